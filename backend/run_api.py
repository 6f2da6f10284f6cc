"""Local dev entrypoint for a Matchup service.

Usage: python run_api.py [auth|user|match]
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    backend_dir = Path(__file__).resolve().parent
    src_dir = backend_dir / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


if __name__ == "__main__":
    _ensure_src_on_path()

    from matchup.cli.main import cli

    service = sys.argv[1] if len(sys.argv) > 1 else "user"
    cli(
        [
            "serve",
            service,
            "--config",
            os.environ.get("MATCHUP_CONFIG", f"config/{service}.json"),
            "--host",
            "127.0.0.1",
            "--log-level",
            os.environ.get("MATCHUP_LOG_LEVEL", "debug"),
        ]
    )
