"""Service runner CLI command."""

import logging
import sys

import click

from matchup.api.app import SERVICES
from matchup.config import ConfigError, ServiceConfig

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def default_config_path(service_name: str) -> str:
    return f"/etc/{service_name}-service/config.json"


@click.command("serve")
@click.argument("service", type=click.Choice(SERVICES))
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to the JSON config file. [default: /etc/<service>-service/config.json]",
)
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
@click.option("--port", default=None, type=int, help="Port to bind. [default: ports.service from config]")
@click.option(
    "--log-level",
    default="info",
    show_default=True,
    envvar="MATCHUP_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level for the service and uvicorn.",
)
def serve(service: str, config_path: str | None, host: str, port: int | None, log_level: str):
    """Run one of the services under uvicorn."""
    import uvicorn

    from matchup.api.app import create_app

    log_level = log_level.lower()
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = config_path or default_config_path(service)
    try:
        config = ServiceConfig.load(path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    app = create_app(service, config)
    uvicorn.run(app, host=host, port=port or config.port(service), log_level=log_level)
