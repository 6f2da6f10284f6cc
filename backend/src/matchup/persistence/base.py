"""Shared plumbing for the SQL stores.

Stores accept a SQLAlchemy engine and use Core ``text()`` statements, so the
same SQL runs against SQLite and PostgreSQL.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from matchup.core.errors import DuplicateFailure, OtherFailure, ServiceFailure


class SQLStore:
    """Base class for dialect-neutral stores."""

    entity_name: str = ""

    # CREATE TABLE / CREATE INDEX statements, run once on construction
    schema: Sequence[str] = ()

    def __init__(self, engine: Engine):
        self._engine = engine
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        """Create this store's tables and indexes if they don't exist."""
        with self._engine.connect() as conn:
            for statement in self.schema:
                conn.execute(text(statement))
            conn.commit()

    @contextmanager
    def _errors(self, unique_field: str | None = None) -> Iterator[None]:
        """Translate driver errors into store failures.

        Args:
            unique_field: Field reported in a DuplicateFailure when the
                statement violates a uniqueness constraint
        """
        try:
            yield
        except ServiceFailure:
            raise
        except IntegrityError as e:
            if unique_field:
                raise DuplicateFailure(self.entity_name, unique_field) from e
            raise OtherFailure(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise OtherFailure(str(e)) from e
