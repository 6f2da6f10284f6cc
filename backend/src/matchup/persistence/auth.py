"""Store for auth credentials (email + bcrypt password hash)."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import text

from matchup.core.errors import NotFoundFailure
from matchup.persistence.base import SQLStore


@dataclass(frozen=True)
class Auth:
    """An auth record as persisted. ``password`` is always a hash."""

    id: UUID
    email: str
    password: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "email": self.email}


@dataclass
class CreateAuthInput:
    id: UUID
    email: str
    password: str


@dataclass
class ReadAuthInput:
    email: str


class AuthStore(SQLStore):
    """One auth record per email; the database enforces uniqueness."""

    entity_name = "auth"
    schema = (
        """
        CREATE TABLE IF NOT EXISTS auth (
            id          TEXT PRIMARY KEY,
            email       TEXT NOT NULL UNIQUE,
            password    TEXT NOT NULL
        )
        """,
    )

    def create(self, input: CreateAuthInput) -> Auth:
        with self._errors(unique_field="email"), self._engine.connect() as conn:
            conn.execute(
                text("INSERT INTO auth (id, email, password) VALUES (:id, :email, :password)"),
                {"id": str(input.id), "email": input.email, "password": input.password},
            )
            conn.commit()

        return Auth(id=input.id, email=input.email, password=input.password)

    def read(self, input: ReadAuthInput) -> Auth:
        with self._errors(), self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, email, password FROM auth WHERE email = :email"),
                {"email": input.email},
            ).mappings().fetchone()

        if not row:
            raise NotFoundFailure(self.entity_name, input.email, key_name="email")
        return Auth(id=UUID(row["id"]), email=row["email"], password=row["password"])
