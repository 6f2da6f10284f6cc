"""Stores for user profiles and their pictures."""

import base64
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import text

from matchup.core.errors import NotFoundFailure
from matchup.persistence.base import SQLStore


@dataclass(frozen=True)
class User:
    id: UUID
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "name": self.name}


@dataclass(frozen=True)
class Picture:
    id: UUID
    user_id: UUID
    img: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "img": base64.b64encode(self.img).decode("ascii"),
        }


@dataclass
class CreateUserInput:
    id: UUID
    name: str


@dataclass
class ReadUserInput:
    id: UUID


@dataclass
class UpdateUserInput:
    id: UUID
    name: str


@dataclass
class DeleteUserInput:
    id: UUID


@dataclass
class ListUserInput:
    pass


@dataclass
class CreatePictureInput:
    id: UUID
    user_id: UUID
    img: bytes


@dataclass
class ReadPictureInput:
    id: UUID
    user_id: UUID


USER_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS user_profile (
        id      TEXT PRIMARY KEY,
        name    TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS picture (
        id          TEXT PRIMARY KEY,
        user_id     TEXT NOT NULL,
        img         TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_picture_user ON picture(user_id)",
)


class UserStore(SQLStore):
    """User profiles, keyed by the owning auth ID. Deleting a user deletes its pictures."""

    entity_name = "user"
    schema = USER_SCHEMA

    def create(self, input: CreateUserInput) -> User:
        with self._errors(unique_field="id"), self._engine.connect() as conn:
            conn.execute(
                text("INSERT INTO user_profile (id, name) VALUES (:id, :name)"),
                {"id": str(input.id), "name": input.name},
            )
            conn.commit()

        return User(id=input.id, name=input.name)

    def read(self, input: ReadUserInput) -> User:
        with self._errors(), self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, name FROM user_profile WHERE id = :id"),
                {"id": str(input.id)},
            ).mappings().fetchone()

        if not row:
            raise NotFoundFailure(self.entity_name, input.id)
        return _row_to_user(row)

    def update(self, input: UpdateUserInput) -> User:
        with self._errors(), self._engine.connect() as conn:
            result = conn.execute(
                text("UPDATE user_profile SET name = :name WHERE id = :id"),
                {"id": str(input.id), "name": input.name},
            )
            conn.commit()

        if result.rowcount == 0:
            raise NotFoundFailure(self.entity_name, input.id)
        return User(id=input.id, name=input.name)

    def delete(self, input: DeleteUserInput) -> None:
        with self._errors(), self._engine.connect() as conn:
            conn.execute(
                text("DELETE FROM picture WHERE user_id = :id"),
                {"id": str(input.id)},
            )
            result = conn.execute(
                text("DELETE FROM user_profile WHERE id = :id"),
                {"id": str(input.id)},
            )
            if result.rowcount == 0:
                conn.rollback()
                raise NotFoundFailure(self.entity_name, input.id)
            conn.commit()

    def list(self, input: ListUserInput) -> list[User]:
        with self._errors(), self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT id, name FROM user_profile ORDER BY name, id")
            ).mappings().fetchall()

        return [_row_to_user(row) for row in rows]


class PictureStore(SQLStore):
    """Pictures belonging to a user. Image bytes are stored base64-encoded."""

    entity_name = "picture"
    schema = USER_SCHEMA

    def create(self, input: CreatePictureInput) -> Picture:
        with self._errors(unique_field="id"), self._engine.connect() as conn:
            owner = conn.execute(
                text("SELECT id FROM user_profile WHERE id = :id"),
                {"id": str(input.user_id)},
            ).fetchone()
            if not owner:
                raise NotFoundFailure("user", input.user_id)

            conn.execute(
                text("INSERT INTO picture (id, user_id, img) VALUES (:id, :user_id, :img)"),
                {
                    "id": str(input.id),
                    "user_id": str(input.user_id),
                    "img": base64.b64encode(input.img).decode("ascii"),
                },
            )
            conn.commit()

        return Picture(id=input.id, user_id=input.user_id, img=input.img)

    def read(self, input: ReadPictureInput) -> Picture:
        with self._errors(), self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, user_id, img FROM picture WHERE id = :id AND user_id = :user_id"),
                {"id": str(input.id), "user_id": str(input.user_id)},
            ).mappings().fetchone()

        if not row:
            raise NotFoundFailure(self.entity_name, input.id)
        return Picture(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            img=base64.b64decode(row["img"]),
        )


def _row_to_user(row: Any) -> User:
    return User(id=UUID(row["id"]), name=row["name"])
