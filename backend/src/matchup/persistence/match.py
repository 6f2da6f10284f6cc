"""Store for match records between two users."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text

from matchup.core.errors import NotFoundFailure
from matchup.persistence.base import SQLStore


def format_timestamp(value: datetime) -> str:
    """Fixed-width RFC 3339 UTC timestamp, so stored values sort as text."""
    return value.astimezone(UTC).isoformat(timespec="microseconds")


@dataclass(frozen=True)
class Match:
    id: UUID
    auth_id: UUID
    user_one: UUID
    user_two: UUID
    matched_on: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "userOne": str(self.user_one),
            "userTwo": str(self.user_two),
            "matchedOn": format_timestamp(self.matched_on),
        }


@dataclass
class CreateMatchInput:
    id: UUID
    auth_id: UUID
    user_one: UUID
    user_two: UUID
    matched_on: datetime | None = None


@dataclass
class ReadMatchInput:
    id: UUID


@dataclass
class UpdateMatchInput:
    id: UUID
    user_one: UUID
    user_two: UUID
    matched_on: datetime | None = None


@dataclass
class DeleteMatchInput:
    id: UUID


@dataclass
class ListMatchInput:
    auth_id: UUID


class MatchStore(SQLStore):
    """Matches, each owned by the auth that created it."""

    entity_name = "match"
    schema = (
        """
        CREATE TABLE IF NOT EXISTS match_record (
            id          TEXT PRIMARY KEY,
            auth_id     TEXT NOT NULL,
            user_one    TEXT NOT NULL,
            user_two    TEXT NOT NULL,
            matched_on  TEXT NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_match_auth ON match_record(auth_id)",
    )

    def create(self, input: CreateMatchInput) -> Match:
        matched_on = input.matched_on or datetime.now(UTC)
        with self._errors(unique_field="id"), self._engine.connect() as conn:
            conn.execute(
                text("""
                    INSERT INTO match_record (id, auth_id, user_one, user_two, matched_on)
                    VALUES (:id, :auth_id, :user_one, :user_two, :matched_on)
                """),
                {
                    "id": str(input.id),
                    "auth_id": str(input.auth_id),
                    "user_one": str(input.user_one),
                    "user_two": str(input.user_two),
                    "matched_on": format_timestamp(matched_on),
                },
            )
            conn.commit()

        return self.read(ReadMatchInput(id=input.id))

    def read(self, input: ReadMatchInput) -> Match:
        with self._errors(), self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT * FROM match_record WHERE id = :id"),
                {"id": str(input.id)},
            ).mappings().fetchone()

        if not row:
            raise NotFoundFailure(self.entity_name, input.id)
        return _row_to_match(row)

    def update(self, input: UpdateMatchInput) -> Match:
        matched_on = input.matched_on or datetime.now(UTC)
        with self._errors(), self._engine.connect() as conn:
            # matched_on never moves backwards for a given match
            result = conn.execute(
                text("""
                    UPDATE match_record
                    SET user_one = :user_one,
                        user_two = :user_two,
                        matched_on = CASE
                            WHEN matched_on > :matched_on THEN matched_on
                            ELSE :matched_on
                        END
                    WHERE id = :id
                """),
                {
                    "id": str(input.id),
                    "user_one": str(input.user_one),
                    "user_two": str(input.user_two),
                    "matched_on": format_timestamp(matched_on),
                },
            )
            if result.rowcount == 0:
                conn.rollback()
                raise NotFoundFailure(self.entity_name, input.id)
            row = conn.execute(
                text("SELECT * FROM match_record WHERE id = :id"),
                {"id": str(input.id)},
            ).mappings().fetchone()
            conn.commit()

        return _row_to_match(row)

    def delete(self, input: DeleteMatchInput) -> None:
        with self._errors(), self._engine.connect() as conn:
            result = conn.execute(
                text("DELETE FROM match_record WHERE id = :id"),
                {"id": str(input.id)},
            )
            conn.commit()

        if result.rowcount == 0:
            raise NotFoundFailure(self.entity_name, input.id)

    def list(self, input: ListMatchInput) -> list[Match]:
        with self._errors(), self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT * FROM match_record WHERE auth_id = :auth_id ORDER BY matched_on, id"),
                {"auth_id": str(input.auth_id)},
            ).mappings().fetchall()

        return [_row_to_match(row) for row in rows]


def _row_to_match(row: Any) -> Match:
    return Match(
        id=UUID(row["id"]),
        auth_id=UUID(row["auth_id"]),
        user_one=UUID(row["user_one"]),
        user_two=UUID(row["user_two"]),
        matched_on=datetime.fromisoformat(row["matched_on"]),
    )
