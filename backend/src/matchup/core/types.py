"""Core types shared by every Matchup service.

Defines the CRUD verbs the request engine understands and the caller
identity extracted from an access token.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class Operation(Enum):
    """The CRUD verb a request is performing."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, taken from the ``id`` claim of its token.

    Attributes:
        auth_id: ID of the auth record the token was minted for
    """

    auth_id: UUID
