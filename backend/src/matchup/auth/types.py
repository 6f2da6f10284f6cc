"""Type definitions for authentication."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Consumer:
    """A principal registered with the gateway.

    Attributes:
        id: Gateway-assigned consumer ID
        username: Principal name the consumer was registered under
    """

    id: str
    username: str


@dataclass(frozen=True)
class Credential:
    """Token-signing material issued by the gateway.

    Held in memory only; never persisted.

    Attributes:
        key: Issuer identifier, written to the ``iss`` claim
        secret: HS256 shared secret
    """

    key: str
    secret: str

    def __repr__(self) -> str:
        return f"Credential(key={self.key!r}, secret='***')"

