"""FastAPI dependencies for caller identity."""

from fastapi import Header

from matchup.auth.jwt_service import extract_identity
from matchup.core.types import Identity


def require_identity(authorization: str | None = Header(default=None)) -> Identity:
    """Dependency that requires an ``Authorization: Bearer`` header.

    Raises:
        IdentityFailure: If the header is missing or its token carries no usable id
    """
    return extract_identity(authorization)


def forward_authorization(authorization: str | None = Header(default=None)) -> str | None:
    """The raw Authorization header, for calls made on the caller's behalf."""
    return authorization
