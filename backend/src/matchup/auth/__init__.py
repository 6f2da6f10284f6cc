"""Authentication module for Matchup."""

from matchup.auth.types import Consumer, Credential
from matchup.auth.password import PasswordService
from matchup.auth.jwt_service import JWTService, extract_identity
from matchup.auth.gateway import AUTH_PRINCIPAL, GatewayClient
from matchup.auth.dependencies import forward_authorization, require_identity

__all__ = [
    "AUTH_PRINCIPAL",
    "Consumer",
    "Credential",
    "PasswordService",
    "JWTService",
    "GatewayClient",
    "extract_identity",
    "forward_authorization",
    "require_identity",
]
