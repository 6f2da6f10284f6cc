"""JWT access token minting and caller identity extraction."""

import time
from uuid import UUID

import jwt

from matchup.auth.types import Credential
from matchup.core.errors import IdentityFailure
from matchup.core.types import Identity


class JWTService:
    """Mints access tokens signed with a gateway-issued credential.

    Uses HS256 with the credential secret; the credential key is the issuer,
    which is how the gateway picks the secret to verify with.
    """

    ACCESS_TOKEN_TTL = 24 * 60 * 60  # 24 hours

    def __init__(self, credential: Credential, algorithm: str = "HS256"):
        """Initialize the JWT service.

        Args:
            credential: Issuer key and shared secret from the gateway
            algorithm: JWT algorithm (default HS256)
        """
        self._credential = credential
        self._algorithm = algorithm

    def create_token(self, auth_id: UUID | str) -> str:
        """Create an access token for an auth record.

        Args:
            auth_id: The authenticated record's ID

        Returns:
            Signed JWT with ``id``, ``iss`` and ``exp`` claims
        """
        claims = {
            "id": str(auth_id),
            "iss": self._credential.key,
            "exp": int(time.time()) + self.ACCESS_TOKEN_TTL,
        }
        return jwt.encode(claims, self._credential.secret, algorithm=self._algorithm)


def extract_identity(authorization: str | None) -> Identity:
    """Extract the caller from an ``Authorization: Bearer <token>`` header.

    The signature is not checked here: the gateway in front of every
    service has already verified it against the issuing credential.

    Raises:
        IdentityFailure: If the header is missing or the token unusable
    """
    if not authorization:
        raise IdentityFailure("Could not authorize request: Authorization header not provided")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise IdentityFailure(f"Could not authorize request: {e}")

    raw_id = claims.get("id")
    if raw_id is None:
        raise IdentityFailure("Could not authorize request: JWT does not contain an id")

    try:
        return Identity(auth_id=UUID(str(raw_id)))
    except ValueError:
        raise IdentityFailure("Could not authorize request: JWT id is not a valid UUID")
