"""Clients for calls between Matchup services."""

from __future__ import annotations

import logging
from uuid import UUID

import httpx

from matchup.core.errors import GatewayFailure

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0


class UserDirectory:
    """Looks up users in the user service on behalf of a caller."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._timeout = timeout
        self._transport = transport

    async def exists(self, user_id: UUID, authorization: str | None) -> bool:
        """True if the user service answers ``GET {base}/{user_id}`` with 200.

        The caller's Authorization header is forwarded unchanged.

        Raises:
            GatewayFailure: If the user service is not configured or unreachable
        """
        if not self._base_url:
            raise GatewayFailure("User service URL is not configured")

        headers = {"Authorization": authorization} if authorization else {}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(f"{self._base_url}/{user_id}", headers=headers)
        except httpx.HTTPError as e:
            raise GatewayFailure(f"Could not reach user service: {e}") from e

        if response.status_code != 200:
            logger.info("User %s rejected by user service with %d", user_id, response.status_code)
            return False
        return True
