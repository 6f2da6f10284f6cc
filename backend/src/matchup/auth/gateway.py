"""Credential exchange with the API gateway's admin API.

The auth service registers itself as a consumer and asks the gateway for a
JWT credential. Tokens it mints are signed with that credential so the
gateway can verify them.
"""

from __future__ import annotations

import logging

import httpx

from matchup.auth.types import Consumer, Credential
from matchup.core.errors import GatewayFailure

logger = logging.getLogger(__name__)

# Principal name the auth service registers under
AUTH_PRINCIPAL = "auth-service"

_DEFAULT_TIMEOUT = 10.0


class GatewayClient:
    """Async client for the gateway admin API."""

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

    async def exchange(self, principal: str = AUTH_PRINCIPAL) -> Credential:
        """Register ``principal`` as a consumer and obtain its credential.

        Not idempotent: every call registers a new consumer.

        Raises:
            GatewayFailure: If the gateway is not configured, unreachable,
                or answers either step with anything other than 201
        """
        if not self._base_url:
            raise GatewayFailure("Gateway admin URL is not configured")

        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            consumer = await self.create_consumer(client, principal)
            credential = await self.request_credential(client, consumer.username)

        logger.info("Obtained gateway credential for consumer %s", consumer.username)
        return credential

    async def create_consumer(self, client: httpx.AsyncClient, principal: str) -> Consumer:
        response = await self._post(client, "/consumers", data={"username": principal})
        body = self._json(response)
        return Consumer(id=str(body.get("id", "")), username=str(body.get("username", principal)))

    async def request_credential(self, client: httpx.AsyncClient, username: str) -> Credential:
        response = await self._post(client, f"/consumers/{username}/jwt")
        body = self._json(response)
        key, secret = body.get("key"), body.get("secret")
        if not key or not secret:
            raise GatewayFailure("Gateway returned a credential without key or secret")
        return Credential(key=str(key), secret=str(secret))

    async def _post(
        self,
        client: httpx.AsyncClient,
        path: str,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await client.post(path, data=data)
        except httpx.HTTPError as e:
            raise GatewayFailure(f"Gateway request to {path} failed: {e}") from e

        if response.status_code != 201:
            raise GatewayFailure(response.text or f"Gateway returned status {response.status_code}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError as e:
            raise GatewayFailure(f"Could not decode gateway response: {e}") from e
        if not isinstance(body, dict):
            raise GatewayFailure("Gateway response is not a JSON object")
        return body
