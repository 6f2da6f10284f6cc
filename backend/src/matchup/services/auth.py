"""Auth service: registration and login, both answered with an access token."""

import logging
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from matchup.auth.jwt_service import JWTService
from matchup.auth.password import PasswordService
from matchup.core.errors import IdentityFailure, Outcome, OutcomeKind
from matchup.core.types import Operation
from matchup.engine import RequestEngine
from matchup.hooks import HookRegistry, PreHookContext
from matchup.persistence.auth import Auth, AuthStore, CreateAuthInput, ReadAuthInput

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AuthRequest(BaseModel):
    """Request body for both register and login."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=64)


def build_auth_hooks(password_service: PasswordService) -> HookRegistry:
    """Hook registry for the auth entity.

    The plain-text password is replaced by its bcrypt hash before the
    record reaches the store.
    """
    registry = HookRegistry("auth")

    @registry.before(Operation.CREATE)
    async def hash_password(ctx: PreHookContext) -> None:
        ctx.store_input.password = password_service.hash(ctx.store_input.password)

    return registry


def render_token(operation: Operation, result: Any, token: str | None) -> dict[str, Any]:
    return {"accessToken": token}


def create_auth_router(
    store: AuthStore,
    password_service: PasswordService,
    get_jwt_service: Callable[[], JWTService],
    hooks: HookRegistry | None = None,
) -> APIRouter:
    """Create the auth router with injected dependencies.

    Args:
        store: Auth record store
        password_service: Hashes on register, verifies on login
        get_jwt_service: Returns the token service built from the gateway
            credential; only available once startup has completed
        hooks: Extra hooks; defaults to the built-in password hashing

    Returns:
        Configured APIRouter
    """
    router = APIRouter(tags=["auth"])
    engine = RequestEngine(store, hooks or build_auth_hooks(password_service), render=render_token)

    async def mint(auth: Auth) -> str:
        return get_jwt_service().create_token(auth.id)

    @router.post("/auth")
    async def register(request: AuthRequest) -> JSONResponse:
        """Create an auth record and return an access token for it."""
        store_input = CreateAuthInput(id=uuid4(), email=request.email, password=request.password)
        outcome = await engine.create(store_input, request=request, finalize=mint)
        return outcome.to_response()

    @router.get("/auth")
    async def login(request: AuthRequest = Body(...)) -> JSONResponse:
        """Verify an email/password pair and return an access token.

        Unknown emails and wrong passwords are indistinguishable to the caller.
        """

        async def verify_and_mint(auth: Auth) -> str:
            if not password_service.verify(request.password, auth.password):
                raise IdentityFailure(INVALID_CREDENTIALS)
            return await mint(auth)

        outcome = await engine.read(
            ReadAuthInput(email=request.email),
            request=request,
            finalize=verify_and_mint,
        )
        if outcome.kind is OutcomeKind.NOT_FOUND:
            logger.info("Login attempted for unknown email")
            outcome = Outcome(kind=OutcomeKind.UNAUTHORIZED, message=INVALID_CREDENTIALS)
        return outcome.to_response()

    return router
