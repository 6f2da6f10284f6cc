"""FastAPI application factory for the Matchup services."""

import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from matchup.auth import Credential, GatewayClient, JWTService, PasswordService
from matchup.config import GATEWAY_SERVICE, USER_SERVICE, ServiceConfig
from matchup.core.errors import (
    GatewayFailure,
    Outcome,
    ServiceFailure,
    ValidationFailure,
    classify,
)
from matchup.persistence import (
    AuthStore,
    DatabaseConfig,
    MatchStore,
    PictureStore,
    UserStore,
    create_db_engine,
)
from matchup.services import (
    UserDirectory,
    create_auth_router,
    create_match_router,
    create_user_router,
)

logger = logging.getLogger(__name__)

SERVICES = ("auth", "user", "match")


def create_app(
    service_name: str,
    config: ServiceConfig,
    *,
    engine: Engine | None = None,
    credential: Credential | None = None,
    gateway_transport: httpx.AsyncBaseTransport | None = None,
    peer_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Assemble one service.

    Stores, hook registries and routers are all built here, before the app
    serves its first request.

    Args:
        service_name: One of "auth", "user", "match"
        config: Loaded process configuration
        engine: SQLAlchemy engine; built from ``config`` when omitted
        credential: Token-signing credential for the auth service; when
            omitted it is obtained from the gateway at startup
        gateway_transport: httpx transport for gateway admin calls
        peer_transport: httpx transport for calls to the user service

    Raises:
        ValueError: If ``service_name`` is not a known service
    """
    if service_name not in SERVICES:
        raise ValueError(f"Unknown service '{service_name}'. Expected one of: {', '.join(SERVICES)}")

    if engine is None:
        engine = create_db_engine(DatabaseConfig.from_service_config(config))

    if service_name == "auth":
        app = _create_auth_app(config, engine, credential, gateway_transport)
    elif service_name == "user":
        app = FastAPI(title="Matchup User Service")
        app.include_router(create_user_router(UserStore(engine), PictureStore(engine)))
    else:
        app = FastAPI(title="Matchup Match Service")
        directory = UserDirectory(config.service_url(USER_SERVICE), transport=peer_transport)
        app.include_router(create_match_router(MatchStore(engine), directory))

    app.state.service_name = service_name
    app.state.config = config
    register_exception_handlers(app)
    return app


def _create_auth_app(
    config: ServiceConfig,
    engine: Engine,
    credential: Credential | None,
    gateway_transport: httpx.AsyncBaseTransport | None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Obtain the signing credential before serving."""
        signing = credential
        if signing is None:
            gateway = GatewayClient(config.service_url(GATEWAY_SERVICE), transport=gateway_transport)
            try:
                signing = await gateway.exchange()
            except GatewayFailure as e:
                logger.error("Could not obtain signing credential from gateway: %s", e)
                raise
        app.state.jwt_service = JWTService(signing)
        logger.info("Auth service ready, issuing tokens as %s", signing.key)
        yield
        app.state.jwt_service = None

    app = FastAPI(title="Matchup Auth Service", lifespan=lifespan)
    app.state.jwt_service = None

    def get_jwt_service() -> JWTService:
        if app.state.jwt_service is None:
            raise GatewayFailure("Signing credential is not available")
        return app.state.jwt_service

    app.include_router(
        create_auth_router(
            AuthStore(engine),
            PasswordService(rounds=config.password_rounds),
            get_jwt_service,
        )
    )
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure response is ``{"error": message}`` with its taxonomy status."""

    @app.exception_handler(ServiceFailure)
    async def service_failure_handler(request: Request, exc: ServiceFailure) -> JSONResponse:
        return classify(exc).to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return classify(ValidationFailure(describe_validation_errors(exc.errors()))).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        outcome: Outcome = classify(exc)
        return outcome.to_response()


def describe_validation_errors(errors: Any) -> str:
    """Flatten pydantic errors into ``field: message`` pairs."""
    parts = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query", "header")]
        message = error.get("msg", "invalid value")
        parts.append(f"{'.'.join(location)}: {message}" if location else message)
    return "; ".join(parts) or "malformed request"
