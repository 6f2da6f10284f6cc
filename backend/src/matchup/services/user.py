"""User service: profiles keyed by the caller's auth ID, plus pictures."""

import base64
import binascii
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from matchup.auth.dependencies import require_identity
from matchup.core.errors import PermissionFailure
from matchup.core.types import Identity, Operation
from matchup.engine import RequestEngine
from matchup.hooks import HookError, HookRegistry, PreHookContext
from matchup.persistence.user import (
    CreatePictureInput,
    CreateUserInput,
    DeleteUserInput,
    ListUserInput,
    PictureStore,
    ReadPictureInput,
    ReadUserInput,
    UpdateUserInput,
    UserStore,
)


class UserRequest(BaseModel):
    """Request body for user create and update."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=2, max_length=255)


class PictureRequest(BaseModel):
    """Request body for picture upload. ``img`` is base64 on the wire."""

    model_config = ConfigDict(frozen=True)

    img: bytes

    @field_validator("img", mode="before")
    @classmethod
    def decode_img(cls, value: object) -> bytes:
        if not isinstance(value, str):
            raise ValueError("img must be a base64 string")
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"img is not valid base64: {e}") from e


async def require_owner(ctx: PreHookContext) -> None:
    """Only the auth a user record belongs to may change it."""
    owner_id = getattr(ctx.store_input, "user_id", None) or ctx.store_input.id
    if ctx.identity is None or owner_id != ctx.identity.auth_id:
        raise HookError(PermissionFailure().message, status_code=403)


def build_user_hooks() -> HookRegistry:
    registry = HookRegistry("user")
    registry.register_before(Operation.UPDATE, require_owner)
    registry.register_before(Operation.DELETE, require_owner)
    return registry


def build_picture_hooks() -> HookRegistry:
    registry = HookRegistry("picture")
    registry.register_before(Operation.CREATE, require_owner)
    return registry


def create_user_router(
    user_store: UserStore,
    picture_store: PictureStore,
    user_hooks: HookRegistry | None = None,
    picture_hooks: HookRegistry | None = None,
) -> APIRouter:
    """Create the user router.

    Every route requires a caller identity. The user ID is always the
    caller's auth ID; there is no way to create a profile for someone else.
    """
    router = APIRouter(tags=["user"])
    users = RequestEngine(user_store, user_hooks or build_user_hooks())
    pictures = RequestEngine(picture_store, picture_hooks or build_picture_hooks())

    @router.post("/user")
    async def create_user(request: UserRequest, identity: Identity = Depends(require_identity)) -> JSONResponse:
        store_input = CreateUserInput(id=identity.auth_id, name=request.name)
        outcome = await users.create(store_input, request=request, identity=identity)
        return outcome.to_response()

    @router.get("/users")
    async def list_users(identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await users.list(ListUserInput(), identity=identity)
        return outcome.to_response()

    @router.get("/user/{user_id}")
    async def read_user(user_id: UUID, identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await users.read(ReadUserInput(id=user_id), identity=identity)
        return outcome.to_response()

    @router.put("/user/{user_id}")
    async def update_user(
        user_id: UUID,
        request: UserRequest,
        identity: Identity = Depends(require_identity),
    ) -> JSONResponse:
        store_input = UpdateUserInput(id=user_id, name=request.name)
        outcome = await users.update(store_input, request=request, identity=identity)
        return outcome.to_response()

    @router.delete("/user/{user_id}")
    async def delete_user(user_id: UUID, identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await users.delete(DeleteUserInput(id=user_id), identity=identity)
        return outcome.to_response()

    @router.post("/user/{user_id}/picture")
    async def create_picture(
        user_id: UUID,
        request: PictureRequest,
        identity: Identity = Depends(require_identity),
    ) -> JSONResponse:
        store_input = CreatePictureInput(id=uuid4(), user_id=user_id, img=request.img)
        outcome = await pictures.create(store_input, request=request, identity=identity)
        return outcome.to_response()

    @router.get("/user/{user_id}/picture/{picture_id}")
    async def read_picture(
        user_id: UUID,
        picture_id: UUID,
        identity: Identity = Depends(require_identity),
    ) -> JSONResponse:
        outcome = await pictures.read(ReadPictureInput(id=picture_id, user_id=user_id), identity=identity)
        return outcome.to_response()

    return router
