"""Match service: match records between two users, owned by their creator."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from matchup.auth.dependencies import forward_authorization, require_identity
from matchup.core.errors import PermissionFailure
from matchup.core.types import Identity, Operation
from matchup.engine import RequestEngine
from matchup.hooks import HookError, HookRegistry, PostHookContext, PreHookContext
from matchup.persistence.match import (
    CreateMatchInput,
    DeleteMatchInput,
    ListMatchInput,
    MatchStore,
    ReadMatchInput,
    UpdateMatchInput,
)
from matchup.services.peers import UserDirectory


class MatchRequest(BaseModel):
    """Request body for match create and update."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_one: UUID = Field(alias="userOne")
    user_two: UUID = Field(alias="userTwo")


@dataclass(frozen=True)
class MatchInput:
    """Validated caller input for create and update.

    Carries the caller's Authorization header so participant lookups are
    made on the caller's behalf.
    """

    user_one: UUID
    user_two: UUID
    authorization: str | None = None


def build_match_hooks(store: MatchStore, directory: UserDirectory) -> HookRegistry:
    """Built-in hooks for the match entity, in execution order per verb.

    create: stamp matchedOn, check both participants exist
    read:   (after) caller must own the match
    update: caller must own the match, stamp matchedOn, check participants
    delete: caller must own the match
    """
    registry = HookRegistry("match")

    async def require_owner(ctx: PreHookContext) -> None:
        match = store.read(ReadMatchInput(id=ctx.store_input.id))
        _check_owner(match.auth_id, ctx.identity)

    async def stamp_matched_on(ctx: PreHookContext) -> None:
        ctx.store_input.matched_on = datetime.now(UTC)

    async def check_participants(ctx: PreHookContext) -> None:
        request: MatchInput = ctx.request
        for user_id in (request.user_one, request.user_two):
            if not await directory.exists(user_id, request.authorization):
                raise HookError(f"Unknown User: {user_id}", status_code=400)

    async def require_owner_of_result(ctx: PostHookContext) -> None:
        _check_owner(ctx.result.auth_id, ctx.identity)

    registry.register_before(Operation.CREATE, stamp_matched_on)
    registry.register_before(Operation.CREATE, check_participants)

    registry.register_after(Operation.READ, require_owner_of_result)

    registry.register_before(Operation.UPDATE, require_owner)
    registry.register_before(Operation.UPDATE, stamp_matched_on)
    registry.register_before(Operation.UPDATE, check_participants)

    registry.register_before(Operation.DELETE, require_owner)

    return registry


def _check_owner(owner_id: UUID, identity: Identity | None) -> None:
    if identity is None or owner_id != identity.auth_id:
        raise HookError(PermissionFailure().message, status_code=403)


def create_match_router(
    store: MatchStore,
    directory: UserDirectory,
    hooks: HookRegistry | None = None,
) -> APIRouter:
    """Create the match router.

    Args:
        store: Match record store
        directory: Client for the user service, used to check participants
        hooks: Registry to serve with; defaults to the built-in match hooks
    """
    router = APIRouter(tags=["match"])
    engine = RequestEngine(store, hooks or build_match_hooks(store, directory))

    @router.post("/match")
    async def create_match(
        request: MatchRequest,
        identity: Identity = Depends(require_identity),
        authorization: str | None = Depends(forward_authorization),
    ) -> JSONResponse:
        op_input = MatchInput(request.user_one, request.user_two, authorization)
        store_input = CreateMatchInput(
            id=uuid4(),
            auth_id=identity.auth_id,
            user_one=request.user_one,
            user_two=request.user_two,
        )
        outcome = await engine.create(store_input, request=op_input, identity=identity)
        return outcome.to_response()

    # Declared before /match/{match_id} so "all" is not parsed as an ID
    @router.get("/match/all")
    async def list_matches(identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await engine.list(ListMatchInput(auth_id=identity.auth_id), identity=identity)
        return outcome.to_response()

    @router.get("/match/{match_id}")
    async def read_match(match_id: UUID, identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await engine.read(ReadMatchInput(id=match_id), identity=identity)
        return outcome.to_response()

    @router.put("/match/{match_id}")
    async def update_match(
        match_id: UUID,
        request: MatchRequest,
        identity: Identity = Depends(require_identity),
        authorization: str | None = Depends(forward_authorization),
    ) -> JSONResponse:
        op_input = MatchInput(request.user_one, request.user_two, authorization)
        store_input = UpdateMatchInput(id=match_id, user_one=request.user_one, user_two=request.user_two)
        outcome = await engine.update(store_input, request=op_input, identity=identity)
        return outcome.to_response()

    @router.delete("/match/{match_id}")
    async def delete_match(match_id: UUID, identity: Identity = Depends(require_identity)) -> JSONResponse:
        outcome = await engine.delete(DeleteMatchInput(id=match_id), identity=identity)
        return outcome.to_response()

    return router
