"""Hooked CRUD request engine.

Runs one request through the pipeline:

    pre-hooks -> store call -> (finalize) -> post-hooks -> Outcome

The store is called at most once per request. Store failures go through the
error classifier; hook failures keep the status the hook chose. A post-hook
failure does not undo a store change that already happened.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from matchup.core.errors import Outcome, classify
from matchup.core.types import Identity, Operation
from matchup.hooks import HookError, HookRegistry, HookService, PostHookContext, PreHookContext
from matchup.persistence.adapter import Store

logger = logging.getLogger(__name__)

# async (store result) -> access token or None; may raise HookError or a ServiceFailure
Finalizer = Callable[[Any], Awaitable[str | None]]

# (operation, store result, token) -> response body
Renderer = Callable[[Operation, Any, str | None], dict[str, Any]]


def render_record(entity_name: str) -> Renderer:
    """Default renderer: records via ``to_dict()``, lists under ``<entity>List``."""

    def render(operation: Operation, result: Any, token: str | None) -> dict[str, Any]:
        if operation is Operation.DELETE or result is None:
            return {}
        if operation is Operation.LIST:
            return {f"{entity_name}List": [record.to_dict() for record in result]}
        return result.to_dict()

    return render


class RequestEngine:
    """Executes CRUD requests for one entity.

    The hook registry must be frozen before the engine is built; it is
    shared read-only by every request the engine serves. The verbs the
    engine serves are the verb methods the store implements.

    Raises:
        ValueError: If hooks are registered for a verb the store lacks
    """

    def __init__(
        self,
        store: Store,
        hooks: HookRegistry,
        *,
        render: Renderer | None = None,
        hook_service: HookService | None = None,
    ):
        if not hooks.is_frozen:
            hooks.freeze()
        self.store = store
        self.hooks = hooks
        self.entity_name = hooks.entity_name
        self.operations = frozenset(op for op in Operation if callable(getattr(store, op.value, None)))

        for operation in Operation:
            if operation in self.operations:
                continue
            if hooks.pre_hooks(operation) or hooks.post_hooks(operation):
                raise ValueError(
                    f"Hooks registered for '{operation.value}' but the "
                    f"{self.entity_name} store does not implement it"
                )

        self._render = render or render_record(self.entity_name)
        self._hook_service = hook_service or HookService()

    async def execute(
        self,
        operation: Operation,
        store_input: Any,
        *,
        request: Any = None,
        identity: Identity | None = None,
        finalize: Finalizer | None = None,
    ) -> Outcome:
        """Run a single request through the hook pipeline.

        Args:
            operation: The CRUD verb
            store_input: Mutable staging structure, already seeded from the request
            request: Validated caller input, passed to pre-hooks unchanged
            identity: Authenticated caller, if any
            finalize: Optional step run between the store call and the
                post-hooks; its return value is the token post-hooks receive

        Returns:
            The request's Outcome. Every failure is reported through it.

        Raises:
            ValueError: If the store does not implement ``operation``
        """
        if operation not in self.operations:
            raise ValueError(f"The {self.entity_name} store does not implement '{operation.value}'")

        pre_ctx = PreHookContext(
            entity_name=self.entity_name,
            operation=operation,
            request=request,
            store_input=store_input,
            identity=identity,
        )
        aborted = await self._hook_service.run_before(self.hooks.pre_hooks(operation), pre_ctx)
        if aborted:
            return aborted

        try:
            result = getattr(self.store, operation.value)(pre_ctx.store_input)
        except Exception as e:
            logger.debug("Store %s failed for %s: %s", operation.value, self.entity_name, e)
            return classify(e)

        token = None
        if finalize:
            try:
                token = await finalize(result)
            except HookError as e:
                return Outcome.from_status(e.status_code, e.message)
            except Exception as e:
                return classify(e)

        post_ctx = PostHookContext(
            entity_name=self.entity_name,
            operation=operation,
            result=result,
            token=token,
            identity=identity,
        )
        aborted = await self._hook_service.run_after(self.hooks.post_hooks(operation), post_ctx)
        if aborted:
            return aborted

        try:
            return Outcome.success(self._render(operation, result, token))
        except Exception as e:
            return classify(e)

    async def create(self, store_input: Any, **kwargs: Any) -> Outcome:
        return await self.execute(Operation.CREATE, store_input, **kwargs)

    async def read(self, store_input: Any, **kwargs: Any) -> Outcome:
        return await self.execute(Operation.READ, store_input, **kwargs)

    async def update(self, store_input: Any, **kwargs: Any) -> Outcome:
        return await self.execute(Operation.UPDATE, store_input, **kwargs)

    async def delete(self, store_input: Any, **kwargs: Any) -> Outcome:
        return await self.execute(Operation.DELETE, store_input, **kwargs)

    async def list(self, store_input: Any, **kwargs: Any) -> Outcome:
        return await self.execute(Operation.LIST, store_input, **kwargs)
