"""Matchup request lifecycle hook system.

Provides extension points around every store call made by the request
engine:
- before<Verb>: after validation, before the store call (can edit the store
  input, can abort)
- after<Verb>: after a successful store call (can abort; the store change
  is not rolled back)

Usage:
    from matchup.hooks import HookRegistry, HookError, PreHookContext

    registry = HookRegistry("user")

    @registry.before(Operation.UPDATE)
    async def reject_reserved_names(ctx: PreHookContext) -> None:
        if ctx.store_input.name == "admin":
            raise HookError("Name is reserved", status_code=400)
"""

from matchup.hooks.registry import HookEntry, HookRegistry, PostHookFn, PreHookFn
from matchup.hooks.service import HookService
from matchup.hooks.types import HookError, PostHookContext, PreHookContext

__all__ = [
    "HookEntry",
    "HookError",
    "HookRegistry",
    "HookService",
    "PostHookContext",
    "PostHookFn",
    "PreHookContext",
    "PreHookFn",
]
