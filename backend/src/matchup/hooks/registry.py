"""Hook registry for Matchup.

Holds the ordered pre- and post-operation hooks of one entity. A registry
is built while a service is assembled, frozen, and then shared read-only by
every request.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from matchup.core.types import Operation
from matchup.hooks.types import PostHookContext, PreHookContext

# Hook function signatures: async (context) -> None, raising HookError to abort
PreHookFn = Callable[[PreHookContext], Awaitable[None]]
PostHookFn = Callable[[PostHookContext], Awaitable[None]]


@dataclass(frozen=True)
class HookEntry:
    """A registered hook and its position in the chain for its verb."""

    name: str
    fn: Callable[..., Awaitable[None]]
    position: int


class HookRegistry:
    """Ordered pre/post hooks per CRUD verb for a single entity.

    Hooks run in registration order. Only hooks registered for the verb
    being executed are consulted.

    Example:
        registry = HookRegistry("match")

        @registry.before(Operation.CREATE)
        async def stamp_matched_on(ctx: PreHookContext) -> None:
            ctx.store_input.matched_on = datetime.now(UTC)

        registry.freeze()
    """

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        self._before: dict[Operation, list[HookEntry]] = {op: [] for op in Operation}
        self._after: dict[Operation, list[HookEntry]] = {op: [] for op in Operation}
        self._frozen = False

    def register_before(self, operation: Operation, hook_fn: PreHookFn, name: str | None = None) -> None:
        """Append a hook to run before the store call for ``operation``."""
        self._append(self._before[operation], hook_fn, name)

    def register_after(self, operation: Operation, hook_fn: PostHookFn, name: str | None = None) -> None:
        """Append a hook to run after a successful store call for ``operation``."""
        self._append(self._after[operation], hook_fn, name)

    def before(self, operation: Operation) -> Callable[[PreHookFn], PreHookFn]:
        """Decorator form of ``register_before``."""

        def decorator(fn: PreHookFn) -> PreHookFn:
            self.register_before(operation, fn)
            return fn

        return decorator

    def after(self, operation: Operation) -> Callable[[PostHookFn], PostHookFn]:
        """Decorator form of ``register_after``."""

        def decorator(fn: PostHookFn) -> PostHookFn:
            self.register_after(operation, fn)
            return fn

        return decorator

    def pre_hooks(self, operation: Operation) -> tuple[HookEntry, ...]:
        return tuple(self._before[operation])

    def post_hooks(self, operation: Operation) -> tuple[HookEntry, ...]:
        return tuple(self._after[operation])

    def freeze(self) -> None:
        """Reject any further registration. Called once assembly is done."""
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _append(self, entries: list[HookEntry], hook_fn: Callable[..., Awaitable[None]], name: str | None) -> None:
        if self._frozen:
            raise RuntimeError(
                f"Hook registry for '{self.entity_name}' is frozen; "
                "hooks must be registered during service assembly."
            )
        entries.append(
            HookEntry(
                name=name or getattr(hook_fn, "__name__", repr(hook_fn)),
                fn=hook_fn,
                position=len(entries),
            )
        )
