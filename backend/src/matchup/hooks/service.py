"""Hook execution service for Matchup.

Runs a chain of hooks in order and turns the first failure into the
request's Outcome.
"""

import logging
from collections.abc import Sequence

from matchup.core.errors import Outcome, classify
from matchup.hooks.registry import HookEntry
from matchup.hooks.types import HookError, PostHookContext, PreHookContext

logger = logging.getLogger(__name__)


class HookService:
    """Orchestrates hook execution around a store call.

    Hooks within a phase execute sequentially in registration order. The
    first hook that fails aborts the chain; later hooks never run.
    """

    async def run_hooks(
        self,
        phase: str,
        entries: Sequence[HookEntry],
        context: PreHookContext | PostHookContext,
    ) -> Outcome | None:
        """Execute hooks for one phase.

        Args:
            phase: "before" or "after", used for logging only
            entries: Hook entries in registration order
            context: Context passed to every hook

        Returns:
            None if every hook succeeded, otherwise the aborting Outcome.
            A HookError keeps its own status and message; any other
            exception goes through the error classifier, which does the
            ERROR logging for internal errors.
        """
        for entry in entries:
            try:
                await entry.fn(context)
            except HookError as e:
                logger.info(
                    "%s-%s hook '%s' aborted %s with %d: %s",
                    phase,
                    context.operation.value,
                    entry.name,
                    context.entity_name,
                    e.status_code,
                    e.message,
                )
                return Outcome.from_status(e.status_code, e.message)
            except Exception as e:
                outcome = classify(e)
                logger.info(
                    "%s-%s hook '%s' failed for %s with %d",
                    phase,
                    context.operation.value,
                    entry.name,
                    context.entity_name,
                    outcome.status_code,
                )
                return outcome

        return None

    async def run_before(self, entries: Sequence[HookEntry], context: PreHookContext) -> Outcome | None:
        return await self.run_hooks("before", entries, context)

    async def run_after(self, entries: Sequence[HookEntry], context: PostHookContext) -> Outcome | None:
        return await self.run_hooks("after", entries, context)
