"""Tests for the hook registry and hook execution service."""

import pytest

from matchup.core.errors import NotFoundFailure, OutcomeKind
from matchup.core.types import Operation
from matchup.hooks import (
    HookError,
    HookRegistry,
    HookService,
    PostHookContext,
    PreHookContext,
)


@pytest.fixture
def hook_service():
    return HookService()


@pytest.fixture
def pre_context():
    return PreHookContext(
        entity_name="match",
        operation=Operation.CREATE,
        request=None,
        store_input={"calls": []},
    )


def recording_hook(name, calls):
    async def hook_fn(ctx):
        calls.append(name)

    hook_fn.__name__ = name
    return hook_fn


# =============================================================================
# Registry
# =============================================================================


class TestHookRegistry:
    def test_hooks_kept_in_registration_order(self):
        registry = HookRegistry("match")
        calls = []
        for name in ("first", "second", "third"):
            registry.register_before(Operation.CREATE, recording_hook(name, calls))

        entries = registry.pre_hooks(Operation.CREATE)
        assert [e.name for e in entries] == ["first", "second", "third"]
        assert [e.position for e in entries] == [0, 1, 2]

    def test_hooks_are_per_verb_and_phase(self):
        registry = HookRegistry("user")
        registry.register_before(Operation.UPDATE, recording_hook("pre", []))
        registry.register_after(Operation.READ, recording_hook("post", []))

        assert registry.pre_hooks(Operation.CREATE) == ()
        assert registry.post_hooks(Operation.UPDATE) == ()
        assert len(registry.pre_hooks(Operation.UPDATE)) == 1
        assert len(registry.post_hooks(Operation.READ)) == 1

    def test_decorators_register(self):
        registry = HookRegistry("user")

        @registry.before(Operation.DELETE)
        async def guard(ctx):
            pass

        @registry.after(Operation.DELETE)
        async def audit(ctx):
            pass

        assert registry.pre_hooks(Operation.DELETE)[0].fn is guard
        assert registry.post_hooks(Operation.DELETE)[0].name == "audit"

    def test_explicit_name(self):
        registry = HookRegistry("user")
        registry.register_before(Operation.CREATE, recording_hook("x", []), name="stamp")
        assert registry.pre_hooks(Operation.CREATE)[0].name == "stamp"

    def test_frozen_registry_rejects_registration(self):
        registry = HookRegistry("match")
        registry.freeze()
        assert registry.is_frozen
        with pytest.raises(RuntimeError, match="frozen"):
            registry.register_before(Operation.CREATE, recording_hook("late", []))
        with pytest.raises(RuntimeError):
            registry.register_after(Operation.CREATE, recording_hook("late", []))

    def test_registries_are_independent(self):
        users = HookRegistry("user")
        matches = HookRegistry("match")
        users.register_before(Operation.CREATE, recording_hook("a", []))
        assert matches.pre_hooks(Operation.CREATE) == ()


# =============================================================================
# Service
# =============================================================================


class TestHookService:
    @pytest.mark.asyncio
    async def test_no_hooks_passes(self, hook_service, pre_context):
        assert await hook_service.run_before((), pre_context) is None

    @pytest.mark.asyncio
    async def test_all_hooks_run_in_order(self, hook_service, pre_context):
        registry = HookRegistry("match")
        calls = []
        for name in ("a", "b", "c"):
            registry.register_before(Operation.CREATE, recording_hook(name, calls))

        result = await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)

        assert result is None
        assert calls == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_hook_error_aborts_chain_with_its_status(self, hook_service, pre_context):
        registry = HookRegistry("match")
        calls = []

        async def reject(ctx):
            calls.append("reject")
            raise HookError("Unknown User: 42", status_code=400)

        registry.register_before(Operation.CREATE, recording_hook("a", calls))
        registry.register_before(Operation.CREATE, reject)
        registry.register_before(Operation.CREATE, recording_hook("c", calls))

        result = await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)

        assert calls == ["a", "reject"]
        assert result.kind is OutcomeKind.BAD_REQUEST
        assert result.message == "Unknown User: 42"

    @pytest.mark.asyncio
    async def test_hook_error_status_outside_taxonomy(self, hook_service, pre_context):
        registry = HookRegistry("match")

        async def teapot(ctx):
            raise HookError("short and stout", status_code=418)

        registry.register_before(Operation.CREATE, teapot)
        result = await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)
        assert result.kind is OutcomeKind.INTERNAL_ERROR

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_classified(self, hook_service, pre_context):
        registry = HookRegistry("match")

        async def broken(ctx):
            raise RuntimeError("kaboom")

        registry.register_before(Operation.CREATE, broken)
        result = await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)

        assert result.kind is OutcomeKind.INTERNAL_ERROR
        assert result.detail == "kaboom"

    @pytest.mark.asyncio
    async def test_unexpected_exception_logged_once_at_error(self, hook_service, pre_context, caplog):
        registry = HookRegistry("match")

        async def broken(ctx):
            raise RuntimeError("kaboom")

        registry.register_before(Operation.CREATE, broken)
        with caplog.at_level("INFO", logger="matchup"):
            await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)

        errors = [r for r in caplog.records if r.levelname == "ERROR"]
        assert len(errors) == 1
        assert "kaboom" in errors[0].getMessage()
        assert any("broken" in r.getMessage() for r in caplog.records if r.levelname == "INFO")

    @pytest.mark.asyncio
    async def test_service_failure_in_hook_keeps_its_kind(self, hook_service, pre_context):
        registry = HookRegistry("match")

        async def lookup(ctx):
            raise NotFoundFailure("match", "m1")

        registry.register_before(Operation.CREATE, lookup)
        result = await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)
        assert result.kind is OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_pre_hook_may_edit_store_input(self, hook_service, pre_context):
        registry = HookRegistry("match")

        @registry.before(Operation.CREATE)
        async def stamp(ctx):
            ctx.store_input["stamped"] = True

        await hook_service.run_before(registry.pre_hooks(Operation.CREATE), pre_context)
        assert pre_context.store_input["stamped"] is True

    @pytest.mark.asyncio
    async def test_post_hooks_receive_result_and_token(self, hook_service):
        registry = HookRegistry("auth")
        seen = []

        @registry.after(Operation.CREATE)
        async def capture(ctx):
            seen.append((ctx.result, ctx.token))

        ctx = PostHookContext(
            entity_name="auth",
            operation=Operation.CREATE,
            result="record",
            token="jwt",
        )
        await hook_service.run_after(registry.post_hooks(Operation.CREATE), ctx)
        assert seen == [("record", "jwt")]
