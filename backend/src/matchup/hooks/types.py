"""Hook system types for Matchup.

Defines the data passed to and raised by hook functions:
- PreHookContext: runtime state for hooks that run before the store call
- PostHookContext: runtime state for hooks that run after a successful store call
- HookError: raised by a hook to abort the request with an HTTP status
"""

from dataclasses import dataclass
from typing import Any

from matchup.core.types import Identity, Operation


class HookError(Exception):
    """Raised by a hook to abort the request.

    The status code and message are returned to the caller verbatim;
    they are not passed through the error classifier.

    Attributes:
        message: User-facing error message
        status_code: HTTP status the request fails with
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class PreHookContext:
    """Runtime context passed to every pre-operation hook.

    Attributes:
        entity_name: Name of the entity being operated on
        operation: The current operation
        request: Validated caller input (immutable), None for verbs without a body
        store_input: Staging structure handed to the store; hooks may edit its fields
        identity: Authenticated caller, when the service requires one
    """

    entity_name: str
    operation: Operation
    request: Any
    store_input: Any
    identity: Identity | None = None


@dataclass(frozen=True)
class PostHookContext:
    """Runtime context passed to every post-operation hook.

    Attributes:
        entity_name: Name of the entity being operated on
        operation: The current operation
        result: Value returned by the store (record, list of records, or None)
        token: Access token minted for this result (auth create/read only)
        identity: Authenticated caller, when the service requires one
    """

    entity_name: str
    operation: Operation
    result: Any
    token: str | None = None
    identity: Identity | None = None
