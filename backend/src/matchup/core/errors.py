"""Failure taxonomy and the error classifier.

Every failure raised by a store, by the credential exchange or by the
request-parsing layer is a ``ServiceFailure`` subclass. ``classify`` maps
any exception onto exactly one ``Outcome``; it never raises, and anything
it does not recognise becomes an InternalError.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong"


class OutcomeKind(Enum):
    """The classified result of a request, bound to an HTTP status."""

    SUCCESS = "success"
    BAD_REQUEST = "badRequest"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "notFound"
    CONFLICT = "conflict"
    INTERNAL_ERROR = "internalError"

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self]


STATUS_CODES: dict[OutcomeKind, int] = {
    OutcomeKind.SUCCESS: 200,
    OutcomeKind.BAD_REQUEST: 400,
    OutcomeKind.UNAUTHORIZED: 401,
    OutcomeKind.FORBIDDEN: 403,
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.CONFLICT: 409,
    OutcomeKind.INTERNAL_ERROR: 500,
}

_KINDS_BY_STATUS = {status: kind for kind, status in STATUS_CODES.items()}


@dataclass(frozen=True)
class Outcome:
    """Exactly one Outcome is produced per request.

    Attributes:
        kind: Which branch of the taxonomy this is
        message: User-facing message (empty on success)
        body: Response body on success
        detail: Diagnostic detail for InternalError, never sent to the caller
    """

    kind: OutcomeKind
    message: str = ""
    body: dict[str, Any] = field(default_factory=dict)
    detail: str | None = None

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def success(cls, body: dict[str, Any]) -> "Outcome":
        return cls(kind=OutcomeKind.SUCCESS, body=body)

    @classmethod
    def from_status(cls, status_code: int, message: str) -> "Outcome":
        """Build an error Outcome for a status chosen by a hook.

        Statuses outside the taxonomy are treated as InternalError.
        """
        kind = _KINDS_BY_STATUS.get(status_code, OutcomeKind.INTERNAL_ERROR)
        if kind is OutcomeKind.SUCCESS:
            kind = OutcomeKind.INTERNAL_ERROR
        return cls(kind=kind, message=message)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return self.body
        return {"error": self.message}

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


# =============================================================================
# Failures
# =============================================================================


class ServiceFailure(Exception):
    """Base class for every failure the classifier recognises."""

    kind: OutcomeKind = OutcomeKind.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(ServiceFailure):
    """Request input failed structural or semantic validation."""

    kind = OutcomeKind.BAD_REQUEST

    def __init__(self, reason: str):
        super().__init__(f"Invalid request parameters: {reason}")
        self.reason = reason


class IdentityFailure(ServiceFailure):
    """Caller identity is missing, unparsable or rejected."""

    kind = OutcomeKind.UNAUTHORIZED


class PermissionFailure(ServiceFailure):
    """Caller is authenticated but may not touch the target record."""

    kind = OutcomeKind.FORBIDDEN

    def __init__(self, message: str = "Not authorized to make request"):
        super().__init__(message)


class NotFoundFailure(ServiceFailure):
    """No record exists for the given key."""

    kind = OutcomeKind.NOT_FOUND

    def __init__(self, entity: str, key: Any, key_name: str = "ID"):
        super().__init__(f"{entity} not found with {key_name} {key}")
        self.entity = entity
        self.key = key


class DuplicateFailure(ServiceFailure):
    """A unique key already exists on create."""

    kind = OutcomeKind.CONFLICT

    def __init__(self, entity: str, field_name: str):
        super().__init__(f"Duplicate {entity}: {field_name} already exists")
        self.entity = entity
        self.field_name = field_name


class OtherFailure(ServiceFailure):
    """Any other store failure (I/O, constraint, decode)."""

    kind = OutcomeKind.INTERNAL_ERROR


class GatewayFailure(ServiceFailure):
    """A downstream call (gateway or peer service) failed or timed out."""

    kind = OutcomeKind.INTERNAL_ERROR


# =============================================================================
# Classifier
# =============================================================================


def classify(failure: BaseException) -> Outcome:
    """Map a failure onto its Outcome.

    Recognised failures carry their own message, except InternalError whose
    caller-visible message is always the generic wrapper; the underlying
    message is kept on ``Outcome.detail`` for diagnostics.
    """
    if isinstance(failure, ServiceFailure) and failure.kind not in (
        OutcomeKind.SUCCESS,
        OutcomeKind.INTERNAL_ERROR,
    ):
        return Outcome(kind=failure.kind, message=failure.message)

    detail = str(failure) or type(failure).__name__
    logger.error("Request failed with internal error: %s", detail)
    return Outcome(
        kind=OutcomeKind.INTERNAL_ERROR,
        message=GENERIC_ERROR_MESSAGE,
        detail=detail,
    )
