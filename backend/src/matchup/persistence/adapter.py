"""Store Protocol: the capability set the request engine drives."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Store(Protocol):
    """Persistence for one entity type.

    Each verb method (``create``, ``read``, ``update``, ``delete``, ``list``)
    receives the finalized store input for its verb and either returns a
    domain value or raises NotFoundFailure, DuplicateFailure or OtherFailure.
    A store implements only the verbs its service exposes; ``create`` and
    ``read`` are the minimum. The request engine checks which verbs a store
    has when it is built.
    """

    entity_name: str

    def create(self, input: Any) -> Any: ...

    def read(self, input: Any) -> Any: ...
