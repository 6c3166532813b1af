"""Boundary Protocols: contracts between the binding core and its host collaborators.

Invariants:
    - Core NEVER imports from services/, api/ or infrastructure/
    - DocumentStore methods are coroutines: every implementation does IO
    - RequestLike is implemented once per host router (see api/adapter.py)
    - Stores raise DocbindError subclasses; anything else is treated as a store failure

Design Decisions:
    - Protocol over ABC: structural subtyping, adapters need not inherit anything
    - SimpleRequest lives here: a host-neutral RequestLike for direct calls and tests
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from docbind.core.domain_types import Document
from docbind.core.merge_patch import MergePatch
from docbind.core.query_translator import QuerySpec


class DocumentStore(Protocol):
    """Contract for one document collection: implemented by infrastructure."""
    model_name: str
    id_key: str
    version_key: str | None

    async def insert(self, fields: Mapping[str, Any]) -> Document: ...
    async def find_one(self, doc_id: str) -> Document | None: ...
    async def find_many(self, query: QuerySpec) -> list[Document]: ...
    async def count(self, filter: Mapping[str, Any]) -> int: ...
    async def update_one(self, doc_id: str, patch: MergePatch) -> Document | None: ...
    async def update_many(self, filter: Mapping[str, Any], patch: MergePatch) -> int: ...
    async def replace_one(
        self,
        doc_id: str,
        fields: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Document | None: ...
    async def delete_one(self, doc_id: str) -> bool: ...
    async def delete_many(self, filter: Mapping[str, Any]) -> int: ...


class RequestLike(Protocol):
    """What a handler needs from an incoming request, whatever router delivered it."""
    def path_param(self, name: str) -> str | None: ...
    def query_params(self) -> Mapping[str, Any]: ...
    def body(self) -> Any: ...


@dataclass(frozen=True)
class SimpleRequest:
    """RequestLike built from plain values."""
    path_params: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    payload: Any = None

    def path_param(self, name: str) -> str | None:
        return self.path_params.get(name)

    def query_params(self) -> Mapping[str, Any]:
        return self.query

    def body(self) -> Any:
        return self.payload
