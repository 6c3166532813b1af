"""SQL Document Store: DocumentStore implementation on the async SQLAlchemy session manager.

Invariants:
    - One database session per store call
    - The store assigns ids (32-char hex) and starts the version counter at 0
    - Payload id/version keys are never stored in the body
    - With a schema, every written body is validated first; failures raise
      ValidationFailureError with field-level details, unknown fields are dropped
    - Every write to an existing row is a conditional UPDATE on the revision the
      write was computed from; a lost race re-reads the row and recomputes
    - replace_one with expected_version raises VersionConflictError when the stored
      version differs, including when a concurrent patch lands first
    - Bulk writes commit per document: a failure part-way leaves earlier documents written

Design Decisions:
    - Filtering, sorting and projection run in Python over the collection's rows
      (core/filter_match.py): JSON querying differs across SQL dialects
    - Merge and replacement computed by core/merge_patch.py: the store only persists
    - Compare-and-swap over row locks: SQLite has no SELECT ... FOR UPDATE
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docbind.core.domain_types import Document
from docbind.core.errors import (
    StoreFailureError, ValidationFailureError, VersionConflictError,
)
from docbind.core.filter_match import filter_documents, matches, run_query
from docbind.core.merge_patch import MergePatch, apply_patch, build_replacement
from docbind.core.query_translator import QuerySpec
from docbind.infrastructure.database import DatabaseSessionManager
from docbind.models.document import DocumentRow, new_document_id

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 25

# Receives the current document, returns the document to write (None skips the write)
Rewrite = Callable[[Document], Document | None]


def model_name_for(collection: str) -> str:
    """`books` -> `Book`."""
    name = collection[:-1] if collection.endswith("s") and len(collection) > 1 else collection
    return name[:1].upper() + name[1:]


class SqlDocumentStore:
    """One collection of documents stored in the shared `documents` table."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        collection: str,
        *,
        model_name: str | None = None,
        schema: type[BaseModel] | None = None,
        id_key: str = "_id",
        version_key: str | None = "__v",
    ):
        self._db = db
        self.collection = collection
        self.model_name = model_name or model_name_for(collection)
        self.schema = schema
        self.id_key = id_key
        self.version_key = version_key

    # ─── DocumentStore ───────────────────────────────────────────

    async def insert(self, fields: Mapping[str, Any]) -> Document:
        body = self._validate(self._strip(fields))
        row = DocumentRow(
            id=new_document_id(), collection=self.collection,
            version=0, revision=0, body=body,
        )
        async with self._db.session() as session:
            session.add(row)
            await session.commit()
        logger.debug(
            f"Inserted into {self.collection}",
            extra={"resource": self.model_name, "document_id": row.id},
        )
        return self._to_document(row)

    async def find_one(self, doc_id: str) -> Document | None:
        async with self._db.session() as session:
            row = await self._get_row(session, doc_id)
        return self._to_document(row) if row is not None else None

    async def find_many(self, query: QuerySpec) -> list[Document]:
        async with self._db.session() as session:
            rows = await self._all_rows(session)
        return run_query((self._to_document(r) for r in rows), query, self.id_key)

    async def count(self, filter: Mapping[str, Any]) -> int:
        async with self._db.session() as session:
            rows = await self._all_rows(session)
        return len(filter_documents((self._to_document(r) for r in rows), filter))

    async def update_one(self, doc_id: str, patch: MergePatch) -> Document | None:
        async with self._db.session() as session:
            return await self._rewrite(
                session, doc_id, lambda current: apply_patch(current, patch),
            )

    async def update_many(self, filter: Mapping[str, Any], patch: MergePatch) -> int:
        def rewrite(current: Document) -> Document | None:
            if not matches(current, filter):
                return None
            return apply_patch(current, patch)

        updated = 0
        async with self._db.session() as session:
            for row in await self._matching_rows(session, filter):
                if await self._rewrite(session, row.id, rewrite) is not None:
                    updated += 1
        logger.debug(
            f"Updated {updated} document(s) in {self.collection}",
            extra={"resource": self.model_name, "count": updated},
        )
        return updated

    async def replace_one(
        self,
        doc_id: str,
        fields: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Document | None:
        def rewrite(current: Document) -> Document:
            if expected_version is not None and self.version_key:
                actual = current.get(self.version_key)
                if actual != expected_version:
                    raise VersionConflictError(doc_id, expected_version, actual)
            return build_replacement(
                current, fields, id_key=self.id_key, version_key=self.version_key,
            )

        async with self._db.session() as session:
            return await self._rewrite(session, doc_id, rewrite)

    async def delete_one(self, doc_id: str) -> bool:
        async with self._db.session() as session:
            row = await self._get_row(session, doc_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
        return True

    async def delete_many(self, filter: Mapping[str, Any]) -> int:
        async with self._db.session() as session:
            rows = await self._matching_rows(session, filter)
            for row in rows:
                await session.delete(row)
            await session.commit()
        logger.debug(
            f"Deleted {len(rows)} document(s) from {self.collection}",
            extra={"resource": self.model_name, "count": len(rows)},
        )
        return len(rows)

    # ─── Conditional Writes ──────────────────────────────────────

    async def _rewrite(
        self, session: AsyncSession, doc_id: str, rewrite: Rewrite,
    ) -> Document | None:
        """Read, recompute and conditionally write one document until the write wins.

        Returns the written document, or None when the document is gone or the
        rewrite declined to write.
        """
        for _ in range(MAX_WRITE_ATTEMPTS):
            row = await self._get_row(session, doc_id)
            if row is None:
                return None
            document = rewrite(self._to_document(row))
            if document is None:
                return None
            written = await self._swap(session, row, document)
            if written is not None:
                return written
        raise StoreFailureError(
            f"gave up on '{doc_id}' after {MAX_WRITE_ATTEMPTS} conflicting writes", "update",
        )

    async def _swap(
        self, session: AsyncSession, row: DocumentRow, document: Document,
    ) -> Document | None:
        """UPDATE the row only if its revision is still the one `document` was built from."""
        body = self._validate(self._strip(document))
        version = row.version
        if self.version_key:
            version = document.get(self.version_key, row.version)
        result = await session.execute(
            update(DocumentRow)
            .where(
                DocumentRow.id == row.id,
                DocumentRow.collection == self.collection,
                DocumentRow.revision == row.revision,
            )
            .values(
                body=body,
                version=version,
                revision=row.revision + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            await session.rollback()
            logger.debug(
                f"Write race on {self.collection}, retrying",
                extra={"resource": self.model_name, "document_id": row.id},
            )
            return None
        await session.commit()
        return self._assemble(row.id, body, version)

    # ─── Rows ────────────────────────────────────────────────────

    async def _get_row(self, session: AsyncSession, doc_id: str) -> DocumentRow | None:
        result = await session.execute(
            select(DocumentRow)
            .where(
                DocumentRow.collection == self.collection,
                DocumentRow.id == str(doc_id),
            )
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _all_rows(self, session: AsyncSession) -> list[DocumentRow]:
        result = await session.execute(
            select(DocumentRow)
            .where(DocumentRow.collection == self.collection)
            .order_by(DocumentRow.created_at, DocumentRow.id),
        )
        return list(result.scalars().all())

    async def _matching_rows(
        self, session: AsyncSession, filter: Mapping[str, Any],
    ) -> list[DocumentRow]:
        rows = await self._all_rows(session)
        wanted = {
            doc[self.id_key]
            for doc in filter_documents((self._to_document(r) for r in rows), filter)
        }
        return [row for row in rows if row.id in wanted]

    # ─── Documents ───────────────────────────────────────────────

    def _strip(self, fields: Mapping[str, Any]) -> dict:
        return {
            k: v for k, v in fields.items() if k not in (self.id_key, self.version_key)
        }

    def _assemble(self, doc_id: str, body: Mapping[str, Any], version: int) -> Document:
        document: Document = {self.id_key: doc_id}
        document.update(body or {})
        if self.version_key:
            document[self.version_key] = version
        return document

    def _to_document(self, row: DocumentRow) -> Document:
        return self._assemble(row.id, row.body, row.version)

    def _validate(self, body: dict) -> dict:
        if self.schema is None:
            return dict(body)
        try:
            model = self.schema.model_validate(body)
        except ValidationError as e:
            raise ValidationFailureError(
                f"{self.model_name} validation failed",
                details=[
                    {
                        "field": ".".join(str(loc) for loc in err["loc"]),
                        "message": err["msg"],
                        "type": err["type"],
                    }
                    for err in e.errors()
                ],
            ) from None
        return model.model_dump(mode="json", exclude_unset=True)
