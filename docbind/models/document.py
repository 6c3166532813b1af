"""Document ORM: one row per document, every collection in one table.

Invariants:
    - id is a 32-char hex string assigned on insert
    - (collection, id) identifies a document; id alone is unique too
    - version mirrors the document's version counter (0 when unversioned)
    - revision increases on every write; conditional updates compare against it
    - body holds every field except id and version

Design Decisions:
    - JSON column for body: documents are schema-less mappings
    - version denormalized into its own column: optimistic checks read it without parsing body
    - revision separate from version: a replacement keeps the version but must still
      invalidate concurrent writers that read the old body
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from docbind.db.base import Base


def new_document_id() -> str:
    return uuid.uuid4().hex


class DocumentRow(Base):
    """A stored document of some collection."""
    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_collection", "collection"),)

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=new_document_id,
    )
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    body: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
