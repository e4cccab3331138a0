"""SQLite-backed document store.

Persists :class:`Document` records to a local SQLite database at
``data/documents.db``.  Uses ``aiosqlite`` for async I/O.  Status writes are
conditional (``UPDATE ... WHERE status = ?``) so two process calls racing on
the same document cannot silently overwrite each other.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import aiosqlite
import structlog

from docpipe.interfaces.document_store import IDocumentStore
from docpipe.models.document import Document, DocumentStatus, utc_now
from docpipe.utils.errors import DocumentNotFoundError, StatusConflictError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id          TEXT    PRIMARY KEY,
    file_name   TEXT    NOT NULL,
    file_type   TEXT    NOT NULL,
    text        TEXT    NOT NULL DEFAULT '',
    status      TEXT    NOT NULL,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);",
]

_INSERT_SQL = """\
INSERT INTO documents (id, file_name, file_type, text, status, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_SQL = """\
SELECT id, file_name, file_type, text, status, created_at, updated_at
FROM documents
WHERE id = ?;
"""

_CAS_STATUS_SQL = """\
UPDATE documents
SET status = ?, updated_at = ?
WHERE id = ? AND status = ?;
"""


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed :class:`IDocumentStore`."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("document_db_initialized", path=str(self._db_path))

    async def insert(self, document: Document) -> Document:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                _INSERT_SQL,
                (
                    document.id,
                    document.file_name,
                    document.file_type,
                    document.text,
                    document.status.value,
                    document.created_at.isoformat(),
                    document.updated_at.isoformat(),
                ),
            )
            await db.commit()
        logger.info(
            "document_inserted",
            document_id=document.id,
            file_name=document.file_name,
            chars=len(document.text),
        )
        return document

    async def get(self, document_id: str) -> Document | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_SQL, (document_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        expected_status: DocumentStatus,
    ) -> Document:
        if not expected_status.can_transition_to(status):
            raise StatusConflictError(
                message=(
                    f"Document {document_id} cannot move from "
                    f"'{expected_status.value}' to '{status.value}'"
                )
            )

        now = utc_now()
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                _CAS_STATUS_SQL,
                (status.value, now.isoformat(), document_id, expected_status.value),
            )
            await db.commit()
            updated = cursor.rowcount
            cursor = await db.execute(_SELECT_SQL, (document_id,))
            row = await cursor.fetchone()

        if row is None:
            raise DocumentNotFoundError(message=f"Document not found: {document_id}")
        if updated == 0:
            raise StatusConflictError(
                message=(
                    f"Document {document_id} is '{row['status']}', "
                    f"expected '{expected_status.value}'"
                )
            )

        logger.info(
            "document_status_updated",
            document_id=document_id,
            previous=expected_status.value,
            status=status.value,
        )
        return self._row_to_document(row)

    def get_provider_name(self) -> str:
        return "sqlite_documents"

    @staticmethod
    def _row_to_document(row: aiosqlite.Row) -> Document:
        return Document(
            id=row["id"],
            file_name=row["file_name"],
            file_type=row["file_type"],
            text=row["text"],
            status=DocumentStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
