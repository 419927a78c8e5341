import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite
from pydantic import TypeAdapter, ValidationError

from smartstudy.config import settings
from smartstudy.models.document import Document
from smartstudy.models.quiz_item import QuizItem
from smartstudy.models.study import SessionStats

logger = logging.getLogger(__name__)

_db_path: Path | None = None

DOCUMENTS_KEY = "documents"
ITEMS_KEY = "studyMaterials"
STATS_KEY = "studyStats"

_documents_adapter = TypeAdapter(list[Document])
_items_adapter = TypeAdapter(list[QuizItem])

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS store (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


class PersistenceFailure(Exception):
    """Raised when a blob could not be written to the store."""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()
    logger.info("SQLite store ready at %s", _db_path)


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        yield db


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


# --- Key-value store ---


async def load(db: aiosqlite.Connection, key: str) -> str | None:
    cursor = await db.execute("SELECT value FROM store WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row[0] if row else None


async def save(db: aiosqlite.Connection, key: str, blob: str) -> None:
    try:
        await db.execute(
            "INSERT INTO store(key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (key, blob, _now()),
        )
        await db.commit()
    except aiosqlite.Error as e:
        raise PersistenceFailure(f"could not save {key!r}: {e}") from e


async def _load_blob(db: aiosqlite.Connection, key: str) -> str | None:
    """Read a blob; a failed read counts as an empty store."""
    try:
        return await load(db, key)
    except aiosqlite.Error as e:
        logger.warning("Load of %r failed, starting empty: %s", key, e)
        return None


# --- Typed aggregates ---


async def load_documents(db: aiosqlite.Connection) -> list[Document]:
    blob = await _load_blob(db, DOCUMENTS_KEY)
    if not blob:
        return []
    try:
        return _documents_adapter.validate_json(blob)
    except ValidationError as e:
        logger.warning("Stored documents unreadable, starting empty: %s", e)
        return []


async def save_documents(db: aiosqlite.Connection, documents: list[Document]) -> None:
    await save(db, DOCUMENTS_KEY, _documents_adapter.dump_json(documents).decode())


async def load_items(db: aiosqlite.Connection) -> list[QuizItem]:
    blob = await _load_blob(db, ITEMS_KEY)
    if not blob:
        return []
    try:
        return _items_adapter.validate_json(blob)
    except ValidationError as e:
        logger.warning("Stored study materials unreadable, starting empty: %s", e)
        return []


async def save_items(db: aiosqlite.Connection, items: list[QuizItem]) -> None:
    await save(db, ITEMS_KEY, _items_adapter.dump_json(items).decode())


async def load_stats(db: aiosqlite.Connection) -> SessionStats:
    blob = await _load_blob(db, STATS_KEY)
    if not blob:
        return SessionStats()
    try:
        return SessionStats.model_validate_json(blob)
    except ValidationError as e:
        logger.warning("Stored study stats unreadable, starting empty: %s", e)
        return SessionStats()


async def save_stats(db: aiosqlite.Connection, stats: SessionStats) -> None:
    await save(db, STATS_KEY, stats.model_dump_json())


async def save_snapshot(
    db: aiosqlite.Connection,
    documents: list[Document] | None = None,
    items: list[QuizItem] | None = None,
    stats: SessionStats | None = None,
) -> bool:
    """
    Write back whichever aggregates were given.

    Returns False if any write failed. Failures are logged, not raised: the
    in-memory session keeps going on unsynchronised state.
    """
    ok = True
    writes = (
        (documents, save_documents),
        (items, save_items),
        (stats, save_stats),
    )
    for value, writer in writes:
        if value is None:
            continue
        try:
            await writer(db, value)
        except PersistenceFailure as e:
            logger.error("Persistence failure: %s", e)
            ok = False
    return ok
