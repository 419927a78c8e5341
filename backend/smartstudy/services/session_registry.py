"""
Process-wide holder for the live study workspace.

The workspace (documents, the session over the quiz items, cumulative stats)
is loaded from the store on first use and kept in memory afterwards; the
store is only written back to. A failed write therefore never loses progress
within the running process.

All read-modify-write cycles go through `session_lock` so one reviewer
touches the item set at a time.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

import aiosqlite

from smartstudy.db.sqlite import load_documents, load_items, load_stats
from smartstudy.models.document import Document
from smartstudy.models.study import SessionStats
from smartstudy.services import session_engine
from smartstudy.services.session_engine import SessionState

logger = logging.getLogger(__name__)

session_lock = asyncio.Lock()


@dataclass
class Workspace:
    documents: list[Document] = field(default_factory=list)
    session: SessionState = field(default_factory=SessionState)
    stats: SessionStats = field(default_factory=SessionStats)


_workspace: Workspace | None = None


async def get_workspace(db: aiosqlite.Connection) -> Workspace:
    """Return the live workspace, loading it from the store the first time."""
    global _workspace
    if _workspace is None:
        documents = await load_documents(db)
        items = await load_items(db)
        stats = await load_stats(db)
        _workspace = Workspace(
            documents=documents,
            session=session_engine.start(items),
            stats=stats,
        )
        logger.info(
            "Workspace loaded: %d documents, %d items", len(documents), len(items)
        )
    return _workspace


def commit(workspace: Workspace) -> None:
    global _workspace
    _workspace = workspace


def reset() -> None:
    """Forget the in-memory workspace; the next request reloads from the store."""
    global _workspace
    _workspace = None
