"""
Study session router.

Endpoints:
  GET    /study/session  current item, cursor, phase and stats
  POST   /study/select   pick an option (mcq) or true/false answer
  POST   /study/reveal   show the answer
  POST   /study/rate     score the item, run SM-2, advance
  POST   /study/restart  walk the items again from the first one
  GET    /study/items    every quiz item
  GET    /study/due      items whose next review date has passed
  DELETE /study/items    clear all study materials (stats are kept)
  GET    /study/stats    cumulative stats
  GET    /study/summary  dashboard figures
"""
from __future__ import annotations

import dataclasses
import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from smartstudy.db.sqlite import get_db, save_snapshot
from smartstudy.models.quiz_item import QuizItemList
from smartstudy.models.study import (
    RateRequest,
    RateResult,
    SelectRequest,
    SessionStats,
    SessionView,
    StudySummary,
)
from smartstudy.services import session_engine
from smartstudy.services.scheduler import is_due
from smartstudy.services.session_engine import InvalidSelection, SessionState
from smartstudy.services.session_registry import (
    commit,
    get_workspace,
    session_lock,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _view(
    session: SessionState, stats: SessionStats, persisted: bool = True
) -> SessionView:
    return SessionView(
        item=session.current,
        cursor=session.cursor,
        total=len(session.items),
        phase=session.phase.value,
        selection=session.selection,
        complete=session.complete,
        stats=stats,
        persisted=persisted,
    )


@router.get("/session", response_model=SessionView)
async def get_session(db: aiosqlite.Connection = Depends(get_db)) -> SessionView:
    async with session_lock:
        ws = await get_workspace(db)
        return _view(ws.session, ws.stats)


@router.post("/select", response_model=SessionView)
async def select_answer(
    body: SelectRequest,
    db: aiosqlite.Connection = Depends(get_db),
) -> SessionView:
    async with session_lock:
        ws = await get_workspace(db)
        try:
            session = session_engine.select(ws.session, body.choice)
        except InvalidSelection as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        commit(dataclasses.replace(ws, session=session))
        return _view(session, ws.stats)


@router.post("/reveal", response_model=SessionView)
async def reveal_answer(db: aiosqlite.Connection = Depends(get_db)) -> SessionView:
    async with session_lock:
        ws = await get_workspace(db)
        try:
            session = session_engine.reveal(ws.session)
        except InvalidSelection as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        commit(dataclasses.replace(ws, session=session))
        return _view(session, ws.stats)


@router.post("/rate", response_model=RateResult)
async def rate_item(
    body: RateRequest,
    db: aiosqlite.Connection = Depends(get_db),
) -> RateResult:
    """Score the revealed item. Flashcards need a rating; mcq/truefalse use the selection."""
    async with session_lock:
        ws = await get_workspace(db)
        try:
            step = session_engine.rate(ws.session, ws.stats, body.rating)
        except InvalidSelection as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

        commit(dataclasses.replace(ws, session=step.state, stats=step.stats))
        persisted = await save_snapshot(db, items=step.state.items, stats=step.stats)

    logger.info(
        "Rated item %s: quality=%d correct=%s next in %d days",
        step.item.id,
        step.quality,
        step.is_correct,
        step.item.interval_days,
    )
    return RateResult(
        item=step.item,
        quality=step.quality,
        is_correct=step.is_correct,
        session=_view(step.state, step.stats, persisted),
    )


@router.post("/restart", response_model=SessionView)
async def restart_session(db: aiosqlite.Connection = Depends(get_db)) -> SessionView:
    async with session_lock:
        ws = await get_workspace(db)
        session = session_engine.restart(ws.session)
        commit(dataclasses.replace(ws, session=session))
        return _view(session, ws.stats)


@router.get("/items", response_model=QuizItemList)
async def list_items(db: aiosqlite.Connection = Depends(get_db)) -> QuizItemList:
    async with session_lock:
        ws = await get_workspace(db)
        items = list(ws.session.items)
    return QuizItemList(items=items, total=len(items))


@router.get("/due", response_model=QuizItemList)
async def list_due_items(db: aiosqlite.Connection = Depends(get_db)) -> QuizItemList:
    """Items due for review now, earliest first."""
    async with session_lock:
        ws = await get_workspace(db)
        due = [item for item in ws.session.items if is_due(item)]
    due.sort(key=lambda item: item.next_review_date)
    return QuizItemList(items=due, total=len(due))


@router.delete("/items", response_model=SessionView)
async def clear_items(db: aiosqlite.Connection = Depends(get_db)) -> SessionView:
    async with session_lock:
        ws = await get_workspace(db)
        session = session_engine.clear(ws.session)
        commit(dataclasses.replace(ws, session=session))
        persisted = await save_snapshot(db, items=session.items)
    logger.info("Cleared %d study items", len(ws.session.items))
    return _view(session, ws.stats, persisted)


@router.get("/stats", response_model=SessionStats)
async def get_stats(db: aiosqlite.Connection = Depends(get_db)) -> SessionStats:
    async with session_lock:
        ws = await get_workspace(db)
        return ws.stats


@router.get("/summary", response_model=StudySummary)
async def get_summary(db: aiosqlite.Connection = Depends(get_db)) -> StudySummary:
    async with session_lock:
        ws = await get_workspace(db)
        items = ws.session.items
        return StudySummary(
            stats=ws.stats,
            accuracy=ws.stats.accuracy,
            total_items=len(items),
            due_items=sum(1 for item in items if is_due(item)),
            documents=len(ws.documents),
        )
