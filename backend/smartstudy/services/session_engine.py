"""
Study session engine.

A session walks an ordered list of quiz items with a cursor. Each item goes
Unanswered -> Revealed -> (rated, cursor advances). Multiple-choice and
true/false items need a selection before they can be revealed; flashcards are
revealed directly and rated with a Rating label.

Every operation takes the current SessionState and returns a new one; nothing
here touches storage. The caller persists items and stats after each step.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from smartstudy.models.quiz_item import ItemKind, QuizItem
from smartstudy.models.study import RATING_QUALITY, Rating, SessionStats
from smartstudy.services.scheduler import schedule

MATCH_QUALITY = 4
MISS_QUALITY = 2


class InvalidSelection(Exception):
    """Raised when an action is not allowed in the session's current state."""


class Phase(str, Enum):
    UNANSWERED = "unanswered"
    REVEALED = "revealed"


@dataclass(frozen=True)
class SessionState:
    items: list[QuizItem] = field(default_factory=list)
    cursor: int = 0
    phase: Phase = Phase.UNANSWERED
    selection: str | bool | None = None
    complete: bool = False

    @property
    def current(self) -> QuizItem | None:
        if self.complete or not 0 <= self.cursor < len(self.items):
            return None
        return self.items[self.cursor]


@dataclass(frozen=True)
class StepResult:
    state: SessionState
    stats: SessionStats
    item: QuizItem      # the rescheduled item
    quality: int
    is_correct: bool


def start(items: list[QuizItem], cursor: int = 0) -> SessionState:
    """Open a session over `items`, pulling a stale cursor back into range."""
    if not items:
        return SessionState(items=[])
    cursor = min(max(cursor, 0), len(items) - 1)
    return SessionState(items=list(items), cursor=cursor)


def _require_current(state: SessionState) -> QuizItem:
    item = state.current
    if item is None:
        raise InvalidSelection("no item to study")
    return item


def select(state: SessionState, choice: str | bool) -> SessionState:
    item = _require_current(state)
    if state.phase is Phase.REVEALED:
        raise InvalidSelection("answer already revealed")

    if item.kind is ItemKind.MULTIPLE_CHOICE:
        if not isinstance(choice, str) or not choice:
            raise InvalidSelection("multiple choice needs a non-empty option")
    elif item.kind is ItemKind.TRUE_FALSE:
        if not isinstance(choice, bool):
            raise InvalidSelection("true/false needs a boolean answer")
    else:
        raise InvalidSelection("flashcards take a rating, not a selection")

    return dataclasses.replace(state, selection=choice)


def reveal(state: SessionState) -> SessionState:
    item = _require_current(state)
    if item.kind is not ItemKind.FLASHCARD and state.selection is None:
        raise InvalidSelection("select an answer before revealing")
    return dataclasses.replace(state, phase=Phase.REVEALED)


def derive_quality(
    item: QuizItem,
    rating: Rating | None = None,
    selection: str | bool | None = None,
) -> tuple[int, bool]:
    """Map an interaction on `item` to (SM-2 quality, is_correct)."""
    if item.kind is ItemKind.FLASHCARD:
        if rating is None:
            raise InvalidSelection("flashcards need a rating")
        quality = RATING_QUALITY[Rating(rating)]
        return quality, quality >= 3

    # Strict type match so a True selection never equals a "True" option
    is_correct = (
        type(selection) is type(item.correct_answer)
        and selection == item.correct_answer
    )
    return (MATCH_QUALITY if is_correct else MISS_QUALITY), is_correct


def rate(
    state: SessionState,
    stats: SessionStats,
    rating: Rating | None = None,
    now: datetime | None = None,
) -> StepResult:
    """
    Score the current item, reschedule it, update stats and advance.

    The session completes after the last item; it does not wrap around.
    """
    item = _require_current(state)
    if state.phase is not Phase.REVEALED:
        raise InvalidSelection("reveal the answer before rating")

    quality, is_correct = derive_quality(item, rating, state.selection)
    updated = schedule(item, quality, now=now)

    items = list(state.items)
    items[state.cursor] = updated

    last = state.cursor >= len(items) - 1
    next_state = SessionState(
        items=items,
        cursor=state.cursor if last else state.cursor + 1,
        complete=last,
    )
    return StepResult(
        state=next_state,
        stats=stats.record(is_correct),
        item=updated,
        quality=quality,
        is_correct=is_correct,
    )


def extend(state: SessionState, new_items: list[QuizItem]) -> SessionState:
    """Append a generated batch; a finished walk resumes at its first item."""
    items = [*state.items, *new_items]
    if state.complete and new_items:
        return SessionState(items=items, cursor=len(state.items))
    return dataclasses.replace(state, items=items)


def restart(state: SessionState) -> SessionState:
    return SessionState(items=state.items)


def clear(state: SessionState) -> SessionState:
    """Drop every item. Stats are kept by the caller untouched."""
    return SessionState(items=[])
