from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel

from smartstudy.models.quiz_item import QuizItem


class Rating(str, Enum):
    """Self-assessment buttons shown after a flashcard is revealed."""

    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


# Presentation label -> SM-2 quality (0–5)
RATING_QUALITY: dict[Rating, int] = {
    Rating.HARD: 2,
    Rating.GOOD: 3,
    Rating.EASY: 4,
}


class SessionStats(BaseModel):
    items_studied: int = 0
    correct_answers: int = 0
    current_streak: int = 0

    @property
    def accuracy(self) -> int:
        if self.items_studied == 0:
            return 0
        # Halves round up
        return math.floor(self.correct_answers / self.items_studied * 100 + 0.5)

    def record(self, is_correct: bool) -> SessionStats:
        return SessionStats(
            items_studied=self.items_studied + 1,
            correct_answers=self.correct_answers + (1 if is_correct else 0),
            current_streak=self.current_streak + 1 if is_correct else 0,
        )


# --- Request / response bodies ---


class SelectRequest(BaseModel):
    choice: str | bool


class RateRequest(BaseModel):
    rating: Rating | None = None  # required for flashcards only


class SessionView(BaseModel):
    item: QuizItem | None
    cursor: int
    total: int
    phase: str
    selection: str | bool | None
    complete: bool
    stats: SessionStats
    persisted: bool = True


class RateResult(BaseModel):
    item: QuizItem
    quality: int
    is_correct: bool
    session: SessionView


class StudySummary(BaseModel):
    stats: SessionStats
    accuracy: int
    total_items: int
    due_items: int
    documents: int
