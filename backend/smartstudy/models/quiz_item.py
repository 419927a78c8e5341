from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ItemKind(str, Enum):
    FLASHCARD = "flashcard"
    MULTIPLE_CHOICE = "mcq"
    TRUE_FALSE = "truefalse"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizItem(BaseModel):
    id: str
    kind: ItemKind
    prompt: str
    difficulty: Difficulty      # cosmetic; never read by the scheduler
    document_id: str | None = None
    batch_id: str | None = None

    # flashcard
    answer: str | None = None
    # mcq: str, truefalse: bool
    options: list[str] | None = None
    correct_answer: str | bool | None = None
    explanation: str | None = None

    # SM-2 scheduling state
    next_review_date: datetime
    interval_days: int = Field(default=1, ge=1)
    ease_factor: float = Field(default=2.5, ge=1.3)
    repetition_count: int = Field(default=0, ge=0)


class QuizItemList(BaseModel):
    items: list[QuizItem]
    total: int
