"""
Quiz item generation service.

Turns the raw text of a document into flashcards, multiple-choice questions
and true/false statements without any model in the loop:
  1. Split the text into sentences on runs of . ! ?
  2. Keep sentences longer than MIN_SENTENCE_CHARS
  3. For each requested kind, draw sentences at random (with replacement) and
     phrase a question around the pivot keyword (the middle word)

This is a best-effort heuristic. Only an empty sentence pool is an error
(InsufficientContent); any other input is tolerated.
"""
from __future__ import annotations

import logging
import math
import random
import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from smartstudy.models.quiz_item import Difficulty, ItemKind, QuizItem

logger = logging.getLogger(__name__)

MIN_SENTENCE_CHARS = 20
MIN_PIVOT_WORDS = 5
INITIAL_EASE_FACTOR = 2.5

_SENTENCE_END = re.compile(r"[.!?]+")
_DIFFICULTIES = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


class InsufficientContent(Exception):
    """Raised when the text has no sentence usable for a question."""


def split_sentences(text: str) -> list[str]:
    """Return the stripped sentences of `text` longer than MIN_SENTENCE_CHARS."""
    fragments = (s.strip() for s in _SENTENCE_END.split(text))
    return [s for s in fragments if len(s) > MIN_SENTENCE_CHARS]


def pivot_keyword(sentence: str) -> str:
    words = sentence.split()
    return words[len(words) // 2]


def generate(
    text: str,
    kinds: Iterable[ItemKind],
    target_count: int,
    rng: random.Random | None = None,
    now: datetime | None = None,
    document_id: str | None = None,
) -> list[QuizItem]:
    """
    Generate up to ceil(target_count / len(kinds)) items per kind.

    Raises InsufficientContent if no sentence survives filtering or none of
    them is long enough to pick a pivot keyword from.
    Raises ValueError on an empty kind set or a non-positive count.
    """
    kinds = list(dict.fromkeys(ItemKind(k) for k in kinds))
    if not kinds:
        raise ValueError("at least one item kind is required")
    if target_count < 1:
        raise ValueError("target_count must be positive")

    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)

    sentences = split_sentences(text)
    if not sentences:
        raise InsufficientContent(
            f"no sentence longer than {MIN_SENTENCE_CHARS} characters"
        )
    pool = [s for s in sentences if len(s.split()) > MIN_PIVOT_WORDS]
    if not pool:
        raise InsufficientContent(
            f"no sentence with more than {MIN_PIVOT_WORDS} words"
        )

    per_kind = min(math.ceil(target_count / len(kinds)), len(sentences))
    batch_id = _new_id(rng)
    items: list[QuizItem] = []

    for kind in kinds:
        for _ in range(per_kind):
            sentence = rng.choice(pool)
            items.append(
                _build_item(kind, sentence, rng, now, document_id, batch_id)
            )

    logger.debug(
        "Generated %d items from %d sentences (%d pivotable)",
        len(items),
        len(sentences),
        len(pool),
    )
    return items


def _build_item(
    kind: ItemKind,
    sentence: str,
    rng: random.Random,
    now: datetime,
    document_id: str | None,
    batch_id: str,
) -> QuizItem:
    keyword = pivot_keyword(sentence)
    fields: dict = {
        "id": _new_id(rng),
        "kind": kind,
        "difficulty": rng.choice(_DIFFICULTIES),
        "document_id": document_id,
        "batch_id": batch_id,
        "next_review_date": now,
        "interval_days": 1,
        "ease_factor": INITIAL_EASE_FACTOR,
        "repetition_count": 0,
    }

    if kind is ItemKind.FLASHCARD:
        fields["prompt"] = f"What is {keyword} in the context of this topic?"
        fields["answer"] = sentence
    elif kind is ItemKind.MULTIPLE_CHOICE:
        options = [
            sentence,
            f"{keyword} is unrelated",
            "Opposite meaning",
            "Different concept",
        ]
        rng.shuffle(options)
        fields["prompt"] = f"Which statement about {keyword} is correct?"
        fields["options"] = options
        fields["correct_answer"] = sentence
    else:
        is_true = rng.random() > 0.5
        if is_true:
            fields["prompt"] = sentence
            fields["explanation"] = "This is true."
        else:
            fields["prompt"] = sentence.replace(keyword, "incorrect", 1)
            fields["explanation"] = f"False. Correct: {sentence}"
        fields["correct_answer"] = is_true

    return QuizItem(**fields)


def _new_id(rng: random.Random) -> str:
    # Drawn from rng so a seeded generator yields reproducible ids
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))
