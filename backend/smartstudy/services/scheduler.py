"""SM-2 derived review scheduling."""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from smartstudy.models.quiz_item import QuizItem

PASS_QUALITY = 3
MIN_EASE_FACTOR = 1.3


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def schedule(item: QuizItem, quality: int, now: datetime | None = None) -> QuizItem:
    """
    Return a copy of `item` rescheduled for a review of the given quality.

    quality >= 3 is a pass: the interval grows 1 -> 6 -> interval * ease.
    Anything lower resets the repetition count and retries tomorrow.
    The ease factor is recomputed on both paths from the previous value.
    """
    repetitions = item.repetition_count

    if quality >= PASS_QUALITY:
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = 6
        else:
            interval = max(1, _round_half_up(item.interval_days * item.ease_factor))
        repetitions += 1
    else:
        repetitions = 0
        interval = 1

    now = now or datetime.now(timezone.utc)
    return item.model_copy(
        update={
            "interval_days": interval,
            "repetition_count": repetitions,
            "ease_factor": next_ease_factor(item.ease_factor, quality),
            "next_review_date": now + timedelta(days=interval),
        }
    )


def is_due(item: QuizItem, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return item.next_review_date <= now
