import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from smartstudy.models.quiz_item import Difficulty, ItemKind, QuizItem

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

SAMPLE_TEXT = (
    "Photosynthesis converts light energy into chemical energy inside plant cells. "
    "Mitochondria produce most of the chemical energy needed by the cell! "
    "Short one. "
    "Why do leaves change their color during the autumn season?"
)

SAMPLE_SENTENCES = [
    "Photosynthesis converts light energy into chemical energy inside plant cells",
    "Mitochondria produce most of the chemical energy needed by the cell",
    "Why do leaves change their color during the autumn season",
]


def make_item(kind: ItemKind = ItemKind.FLASHCARD, **overrides) -> QuizItem:
    fields = {
        "id": f"{kind.value}-1",
        "kind": kind,
        "prompt": "What is energy in the context of this topic?",
        "difficulty": Difficulty.MEDIUM,
        "next_review_date": NOW,
        "interval_days": 1,
        "ease_factor": 2.5,
        "repetition_count": 0,
    }
    if kind is ItemKind.FLASHCARD:
        fields["answer"] = SAMPLE_SENTENCES[0]
    elif kind is ItemKind.MULTIPLE_CHOICE:
        fields["options"] = [
            "Opposite meaning",
            SAMPLE_SENTENCES[0],
            "energy is unrelated",
            "Different concept",
        ]
        fields["correct_answer"] = SAMPLE_SENTENCES[0]
    else:
        fields["correct_answer"] = False
        fields["explanation"] = f"False. Correct: {SAMPLE_SENTENCES[0]}"
    fields.update(overrides)
    return QuizItem(**fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client over a fresh SQLite store in a temporary data dir."""
    from smartstudy import app
    from smartstudy.config import settings
    from smartstudy.routers import documents

    monkeypatch.setattr(settings, "smartstudy_data_dir", tmp_path)
    monkeypatch.setattr(documents, "rng", random.Random(42))
    with TestClient(app) as c:
        yield c
