from smartstudy.models.chat import ChatEvent, ChatRequest
from smartstudy.models.document import (
    Document,
    DocumentKind,
    DocumentList,
    DocumentSummary,
    GenerateRequest,
    GenerateResult,
)
from smartstudy.models.quiz_item import Difficulty, ItemKind, QuizItem, QuizItemList
from smartstudy.models.study import (
    RATING_QUALITY,
    RateRequest,
    RateResult,
    Rating,
    SelectRequest,
    SessionStats,
    SessionView,
    StudySummary,
)

__all__ = [
    "RATING_QUALITY",
    "ChatEvent",
    "ChatRequest",
    "Difficulty",
    "Document",
    "DocumentKind",
    "DocumentList",
    "DocumentSummary",
    "GenerateRequest",
    "GenerateResult",
    "ItemKind",
    "QuizItem",
    "QuizItemList",
    "RateRequest",
    "RateResult",
    "Rating",
    "SelectRequest",
    "SessionStats",
    "SessionView",
    "StudySummary",
]
