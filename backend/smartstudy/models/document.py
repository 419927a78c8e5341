from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from smartstudy.models.quiz_item import ItemKind


class DocumentKind(str, Enum):
    PDF = "pdf"
    TEXT = "text"


class Document(BaseModel):
    id: str
    name: str
    kind: DocumentKind
    raw_text: str
    uploaded_at: datetime
    derived_item_count: int = 0
    page_count: int = 1


class DocumentSummary(BaseModel):
    """Document without its raw text, for listings."""

    id: str
    name: str
    kind: DocumentKind
    uploaded_at: datetime
    derived_item_count: int
    page_count: int


class DocumentList(BaseModel):
    items: list[DocumentSummary]
    total: int


class GenerateRequest(BaseModel):
    kinds: list[ItemKind] = [
        ItemKind.FLASHCARD,
        ItemKind.MULTIPLE_CHOICE,
        ItemKind.TRUE_FALSE,
    ]
    count: int | None = None  # falls back to settings.default_item_count


class GenerateResult(BaseModel):
    document_id: str
    generated: int
    total_items: int
    persisted: bool = True
