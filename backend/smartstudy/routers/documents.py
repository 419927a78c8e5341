import dataclasses
import logging
import random

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from smartstudy.config import settings
from smartstudy.db.sqlite import get_db, save_snapshot
from smartstudy.models.document import (
    Document,
    DocumentList,
    DocumentSummary,
    GenerateRequest,
    GenerateResult,
)
from smartstudy.services import item_generator, session_engine
from smartstudy.services.item_generator import InsufficientContent
from smartstudy.services.session_registry import commit, get_workspace, session_lock

logger = logging.getLogger(__name__)
router = APIRouter()

# Swapped for a seeded instance in tests
rng = random.Random()


def _summary(doc: Document) -> DocumentSummary:
    return DocumentSummary(**doc.model_dump(exclude={"raw_text"}))


@router.get("/", response_model=DocumentList)
async def list_docs(db: aiosqlite.Connection = Depends(get_db)):
    async with session_lock:
        ws = await get_workspace(db)
        items = [_summary(d) for d in ws.documents]
    return DocumentList(items=items, total=len(items))


@router.get("/{doc_id}", response_model=Document)
async def get_doc(doc_id: str, db: aiosqlite.Connection = Depends(get_db)):
    async with session_lock:
        ws = await get_workspace(db)
        doc = next((d for d in ws.documents if d.id == doc_id), None)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    return doc


@router.delete("/{doc_id}", status_code=204)
async def delete_doc(doc_id: str, db: aiosqlite.Connection = Depends(get_db)):
    async with session_lock:
        ws = await get_workspace(db)
        remaining = [d for d in ws.documents if d.id != doc_id]
        if len(remaining) == len(ws.documents):
            raise HTTPException(status_code=404, detail="Document not found")
        commit(dataclasses.replace(ws, documents=remaining))
        # Generated items outlive their document; only a clear removes them
        await save_snapshot(db, documents=remaining)


@router.post("/{doc_id}/generate", response_model=GenerateResult)
async def generate_items(
    doc_id: str,
    body: GenerateRequest | None = None,
    db: aiosqlite.Connection = Depends(get_db),
):
    body = body or GenerateRequest()
    count = body.count if body.count is not None else settings.default_item_count
    if not body.kinds:
        raise HTTPException(status_code=422, detail="Select at least one item type")
    if count < 1:
        raise HTTPException(status_code=422, detail="count must be positive")

    async with session_lock:
        ws = await get_workspace(db)
        doc = next((d for d in ws.documents if d.id == doc_id), None)
        if not doc:
            raise HTTPException(status_code=404, detail="Document not found")

        try:
            new_items = item_generator.generate(
                doc.raw_text, body.kinds, count, rng=rng, document_id=doc.id
            )
        except InsufficientContent as e:
            logger.warning("Cannot generate items for %s: %s", doc_id, e)
            raise HTTPException(
                status_code=422,
                detail=f"Cannot generate study materials from this document: {e}",
            ) from e

        session = session_engine.extend(ws.session, new_items)
        documents = [
            d.model_copy(update={"derived_item_count": len(new_items)})
            if d.id == doc_id
            else d
            for d in ws.documents
        ]
        commit(dataclasses.replace(ws, documents=documents, session=session))
        persisted = await save_snapshot(db, documents=documents, items=session.items)

    logger.info("Document %s: generated %d items", doc_id, len(new_items))
    return GenerateResult(
        document_id=doc_id,
        generated=len(new_items),
        total_items=len(session.items),
        persisted=persisted,
    )
