import asyncio
import dataclasses
import logging
import uuid
from datetime import datetime, timezone

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, UploadFile

from smartstudy.db.sqlite import get_db, save_snapshot
from smartstudy.models.document import Document
from smartstudy.services.session_registry import commit, get_workspace, session_lock
from smartstudy.services.text_extractor import (
    UnsupportedFileType,
    detect_kind,
    extract_text,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload", response_model=Document, status_code=201)
async def upload_document(
    file: UploadFile,
    db: aiosqlite.Connection = Depends(get_db),
):
    # Validate file type before reading the body
    try:
        detect_kind(file.filename or "")
    except UnsupportedFileType as e:
        raise HTTPException(400, "Please upload PDF or TXT") from e

    content = await file.read()
    try:
        extraction = await asyncio.to_thread(extract_text, file.filename, content)
    except Exception as e:
        logger.error("Text extraction failed for %s: %s", file.filename, e)
        raise HTTPException(422, f"Could not read document: {e}") from e

    doc = Document(
        id=str(uuid.uuid4()),
        name=file.filename,
        kind=extraction.kind,
        raw_text=extraction.text,
        uploaded_at=datetime.now(timezone.utc),
        page_count=extraction.page_count,
    )

    async with session_lock:
        ws = await get_workspace(db)
        documents = [*ws.documents, doc]
        commit(dataclasses.replace(ws, documents=documents))
        await save_snapshot(db, documents=documents)

    logger.info(
        "Uploaded %s (%s, %d pages, %d chars)",
        doc.name,
        doc.kind.value,
        doc.page_count,
        len(doc.raw_text),
    )
    return doc
