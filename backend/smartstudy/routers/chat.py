from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from smartstudy.models.chat import ChatRequest
from smartstudy.services.relay import stream_chat

router = APIRouter()


@router.post("/chat-stream")
async def chat_stream(body: ChatRequest | None = None):
    """Relay one message to the chat model as a server-sent event stream."""
    if body is None or not body.message:
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    async def event_generator():
        async for event in stream_chat(body.message):
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
