from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str | None = None


class ChatEvent(BaseModel):
    """One `data:` frame of the chat event stream."""

    content: str | None = None
    full_response: str | None = Field(default=None, serialization_alias="fullResponse")
    done: bool = False
    error: str | None = None
    detail: str | None = None

    def to_sse(self) -> str:
        return f"data: {self.model_dump_json(by_alias=True, exclude_none=True)}\n\n"
