"""
Chat-completion response models.

Only the fields the clients read are typed; everything else in a
completion or stream chunk is accepted as-is and ignored.
"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator

from .request import Message


class Choice(BaseModel):
    """A single completion choice."""
    index: Any = None
    message: Message = Field(default_factory=Message)
    finish_reason: Any = None

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value: Any) -> Any:
        return Message() if value is None else value


class ChatResponse(BaseModel):
    """
    Decoded chat completion.

    Only ``choices`` matters to the client; ``null`` counts as no choices.
    """
    choices: List[Choice] = Field(default_factory=list)

    @field_validator("choices", mode="before")
    @classmethod
    def _null_choices(cls, value: Any) -> Any:
        return [] if value is None else value

    def first_message(self) -> Optional[Message]:
        """Get the message of the first choice."""
        if self.choices:
            return self.choices[0].message
        return None


class StreamDelta(BaseModel):
    """Delta content for streaming."""
    content: Optional[str] = None


class StreamChoice(BaseModel):
    """A streaming choice."""
    delta: Optional[StreamDelta] = None


class StreamChunk(BaseModel):
    """One ``data:`` payload of a streamed completion."""
    choices: Optional[List[Optional[StreamChoice]]] = None

    def content_delta(self) -> str:
        """Text carried by the first choice, empty when there is none."""
        if not self.choices:
            return ""
        first = self.choices[0]
        if first is None or first.delta is None:
            return ""
        return first.delta.content or ""
