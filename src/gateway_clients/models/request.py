"""
Chat-completion request models.
"""

from typing import Optional, Dict, Any, Tuple, Sequence
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FunctionDefinition(BaseModel):
    """Function definition for tool use."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class Tool(BaseModel):
    """Tool definition."""
    model_config = ConfigDict(frozen=True)

    type: str = "function"
    function: FunctionDefinition


class FunctionCall(BaseModel):
    """Function invocation requested by the model."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    arguments: str = ""


class ToolCall(BaseModel):
    """Tool call in a message."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    type: str = "function"
    function: FunctionCall = Field(default_factory=FunctionCall)


class Message(BaseModel):
    """
    Chat message.

    Used both for the conversation sent to the model and for the
    assistant message decoded from a completion. Messages are frozen;
    callers build a conversation by appending new ones.
    """
    model_config = ConfigDict(frozen=True)

    role: str = "assistant"
    content: str = ""
    tool_calls: Optional[Tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to OpenAI API format."""
        data: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [tc.model_dump(mode="json") for tc in self.tool_calls]
        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        return data


class ChatRequest(BaseModel):
    """
    Chat completion request body.

    Only the fields this client sends; built internally and serialized
    once per call.
    """
    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Model identifier")
    messages: Tuple[Message, ...] = Field(..., description="Conversation messages")
    stream: bool = Field(default=False)

    # Tool use
    tools: Optional[Tuple[Tool, ...]] = None
    tool_choice: Optional[Any] = None

    @classmethod
    def build(
        cls,
        model: str,
        messages: Sequence[Message],
        stream: bool = False,
        tools: Optional[Sequence[Tool]] = None,
        tool_choice: Any = None,
    ) -> "ChatRequest":
        return cls(
            model=model,
            messages=tuple(messages),
            stream=stream,
            tools=tuple(tools) if tools else None,
            tool_choice=tool_choice,
        )

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to OpenAI API format."""
        data: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_openai_format() for m in self.messages],
        }

        if self.stream:
            data["stream"] = True

        if self.tools:
            data["tools"] = [t.model_dump(mode="json", exclude_none=True) for t in self.tools]
            data["tool_choice"] = "auto" if self.tool_choice is None else self.tool_choice

        return data

