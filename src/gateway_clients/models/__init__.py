"""
Client data models.
"""

from .request import ChatRequest, Message, ToolCall, FunctionCall, Tool, FunctionDefinition
from .response import ChatResponse, Choice, StreamChunk, StreamChoice, StreamDelta
from .gateway import GatewayCall, GatewayResponse, MultipartFile, MultipartPayload

__all__ = [
    "ChatRequest",
    "Message",
    "ToolCall",
    "FunctionCall",
    "Tool",
    "FunctionDefinition",
    "ChatResponse",
    "Choice",
    "StreamChunk",
    "StreamChoice",
    "StreamDelta",
    "GatewayCall",
    "GatewayResponse",
    "MultipartFile",
    "MultipartPayload",
]
