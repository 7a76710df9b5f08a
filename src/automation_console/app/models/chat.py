"""Chat models.

``ChatMessage`` is what the client sends and receives. The remaining models
are the vendor-neutral shape of one tool-calling conversation: the chat loop
only ever works with these, and each vendor binding translates them to and
from its own SDK types.
"""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field


class Provider(str, Enum):
    """LLM vendor that drives the assistant."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One visible turn of the transcript."""
    role: ChatRole
    content: str


class ChatRequest(BaseModel):
    """Body of ``POST /chat``. The client holds the whole transcript."""
    messages: list[ChatMessage]
    provider: Provider = Provider.ANTHROPIC


class ToolSpec(BaseModel):
    """A tool offered to the model: name, description, JSON Schema of its input."""
    name: str
    description: str
    parameters: dict


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""
    id: str = Field(..., description="Vendor call identifier, echoed back with the result")
    name: str
    input: dict | None = Field(default=None, description="Parsed arguments; None if the vendor sent unparseable JSON")


class ToolResult(BaseModel):
    """JSON-encoded outcome of one tool call."""
    call_id: str
    content: str
    is_error: bool = False


class ToolCallTurn(BaseModel):
    """Assistant turn that asked for tools."""
    kind: Literal["tool_calls"] = "tool_calls"
    text: str | None = None
    calls: list[ToolCall]


class ToolResultTurn(BaseModel):
    """Results for every call of the preceding ``ToolCallTurn``."""
    kind: Literal["tool_results"] = "tool_results"
    results: list[ToolResult]


ConversationTurn = Union[ChatMessage, ToolCallTurn, ToolResultTurn]


class CompletionRequest(BaseModel):
    """Everything a vendor binding needs for one model call."""
    conversation: list[ConversationTurn]
    system: str
    tools: list[ToolSpec]
    max_tokens: int = 1024


class CompletionResult(BaseModel):
    """A model answer: either final text or a batch of tool calls."""
    text: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    stop_reason: str | None = None

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)
