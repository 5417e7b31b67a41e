"""
Message and content-block models for the stream-json protocol.

Every model is frozen: a parsed message is never mutated after construction.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

FROZEN = {"frozen": True}


class TextBlock(BaseModel):
    model_config = FROZEN

    type: Literal["text"] = "text"
    text: str


class ThinkingBlock(BaseModel):
    """Extended-thinking block."""

    model_config = FROZEN

    type: Literal["thinking"] = "thinking"
    thinking: str
    signature: str = ""


class ToolUseBlock(BaseModel):
    model_config = FROZEN

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """tool_result block. Known block shapes in a `content` list are typed, anything else is kept as-is."""

    model_config = FROZEN

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Union[str, list[Any], None] = None
    is_error: Optional[bool] = None


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock]
ContentValue = Union[str, list[ContentBlock], None]


class UserMessage(BaseModel):
    model_config = FROZEN

    type: Literal["user"] = "user"
    content: Union[str, list[Any], None] = None
    parent_tool_use_id: Optional[str] = None


class AssistantMessage(BaseModel):
    model_config = FROZEN

    type: Literal["assistant"] = "assistant"
    model: str = ""
    content: list[ContentBlock] = Field(default_factory=list)
    parent_tool_use_id: Optional[str] = None
    error: Optional[str] = None


class SystemMessage(BaseModel):
    """system records: `init`, notifications, compaction markers, ..."""

    model_config = FROZEN

    type: Literal["system"] = "system"
    subtype: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


class ResultMessage(BaseModel):
    """Terminal marker of one turn; carries cost and usage."""

    model_config = FROZEN

    type: Literal["result"] = "result"
    subtype: str
    duration_ms: int
    duration_api_ms: int
    is_error: bool
    num_turns: int
    session_id: str
    total_cost_usd: Optional[float] = None
    usage: Optional[dict[str, Any]] = None
    result: Optional[str] = None
    structured_output: Optional[Any] = None


class StreamEvent(BaseModel):
    """Partial-message update, only emitted with include_partial_messages."""

    model_config = FROZEN

    type: Literal["stream_event"] = "stream_event"
    uuid: str
    session_id: str
    event: Any = None
    parent_tool_use_id: Optional[str] = None


Message = Union[UserMessage, AssistantMessage, SystemMessage, ResultMessage, StreamEvent]
