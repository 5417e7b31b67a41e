from claude_stream.models.messages import (
    AssistantMessage,
    ContentBlock,
    ContentValue,
    Message,
    ResultMessage,
    StreamEvent,
    SystemMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)
from claude_stream.models.envelope import UserContent, UserEnvelope

__all__ = [
    "AssistantMessage",
    "ContentBlock",
    "ContentValue",
    "Message",
    "ResultMessage",
    "StreamEvent",
    "SystemMessage",
    "TextBlock",
    "ThinkingBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "UserMessage",
    "UserContent",
    "UserEnvelope",
]
