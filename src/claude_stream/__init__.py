"""
claude-stream: async Python client for the Claude Code stream-json protocol.

Runs the claude CLI as a child process and exposes its output as typed messages.
"""

from claude_stream._version import __version__
from claude_stream.client import ClaudeClient, ClaudeSDKClient
from claude_stream.errors import (
    ArgumentError,
    ClaudeStreamError,
    CLINotFoundError,
    ConnectionError,
    JSONDecodeError,
    ProcessError,
)
from claude_stream.models.messages import (
    AssistantMessage,
    ContentBlock,
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
from claude_stream.options import ClaudeAgentOptions
from claude_stream.parser import parse_message
from claude_stream.query import query
from claude_stream.transport import Transport
from claude_stream.transport.subprocess_cli import SubprocessCLITransport

__all__ = [
    "__version__",
    "ClaudeClient",
    "ClaudeSDKClient",
    "ClaudeAgentOptions",
    "query",
    "parse_message",
    "Transport",
    "SubprocessCLITransport",
    "ClaudeStreamError",
    "CLINotFoundError",
    "ConnectionError",
    "ProcessError",
    "JSONDecodeError",
    "ArgumentError",
    "Message",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ResultMessage",
    "StreamEvent",
    "ContentBlock",
    "TextBlock",
    "ThinkingBlock",
    "ToolUseBlock",
    "ToolResultBlock",
]
