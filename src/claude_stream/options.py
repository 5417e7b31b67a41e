"""
ClaudeAgentOptions: every option the transport and client recognise.
"""

from pathlib import Path
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

PermissionMode = Literal["default", "acceptEdits", "plan", "bypassPermissions"]

CanUseTool = Callable[[str, dict[str, Any], dict[str, Any]], Awaitable[Any]]


class ClaudeAgentOptions(BaseModel):
    model_config = {"extra": "forbid", "arbitrary_types_allowed": True}

    allowed_tools: list[str] = Field(default_factory=list)
    disallowed_tools: list[str] = Field(default_factory=list)
    system_prompt: Optional[str] = None
    append_system_prompt: Optional[str] = None
    model: Optional[str] = None
    max_turns: Optional[int] = None
    permission_mode: Optional[PermissionMode] = None
    permission_prompt_tool_name: Optional[str] = None
    can_use_tool: Optional[CanUseTool] = None
    continue_conversation: bool = False
    resume: Optional[str] = None
    fork_session: bool = False
    settings: Optional[str] = None
    setting_sources: Optional[list[str]] = None
    add_dirs: list[Union[str, Path]] = Field(default_factory=list)
    mcp_servers: Union[dict[str, Any], str, None] = None
    include_partial_messages: bool = False
    agents: Optional[dict[str, Any]] = None
    env: dict[str, str] = Field(default_factory=dict)
    extra_args: dict[str, Optional[str]] = Field(default_factory=dict)
    cwd: Union[str, Path, None] = None
    cli_path: Union[str, Path, None] = None
    max_buffer_size: Optional[int] = None
    stderr: Optional[Callable[[str], None]] = None

    @field_validator("max_turns", "max_buffer_size")
    @classmethod
    def _positive(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("must be positive")
        return value
