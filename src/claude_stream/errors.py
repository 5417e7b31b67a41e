"""
claude-stream error types.

Every transport-level failure surfaces as a ClaudeStreamError subclass with a
stable `code`; callers never see raw OSError / BrokenPipeError from asyncio.
"""

from typing import Any, Optional


class ClaudeStreamError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class CLINotFoundError(ClaudeStreamError):
    """The worker executable could not be located."""

    def __init__(self, message: str, cli_path: Optional[str] = None):
        super().__init__("cli_not_found", message, {"cli_path": cli_path} if cli_path else None)
        self.cli_path = cli_path


class ConnectionError(ClaudeStreamError):
    """Transport not ready: not connected, torn down, bad cwd, or a prior fatal write."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("connection_error", message, details)


class ProcessError(ClaudeStreamError):
    """Worker exited with a non-zero status."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: Optional[str] = None):
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is not None:
            message = f"{message} (exit code: {exit_code})"
        if stderr:
            message = f"{message}\nError output: {stderr}"
        super().__init__("process_error", message, {"exit_code": exit_code})


class JSONDecodeError(ClaudeStreamError):
    """A frame's undecoded buffer grew past the configured ceiling."""

    def __init__(self, message: str, max_buffer_size: Optional[int] = None):
        super().__init__("json_decode_error", message, {"max_buffer_size": max_buffer_size})
        self.max_buffer_size = max_buffer_size


class ArgumentError(ClaudeStreamError, ValueError):
    """Malformed protocol record or invalid option combination."""

    def __init__(self, message: str, data: Optional[dict[str, Any]] = None):
        super().__init__("argument_error", message, {"data": data} if data is not None else None)
        self.data = data
