"""
query(): one prompt, one worker, disposed on every exit path.
"""

from typing import AsyncIterator, Optional

from claude_stream.client import resolve_permission_options
from claude_stream.models.messages import Message
from claude_stream.options import ClaudeAgentOptions
from claude_stream.parser import parse_message
from claude_stream.transport import Transport
from claude_stream.transport.subprocess_cli import SubprocessCLITransport


async def query(
    prompt: str,
    options: Optional[ClaudeAgentOptions] = None,
    transport: Optional[Transport] = None,
) -> AsyncIterator[Message]:
    """Run a single prompt and yield every message until the worker's output ends.

    The transport is closed when the iteration finishes, raises, or is closed
    early by the caller (wrap in contextlib.aclosing() to make that prompt).
    """
    options = resolve_permission_options(options or ClaudeAgentOptions())
    transport = transport or SubprocessCLITransport(prompt=prompt, options=options)
    try:
        await transport.connect()
        async for data in transport.read_messages():
            yield parse_message(data)
    finally:
        await transport.close()
