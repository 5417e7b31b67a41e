"""
ClaudeSDKClient / ClaudeClient: interactive session over one worker.

Lifecycle: unconnected -> connected -> closed. Each query() writes exactly one
envelope; receive_response() drains one turn, up to and including the
ResultMessage.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from claude_stream.errors import ArgumentError, ConnectionError
from claude_stream.models.messages import Message, ResultMessage
from claude_stream.options import ClaudeAgentOptions
from claude_stream.parser import parse_message
from claude_stream.transport import Transport
from claude_stream.transport.envelope import build_envelope, encode_frame
from claude_stream.transport.subprocess_cli import SubprocessCLITransport

logger = logging.getLogger(__name__)


def resolve_permission_options(options: ClaudeAgentOptions) -> ClaudeAgentOptions:
    """Check the permission settings and route callback prompts over stdio.

    can_use_tool and permission_prompt_tool_name are mutually exclusive.
    """
    if options.can_use_tool is not None and options.permission_prompt_tool_name:
        raise ArgumentError(
            "can_use_tool callback cannot be used with permission_prompt_tool_name. "
            "Please use one or the other."
        )
    if options.can_use_tool is not None:
        return options.model_copy(update={"permission_prompt_tool_name": "stdio"})
    return options


class ClaudeSDKClient:
    """Async interactive client (primary)."""

    def __init__(self, options: Optional[ClaudeAgentOptions] = None, transport: Optional[Transport] = None):
        self.options = options or ClaudeAgentOptions()
        self._custom_transport = transport
        self._transport: Optional[Transport] = None
        self._connect_lock = asyncio.Lock()
        self._closed = False

    @property
    def connected(self) -> bool:
        return self._transport is not None and self._transport.is_ready

    async def connect(self) -> None:
        async with self._connect_lock:
            if self._transport is not None:
                return
            if self._closed:
                raise ConnectionError("Client is closed. Create a new client to reconnect.")
            options = resolve_permission_options(self.options)
            transport = self._custom_transport or SubprocessCLITransport(options=options)
            await transport.connect()
            self._transport = transport
            logger.debug("Connected via %s", type(transport).__name__)

    async def query(self, prompt: str, session_id: str = "default") -> None:
        """Send one prompt as a single frame."""
        transport = self._ensure_connected()
        await transport.write(encode_frame(build_envelope(prompt, session_id)))

    async def receive_messages(self) -> AsyncIterator[Message]:
        """Every message from the worker, for the lifetime of the connection."""
        transport = self._ensure_connected()
        async for data in transport.read_messages():
            yield parse_message(data)

    async def receive_response(self) -> AsyncIterator[Message]:
        """Messages of one turn, ending with (and including) the ResultMessage."""
        async for message in self.receive_messages():
            yield message
            if isinstance(message, ResultMessage):
                return

    async def disconnect(self) -> None:
        """Close the transport. Safe to call repeatedly, concurrently, or before connect().

        Waits for an in-flight connect() so the transport it starts is closed too.
        """
        async with self._connect_lock:
            self._closed = True
            transport, self._transport = self._transport, None
        if transport is not None:
            await transport.close()

    close = disconnect

    async def __aenter__(self) -> "ClaudeSDKClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect()

    def _ensure_connected(self) -> Transport:
        if self._transport is None:
            raise ConnectionError("Not connected. Call connect() first.")
        return self._transport


class ClaudeClient:
    """Sync wrapper around ClaudeSDKClient. Runs the event loop internally."""

    def __init__(self, options: Optional[ClaudeAgentOptions] = None, transport: Optional[Transport] = None):
        self._loop = asyncio.new_event_loop()
        self._async = ClaudeSDKClient(options=options, transport=transport)

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def connected(self) -> bool:
        return self._async.connected

    def connect(self) -> None:
        self._run(self._async.connect())

    def query(self, prompt: str, session_id: str = "default") -> None:
        self._run(self._async.query(prompt, session_id))

    def receive_response(self) -> list[Message]:
        """Drain one turn and return its messages (blocking)."""
        async def _collect() -> list[Message]:
            return [message async for message in self._async.receive_response()]
        return self._run(_collect())

    def disconnect(self) -> None:
        if self._loop.is_closed():
            return
        self._run(self._async.disconnect())
        self._loop.run_until_complete(self._loop.shutdown_asyncgens())
        self._loop.close()

    def __enter__(self) -> "ClaudeClient":
        self.connect()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.disconnect()
