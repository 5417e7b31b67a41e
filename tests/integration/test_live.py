"""
Integration tests against a real Claude Code install.

Requires:
  claude on PATH (or CLAUDE_STREAM_CLI_PATH) and a logged-in account

Run: CLAUDE_STREAM_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest
import pytest_asyncio

from claude_stream import (
    AssistantMessage,
    ClaudeAgentOptions,
    ClaudeSDKClient,
    ResultMessage,
    SystemMessage,
    TextBlock,
    query,
)

SKIP = not os.environ.get("CLAUDE_STREAM_INTEGRATION")
CLI_PATH = os.environ.get("CLAUDE_STREAM_CLI_PATH")

pytestmark = [pytest.mark.integration, pytest.mark.skipif(SKIP, reason="CLAUDE_STREAM_INTEGRATION not set")]


def make_options(**kwargs) -> ClaudeAgentOptions:
    return ClaudeAgentOptions(cli_path=CLI_PATH, max_turns=1, **kwargs)


def text_of(messages) -> str:
    return "".join(
        block.text
        for message in messages
        if isinstance(message, AssistantMessage)
        for block in message.content
        if isinstance(block, TextBlock)
    )


@pytest_asyncio.fixture
async def client():
    c = ClaudeSDKClient(make_options())
    await c.connect()
    yield c
    await c.disconnect()


class TestOneShot:
    """query() against the real CLI"""

    @pytest.mark.asyncio
    async def test_simple_prompt(self):
        messages = [m async for m in query("Reply with exactly the word: pong", options=make_options())]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[-1], ResultMessage)
        assert not messages[-1].is_error
        assert "pong" in text_of(messages).lower()


class TestInteractive:
    """ClaudeSDKClient multi-turn"""

    @pytest.mark.asyncio
    async def test_two_turns_share_session(self, client):
        await client.query("Remember the number 7. Reply with OK.")
        first = [m async for m in client.receive_response()]
        assert isinstance(first[-1], ResultMessage)

        await client.query("What number did I ask you to remember? Reply with the digit only.")
        second = [m async for m in client.receive_response()]
        assert isinstance(second[-1], ResultMessage)
        assert second[-1].session_id == first[-1].session_id
        assert "7" in text_of(second)
