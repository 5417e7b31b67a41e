"""Shared fixtures: an in-memory transport and raw record factories."""

import asyncio
import collections
import stat
import sys
from typing import Any, AsyncIterator, Optional

import pytest

from claude_stream.errors import ConnectionError
from claude_stream.transport import Transport


class MockTransport(Transport):
    """Queue-backed transport; frames are only dequeued when yielded."""

    def __init__(self) -> None:
        self.queue: collections.deque[dict[str, Any]] = collections.deque()
        self.written: list[str] = []
        self.connect_calls = 0
        self.close_calls = 0
        self._connected = False

    @property
    def is_ready(self) -> bool:
        return self._connected

    def queue_message(self, record: dict[str, Any]) -> None:
        self.queue.append(record)

    async def connect(self) -> None:
        self.connect_calls += 1
        await asyncio.sleep(0)
        self._connected = True

    async def write(self, data: str) -> None:
        if not self._connected:
            raise ConnectionError("Not connected")
        self.written.append(data)

    async def end_input(self) -> None:
        pass

    async def read_messages(self) -> AsyncIterator[dict[str, Any]]:
        if not self._connected:
            raise ConnectionError("Not connected")
        while self.queue:
            yield self.queue.popleft()
            await asyncio.sleep(0)

    async def close(self) -> None:
        if not self._connected and self.close_calls:
            return
        self.close_calls += 1
        await asyncio.sleep(0)
        self._connected = False
        self.queue.clear()


def assistant_record(text: str = "Hello!", model: str = "claude-sonnet-4") -> dict[str, Any]:
    return {
        "type": "assistant",
        "message": {"role": "assistant", "model": model, "content": [{"type": "text", "text": text}]},
        "parent_tool_use_id": None,
    }


def result_record(session_id: str = "session_1", **extra: Any) -> dict[str, Any]:
    record = {
        "type": "result",
        "subtype": "success",
        "duration_ms": 1000,
        "duration_api_ms": 900,
        "is_error": False,
        "num_turns": 1,
        "session_id": session_id,
    }
    record.update(extra)
    return record


def user_record(content: Any = "test", parent: Optional[str] = None) -> dict[str, Any]:
    return {"type": "user", "message": {"role": "user", "content": content}, "parent_tool_use_id": parent}


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


FAKE_CLI = '''#!{python}
import json, os, subprocess, sys, time

mode = os.environ.get("FAKE_MODE", "echo")

def emit(record):
    sys.stdout.write(json.dumps(record) + "\\n")
    sys.stdout.flush()

def result(session_id="s1"):
    return {{"type": "result", "subtype": "success", "duration_ms": 5, "duration_api_ms": 4,
             "is_error": False, "num_turns": 1, "session_id": session_id}}

if mode == "echo":
    for line in sys.stdin:
        request = json.loads(line)
        emit({{"type": "assistant", "message": {{"model": "fake",
              "content": [{{"type": "text", "text": "echo: " + request["message"]["content"]}}]}}}})
        emit(result(request["session_id"]))
elif mode == "print":
    emit({{"type": "assistant", "message": {{"model": "fake", "content": [{{"type": "text", "text": sys.argv[-1]}}]}}}})
    emit(result())
elif mode == "args":
    emit({{"type": "system", "subtype": "args", "data": {{"argv": sys.argv[1:], "cwd": os.getcwd(),
          "entrypoint": os.environ.get("CLAUDE_CODE_ENTRYPOINT"), "extra": os.environ.get("FAKE_EXTRA")}}}})
elif mode == "split":
    sys.stdout.write(json.dumps({{"type": "system", "subtype": "init", "data": {{"tools": ["Read", "Bash"]}}}}, indent=2) + "\\n")
    sys.stdout.flush()
    emit(result())
elif mode == "noise":
    sys.stdout.write("\\n   \\n")
    sys.stdout.write("[1, 2]\\n")
    emit(result())
elif mode == "oversized":
    sys.stdout.write('{{"type": "system", "subtype": "big", "data": {{"blob": "' + "x" * 5000 + '"}}}}\\n')
    emit(result())
elif mode == "fail":
    sys.stderr.write("first problem\\nboom\\n")
    sys.stderr.flush()
    sys.exit(3)
elif mode == "hang":
    emit({{"type": "system", "subtype": "init", "data": {{}}}})
    time.sleep(60)
elif mode == "spawn":
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
    emit({{"type": "system", "subtype": "child", "data": {{"pid": child.pid}}}})
    time.sleep(60)
'''


@pytest.fixture
def fake_cli(tmp_path) -> str:
    """An executable stand-in for the claude binary; behaviour chosen via FAKE_MODE."""
    if sys.platform == "win32":
        pytest.skip("fake CLI script requires a POSIX shebang")
    path = tmp_path / "claude"
    path.write_text(FAKE_CLI.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)
