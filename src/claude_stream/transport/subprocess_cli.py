"""
Subprocess transport: runs the claude CLI in stream-json mode.

Requests go to the child's stdin, one JSON object per line; frames are read
from stdout through StreamingDecoder. stderr, when piped, is drained by one
background task into the configured sink so the child never blocks on a full
pipe.
"""

import asyncio
import codecs
import collections
import logging
from pathlib import Path
from subprocess import PIPE
from typing import Any, AsyncIterator, Optional, Union

import psutil

from claude_stream._version import __version__
from claude_stream.errors import CLINotFoundError, ConnectionError, ProcessError
from claude_stream.options import ClaudeAgentOptions
from claude_stream.transport import Transport
from claude_stream.transport.command import build_command, build_env, find_cli
from claude_stream.transport.decoder import StreamingDecoder

READ_CHUNK_SIZE = 64 * 1024
STDERR_TAIL_LINES = 100
STDERR_JOIN_TIMEOUT_S = 2.0
KILL_WAIT_TIMEOUT_S = 5.0

logger = logging.getLogger(__name__)


class SubprocessCLITransport(Transport):
    def __init__(
        self,
        prompt: Optional[str] = None,
        options: Optional[ClaudeAgentOptions] = None,
        cli_path: Union[str, Path, None] = None,
    ):
        self._prompt = prompt
        self._options = options or ClaudeAgentOptions()
        self._cli_path = cli_path or self._options.cli_path
        self._cwd = self._options.cwd
        self._decoder = StreamingDecoder(self._options.max_buffer_size)

        self._process: Optional[asyncio.subprocess.Process] = None
        self._stdin: Optional[asyncio.StreamWriter] = None
        self._stdout: Optional[asyncio.StreamReader] = None
        self._stderr_task: Optional[asyncio.Task[None]] = None
        self._stderr_tail: collections.deque[str] = collections.deque(maxlen=STDERR_TAIL_LINES)

        self._connect_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._close_lock = asyncio.Lock()
        self._ready = False
        self._closed = False
        self._exit_error: Optional[Exception] = None

        self._line_buffer = ""
        self._discard_partial = False
        self._pending_lines: collections.deque[str] = collections.deque()
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def is_streaming(self) -> bool:
        return self._prompt is None

    def _wants_stderr(self) -> bool:
        return self._options.stderr is not None or "debug-to-stderr" in self._options.extra_args

    async def connect(self) -> None:
        async with self._connect_lock:
            if self._process is not None:
                return
            if self._closed:
                raise ConnectionError("Transport is closed")
            if self._exit_error is not None:
                raise self._exit_error

            try:
                cli_path = str(self._cli_path) if self._cli_path else find_cli()
            except CLINotFoundError as e:
                self._exit_error = e
                raise

            cmd = build_command(cli_path, self._options, self._prompt)
            try:
                self._process = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdin=PIPE,
                    stdout=PIPE,
                    stderr=PIPE if self._wants_stderr() else None,
                    cwd=str(self._cwd) if self._cwd is not None else None,
                    env=build_env(self._options, __version__),
                )
            except OSError as e:
                self._exit_error = self._start_error(cli_path, e)
                raise self._exit_error from e

            logger.debug("Started %s (pid %s, %d args)", cli_path, self._process.pid, len(cmd))
            self._stdout = self._process.stdout
            if self.is_streaming:
                self._stdin = self._process.stdin
            elif self._process.stdin is not None:
                self._process.stdin.close()

            if self._process.stderr is not None:
                self._stderr_task = asyncio.create_task(self._drain_stderr(self._process.stderr))
            self._ready = True

    def _start_error(self, cli_path: str, error: OSError) -> Exception:
        if self._cwd is not None and not Path(self._cwd).is_dir():
            return ConnectionError(f"Working directory does not exist: {self._cwd}", {"cwd": str(self._cwd)})
        if isinstance(error, FileNotFoundError):
            return CLINotFoundError(f"Claude Code not found at: {cli_path}", cli_path=cli_path)
        return ConnectionError(f"Failed to start Claude Code: {error}")

    async def _drain_stderr(self, stream: asyncio.StreamReader) -> None:
        sink = self._options.stderr
        try:
            async for raw in stream:
                line = raw.decode("utf-8", errors="replace").rstrip()
                if not line:
                    continue
                self._stderr_tail.append(line)
                if sink is None:
                    continue
                try:
                    sink(line)
                except Exception:
                    logger.debug("stderr sink raised", exc_info=True)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.debug("stderr drain stopped", exc_info=True)

    async def write(self, data: str) -> None:
        async with self._write_lock:
            if self._exit_error is not None:
                raise ConnectionError(
                    f"Cannot write to process that exited with error: {self._exit_error}"
                ) from self._exit_error
            if not self._ready or self._stdin is None or self._process is None:
                raise ConnectionError("Transport is not ready for writing")
            if self._process.returncode is not None:
                raise ConnectionError(
                    f"Cannot write to terminated process (exit code: {self._process.returncode})"
                )
            try:
                self._stdin.write(data.encode("utf-8"))
                await self._stdin.drain()
            except (OSError, RuntimeError) as e:
                self._ready = False
                self._exit_error = ConnectionError(f"Failed to write to process stdin: {e}")
                raise self._exit_error from e

    async def end_input(self) -> None:
        stdin, self._stdin = self._stdin, None
        if stdin is None:
            return
        try:
            stdin.close()
            await stdin.wait_closed()
        except (OSError, RuntimeError):
            logger.debug("Error closing stdin", exc_info=True)

    def _split_lines(self, data: bytes) -> None:
        self._line_buffer += self._utf8.decode(data)
        *lines, self._line_buffer = self._line_buffer.split("\n")
        for line in lines:
            if self._discard_partial:
                # tail of an oversized line
                self._discard_partial = False
                continue
            self._pending_lines.append(line)
        if self._discard_partial:
            self._line_buffer = ""
        elif len(self._line_buffer) > self._decoder.max_buffer_size:
            # Hand the oversized partial line to the decoder so it reports the
            # overflow, then drop the rest of that line.
            self._pending_lines.append(self._line_buffer)
            self._line_buffer = ""
            self._discard_partial = True

    async def _read_lines(self, stdout: asyncio.StreamReader) -> AsyncIterator[str]:
        # Pending lines live on the instance so that a consumer which stops
        # after a frame leaves the following frames for the next read_messages().
        while True:
            while self._pending_lines:
                yield self._pending_lines.popleft()
            data = await stdout.read(READ_CHUNK_SIZE)
            if not data:
                break
            self._split_lines(data)
        tail = self._line_buffer + self._utf8.decode(b"", final=True)
        self._line_buffer = ""
        if tail and not self._discard_partial:
            yield tail

    async def read_messages(self) -> AsyncIterator[dict[str, Any]]:
        process, stdout = self._process, self._stdout
        if process is None or stdout is None:
            raise ConnectionError("Not connected")

        async for line in self._read_lines(stdout):
            value = self._decoder.feed(line)
            if value is None:
                continue
            if not isinstance(value, dict):
                logger.debug("Skipping non-object frame: %r", value)
                continue
            yield value

        if self._closed:
            return
        returncode = await process.wait()
        if returncode != 0:
            if self._stderr_task is not None:
                # let the drain pick up the final stderr lines
                await asyncio.wait([self._stderr_task], timeout=STDERR_JOIN_TIMEOUT_S)
            logger.debug("Worker exited with %s", returncode)
            self._exit_error = ProcessError(
                "Command failed",
                exit_code=returncode,
                stderr="\n".join(self._stderr_tail) or None,
            )
            raise self._exit_error

    async def close(self) -> None:
        async with self._close_lock:
            if self._closed:
                return
            # a connect() in progress finishes spawning first, then gets torn down below
            async with self._connect_lock:
                self._closed = True
            self._ready = False
            first_error: Optional[BaseException] = None

            def note(error: BaseException) -> None:
                nonlocal first_error
                if first_error is None:
                    first_error = error

            task, self._stderr_task = self._stderr_task, None
            if task is not None:
                task.cancel()
                try:
                    await asyncio.wait([task], timeout=STDERR_JOIN_TIMEOUT_S)
                except Exception as e:
                    note(e)

            try:
                await self.end_input()
            except Exception as e:
                note(e)

            process, self._process = self._process, None
            if process is not None:
                try:
                    await self._terminate(process)
                except Exception as e:
                    note(e)

            stdout, self._stdout = self._stdout, None
            if stdout is not None and not stdout.at_eof():
                # wake any reader still blocked on a pipe held open by a stray descendant
                stdout.feed_eof()

            self._exit_error = None
            if first_error is not None:
                logger.warning("Error during transport teardown: %s", first_error)

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            children = psutil.Process(process.pid).children(recursive=True)
        except psutil.NoSuchProcess:
            children = []
        for child in children:
            try:
                child.kill()
            except psutil.NoSuchProcess:
                pass
        try:
            process.kill()
        except ProcessLookupError:
            return
        await asyncio.wait_for(process.wait(), timeout=KILL_WAIT_TIMEOUT_S)
