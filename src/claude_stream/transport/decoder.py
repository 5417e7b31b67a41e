"""
Incremental JSON frame decoder.

Chunks (lines, in the subprocess transport) are stripped and appended to one
buffer; a frame is emitted as soon as the buffer parses as one complete JSON
value. A record may therefore span any number of chunks.
"""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Optional

from claude_stream.errors import JSONDecodeError

DEFAULT_MAX_BUFFER_SIZE = 1024 * 1024

logger = logging.getLogger(__name__)


class StreamingDecoder:
    def __init__(self, max_buffer_size: Optional[int] = None):
        self.max_buffer_size = max_buffer_size or DEFAULT_MAX_BUFFER_SIZE
        self._buffer = ""

    @property
    def pending(self) -> int:
        """Length of undecoded buffered text."""
        return len(self._buffer)

    def reset(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> Optional[Any]:
        """Append one chunk; return the decoded value if the buffer is now complete.

        Raises JSONDecodeError (and clears the buffer) when the buffer exceeds
        max_buffer_size before becoming parseable.
        """
        chunk = chunk.strip()
        if not chunk:
            return None
        self._buffer += chunk

        if len(self._buffer) > self.max_buffer_size:
            size = len(self._buffer)
            self._buffer = ""
            logger.warning("Dropping %d buffered chars: frame exceeded %d", size, self.max_buffer_size)
            raise JSONDecodeError(
                f"JSON message exceeded maximum buffer size of {self.max_buffer_size} bytes",
                max_buffer_size=self.max_buffer_size,
            )

        try:
            value = json.loads(self._buffer)
        except json.JSONDecodeError:
            # Incomplete: keep accumulating.
            return None
        self._buffer = ""
        return value

    async def decode(self, chunks: AsyncIterable[str]) -> AsyncIterator[Any]:
        """Drive feed() over an async chunk source, yielding each complete value."""
        async for chunk in chunks:
            value = self.feed(chunk)
            if value is not None:
                yield value
