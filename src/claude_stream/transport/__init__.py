"""
Transport interface: a duplex frame channel to one worker.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator


class Transport(ABC):
    @property
    @abstractmethod
    def is_ready(self) -> bool: ...

    @abstractmethod
    async def connect(self) -> None:
        """Start the worker. A second call while connected is a no-op."""

    @abstractmethod
    async def write(self, data: str) -> None:
        """Write one framed request."""

    @abstractmethod
    async def end_input(self) -> None:
        """Close the write side; the worker sees EOF on its input."""

    @abstractmethod
    def read_messages(self) -> AsyncIterator[dict[str, Any]]:
        """Lazy, single-pass sequence of decoded frames."""

    @abstractmethod
    async def close(self) -> None:
        """Tear everything down. Idempotent, never raises."""

    async def __aenter__(self) -> "Transport":
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
