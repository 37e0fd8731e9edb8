"""Bounded, exact-length reads over a sequential (non-seekable) byte source."""
import asyncio
import inspect
import logging
from typing import Any, AsyncIterator

from ..exceptions import StreamExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 1024 * 1024  # 1 MiB


class BoundedReader:
    """
    Exact-length reader over a binary stream.

    Every operation consumes exactly ``n`` bytes or raises
    ``StreamExhaustedError``; the source is never rewound. Works with blocking
    file objects (reads run in a worker thread) and with objects whose
    ``read`` is a coroutine function.
    """

    def __init__(self, stream: Any, block_size: int = DEFAULT_BLOCK_SIZE):
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        self._stream = stream
        self._block_size = block_size
        self._async = inspect.iscoroutinefunction(getattr(stream, "read", None))
        self._consumed = 0

    @property
    def consumed(self) -> int:
        """Total bytes consumed from the source so far."""
        return self._consumed

    async def _read_some(self, size: int) -> bytes:
        if self._async:
            data = await self._stream.read(size)
        else:
            data = await asyncio.to_thread(self._stream.read, size)
        data = data or b""
        self._consumed += len(data)
        return data

    async def iter_exactly(self, n: int) -> AsyncIterator[bytes]:
        """Yield blocks totalling exactly ``n`` bytes."""
        if n < 0:
            raise ValueError(f"cannot read a negative length: {n}")
        remaining = n
        while remaining > 0:
            block = await self._read_some(min(self._block_size, remaining))
            if not block:
                raise StreamExhaustedError(n, n - remaining)
            remaining -= len(block)
            yield block

    async def read_exactly(self, n: int) -> bytes:
        """Read exactly ``n`` bytes into memory."""
        buffer = bytearray()
        async for block in self.iter_exactly(n):
            buffer.extend(block)
        return bytes(buffer)

    async def discard_exactly(self, n: int) -> int:
        """Consume and drop exactly ``n`` bytes; returns ``n``."""
        discarded = 0
        async for block in self.iter_exactly(n):
            discarded += len(block)
        logger.debug("Discarded %d bytes from source", discarded)
        return discarded
