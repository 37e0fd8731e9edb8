"""Chunk planning."""
from dataclasses import dataclass
from typing import Iterator, Tuple

from ..models import MB


@dataclass(frozen=True)
class PlannedChunk:
    """One contiguous byte range of the source."""
    part_no: int  # 1-based
    size: int


@dataclass(frozen=True)
class ChunkPlan:
    """Split of ``total_size`` bytes into ``chunk_size`` pieces."""
    total_size: int
    chunk_size: int
    total_chunks: int

    @property
    def last_chunk_size(self) -> int:
        if self.total_chunks == 0:
            return 0
        return self.total_size - self.chunk_size * (self.total_chunks - 1)

    def chunk(self, part_no: int) -> PlannedChunk:
        if not 1 <= part_no <= self.total_chunks:
            raise IndexError(f"part {part_no} outside plan of {self.total_chunks} chunks")
        size = self.last_chunk_size if part_no == self.total_chunks else self.chunk_size
        return PlannedChunk(part_no=part_no, size=size)

    @property
    def chunks(self) -> Tuple[PlannedChunk, ...]:
        return tuple(self)

    def __iter__(self) -> Iterator[PlannedChunk]:
        for part_no in range(1, self.total_chunks + 1):
            yield self.chunk(part_no)

    def __len__(self) -> int:
        return self.total_chunks


def chunk_size_bytes(megabytes: int) -> int:
    """Convert a configured chunk size in megabytes to bytes."""
    if megabytes <= 0:
        raise ValueError(f"chunk size must be positive, got {megabytes} MB")
    return megabytes * MB


def plan_chunks(total_size: int, chunk_size: int) -> ChunkPlan:
    """
    Plan ``ceil(total_size / chunk_size)`` chunks.

    An empty source yields zero chunks; the file is still committed with an
    empty manifest.
    """
    if total_size < 0:
        raise ValueError(f"total size must be non-negative, got {total_size}")
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive, got {chunk_size}")
    total_chunks = (total_size + chunk_size - 1) // chunk_size
    return ChunkPlan(total_size=total_size, chunk_size=chunk_size, total_chunks=total_chunks)
