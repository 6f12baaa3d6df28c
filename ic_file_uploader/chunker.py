"""Split a payload into bounded-size chunks for sequential upload."""

from __future__ import annotations

import mmap
from dataclasses import dataclass, field
from typing import Iterator, Union

from .errors import InvalidConfiguration

Payload = Union[bytes, bytearray, memoryview, mmap.mmap]


@dataclass(frozen=True)
class Chunk:
    """A (offset, length) view into a payload. Bytes are copied out only on demand."""

    offset: int
    length: int
    payload: Payload = field(repr=False, compare=False)

    @property
    def end(self) -> int:
        return self.offset + self.length

    def tobytes(self) -> bytes:
        return bytes(self.payload[self.offset:self.end])

    def __len__(self) -> int:
        return self.length


def chunk_sizes(total_bytes: int, chunk_size: int) -> list[int]:
    """Return the sizes of fragments required to cover *total_bytes*."""
    if total_bytes < 0:
        raise InvalidConfiguration("total_bytes must be non-negative")
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk size must be positive, got {chunk_size}")
    sizes: list[int] = []
    offset = 0
    while offset < total_bytes:
        remaining = total_bytes - offset
        sizes.append(chunk_size if remaining >= chunk_size else remaining)
        offset += chunk_size
    return sizes


class ChunkSequence:
    """
    Lazy, restartable sequence of chunks over an immutable payload.

    Every call to ``iter()`` starts again from ``start_offset``; no cursor is
    shared between iterations.
    """

    def __init__(self, payload: Payload, max_chunk_size: int, start_offset: int = 0):
        self._payload = payload
        self.max_chunk_size = max_chunk_size
        self.start_offset = start_offset
        self._payload_len = len(payload)

    @property
    def total_bytes(self) -> int:
        return self._payload_len - self.start_offset

    def __len__(self) -> int:
        return -(-self.total_bytes // self.max_chunk_size)

    def __iter__(self) -> Iterator[Chunk]:
        offset = self.start_offset
        while offset < self._payload_len:
            length = min(self.max_chunk_size, self._payload_len - offset)
            yield Chunk(offset, length, self._payload)
            offset += length

    def sizes(self) -> list[int]:
        return chunk_sizes(self.total_bytes, self.max_chunk_size)

    def __repr__(self) -> str:
        return (
            f"ChunkSequence(total_bytes={self.total_bytes}, "
            f"max_chunk_size={self.max_chunk_size}, chunks={len(self)})"
        )


def split(payload: Payload, max_chunk_size: int, start_offset: int = 0) -> ChunkSequence:
    """
    Partition *payload* into chunks of at most *max_chunk_size* bytes.

    Arguments are validated here rather than on first iteration, so a bad
    configuration surfaces before any chunk reaches the network.

    Args:
        payload: Bytes-like buffer (bytes, bytearray, mmap) to chunk
        max_chunk_size: Upper bound on each chunk's length
        start_offset: Byte position to start chunking from

    Returns:
        ChunkSequence: empty for an empty payload
    """
    if isinstance(max_chunk_size, bool) or not isinstance(max_chunk_size, int):
        raise InvalidConfiguration(f"max_chunk_size must be an integer, got {max_chunk_size!r}")
    if max_chunk_size <= 0:
        raise InvalidConfiguration(f"max_chunk_size must be positive, got {max_chunk_size}")
    if isinstance(start_offset, bool) or not isinstance(start_offset, int):
        raise InvalidConfiguration(f"start offset must be an integer, got {start_offset!r}")
    if not 0 <= start_offset <= len(payload):
        raise InvalidConfiguration(
            f"start offset {start_offset} is outside the payload (0..{len(payload)})"
        )
    return ChunkSequence(payload, max_chunk_size, start_offset)
