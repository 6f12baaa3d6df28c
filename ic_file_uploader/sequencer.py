"""
Ordered, one-at-a-time delivery of chunks to a remote write capability.

The sequencer never overlaps writes: a canister upload method appends to
its asset in call order, so chunk N+1 is not read until chunk N has been
acknowledged.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .chunker import Chunk
from .config import DEFAULT_INDEX_BASE, validate_index_base
from .errors import InvalidConfiguration, PartialTransfer, TransportFailure

WriteFn = Callable[[int, bytes], Any]
ProgressFn = Callable[[int, Chunk, "DeliveryReport"], None]


class DeliveryState(enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class DeliveryReport:
    """Running totals for one delivery. Returned as-is on success."""

    index_base: int
    start_index: int
    total_chunks: Optional[int] = None
    chunks_skipped: int = 0
    bytes_skipped: int = 0
    chunks_sent: int = 0
    bytes_sent: int = 0

    @property
    def chunks_acknowledged(self) -> int:
        """Chunks the remote holds, including ones acknowledged by an earlier run."""
        return self.chunks_skipped + self.chunks_sent

    @property
    def bytes_acknowledged(self) -> int:
        return self.bytes_skipped + self.bytes_sent

    @property
    def next_index(self) -> int:
        return self.index_base + self.chunks_acknowledged


class Sequencer:
    """
    Drives a single transfer through IDLE -> IN_FLIGHT -> COMPLETE/FAILED.

    Args:
        write_fn: Called as ``write_fn(index, data)``; signals failure by raising
        index_base: Index of the first chunk (0 or 1, as the canister expects)
        on_progress: Optional ``(index, chunk, report)`` callback after each ack
    """

    def __init__(
        self,
        write_fn: WriteFn,
        index_base: int = DEFAULT_INDEX_BASE,
        on_progress: Optional[ProgressFn] = None,
    ):
        self.write_fn = write_fn
        self.index_base = validate_index_base(index_base)
        self.on_progress = on_progress
        self.state = DeliveryState.IDLE
        self.current_index: Optional[int] = None
        self.error: Optional[TransportFailure] = None
        self.partial: Optional[PartialTransfer] = None

    def _resolve_start(self, chunks: Iterable[Chunk], start_index: Optional[int]) -> int:
        if start_index is None:
            return self.index_base
        if isinstance(start_index, bool) or not isinstance(start_index, int):
            raise InvalidConfiguration(f"start index must be an integer, got {start_index!r}")
        if start_index < self.index_base:
            raise InvalidConfiguration(
                f"start index {start_index} is below the index base {self.index_base}"
            )
        if hasattr(chunks, "__len__"):
            end_index = self.index_base + len(chunks)
            if start_index > end_index:
                raise InvalidConfiguration(
                    f"start index {start_index} is past the last chunk "
                    f"(valid range {self.index_base}..{end_index})"
                )
        return start_index

    def deliver(self, chunks: Iterable[Chunk], start_index: Optional[int] = None) -> DeliveryReport:
        """
        Send every chunk in order, halting on the first failed write.

        Returns:
            DeliveryReport for the completed transfer

        Raises:
            InvalidConfiguration: start index out of range (no remote call made)
            TransportFailure: a write raised; later chunks were not sent
            KeyboardInterrupt: re-raised with a ``partial`` attribute (PartialTransfer)
        """
        if self.state is not DeliveryState.IDLE:
            raise RuntimeError(f"sequencer already used (state: {self.state.value})")

        start = self._resolve_start(chunks, start_index)
        report = DeliveryReport(
            index_base=self.index_base,
            start_index=start,
            total_chunks=len(chunks) if hasattr(chunks, "__len__") else None,
        )

        index = self.index_base - 1
        for index, chunk in enumerate(chunks, start=self.index_base):
            if index < start:
                report.chunks_skipped += 1
                report.bytes_skipped += chunk.length
                continue

            self.state = DeliveryState.IN_FLIGHT
            self.current_index = index
            try:
                self.write_fn(index, chunk.tobytes())
            except KeyboardInterrupt as interrupt:
                self.state = DeliveryState.FAILED
                self.partial = PartialTransfer(
                    failed_index=index,
                    chunks_acknowledged=report.chunks_acknowledged,
                    bytes_acknowledged=report.bytes_acknowledged,
                    total_chunks=report.total_chunks,
                )
                interrupt.partial = self.partial
                raise
            except Exception as exc:
                self.state = DeliveryState.FAILED
                self.error = TransportFailure(
                    index=index,
                    chunks_acknowledged=report.chunks_acknowledged,
                    bytes_acknowledged=report.bytes_acknowledged,
                    total_chunks=report.total_chunks,
                    cause=exc,
                )
                self.partial = self.error.partial
                raise self.error from exc

            report.chunks_sent += 1
            report.bytes_sent += chunk.length
            if self.on_progress is not None:
                self.on_progress(index, chunk, report)

        # Unsized iterables can only be range-checked once exhausted
        if start > index + 1:
            raise InvalidConfiguration(
                f"start index {start} is past the last chunk "
                f"(valid range {self.index_base}..{index + 1})"
            )

        if report.total_chunks is None:
            report.total_chunks = report.chunks_acknowledged
        self.state = DeliveryState.COMPLETE
        self.current_index = None
        return report


def deliver(
    chunks: Iterable[Chunk],
    write_fn: WriteFn,
    *,
    index_base: int = DEFAULT_INDEX_BASE,
    start_index: Optional[int] = None,
    on_progress: Optional[ProgressFn] = None,
) -> DeliveryReport:
    """Deliver *chunks* through a fresh Sequencer. See ``Sequencer.deliver``."""
    sequencer = Sequencer(write_fn, index_base=index_base, on_progress=on_progress)
    return sequencer.deliver(chunks, start_index=start_index)
