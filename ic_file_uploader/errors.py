"""Error types raised while chunking and uploading a payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ERROR_PREFIX = "Upload Error"


class UploadError(Exception):
    """Base class for every uploader failure. Messages carry the uploader prefix."""

    def __init__(self, message: str):
        self.detail = message
        super().__init__(f"{ERROR_PREFIX}: {message}")


class InvalidConfiguration(UploadError, ValueError):
    """Bad chunk size, offset, index base or resume index. Raised before any remote call."""


class RemoteCallError(UploadError):
    """A single chunk write was rejected by dfx or the replica."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


@dataclass(frozen=True)
class PartialTransfer:
    """What the canister holds after a failed transfer: a prefix of the payload."""

    failed_index: int
    chunks_acknowledged: int
    bytes_acknowledged: int
    total_chunks: Optional[int] = None

    @property
    def resume_index(self) -> int:
        """Index to pass as ``start_index`` to continue where delivery stopped."""
        return self.failed_index


class TransportFailure(UploadError):
    """
    The first chunk write that failed during a delivery.

    Chunks before ``index`` were acknowledged, nothing after it was sent.
    The underlying exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        index: int,
        chunks_acknowledged: int,
        bytes_acknowledged: int,
        total_chunks: Optional[int],
        cause: BaseException,
    ):
        self.index = index
        self.chunks_acknowledged = chunks_acknowledged
        self.bytes_acknowledged = bytes_acknowledged
        self.total_chunks = total_chunks
        self.cause = cause
        total = "?" if total_chunks is None else str(total_chunks)
        super().__init__(
            f"Upload interrupted at chunk {index} "
            f"({chunks_acknowledged}/{total} chunks, {bytes_acknowledged:,} bytes acknowledged): "
            f"{_describe(cause)}"
        )

    @property
    def partial(self) -> PartialTransfer:
        return PartialTransfer(
            failed_index=self.index,
            chunks_acknowledged=self.chunks_acknowledged,
            bytes_acknowledged=self.bytes_acknowledged,
            total_chunks=self.total_chunks,
        )


def _describe(exc: BaseException) -> str:
    if isinstance(exc, RemoteCallError) and exc.stderr:
        return exc.stderr
    if isinstance(exc, UploadError):
        return exc.detail
    return str(exc) or type(exc).__name__
