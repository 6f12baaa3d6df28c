"""
Upload orchestration: chunk a payload, deliver it, and optionally resume
from the failed chunk when a write fails.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from .chunker import Payload, split
from .config import DEFAULT_CHUNK_SIZE, DEFAULT_INDEX_BASE, validate_chunk_size
from .errors import InvalidConfiguration, TransportFailure
from .sequencer import DeliveryReport, ProgressFn, Sequencer, WriteFn

RetryFn = Callable[[TransportFailure, int], None]


def upload_payload(
    payload: Payload,
    write_fn: WriteFn,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    offset: int = 0,
    start_index: Optional[int] = None,
    index_base: int = DEFAULT_INDEX_BASE,
    autoresume: bool = False,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    on_progress: Optional[ProgressFn] = None,
    on_retry: Optional[RetryFn] = None,
) -> DeliveryReport:
    """
    Upload *payload* through *write_fn* in order.

    With ``autoresume`` a failed transfer is restarted at the failed chunk
    (chunks already acknowledged are not re-sent) up to ``max_retries`` times.
    This relies on the canister accepting a re-sent index after a transient
    failure.

    Args:
        payload: Bytes-like buffer to upload
        write_fn: Remote write capability ``(index, data)``
        chunk_size: Maximum bytes per write
        offset: Byte position to start chunking from
        start_index: Skip chunks below this index (already on the canister)
        index_base: Index of the first chunk
        autoresume: Resume from the failed chunk instead of giving up
        max_retries: Resume attempts before the last failure is re-raised
        retry_delay: Seconds to wait before each resume
        on_progress: Forwarded to the Sequencer
        on_retry: Called with ``(failure, attempt)`` before each resume

    Returns:
        DeliveryReport of the final, successful delivery
    """
    validate_chunk_size(chunk_size)
    if max_retries < 0:
        raise InvalidConfiguration(f"max retries must be non-negative, got {max_retries}")
    chunks = split(payload, chunk_size, start_offset=offset)

    attempt = 0
    while True:
        sequencer = Sequencer(write_fn, index_base=index_base, on_progress=on_progress)
        try:
            return sequencer.deliver(chunks, start_index=start_index)
        except TransportFailure as failure:
            if not autoresume or attempt >= max_retries:
                raise
            attempt += 1
            if on_retry is not None:
                on_retry(failure, attempt)
            if retry_delay > 0:
                time.sleep(retry_delay)
            start_index = failure.partial.resume_index
