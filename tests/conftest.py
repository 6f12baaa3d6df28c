"""Shared pytest fixtures for uploader tests."""

from __future__ import annotations

from typing import Optional

import pytest


class RecordingWriter:
    """In-memory write capability that appends chunks like an upload method would."""

    def __init__(self, failures: Optional[dict[int, int]] = None, error: Optional[Exception] = None):
        # index -> number of times a write at that index should fail
        self.failures = dict(failures or {})
        self.error = error or RuntimeError("canister rejected the message")
        self.attempts: list[int] = []
        self.calls: list[tuple[int, bytes]] = []

    def __call__(self, index: int, data: bytes) -> None:
        self.attempts.append(index)
        if self.failures.get(index, 0) > 0:
            self.failures[index] -= 1
            raise self.error
        self.calls.append((index, data))

    @property
    def indices(self) -> list[int]:
        return [index for index, _ in self.calls]

    @property
    def received(self) -> bytes:
        return b"".join(data for _, data in self.calls)


@pytest.fixture
def recording_writer():
    """Factory for RecordingWriter instances."""
    return RecordingWriter


@pytest.fixture
def payload_10k() -> bytes:
    """10,000 bytes with a repeating pattern so misplaced chunks are visible."""
    pattern = b"TEST_DATA_PATTERN_10000_"
    return (pattern * (10_000 // len(pattern) + 1))[:10_000]


@pytest.fixture(autouse=True)
def clean_upload_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""
    for var in (
        "IC_UPLOAD_CHUNK_SIZE",
        "IC_UPLOAD_INDEX_BASE",
        "DFX_NETWORK",
        "IC_REPLICA_URL",
        "IC_UPLOAD_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
