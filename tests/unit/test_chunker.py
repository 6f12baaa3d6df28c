"""Unit tests for payload chunking."""

from __future__ import annotations

import pytest

from ic_file_uploader import InvalidConfiguration, chunk_sizes, split


def test_split_concrete_scenario(payload_10k: bytes) -> None:
    chunks = list(split(payload_10k, 4096))
    assert [c.length for c in chunks] == [4096, 4096, 1808]
    assert [c.offset for c in chunks] == [0, 4096, 8192]
    assert b"".join(c.tobytes() for c in chunks) == payload_10k


def test_split_empty_payload_yields_no_chunks() -> None:
    chunks = split(b"", 4096)
    assert list(chunks) == []
    assert len(chunks) == 0
    assert chunks.total_bytes == 0


def test_split_exact_boundary() -> None:
    data = b"0123456789" * 3
    chunks = list(split(data, 10))
    assert [c.tobytes() for c in chunks] == [b"0123456789"] * 3


def test_split_payload_smaller_than_chunk() -> None:
    chunks = list(split(b"small", 100))
    assert len(chunks) == 1
    assert chunks[0].tobytes() == b"small"


@pytest.mark.parametrize("size", [1, 2, 3, 7, 64, 999, 1000, 1001])
def test_split_covers_payload_without_gaps(size: int) -> None:
    data = bytes(range(256)) * 4
    chunks = list(split(data, size))

    assert sum(c.length for c in chunks) == len(data)
    assert all(c.length <= size for c in chunks)
    assert all(c.length == size for c in chunks[:-1])
    for previous, current in zip(chunks, chunks[1:]):
        assert current.offset == previous.end
    assert b"".join(c.tobytes() for c in chunks) == data


def test_split_is_restartable(payload_10k: bytes) -> None:
    chunks = split(payload_10k, 3000)
    first = [c.tobytes() for c in chunks]
    second = [c.tobytes() for c in chunks]
    third = [c.tobytes() for c in split(payload_10k, 3000)]
    assert first == second == third


def test_split_len_matches_iteration(payload_10k: bytes) -> None:
    chunks = split(payload_10k, 4096)
    assert len(chunks) == 3
    assert chunks.sizes() == [4096, 4096, 1808]


def test_split_with_start_offset(payload_10k: bytes) -> None:
    chunks = split(payload_10k, 4096, start_offset=5000)
    assert chunks.total_bytes == 5000
    assert [c.offset for c in chunks] == [5000, 9096]
    assert b"".join(c.tobytes() for c in chunks) == payload_10k[5000:]


def test_split_offset_at_end_is_empty(payload_10k: bytes) -> None:
    assert list(split(payload_10k, 4096, start_offset=len(payload_10k))) == []


def test_split_accepts_bytearray_and_memoryview() -> None:
    data = bytearray(b"abcdefghij")
    assert [c.tobytes() for c in split(data, 4)] == [b"abcd", b"efgh", b"ij"]
    assert [c.tobytes() for c in split(memoryview(bytes(data)), 4)] == [b"abcd", b"efgh", b"ij"]


@pytest.mark.parametrize("bad_size", [0, -1, -4096, True, 1.5, "10"])
def test_split_rejects_bad_chunk_size_eagerly(bad_size) -> None:
    # Raised by split() itself, not on first iteration
    with pytest.raises(InvalidConfiguration):
        split(b"data", bad_size)


@pytest.mark.parametrize("bad_offset", [-1, 5, 100])
def test_split_rejects_offset_outside_payload(bad_offset: int) -> None:
    with pytest.raises(InvalidConfiguration):
        split(b"data", 2, start_offset=bad_offset)


def test_invalid_configuration_is_value_error() -> None:
    with pytest.raises(ValueError, match="Upload Error"):
        split(b"data", 0)


def test_chunk_sizes() -> None:
    assert chunk_sizes(0, 50) == []
    assert chunk_sizes(100, 50) == [50, 50]
    assert chunk_sizes(101, 50) == [50, 50, 1]
    assert chunk_sizes(1, 50) == [1]


def test_chunk_sizes_negative_total_raises() -> None:
    with pytest.raises(InvalidConfiguration):
        chunk_sizes(-1, 50)
