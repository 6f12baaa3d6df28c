"""Byte sources for uploads: whole-file reads or memory-mapped files."""

from __future__ import annotations

import mmap
import pathlib
from contextlib import contextmanager
from typing import Iterator, Union


def read_payload(path: pathlib.Path) -> bytes:
    """Load the whole file into memory."""
    if not path.exists():
        raise FileNotFoundError(f"{path} does not exist")
    return path.read_bytes()


@contextmanager
def open_payload(path: pathlib.Path) -> Iterator[Union[mmap.mmap, bytes]]:
    """
    Memory-map *path* read-only for the duration of the upload.

    Empty files cannot be mapped and are yielded as ``b""``.
    """
    if not path.exists():
        raise FileNotFoundError(f"{path} does not exist")
    with path.open("rb") as f:
        if path.stat().st_size == 0:
            yield b""
            return
        with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mapped:
            yield mapped
