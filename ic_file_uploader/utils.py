#!/usr/bin/env python3
"""
Shared console helpers for the IC file uploader
"""

from rich.console import Console

console = Console(force_terminal=True, markup=True)


def format_size(num_bytes: int) -> str:
    """Human readable size used in upload summaries."""
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / 1024 / 1024:.1f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes} bytes"
