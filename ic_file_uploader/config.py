#!/usr/bin/env python3
"""
Configuration module for the IC file uploader
Manages transport limits, chunk sizing and environment overrides
"""

import os

from .errors import InvalidConfiguration


########################################################################
# Transport Limits
########################################################################

# Ingress limit for canister update calls (2 MB)
MAX_CANISTER_HTTP_PAYLOAD_SIZE = 2 * 1000 * 1000

# Conservative update-safe chunk size, leaves headroom for Candid framing
DEFAULT_CHUNK_SIZE = 1_900_000


########################################################################
# Remote Protocol Defaults
########################################################################

DEFAULT_INDEX_BASE = 1
VALID_INDEX_BASES = (0, 1)

DEFAULT_REPLICA_URL = "http://127.0.0.1:4943"
DEFAULT_HTTP_TIMEOUT = 300.0

PROXY_ENV_VARS = (
    "HTTP_PROXY",
    "http_proxy",
    "HTTPS_PROXY",
    "https_proxy",
    "ALL_PROXY",
    "all_proxy",
)


########################################################################
# Environment Overrides
########################################################################

def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfiguration(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidConfiguration(f"{name} must be a number, got {raw!r}")


def get_upload_settings():
    """Get upload settings from environment or defaults"""
    return {
        'CHUNK_SIZE': _env_int("IC_UPLOAD_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        'INDEX_BASE': _env_int("IC_UPLOAD_INDEX_BASE", DEFAULT_INDEX_BASE),
        'NETWORK': os.environ.get("DFX_NETWORK") or None,
        'REPLICA_URL': os.environ.get("IC_REPLICA_URL", DEFAULT_REPLICA_URL),
        'HTTP_TIMEOUT': _env_float("IC_UPLOAD_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
    }


########################################################################
# Validation
########################################################################

def validate_chunk_size(chunk_size: int) -> int:
    """
    Check that a chunk size is positive and fits in a single update call.

    Returns the chunk size unchanged so callers can validate inline.
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
        raise InvalidConfiguration(f"chunk size must be an integer, got {chunk_size!r}")
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk size must be positive, got {chunk_size}")
    if chunk_size > MAX_CANISTER_HTTP_PAYLOAD_SIZE:
        raise InvalidConfiguration(
            f"chunk size {chunk_size:,} exceeds the canister ingress limit "
            f"of {MAX_CANISTER_HTTP_PAYLOAD_SIZE:,} bytes"
        )
    return chunk_size


def validate_index_base(index_base: int) -> int:
    """Only 0- and 1-based chunk numbering is supported by upload methods."""
    if index_base not in VALID_INDEX_BASES:
        raise InvalidConfiguration(f"index base must be 0 or 1, got {index_base!r}")
    return index_base
