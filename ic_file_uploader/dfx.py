#!/usr/bin/env python3
"""
dfx helpers for the IC file uploader

Candid text encoding of chunk arguments, running `dfx` through `sh`,
and a chunk writer that uploads each chunk with `dfx canister call`.
"""

from __future__ import annotations

import tempfile
from typing import Optional, Sequence

import sh

from .errors import RemoteCallError


########################################################################
# Candid Text Encoding
########################################################################

def blob_literal(data: bytes) -> str:
    """Render bytes as a Candid text blob, e.g. ``blob "\\DE\\AD"``."""
    return 'blob "' + "".join(f"\\{byte:02X}" for byte in data) + '"'


def format_arguments(data: bytes, index: Optional[int] = None) -> str:
    """
    Build the Candid argument tuple for an upload method.

    Plain methods take ``(blob)``; indexed methods take ``(nat, blob)`` so the
    canister can place the chunk itself.
    """
    if index is None:
        return f"({blob_literal(data)})"
    return f"({index} : nat, {blob_literal(data)})"


########################################################################
# dfx Execution
########################################################################

def _stderr_text(exc: sh.ErrorReturnCode) -> str:
    stderr = exc.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return (stderr or "").strip()


def _dfx_command():
    try:
        return sh.Command("dfx")
    except sh.CommandNotFound:
        raise RemoteCallError("dfx not found; install the IC SDK or put dfx on PATH")


def dfx(command: str, subcommand: str, args: Sequence[str], network: Optional[str] = None) -> str:
    """
    Execute a dfx command with the specified arguments.

    Args:
        command: The main dfx command (e.g. "canister")
        subcommand: The subcommand (e.g. "call")
        args: Remaining arguments, passed through as strings
        network: Optional network name passed as ``--network``

    Returns:
        str: stdout of the command

    Raises:
        RemoteCallError: dfx is missing or exited non-zero
    """
    cmd_args = [command, subcommand]
    if network:
        cmd_args.extend(["--network", network])
    cmd_args.extend(str(arg) for arg in args)

    dfx_cmd = _dfx_command()
    try:
        return str(dfx_cmd(*cmd_args))
    except sh.ErrorReturnCode as e:
        stderr = _stderr_text(e)
        raise RemoteCallError(
            f"dfx {command} {subcommand} failed with exit code {e.exit_code}: {stderr}",
            stderr=stderr,
        ) from e


def query_canister_id(canister_name: str, network: Optional[str] = None) -> str:
    """Read the deployment's canister id for *canister_name*."""
    return dfx("canister", "id", [canister_name], network).strip()


########################################################################
# Chunk Writer
########################################################################

class DfxChunkWriter:
    """
    Upload chunks with ``dfx canister call <canister> <method> --argument-file``.

    The Candid argument for a 2 MB chunk is several MB of text, too long for a
    command line, so it goes through a temporary file.
    """

    def __init__(
        self,
        canister_name: str,
        method_name: str,
        network: Optional[str] = None,
        indexed: bool = False,
    ):
        self.canister_name = canister_name
        self.method_name = method_name
        self.network = network
        self.indexed = indexed

    def __call__(self, index: int, data: bytes) -> str:
        argument = format_arguments(data, index if self.indexed else None)

        with tempfile.NamedTemporaryFile("w", suffix=".did", encoding="ascii") as arg_file:
            arg_file.write(argument)
            arg_file.flush()
            try:
                return dfx(
                    "canister",
                    "call",
                    [self.canister_name, self.method_name, "--argument-file", arg_file.name],
                    self.network,
                )
            except RemoteCallError as e:
                raise RemoteCallError(f"Chunk {index} failed: {e.stderr or e.detail}", stderr=e.stderr) from e

    def __repr__(self) -> str:
        return (
            f"DfxChunkWriter({self.canister_name!r}, {self.method_name!r}, "
            f"network={self.network!r}, indexed={self.indexed})"
        )
