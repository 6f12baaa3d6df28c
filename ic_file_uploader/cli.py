#!/usr/bin/env python3
"""
Command line entry point - upload a file to an IC canister in chunks

Usage:
    ic-file-uploader <canister_name> <canister_method_name> <file_path> [options]
"""

import enum
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from .agent import AgentChunkWriter, make_agent
from .chunker import split
from .config import get_upload_settings, validate_chunk_size, validate_index_base
from .dfx import DfxChunkWriter, query_canister_id
from .errors import PartialTransfer, TransportFailure, UploadError
from .source import open_payload, read_payload
from .uploader import upload_payload
from .utils import console, format_size

print = console.print  # route status output through Rich for consistent styling


# Typer app
app = typer.Typer(add_completion=False, help="Upload a file to an IC canister in chunks")


class Backend(str, enum.Enum):
    dfx = "dfx"
    agent = "agent"


########################################################################
# Writer Construction
########################################################################

def build_writer(
    backend: Backend,
    canister_name: str,
    method_name: str,
    *,
    network: Optional[str],
    indexed: bool,
    replica_url: str,
    canister_id: Optional[str],
    identity_pem: Optional[Path],
    http_timeout: float,
):
    """Create the chunk writer for the selected backend."""
    if backend is Backend.dfx:
        return DfxChunkWriter(canister_name, method_name, network=network, indexed=indexed)

    if canister_id is None:
        canister_id = query_canister_id(canister_name, network)
    pem_text = identity_pem.read_text() if identity_pem else None
    client = make_agent(replica_url, identity_pem=pem_text, http_timeout=http_timeout)
    print(f"[cyan]Replica: {escape(replica_url)}  Canister ID: {escape(str(canister_id))}[/]")
    return AgentChunkWriter(client, canister_id, method_name, indexed=indexed)


def print_resume_hint(partial: PartialTransfer, file_path: Path, offset: int):
    """Tell the user what the canister holds and how to continue."""
    print(f"[red]Canister holds {partial.chunks_acknowledged} chunk(s), "
          f"{partial.bytes_acknowledged:,} bytes of {escape(file_path.name)}[/]")
    resume_hint = f"--resume-index {partial.resume_index}"
    if offset:
        resume_hint += f" --offset {offset}"
    print(f"Resume with {resume_hint}")


########################################################################
# Main Entry Point
########################################################################

@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def run(
    canister_name: str = typer.Argument(..., help="Canister name as known to dfx"),
    method_name: str = typer.Argument(..., help="Update method that receives each chunk"),
    file_path: Path = typer.Argument(..., help="File to upload"),
    offset: int = typer.Option(
        0,
        "--offset",
        "-o",
        help="Byte offset in the file to start uploading from",
    ),
    resume_index: Optional[int] = typer.Option(
        None,
        "--resume-index",
        "-r",
        help="Skip chunks below this index (already on the canister)",
    ),
    network: Optional[str] = typer.Option(
        None,
        "--network",
        "-n",
        help="dfx network name (default: $DFX_NETWORK or local)",
    ),
    autoresume: bool = typer.Option(
        False,
        "--autoresume",
        "-a",
        help="Resume from the failed chunk instead of giving up",
    ),
    max_retries: int = typer.Option(
        3,
        "--max-retries",
        help="Resume attempts when --autoresume is set",
    ),
    retry_delay: float = typer.Option(
        1.0,
        "--retry-delay",
        help="Seconds to wait before resuming",
    ),
    chunk_size: Optional[int] = typer.Option(
        None,
        "--chunk-size",
        "-s",
        help="Bytes per update call (default: $IC_UPLOAD_CHUNK_SIZE or 1,900,000)",
    ),
    index_base: Optional[int] = typer.Option(
        None,
        "--index-base",
        help="Index of the first chunk, 0 or 1 (default: $IC_UPLOAD_INDEX_BASE or 1)",
    ),
    indexed: bool = typer.Option(
        False,
        "--indexed",
        "-i",
        help="Pass the chunk index to the method as (nat, blob)",
    ),
    backend: Backend = typer.Option(
        Backend.dfx,
        "--backend",
        "-b",
        help="Send chunks via `dfx canister call` or an ic-py agent",
    ),
    replica_url: Optional[str] = typer.Option(
        None,
        "--replica-url",
        "-u",
        help="Replica URL for the agent backend (default: $IC_REPLICA_URL)",
    ),
    canister_id: Optional[str] = typer.Option(
        None,
        "--canister-id",
        help="Canister id for the agent backend (default: `dfx canister id`)",
    ),
    identity_pem: Optional[Path] = typer.Option(
        None,
        "--identity-pem",
        help="PEM identity for the agent backend (default: anonymous)",
    ),
    use_mmap: bool = typer.Option(
        False,
        "--mmap",
        help="Memory-map the file instead of reading it into memory",
    ),
):
    """
    Upload FILE_PATH to CANISTER_NAME by calling METHOD_NAME once per chunk, in order.
    """
    try:
        settings = get_upload_settings()
        chunk_size = validate_chunk_size(chunk_size if chunk_size is not None else settings['CHUNK_SIZE'])
        index_base = validate_index_base(index_base if index_base is not None else settings['INDEX_BASE'])
        network = network or settings['NETWORK']

        writer = build_writer(
            backend,
            canister_name,
            method_name,
            network=network,
            indexed=indexed,
            replica_url=replica_url or settings['REPLICA_URL'],
            canister_id=canister_id,
            identity_pem=identity_pem,
            http_timeout=settings['HTTP_TIMEOUT'],
        )

        print(f"[bold]Uploading {escape(str(file_path))}[/]")

        def upload(payload):
            plan = split(payload, chunk_size, start_offset=offset)
            total = len(plan)
            print(f"  {format_size(plan.total_bytes)} in {total} chunk(s) of up to {chunk_size:,} bytes")

            def on_progress(index, chunk, report):
                print(f"Uploading {escape(file_path.name)} chunk {index - index_base + 1}/{total}")

            def on_retry(failure, attempt):
                print(f"[yellow]{escape(str(failure))}[/]")
                print(f"[yellow]Resuming at chunk {failure.partial.resume_index} "
                      f"(attempt {attempt}/{max_retries})[/]")

            return upload_payload(
                payload,
                writer,
                chunk_size=chunk_size,
                offset=offset,
                start_index=resume_index,
                index_base=index_base,
                autoresume=autoresume,
                max_retries=max_retries,
                retry_delay=retry_delay,
                on_progress=on_progress,
                on_retry=on_retry,
            )

        if use_mmap:
            with open_payload(file_path) as payload:
                report = upload(payload)
        else:
            report = upload(read_payload(file_path))

    except TransportFailure as e:
        print(f"[red]{escape(str(e))}[/]")
        print_resume_hint(e.partial, file_path, offset)
        raise typer.Exit(code=1)
    except (UploadError, FileNotFoundError) as e:
        print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)
    except KeyboardInterrupt as e:
        print("\n[red]Upload interrupted.[/]")
        partial = getattr(e, "partial", None)
        if partial is not None:
            print_resume_hint(partial, file_path, offset)
        raise typer.Exit(code=130)

    print(f"[green]Uploaded {escape(file_path.name)}: {report.bytes_sent:,} bytes in "
          f"{report.chunks_sent} chunk(s)[/]")
    if report.chunks_skipped:
        print(f"[cyan]  {report.chunks_skipped} chunk(s) skipped (already uploaded)[/]")


def main():
    app()


if __name__ == "__main__":
    main()
