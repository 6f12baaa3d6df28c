#!/usr/bin/env python3
"""
IC file uploader package.

Modules:
- chunker: Split a payload into bounded-size chunks
- sequencer: Ordered, fail-fast chunk delivery
- errors: Upload error types
- config: Transport limits and environment overrides
- dfx: dfx execution and the dfx chunk writer
- agent: ic-py / PocketIC chunk writer
- source: File byte sources
- uploader: Chunk + deliver + autoresume
"""

from .chunker import (
    Chunk,
    ChunkSequence,
    chunk_sizes,
    split,
)

from .sequencer import (
    DeliveryReport,
    DeliveryState,
    Sequencer,
    deliver,
)

from .errors import (
    UploadError,
    InvalidConfiguration,
    RemoteCallError,
    TransportFailure,
    PartialTransfer,
)

from .config import (
    MAX_CANISTER_HTTP_PAYLOAD_SIZE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_INDEX_BASE,
    get_upload_settings,
    validate_chunk_size,
)

from .dfx import (
    DfxChunkWriter,
    blob_literal,
    format_arguments,
    query_canister_id,
)

from .agent import (
    AgentChunkWriter,
    make_agent,
)

from .source import (
    read_payload,
    open_payload,
)

from .uploader import upload_payload

__version__ = "0.1.0"

__all__ = [
    # chunker
    "Chunk",
    "ChunkSequence",
    "chunk_sizes",
    "split",
    # sequencer
    "DeliveryReport",
    "DeliveryState",
    "Sequencer",
    "deliver",
    # errors
    "UploadError",
    "InvalidConfiguration",
    "RemoteCallError",
    "TransportFailure",
    "PartialTransfer",
    # config
    "MAX_CANISTER_HTTP_PAYLOAD_SIZE",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_INDEX_BASE",
    "get_upload_settings",
    "validate_chunk_size",
    # dfx
    "DfxChunkWriter",
    "blob_literal",
    "format_arguments",
    "query_canister_id",
    # agent
    "AgentChunkWriter",
    "make_agent",
    # source
    "read_payload",
    "open_payload",
    # uploader
    "upload_payload",
]
