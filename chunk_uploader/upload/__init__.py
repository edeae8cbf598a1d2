from .models import (
    MAX_CANISTER_HTTP_PAYLOAD_SIZE,
    DEFAULT_CONCURRENT_UPLOADS,
    ByteChunk,
    UploadJob,
    ChunkOutcome,
    JobResult
)
from .chunker import split_into_chunks, chunk_count
from .encoder import encode_blob, encode_indexed_blob, decode_blob
from .dispatcher import ChunkDispatcher
from .orchestrator import ChunkUploader, upload_file

__all__ = [
    'MAX_CANISTER_HTTP_PAYLOAD_SIZE',
    'DEFAULT_CONCURRENT_UPLOADS',
    'ByteChunk',
    'UploadJob',
    'ChunkOutcome',
    'JobResult',
    'split_into_chunks',
    'chunk_count',
    'encode_blob',
    'encode_indexed_blob',
    'decode_blob',
    'ChunkDispatcher',
    'ChunkUploader',
    'upload_file'
]
