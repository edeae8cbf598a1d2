"""Chunked file uploads to Internet Computer canisters"""

from .config import UploadSettings, load_settings
from .errors import (
    UploadError,
    InputError,
    ResourceError,
    ArgumentEncodingError,
    TransportUnavailable,
    TransportFailure
)
from .transport import ArgumentMode, ArgumentSpec, CallResult, CallTransport, DfxTransport
from .upload import (
    MAX_CANISTER_HTTP_PAYLOAD_SIZE,
    UploadJob,
    JobResult,
    ChunkUploader,
    upload_file
)

__version__ = "0.2.0"

__all__ = [
    'UploadSettings',
    'load_settings',
    'UploadError',
    'InputError',
    'ResourceError',
    'ArgumentEncodingError',
    'TransportUnavailable',
    'TransportFailure',
    'ArgumentMode',
    'ArgumentSpec',
    'CallResult',
    'CallTransport',
    'DfxTransport',
    'MAX_CANISTER_HTTP_PAYLOAD_SIZE',
    'UploadJob',
    'JobResult',
    'ChunkUploader',
    'upload_file'
]
