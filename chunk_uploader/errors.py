"""Upload error taxonomy"""

from typing import Optional


def create_error_string(message: str) -> str:
    """Format an upload error message"""
    return f"Upload Error: {message}"


class UploadError(Exception):
    """Base class for every error that aborts an upload job"""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(create_error_string(message))
        self.index = index


class InputError(UploadError):
    """Invalid job parameters or unreadable source file"""


class ResourceError(UploadError):
    """Temporary argument file could not be created or written"""


class ArgumentEncodingError(UploadError):
    """Argument path cannot be passed to the transport as a string"""


class TransportUnavailable(UploadError):
    """The call transport could not be started at all"""


class TransportFailure(UploadError):
    """The remote call completed but reported failure"""

    def __init__(self, index: int, message: str):
        super().__init__(f"Chunk {index + 1} failed: {message}", index=index)
        self.detail = message
