"""Upload job data model"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Optional

from ..errors import InputError, UploadError
from ..transport.base import ArgumentMode

# Maximum payload of a canister update call (2 MB)
MAX_CANISTER_HTTP_PAYLOAD_SIZE = 2 * 1000 * 1000

DEFAULT_CONCURRENT_UPLOADS = 5


@dataclass(frozen=True)
class ByteChunk:
    """One contiguous slice of the source data"""
    index: int
    total: int
    offset: int
    data: bytes = field(repr=False)

    @property
    def display_index(self) -> int:
        return self.index + 1

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadJob:
    """
    Immutable description of one upload run
    Validated on construction; owns the derived chunk sequence
    """
    data: bytes = field(repr=False)
    canister_name: str
    method_name: str
    chunk_size: int = MAX_CANISTER_HTTP_PAYLOAD_SIZE
    start_offset: int = 0
    network: Optional[str] = None
    concurrent: bool = False
    concurrency_limit: int = DEFAULT_CONCURRENT_UPLOADS
    argument_mode: ArgumentMode = ArgumentMode.FILE
    include_index: Optional[bool] = None

    def __post_init__(self):
        if not self.canister_name:
            raise InputError("Canister name must not be empty")
        if not self.method_name:
            raise InputError("Canister method must not be empty")
        if not 0 < self.chunk_size <= MAX_CANISTER_HTTP_PAYLOAD_SIZE:
            raise InputError(
                f"Chunk size must be between 1 and {MAX_CANISTER_HTTP_PAYLOAD_SIZE}, "
                f"got {self.chunk_size}"
            )
        if not 0 <= self.start_offset <= len(self.data):
            raise InputError(
                f"Offset {self.start_offset} is beyond the end of the file "
                f"({len(self.data)} bytes)"
            )
        if self.concurrency_limit < 1:
            raise InputError(
                f"Concurrent uploads must be at least 1, got {self.concurrency_limit}"
            )
        # Chunks may arrive out of order when uploaded concurrently
        if self.include_index is None:
            object.__setattr__(self, 'include_index', self.concurrent)

    @cached_property
    def chunks(self) -> List[ByteChunk]:
        from .chunker import split_into_chunks
        return split_into_chunks(self.data, self.chunk_size, self.start_offset)

    def offset_of(self, index: int) -> int:
        """Byte offset of a chunk, usable as a resume point"""
        return self.start_offset + index * self.chunk_size


@dataclass
class ChunkOutcome:
    """Result of delivering a single chunk"""
    index: int
    success: bool
    message: str = ""
    error: Optional[UploadError] = field(default=None, repr=False)

    @classmethod
    def ok(cls, index: int) -> "ChunkOutcome":
        return cls(index=index, success=True)

    @classmethod
    def failed(cls, index: int, error: UploadError) -> "ChunkOutcome":
        return cls(index=index, success=False, message=str(error), error=error)

    @property
    def display_index(self) -> int:
        return self.index + 1


@dataclass
class JobResult:
    """Aggregate result of an upload job"""
    success: bool
    total: int
    outcomes: List[ChunkOutcome] = field(default_factory=list)
    failed_index: Optional[int] = None
    message: str = ""
    resume_offset: Optional[int] = None
    error: Optional[UploadError] = field(default=None, repr=False)

    @property
    def uploaded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    def raise_for_failure(self):
        """Re-raise the governing error of a failed job"""
        if self.success:
            return
        if self.error is not None:
            raise self.error
        raise UploadError(self.message, index=self.failed_index)
