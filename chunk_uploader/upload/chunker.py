"""Split a byte buffer into bounded chunks"""

from typing import List

from ..errors import InputError
from .models import ByteChunk


def chunk_count(length: int, chunk_size: int, start_offset: int = 0) -> int:
    """Number of chunks produced for a buffer of the given length"""
    if chunk_size <= 0:
        raise InputError(f"Chunk size must be positive, got {chunk_size}")
    remaining = length - start_offset
    return -(-remaining // chunk_size) if remaining > 0 else 0


def split_into_chunks(data: bytes, chunk_size: int,
                      start_offset: int = 0) -> List[ByteChunk]:
    """
    Split data[start_offset:] into contiguous chunks of chunk_size bytes.
    Only the last chunk may be shorter; no chunk is empty.
    """
    if chunk_size <= 0:
        raise InputError(f"Chunk size must be positive, got {chunk_size}")
    if not 0 <= start_offset <= len(data):
        raise InputError(
            f"Offset {start_offset} is outside the data (length {len(data)})"
        )

    total = chunk_count(len(data), chunk_size, start_offset)
    return [
        ByteChunk(
            index=index,
            total=total,
            offset=start,
            data=bytes(data[start:start + chunk_size]),
        )
        for index, start in enumerate(range(start_offset, len(data), chunk_size))
    ]
