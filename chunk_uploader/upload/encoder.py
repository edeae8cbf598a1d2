"""Candid blob literal encoding"""

import re

BLOB_PATTERN = re.compile(r'^\(\s*blob\s+"((?:\\[0-9A-Fa-f]{2})*)"\s*\)$')


def blob_escapes(data: bytes) -> str:
    return ''.join(f'\\{byte:02X}' for byte in data)


def encode_blob(data: bytes) -> str:
    """
    Render bytes as a Candid blob argument
    Format: (blob "\\00\\FF...")
    """
    return f'(blob "{blob_escapes(data)}")'


def encode_indexed_blob(index: int, data: bytes) -> str:
    """Render a (chunk index, blob) argument tuple"""
    return f'({index}, blob "{blob_escapes(data)}")'


def decode_blob(literal: str) -> bytes:
    """Recover the bytes of a literal produced by encode_blob"""
    match = BLOB_PATTERN.match(literal.strip())
    if not match:
        raise ValueError(f"Not a blob literal: {literal[:40]!r}")
    escapes = match.group(1)
    return bytes.fromhex(escapes.replace('\\', ''))
