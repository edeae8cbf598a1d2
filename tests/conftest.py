"""Pytest configuration and fixtures"""

import asyncio
import os
import re
import shutil
import stat
import tempfile
from pathlib import Path

import pytest

from chunk_uploader.transport import ArgumentMode, CallResult, CallTransport
from chunk_uploader.upload import decode_blob

INDEXED_PATTERN = re.compile(r'^\((\d+), (blob ".*")\)$', re.DOTALL)


def make_data(*sizes):
    """Chunk i is filled with byte value i so payloads identify their chunk"""
    return b''.join(bytes([i]) * size for i, size in enumerate(sizes))


class FakeTransport(CallTransport):
    """
    In-memory transport
    Identifies each call by the first byte of its payload (see make_data)
    """

    def __init__(self, failures=None, delays=None):
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def invoke(self, target, method, argument, network=None):
        if argument.kind is ArgumentMode.FILE:
            path = Path(argument.value)
            assert path.exists()
            literal = path.read_text()
        else:
            literal = argument.value

        sent_index = None
        match = INDEXED_PATTERN.match(literal)
        if match:
            sent_index = int(match.group(1))
            literal = f"({match.group(2)})"
        payload = decode_blob(literal)
        chunk_id = payload[0] if payload else None

        self.calls.append({
            'target': target,
            'method': method,
            'argument': argument,
            'network': network,
            'payload': payload,
            'chunk_id': chunk_id,
            'sent_index': sent_index,
        })

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(chunk_id, 0))
        finally:
            self.in_flight -= 1

        if chunk_id in self.failures:
            return CallResult(exit_success=False, stderr_text=self.failures[chunk_id])
        return CallResult(exit_success=True)

    @property
    def dispatched(self):
        return sorted(call['chunk_id'] for call in self.calls)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def fake_dfx(temp_dir):
    """
    Write an executable stand-in for dfx
    Returns a function taking the shell body of the script
    """
    def _write(body: str) -> str:
        script = temp_dir / "dfx"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    if os.name != 'posix':
        pytest.skip("shell script stand-in requires a POSIX system")
    return _write


@pytest.fixture
def chunk_data():
    return make_data
