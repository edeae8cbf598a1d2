"""Tests for single chunk dispatch"""

from pathlib import Path

import aiofiles.tempfile
import pytest

from chunk_uploader.errors import ArgumentEncodingError, ResourceError, TransportFailure
from chunk_uploader.transport import ArgumentMode, CallResult, CallTransport
from chunk_uploader.upload import ByteChunk, ChunkDispatcher, decode_blob


class PathCapturingTransport(CallTransport):
    """Records argument files and whether they existed during the call"""

    def __init__(self, exit_success=True, stderr_text=""):
        self.result = CallResult(exit_success=exit_success, stderr_text=stderr_text)
        self.seen = []

    async def invoke(self, target, method, argument, network=None):
        path = Path(argument.value)
        self.seen.append((path, path.exists(), path.read_text()))
        return self.result


class RaisingTransport(CallTransport):
    def __init__(self):
        self.paths = []

    async def invoke(self, target, method, argument, network=None):
        self.paths.append(Path(argument.value))
        raise RuntimeError("transport crashed")


@pytest.fixture
def chunk():
    return ByteChunk(index=1, total=3, offset=4, data=b"\x01\x02\xfe")


class TestChunkDispatcher:
    """Argument materialization and result interpretation"""

    @pytest.mark.asyncio
    async def test_inline_success(self, chunk, transport_factory, caplog):
        transport = transport_factory()
        dispatcher = ChunkDispatcher(transport, "store", "append", network="ic",
                                     argument_mode=ArgumentMode.INLINE)

        with caplog.at_level("INFO"):
            outcome = await dispatcher.dispatch(chunk)

        assert outcome.success
        assert outcome.index == 1
        call = transport.calls[0]
        assert call['target'] == "store"
        assert call['method'] == "append"
        assert call['network'] == "ic"
        assert call['argument'].kind is ArgumentMode.INLINE
        assert call['argument'].value == '(blob "\\01\\02\\FE")'
        assert "Uploaded chunk 2/3" in caplog.text

    @pytest.mark.asyncio
    async def test_file_argument_removed_after_success(self, chunk):
        transport = PathCapturingTransport()
        dispatcher = ChunkDispatcher(transport, "store", "append")

        outcome = await dispatcher.dispatch(chunk)

        assert outcome.success
        path, existed, content = transport.seen[0]
        assert existed
        assert decode_blob(content) == chunk.data
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_file_argument_removed_after_failure(self, chunk):
        transport = PathCapturingTransport(exit_success=False, stderr_text="boom\n")
        dispatcher = ChunkDispatcher(transport, "store", "append")

        outcome = await dispatcher.dispatch(chunk)

        assert not outcome.success
        assert not transport.seen[0][0].exists()

    @pytest.mark.asyncio
    async def test_file_argument_removed_when_transport_raises(self, chunk):
        transport = RaisingTransport()
        dispatcher = ChunkDispatcher(transport, "store", "append")

        with pytest.raises(RuntimeError):
            await dispatcher.dispatch(chunk)

        assert not transport.paths[0].exists()

    @pytest.mark.asyncio
    async def test_transport_failure(self, chunk, caplog):
        transport = PathCapturingTransport(exit_success=False,
                                           stderr_text="insufficient cycles\n")
        dispatcher = ChunkDispatcher(transport, "store", "append")

        outcome = await dispatcher.dispatch(chunk)

        assert not outcome.success
        assert outcome.index == 1
        assert isinstance(outcome.error, TransportFailure)
        assert outcome.message == "Upload Error: Chunk 2 failed: insufficient cycles"
        assert "Failed to upload chunk 2: insufficient cycles" in caplog.text

    @pytest.mark.asyncio
    async def test_indexed_argument(self, chunk, transport_factory):
        transport = transport_factory()
        dispatcher = ChunkDispatcher(transport, "store", "append",
                                     argument_mode=ArgumentMode.INLINE, include_index=True)

        await dispatcher.dispatch(chunk)

        assert transport.calls[0]['argument'].value == '(1, blob "\\01\\02\\FE")'
        assert transport.calls[0]['sent_index'] == 1

    @pytest.mark.asyncio
    async def test_temp_file_creation_failure(self, chunk, transport_factory, monkeypatch):
        def broken(*args, **kwargs):
            raise OSError("no space left on device")

        monkeypatch.setattr(aiofiles.tempfile, "NamedTemporaryFile", broken)
        transport = transport_factory()
        dispatcher = ChunkDispatcher(transport, "store", "append")

        with pytest.raises(ResourceError) as exc_info:
            await dispatcher.dispatch(chunk)

        assert "Failed to create temporary file" in str(exc_info.value)
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_unencodable_path(self, chunk, transport_factory, monkeypatch, temp_dir):
        real = aiofiles.tempfile.NamedTemporaryFile

        def surrogate_named(*args, **kwargs):
            kwargs['dir'] = str(temp_dir)
            kwargs['prefix'] = 'chunk-\udcff-'
            return real(*args, **kwargs)

        monkeypatch.setattr(aiofiles.tempfile, "NamedTemporaryFile", surrogate_named)
        transport = transport_factory()
        dispatcher = ChunkDispatcher(transport, "store", "append")

        with pytest.raises(ArgumentEncodingError):
            await dispatcher.dispatch(chunk)

        assert transport.calls == []
        assert list(temp_dir.iterdir()) == []
