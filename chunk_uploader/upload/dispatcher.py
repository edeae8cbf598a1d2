"""Single chunk delivery"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Optional

import aiofiles.tempfile

from ..errors import ArgumentEncodingError, ResourceError, TransportFailure
from ..transport.base import ArgumentMode, ArgumentSpec, CallTransport
from .encoder import encode_blob, encode_indexed_blob
from .models import ByteChunk, ChunkOutcome, UploadJob

logger = logging.getLogger(__name__)


class ChunkDispatcher:
    """
    Delivers one chunk per call: encode, materialize the argument,
    invoke the transport and interpret its result
    """

    def __init__(self, transport: CallTransport, canister_name: str,
                 method_name: str, network: Optional[str] = None,
                 argument_mode: ArgumentMode = ArgumentMode.FILE,
                 include_index: bool = False):
        self.transport = transport
        self.canister_name = canister_name
        self.method_name = method_name
        self.network = network
        self.argument_mode = argument_mode
        self.include_index = include_index

    @classmethod
    def for_job(cls, job: UploadJob, transport: CallTransport) -> "ChunkDispatcher":
        """Build a dispatcher bound to an UploadJob's target"""
        return cls(
            transport,
            job.canister_name,
            job.method_name,
            network=job.network,
            argument_mode=job.argument_mode,
            include_index=job.include_index,
        )

    def encode(self, chunk: ByteChunk) -> str:
        if self.include_index:
            return encode_indexed_blob(chunk.index, chunk.data)
        return encode_blob(chunk.data)

    async def dispatch(self, chunk: ByteChunk) -> ChunkOutcome:
        """
        Upload a chunk
        Raises ResourceError / ArgumentEncodingError for local failures;
        a failed remote call is returned as a failed outcome
        """
        literal = self.encode(chunk)

        async with self._materialize(literal) as argument:
            result = await self.transport.invoke(
                self.canister_name, self.method_name, argument, self.network
            )

        if result.exit_success:
            logger.info(f"Uploaded chunk {chunk.display_index}/{chunk.total}")
            return ChunkOutcome.ok(chunk.index)

        error_message = result.stderr_text.strip()
        logger.error(f"Failed to upload chunk {chunk.display_index}: {error_message}")
        return ChunkOutcome.failed(chunk.index, TransportFailure(chunk.index, error_message))

    @asynccontextmanager
    async def _materialize(self, literal: str) -> AsyncIterator[ArgumentSpec]:
        """Yield the argument; file arguments live only for the call"""
        if self.argument_mode is ArgumentMode.INLINE:
            yield ArgumentSpec.inline(literal)
            return

        async with AsyncExitStack() as stack:
            try:
                temp_file = await stack.enter_async_context(
                    aiofiles.tempfile.NamedTemporaryFile(
                        'w', encoding='ascii', prefix='chunk-', suffix='.did'
                    )
                )
            except OSError as e:
                raise ResourceError(f"Failed to create temporary file: {e}")

            try:
                await temp_file.write(literal)
                await temp_file.flush()
            except OSError as e:
                raise ResourceError(f"Failed to write data to temporary file: {e}")

            path = temp_file.name
            try:
                path.encode('utf-8')
            except (AttributeError, UnicodeEncodeError):
                raise ArgumentEncodingError(
                    "Temporary file path could not be converted to a string"
                )

            yield ArgumentSpec.from_file(path)
