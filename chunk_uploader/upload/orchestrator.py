"""Chunked upload orchestration"""

import asyncio
import logging
from typing import List, Optional

from ..errors import UploadError
from ..transport.base import ArgumentMode, CallTransport
from .dispatcher import ChunkDispatcher
from .models import (
    DEFAULT_CONCURRENT_UPLOADS,
    MAX_CANISTER_HTTP_PAYLOAD_SIZE,
    ByteChunk,
    ChunkOutcome,
    JobResult,
    UploadJob,
)

logger = logging.getLogger(__name__)


class ChunkUploader:
    """
    Drives a job's chunks through the dispatcher
    Sequential mode stops at the first failure; concurrent mode lets every
    chunk settle and reports the first failure in completion order
    """

    def __init__(self, job: UploadJob, transport: CallTransport,
                 dispatcher: Optional[ChunkDispatcher] = None):
        self.job = job
        self.transport = transport
        self.dispatcher = dispatcher or ChunkDispatcher.for_job(job, transport)

    async def run(self) -> JobResult:
        """Upload every chunk of the job"""
        chunks = self.job.chunks
        logger.info(
            f"Uploading {len(chunks)} chunk(s) to {self.job.canister_name}.{self.job.method_name} "
            f"from offset {self.job.start_offset}"
            + (f" ({self.job.concurrency_limit} concurrent)" if self.job.concurrent else "")
        )

        if self.job.concurrent:
            outcomes = await self._run_concurrent(chunks)
        else:
            outcomes = await self._run_sequential(chunks)

        return self._summarize(outcomes, len(chunks))

    async def _deliver(self, chunk: ByteChunk) -> ChunkOutcome:
        """Dispatch one chunk; any raised error becomes a failed outcome"""
        try:
            return await self.dispatcher.dispatch(chunk)
        except UploadError as e:
            logger.error(f"Chunk {chunk.display_index} could not be uploaded: {e}")
            return ChunkOutcome.failed(chunk.index, e)
        except Exception as e:
            logger.error(f"Chunk {chunk.display_index} raised {e!r}", exc_info=True)
            error = UploadError(f"Chunk {chunk.display_index} failed: {e!r}", index=chunk.index)
            return ChunkOutcome.failed(chunk.index, error)

    async def _run_sequential(self, chunks: List[ByteChunk]) -> List[ChunkOutcome]:
        outcomes = []
        for chunk in chunks:
            outcome = await self._deliver(chunk)
            outcomes.append(outcome)
            if not outcome.success:
                break
        return outcomes

    async def _run_concurrent(self, chunks: List[ByteChunk]) -> List[ChunkOutcome]:
        semaphore = asyncio.Semaphore(self.job.concurrency_limit)

        async def bounded(chunk: ByteChunk) -> ChunkOutcome:
            async with semaphore:
                return await self._deliver(chunk)

        tasks = [asyncio.ensure_future(bounded(chunk)) for chunk in chunks]

        # Completion order, not chunk order
        outcomes = []
        for next_done in asyncio.as_completed(tasks):
            outcomes.append(await next_done)
        return outcomes

    def _summarize(self, outcomes: List[ChunkOutcome], total: int) -> JobResult:
        failure = next((outcome for outcome in outcomes if not outcome.success), None)

        if failure is None:
            logger.info(f"Upload complete: {total} chunk(s)")
            return JobResult(success=True, total=total, outcomes=outcomes)

        resume_offset = self.job.offset_of(failure.index)
        logger.error(f"Upload failed at chunk {failure.display_index}/{total}: {failure.message}")
        logger.error(f"Resume with --offset {resume_offset}")
        return JobResult(
            success=False,
            total=total,
            outcomes=outcomes,
            failed_index=failure.index,
            message=failure.message,
            resume_offset=resume_offset,
            error=failure.error,
        )


async def upload_file(data: bytes, canister_name: str, method_name: str,
                      transport: CallTransport,
                      chunk_size: int = MAX_CANISTER_HTTP_PAYLOAD_SIZE,
                      start_offset: int = 0,
                      network: Optional[str] = None,
                      concurrent: bool = False,
                      concurrency_limit: int = DEFAULT_CONCURRENT_UPLOADS,
                      argument_mode: ArgumentMode = ArgumentMode.FILE,
                      include_index: Optional[bool] = None) -> JobResult:
    """Build an UploadJob and run it"""
    job = UploadJob(
        data=data,
        canister_name=canister_name,
        method_name=method_name,
        chunk_size=chunk_size,
        start_offset=start_offset,
        network=network,
        concurrent=concurrent,
        concurrency_limit=concurrency_limit,
        argument_mode=argument_mode,
        include_index=include_index,
    )
    return await ChunkUploader(job, transport).run()
