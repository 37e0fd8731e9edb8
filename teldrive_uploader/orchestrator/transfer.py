"""Chunk transfer: skip what the server already has, upload the rest in order."""
import logging
import uuid
from enum import Enum
from typing import Dict, List

import httpx

from ..exceptions import ChunkTransferError, StreamExhaustedError
from ..models import DriveConfig, RemotePart, UploadSession
from ..protocols import IAPIClient
from ..services.api_client import SUCCESS_STATUS
from ..utils.progress import ProgressReporter
from ..utils.stream import BoundedReader
from .identity import md5_hex
from .planner import ChunkPlan, PlannedChunk

logger = logging.getLogger(__name__)


class ChunkState(Enum):
    """Lifecycle of a planned chunk."""
    PENDING = "pending"
    SKIPPED = "skipped"
    TRANSFERRING = "transferring"
    COMMITTED = "committed"


def chunk_name(file_name: str, part_no: int, total_chunks: int, randomize: bool) -> str:
    """Name a chunk: random digest, ``<name>.part.NNN``, or the file name itself."""
    if randomize:
        return md5_hex(str(uuid.uuid4()))
    if total_chunks > 1:
        return f"{file_name}.part.{part_no:03d}"
    return file_name


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class ChunkTransferEngine:
    """
    Transfers the chunks of one upload session, strictly in part order.

    Chunks present in ``existing`` are skipped by discarding their recorded
    length from the source; all others are streamed to the upload endpoint.
    The first failing chunk aborts the run with ``ChunkTransferError``.
    """

    def __init__(self, api: IAPIClient, config: DriveConfig):
        self._api = api
        self._config = config

    def upload_url(self, session_id: str) -> str:
        return f"{self._config.upload_base_url}/api/uploads/{session_id}"

    async def run(
        self,
        session: UploadSession,
        plan: ChunkPlan,
        file_name: str,
        reader: BoundedReader,
        existing: Dict[int, RemotePart],
        reporter: ProgressReporter,
    ) -> List[RemotePart]:
        if self._config.upload_concurrency > 1:
            logger.debug(
                "upload_concurrency=%d is advisory, chunks are transferred sequentially",
                self._config.upload_concurrency,
            )

        parts: List[RemotePart] = []
        processed = 0

        for chunk in plan:
            known = existing.get(chunk.part_no)
            if known is not None:
                await self._skip(chunk, known, reader)
                parts.append(known)
                processed += known.size
                self._log_state(session, chunk, ChunkState.SKIPPED)
            else:
                self._log_state(session, chunk, ChunkState.TRANSFERRING)
                part = await self._transfer(session, chunk, plan.total_chunks, file_name, reader)
                parts.append(part)
                processed += chunk.size
                self._log_state(session, chunk, ChunkState.COMMITTED)

            await reporter.report(processed, plan.total_size)

        return parts

    async def _skip(self, chunk: PlannedChunk, known: RemotePart, reader: BoundedReader) -> None:
        if known.size != chunk.size:
            logger.warning(
                "Part %d recorded with %d bytes, planned %d; discarding the recorded length",
                chunk.part_no, known.size, chunk.size,
            )
        try:
            await reader.discard_exactly(known.size)
        except StreamExhaustedError as e:
            raise ChunkTransferError(chunk.part_no, str(e)) from e

    async def _transfer(
        self,
        session: UploadSession,
        chunk: PlannedChunk,
        total_chunks: int,
        file_name: str,
        reader: BoundedReader,
    ) -> RemotePart:
        name = chunk_name(file_name, chunk.part_no, total_chunks, self._config.random_chunk_name)
        params = {
            "partName": name,
            "fileName": file_name,
            "partNo": str(chunk.part_no),
            "channelId": str(session.channel_id),
            "encrypted": _bool_param(session.encrypted),
        }
        headers = {
            "Content-Type": "application/octet-stream",
            "Content-Length": str(chunk.size),
        }

        try:
            resp = await self._api.post(
                self.upload_url(session.session_id),
                params=params,
                content=reader.iter_exactly(chunk.size),
                headers=headers,
                check=False,
            )
        except (httpx.HTTPError, StreamExhaustedError) as e:
            raise ChunkTransferError(chunk.part_no, str(e)) from e

        if resp.status_code != SUCCESS_STATUS:
            raise ChunkTransferError(chunk.part_no, f"status {resp.status_code}: {resp.text}")

        try:
            part = RemotePart.from_api(
                resp.json(),
                part_no=chunk.part_no,
                size=chunk.size,
                channel_id=session.channel_id,
                encrypted=session.encrypted,
                name=name,
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise ChunkTransferError(chunk.part_no, f"unparseable response: {e}") from e

        if part.part_id == 0:
            raise ChunkTransferError(chunk.part_no, "response carried no part id")

        return part

    @staticmethod
    def _log_state(session: UploadSession, chunk: PlannedChunk, state: ChunkState) -> None:
        logger.debug(
            "[%s] part %d/%d (%d bytes): %s",
            session.session_id, chunk.part_no, session.total_chunks, chunk.size, state.value,
        )
