"""Core orchestrator - coordinates one resumable chunked upload."""
import logging
from typing import Optional

from ..exceptions import CommitError
from ..models import DriveConfig, DriveObject, UploadSession, UploadSource
from ..protocols import IAPIClient, IPartRegistry, ProgressCallback
from ..services.registry import PartRegistryClient
from ..utils.progress import ProgressReporter
from ..utils.stream import DEFAULT_BLOCK_SIZE, BoundedReader
from .committer import ManifestCommitter
from .identity import derive_session_id, ensure_known_size, normalize_dir_path
from .planner import ChunkPlan, chunk_size_bytes, plan_chunks
from .transfer import ChunkTransferEngine

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Orchestrates a chunked upload using injected services.

    Flow:
    1. Derive the session id from (destination, name, size, owner)
    2. Plan chunks from the configured chunk size
    3. Ask the registry which parts the server already holds
    4. Skip or transfer every chunk in order, reporting progress
    5. Commit the ordered manifest as one file

    Usage:
        async with HTTPAPIClient(api_host, access_token) as api:
            orchestrator = UploadOrchestrator(api, config, owner_id)
            record = await orchestrator.put("/Videos", source, progress_callback)
    """

    def __init__(
        self,
        api: IAPIClient,
        config: DriveConfig,
        owner_id: int,
        registry: Optional[IPartRegistry] = None,
        engine: Optional[ChunkTransferEngine] = None,
        committer: Optional[ManifestCommitter] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        self._api = api
        self._config = config
        self._owner_id = owner_id
        self._registry = registry or PartRegistryClient(api)
        self._engine = engine or ChunkTransferEngine(api, config)
        self._committer = committer or ManifestCommitter(api)
        self._block_size = block_size

    def create_session(self, dest_path: str, file_name: str, plan: ChunkPlan) -> UploadSession:
        return UploadSession(
            session_id=derive_session_id(dest_path, file_name, plan.total_size, self._owner_id),
            channel_id=self._config.channel_id,
            encrypted=self._config.encrypt_files,
            chunk_size=plan.chunk_size,
            total_chunks=plan.total_chunks,
        )

    async def put(
        self,
        dest_path: Optional[str],
        source: UploadSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DriveObject:
        """
        Upload ``source`` into the folder at ``dest_path``.

        Raises:
            UnsupportedSizeError: source length unknown, nothing was sent
            ChunkTransferError: a chunk failed, later chunks were not attempted
            CommitError: the create-file call failed, uploaded parts stay on the server
        """
        file_size = ensure_known_size(source.size)
        parent_path = normalize_dir_path(dest_path)
        plan = plan_chunks(file_size, chunk_size_bytes(self._config.chunk_size_mb))
        session = self.create_session(parent_path, source.name, plan)

        logger.info(
            "Uploading %s/%s (%d bytes, %d chunks, session %s)",
            parent_path, source.name, file_size, plan.total_chunks, session.session_id,
        )

        existing = await self._registry.list_existing_parts(session.session_id) if plan.total_chunks else {}
        reporter = ProgressReporter(progress_callback)
        reader = BoundedReader(source.stream, block_size=self._block_size)

        parts = await self._engine.run(session, plan, source.name, reader, existing, reporter)
        if reporter.reports == 0:
            await reporter.report(0, 0)

        try:
            return await self._committer.commit(
                session,
                dest_path=parent_path,
                file_name=source.name,
                file_size=file_size,
                modified=source.modified,
                parts=parts,
            )
        except CommitError:
            if parts:
                logger.warning(
                    "Commit failed for session %s; %d uploaded parts were left on the server",
                    session.session_id, len(parts),
                )
            raise
