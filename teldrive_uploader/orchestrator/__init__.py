"""Orchestrator package - resumable chunked upload workflow."""
from .committer import ManifestCommitter, build_manifest
from .core import UploadOrchestrator
from .identity import derive_session_id, normalize_dir_path
from .planner import ChunkPlan, PlannedChunk, plan_chunks
from .transfer import ChunkState, ChunkTransferEngine, chunk_name

__all__ = [
    "UploadOrchestrator",
    "ManifestCommitter",
    "ChunkTransferEngine",
    "ChunkState",
    "ChunkPlan",
    "PlannedChunk",
    "build_manifest",
    "chunk_name",
    "derive_session_id",
    "normalize_dir_path",
    "plan_chunks",
]
