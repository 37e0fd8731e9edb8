"""Upload session identity: the same inputs always resume the same session."""
import hashlib
from typing import Optional

from ..exceptions import UnsupportedSizeError


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def normalize_dir_path(path: Optional[str]) -> str:
    """Represent the root as an empty string and drop trailing slashes."""
    if not path or path == "/":
        return ""
    value = path.rstrip("/")
    return value if value.startswith("/") else f"/{value}"


def ensure_known_size(size: Optional[int]) -> int:
    """Reject unknown (None) or negative lengths before any I/O happens."""
    if size is None or size < 0:
        raise UnsupportedSizeError(size)
    return int(size)


def derive_session_id(dest_path: str, file_name: str, file_size: int, owner_id: int) -> str:
    """
    Derive the resumable upload session id.

    Args:
        dest_path: Destination folder, already normalized ("" for root)
        file_name: Name of the logical file
        file_size: Total size in bytes
        owner_id: Id of the authenticated user

    Returns:
        32 character hex digest
    """
    return md5_hex(f"{dest_path}:{file_name}:{file_size}:{owner_id}")
