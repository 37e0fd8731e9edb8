"""Command line interface for the TelDrive uploader."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import httpx
from rich.logging import RichHandler

from .cli_progress import SingleFileUploadProgress, human_size, render_configuration_summary
from .exceptions import TeldriveError
from .models import DriveConfig, DriveObject, UploadSource


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # keep per-request transport noise out of debug output
    logging.getLogger("httpcore").setLevel(max(level, logging.INFO))
    return logging.getLevelName(level)


def _normalize_dest(dest: Optional[str]) -> Optional[str]:
    if dest is None:
        return None
    value = dest.strip()
    if value in {"", "/"}:
        return None
    return value.lstrip("/").rstrip("/")


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _build_config(args: argparse.Namespace) -> DriveConfig:
    """Environment configuration with command line overrides applied."""
    config = DriveConfig.from_env()
    return config.with_overrides(
        chunk_size_mb=args.chunk_size,
        random_chunk_name=False if args.no_random_chunk_name else None,
        encrypt_files=True if args.encrypt else None,
        upload_host=args.upload_host,
    )


def _destination(dest_norm: Optional[str]) -> DriveObject:
    if dest_norm is None:
        return DriveObject(id="root", name="", is_folder=True, path="/")
    return DriveObject(id="", name=dest_norm.rsplit("/", 1)[-1], is_folder=True, path=f"/{dest_norm}")


async def _run_upload(source: Path, dest: Optional[str], config: DriveConfig) -> int:
    from .driver import TeldriveDriver

    stat = source.stat()
    destination = _destination(_normalize_dest(dest))
    progress = SingleFileUploadProgress(source.name, stat.st_size)

    async with TeldriveDriver(config) as drive:
        with source.open("rb") as stream:
            upload_source = UploadSource(
                name=source.name,
                size=stat.st_size,
                stream=stream,
                modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )
            progress.start()
            succeeded = False
            error: Optional[str] = None
            try:
                record = await drive.put(destination, upload_source, progress.get_callback())
                succeeded = True
            except TeldriveError as exc:
                error = str(exc)
                return 1
            finally:
                # interrupts must still stop the live display
                progress.complete(success=succeeded, error=error)

    logging.getLogger(__name__).info("Created file %s (id %s)", record.path, record.id)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teldrive-up",
        description="Upload a file to TelDrive in resumable chunks.",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Source file path")
    parser.add_argument(
        "-g",
        "--dest",
        default=None,
        help="Destination folder path in TelDrive (example: /Videos/2026)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Chunk size in MB (default from TELDRIVE_CHUNK_SIZE_MB or 500)",
    )
    parser.add_argument(
        "--no-random-chunk-name",
        action="store_true",
        help="Name chunks <file>.part.NNN instead of random digests",
    )
    parser.add_argument(
        "--encrypt",
        action="store_true",
        help="Ask the server to encrypt uploaded chunks",
    )
    parser.add_argument(
        "--upload-host",
        default=None,
        help="Alternate host for chunk uploads (default from TELDRIVE_UPLOAD_HOST)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="teldrive-up (from teldrive_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.source is None:
        parser.print_help()
        return 0

    source = Path(args.source).expanduser()
    if not source.is_file():
        print(f"ERROR: source is not a file: {source}", file=sys.stderr)
        return 1

    try:
        config = _build_config(args)
    except TeldriveError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    render_configuration_summary(
        {
            "Source": str(source),
            "Size": human_size(source.stat().st_size),
            "Dest": "/" + (_normalize_dest(args.dest) or ""),
            "API Host": config.api_host,
            "Upload Host": config.upload_host or "(api host)",
            "Channel": config.channel_id,
            "Chunk Size": f"{config.chunk_size_mb} MB",
            "Random Chunk Names": "yes" if config.random_chunk_name else "no",
            "Encrypt": "yes" if config.encrypt_files else "no",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_upload(source, args.dest, config))
    except TeldriveError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except httpx.HTTPError as exc:
        print(f"ERROR: request failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
