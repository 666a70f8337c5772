"""Destination writer: containment, size ceiling, overwrite policy."""
import logging
from dataclasses import dataclass
from pathlib import Path

from git_file_fetch.config import FetchConfig
from git_file_fetch.core.errors import DestOutOfBoundsError, FileTooLargeError
from git_file_fetch.core.redact import redact_secrets
from git_file_fetch.fetch.reference import RemoteFile

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    dest_file: Path
    wrote: bool
    skipped: bool = False


def resolve_destination(output_root: Path, dest_path: str) -> Path:
    """Resolve ``dest_path`` under ``output_root`` and require containment.

    Both sides are fully resolved (symlinks included), so an absolute
    override or a symlinked root cannot smuggle the write elsewhere.

    Raises:
        DestOutOfBoundsError: If the result is not the root or below it.
    """
    root = Path(output_root).resolve()
    dest = (root / dest_path).resolve()
    if dest != root and root not in dest.parents:
        raise DestOutOfBoundsError(dest_path)
    return dest


def write_dest_file(
    contents: bytes,
    remote: RemoteFile,
    config: FetchConfig,
) -> WriteOutcome:
    """Write fetched content to its destination under the output root.

    An existing file is left alone unless ``config.force`` is set; that case
    is reported as ``skipped`` rather than as an error. In dry-run mode every
    check still runs but nothing touches the filesystem.

    Raises:
        DestOutOfBoundsError: Destination escapes ``config.output_root``
        FileTooLargeError: ``contents`` is larger than ``config.max_bytes``
    """
    dest_file = resolve_destination(config.output_root, remote.dest_path)

    if len(contents) > config.max_bytes:
        raise FileTooLargeError(remote.file_path, len(contents), config.max_bytes)

    if dest_file.exists() and not config.force:
        logger.warning(f"Skipping existing '{dest_file}'. Use --force to overwrite.")
        return WriteOutcome(dest_file=dest_file, wrote=False, skipped=True)

    source = redact_secrets(f"{remote.file_path} from {remote.origin}")
    if config.dry_run:
        logger.info(f"[dry-run] Would fetch {source} -> {dest_file}")
        return WriteOutcome(dest_file=dest_file, wrote=False)

    dest_file.parent.mkdir(parents=True, exist_ok=True)
    dest_file.write_bytes(contents)
    logger.info(f"Fetched {source} -> {dest_file}")
    return WriteOutcome(dest_file=dest_file, wrote=True)
