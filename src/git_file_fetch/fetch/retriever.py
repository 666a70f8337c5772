"""Shallow single-file retrieval: init, add remote, fetch depth 1, read blob."""
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from git_file_fetch.config import FetchConfig
from git_file_fetch.core.errors import SourceFileNotFoundError
from git_file_fetch.core.redact import redact_secrets
from git_file_fetch.fetch.git import run_git_with_retry
from git_file_fetch.fetch.reference import RemoteFile

logger = logging.getLogger(__name__)

REMOTE_NAME = "origin"


@dataclass
class RetrievedFile:
    """Raw content of one file and the commit it was read from."""

    contents: bytes
    commit_sha: str


def _parse_ls_tree_entry(output: bytes) -> Optional[List[str]]:
    """Return ``[mode, type, object_sha]`` of the first ``ls-tree -z`` record."""
    record = output.split(b"\0", 1)[0]
    if not record:
        return None
    meta, _, _ = record.partition(b"\t")
    fields = meta.decode("ascii", errors="replace").split()
    return fields if len(fields) == 3 else None


def fetch_file_minimal(
    remote: RemoteFile,
    scratch_dir: Path,
    config: FetchConfig,
    cancel_event: Optional[threading.Event] = None,
) -> RetrievedFile:
    """Fetch one file at ``remote.ref`` without cloning or checking out.

    Only the tip commit of the ref is transferred (``--depth 1``), so the cost
    is bounded by the tree and the one blob, not by repository history.

    Args:
        remote: Parsed request
        scratch_dir: Private, empty directory owned by this call
        config: Run configuration (timeout/retry/backoff and git executable)
        cancel_event: Optional event that aborts waits and running git

    Returns:
        RetrievedFile with raw bytes and the resolved commit SHA

    Raises:
        SourceFileNotFoundError: If the path is not a file at that commit
        GitCommandError: If any git step fails after retries
    """
    repo_dir = scratch_dir / "repo"
    repo_dir.mkdir(parents=True, exist_ok=True)

    def git(*args: str) -> bytes:
        return run_git_with_retry(
            args,
            cwd=repo_dir,
            timeout_ms=config.timeout_ms,
            retries=config.retries,
            backoff_ms=config.retry_backoff_ms,
            git_executable=config.git_executable,
            cancel_event=cancel_event,
        )

    logger.debug(
        f"Shallow fetch of {redact_secrets(remote.origin)} without checkout "
        f"(git fetch --depth 1 + git cat-file)"
    )
    git("init", "-q")
    git("remote", "add", "--", REMOTE_NAME, remote.repo)
    git("fetch", "--quiet", "--no-tags", "--depth", "1", "--", REMOTE_NAME, remote.ref)
    commit_sha = git("rev-parse", "--verify", "FETCH_HEAD^{commit}").decode("ascii").strip()
    logger.debug(f"Resolved {remote.ref} -> {commit_sha[:12]}")

    entry = _parse_ls_tree_entry(git("ls-tree", "-z", commit_sha, "--", remote.file_path))
    if entry is None:
        raise SourceFileNotFoundError(remote.file_path, remote.repo, remote.ref)
    _, object_type, object_sha = entry
    if object_type != "blob":
        raise SourceFileNotFoundError(
            remote.file_path, remote.repo, remote.ref, f"path is a {object_type}, not a file"
        )

    contents = git("cat-file", "blob", object_sha)
    return RetrievedFile(contents=contents, commit_sha=commit_sha)
