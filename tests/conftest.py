"""Pytest fixtures for git-file-fetch tests."""
import logging
import subprocess
from pathlib import Path
from typing import Dict

import pytest

from git_file_fetch.config import FetchConfig
from git_file_fetch.logging_config import LOGGER_NAME


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler/propagation changes made by CLI invocations."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def git_repo_fixture(tmp_path: Path) -> Dict[str, any]:
    """Create a small git repository with a tag, an annotated tag and a branch.

    Returns dict with:
        - path: Path to repo
        - url: repo location as passed to git-file-fetch
        - main_sha: SHA of main branch
        - tag_sha: SHA of lightweight tag v0.1 (same commit as main)
        - dev_sha: SHA of dev branch
        - files: {relative posix path: bytes} committed on main
    """
    repo_path = tmp_path / "source_repo"
    repo_path.mkdir()

    _git(repo_path, "init", "-q")
    _git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")

    files = {
        "README.md": b"# Source repo\n",
        "src/utils/logger.py": b"import logging\n\nlogger = logging.getLogger(__name__)\n",
        "docs/guide.md": b"Guide\n=====\n",
    }
    for rel_path, content in files.items():
        target = repo_path / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-q", "-m", "Initial commit")
    main_sha = _git(repo_path, "rev-parse", "HEAD")

    _git(repo_path, "tag", "v0.1")
    _git(repo_path, "tag", "-a", "v0.2", "-m", "Annotated release")

    _git(repo_path, "checkout", "-q", "-b", "dev")
    (repo_path / "dev_only.txt").write_text("only on dev\n")
    _git(repo_path, "add", "dev_only.txt")
    _git(repo_path, "commit", "-q", "-m", "Add dev_only.txt on dev")
    dev_sha = _git(repo_path, "rev-parse", "HEAD")

    _git(repo_path, "checkout", "-q", "main")

    return {
        "path": repo_path,
        "url": str(repo_path),
        "main_sha": main_sha,
        "tag_sha": main_sha,
        "dev_sha": dev_sha,
        "files": files,
    }


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for a FetchConfig rooted in tmp_path with fast, no-retry defaults."""

    def _make(**overrides) -> FetchConfig:
        values = {
            "output_root": tmp_path / "out",
            "scratch_root": tmp_path / "scratch",
            "timeout_ms": 30_000,
            "retries": 0,
            "retry_backoff_ms": 0,
        }
        values.update(overrides)
        return FetchConfig(**values)

    return _make
