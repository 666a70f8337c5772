"""Run configuration for git-file-fetch.

The CLI builds one ``FetchConfig`` per run and passes it down explicitly;
no fetch component reads the process working directory or environment.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

DEFAULT_MANIFEST_FILE = ".git-remote-files.json"
DEFAULT_MAX_BYTES = 10_000_000  # ~10 MB
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_RETRIES = 2
DEFAULT_RETRY_BACKOFF_MS = 500

ENV_MAX_BYTES = "FETCH_GIT_FILE_MAX_BYTES"
ENV_TIMEOUT_MS = "FETCH_GIT_FILE_TIMEOUT_MS"
ENV_RETRIES = "FETCH_GIT_FILE_RETRIES"
ENV_RETRY_BACKOFF_MS = "FETCH_GIT_FILE_RETRY_BACKOFF_MS"
ENV_GIT_EXECUTABLE = "FETCH_GIT_FILE_GIT"


class FetchConfig(BaseModel):
    """Settings shared by every item of one run."""

    output_root: Path = Field(..., description="Directory fetched files are written under")
    manifest_path: Optional[Path] = Field(
        default=None,
        description=f"Manifest file (defaults to <output_root>/{DEFAULT_MANIFEST_FILE})",
    )
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, ge=0)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    retries: int = Field(default=DEFAULT_RETRIES, ge=0)
    retry_backoff_ms: int = Field(default=DEFAULT_RETRY_BACKOFF_MS, ge=0)
    dry_run: bool = Field(default=False, description="Simulate only; no files or manifest written")
    force: bool = Field(default=False, description="Overwrite existing destination files")
    eject: bool = Field(default=False, description="Write files but never update the manifest")
    git_executable: str = Field(default="git")
    scratch_root: Optional[Path] = Field(
        default=None,
        description="Parent for per-item scratch directories (system temp dir if unset)",
    )

    @model_validator(mode="after")
    def _default_manifest_path(self) -> "FetchConfig":
        if self.manifest_path is None:
            self.manifest_path = self.output_root / DEFAULT_MANIFEST_FILE
        return self

    @property
    def records_manifest(self) -> bool:
        """True when successful writes should be recorded in the manifest."""
        return not (self.dry_run or self.eject)
