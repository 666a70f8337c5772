"""Manifest of fetched files: provenance for audit and reproduction."""
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ManifestEntry(BaseModel):
    """One recorded fetch.

    Captures what was requested (repo, ref, file_path), where it went
    (dest_path) and the immutable commit the content was read from.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "repo": "https://github.com/user/repo.git",
                "ref": "main",
                "filePath": "src/utils/logger.ts",
                "destPath": "src/utils/logger.ts",
                "commitSha": "abc123def456abc123def456abc123def456abc1",
            }
        },
    )

    repo: str = Field(..., description="Source repository URL")
    ref: str = Field(..., description="Requested branch/tag/commit")
    file_path: str = Field(..., alias="filePath", description="POSIX path in the source tree")
    dest_path: str = Field(..., alias="destPath", description="Local path relative to the output root")
    commit_sha: str = Field(..., alias="commitSha", description="Resolved immutable commit SHA")
    comment: Optional[str] = Field(default=None, description="Free-text annotation")

    @field_validator("commit_sha")
    @classmethod
    def validate_commit_sha(cls, v: str) -> str:
        """Ensure commit_sha looks like a git object id (SHA-1 or SHA-256)."""
        if len(v) < 7 or len(v) > 64:
            raise ValueError(f"commitSha must be 7-64 hex characters; got '{v}' (len={len(v)})")
        if not all(c in "0123456789abcdef" for c in v.lower()):
            raise ValueError(f"commitSha must be hexadecimal; got '{v}'")
        return v

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ManifestStore:
    """JSON array on disk, rewritten in full on every append.

    Reads are best-effort: a missing, malformed or non-array file is
    treated as empty. Existing elements are written back verbatim, so
    hand-edited or foreign entries survive an append.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def read_raw(self) -> List[Any]:
        if not self.path.exists():
            return []
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable manifest {self.path}: {e}")
            return []
        return parsed if isinstance(parsed, list) else []

    def entries(self) -> List[ManifestEntry]:
        """Return the entries that validate, in file order."""
        entries = []
        for index, item in enumerate(self.read_raw()):
            try:
                entries.append(ManifestEntry.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid manifest entry #{index} in {self.path}: {e}")
        return entries

    def append(self, entry: ManifestEntry) -> None:
        existing = self.read_raw()
        existing.append(entry.to_dict())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(existing, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.debug(f"Manifest {self.path} now has {len(existing)} entries")
