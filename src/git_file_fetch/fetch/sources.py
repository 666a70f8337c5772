"""Structured source of refs: a JSON array of strings or objects.

Each element is either a raw ``<repo>@<ref>:<path>`` string or an object
``{"repo": ..., "ref": ..., "path": ..., "dest": ...}``. Both shapes are
normalized to ``RefSpec`` before the fetch pipeline sees them.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictStr, ValidationError

from git_file_fetch.core.errors import ConfigInvalidError, ConfigNotFoundError, ConfigParseError
from git_file_fetch.fetch.reference import DEFAULT_REF


@dataclass(frozen=True)
class RefSpec:
    """A raw reference string plus an optional destination override."""

    raw: str
    dest: Optional[str] = None


class ConfigEntry(BaseModel):
    """Object form of a config entry."""

    model_config = ConfigDict(extra="ignore")

    repo: StrictStr
    ref: Optional[StrictStr] = None
    path: StrictStr = Field(..., validation_alias=AliasChoices("path", "filePath"))
    dest: Optional[StrictStr] = Field(default=None, validation_alias=AliasChoices("dest", "destPath"))

    def to_ref_spec(self) -> RefSpec:
        return RefSpec(raw=f"{self.repo}@{self.ref or DEFAULT_REF}:{self.path}", dest=self.dest)


def parse_config_entries(parsed: object) -> List[RefSpec]:
    """Normalize an already-decoded config document.

    Raises:
        ConfigInvalidError: If it is not an array, or an element matches
            neither the string nor the object shape.
    """
    if not isinstance(parsed, list):
        raise ConfigInvalidError("Config must be a JSON array of strings or objects")

    specs = []
    for index, item in enumerate(parsed):
        if isinstance(item, str):
            specs.append(RefSpec(raw=item))
        elif isinstance(item, dict):
            try:
                specs.append(ConfigEntry.model_validate(item).to_ref_spec())
            except ValidationError as e:
                raise ConfigInvalidError(
                    f"Config entry #{index}: object entries must include string fields "
                    f"{{ repo, path }} ({e.error_count()} validation errors)"
                ) from e
        else:
            raise ConfigInvalidError(
                f"Config entry #{index}: unsupported item type {type(item).__name__}"
            )
    return specs


def load_config_file(config_path: Path) -> List[RefSpec]:
    """Load refs from a JSON config file.

    Raises:
        ConfigNotFoundError: File does not exist
        ConfigParseError: File is not valid JSON
        ConfigInvalidError: JSON has the wrong shape
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {config_path}")
    try:
        parsed = json.loads(config_path.read_text(encoding="utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise ConfigParseError(f"Failed to parse JSON config at {config_path}: {e}") from e
    return parse_config_entries(parsed)
