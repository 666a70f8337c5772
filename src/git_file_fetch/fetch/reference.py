"""Reference parsing: ``<repo>@<ref>:<path>`` -> RemoteFile."""
import os
import posixpath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from git_file_fetch.core.errors import InvalidPathError, InvalidRefFormatError

DEFAULT_REF = "main"


class RemoteFile(BaseModel):
    """One file requested from a remote repository.

    ``file_path`` is the POSIX path inside the source tree; ``dest_path`` is
    the same path with platform separators, used when no destination
    override is given. ``commit_sha`` is filled in once the ref is resolved.
    """

    model_config = ConfigDict(populate_by_name=True)

    repo: str = Field(..., description="Origin repository URL or path")
    ref: str = Field(default=DEFAULT_REF, description="Requested branch/tag/commit")
    file_path: str = Field(..., alias="filePath")
    dest_path: str = Field(..., alias="destPath")
    commit_sha: Optional[str] = Field(default=None, alias="commitSha")
    comment: Optional[str] = Field(default=None)

    @property
    def origin(self) -> str:
        return f"{self.repo}@{self.ref}"

    def to_dict(self) -> dict:
        """Convert to the camelCase dictionary used on disk and in reports."""
        return self.model_dump(by_alias=True, exclude_none=True)


def normalize_and_validate_relative_path(input_path: str) -> str:
    """Normalize a source-tree path to POSIX form and reject unsafe ones.

    Backslashes become forward slashes and ``.``/empty segments collapse.
    ``..`` is never resolved away: ``a/b/../c`` becomes ``a/c``, but any
    result that still has a ``..`` segment is rejected. The check is per
    segment, so a name that merely begins with ``..`` (``..config``) is
    accepted even though it starts with the same two characters.

    Raises:
        InvalidPathError: On traversal, absolute or home-relative paths,
            NUL bytes, or a path that names no file at all.
    """
    forward = input_path.replace("\\", "/")
    normalized = posixpath.normpath(forward) if forward else "."

    if ".." in normalized.split("/"):
        raise InvalidPathError(input_path, "parent directory traversal is not allowed.")
    if normalized.startswith("/") or normalized.startswith("~"):
        raise InvalidPathError(input_path, "absolute paths are not allowed.")
    if "\0" in normalized:
        raise InvalidPathError(input_path, "null byte is not allowed.")
    if normalized == ".":
        raise InvalidPathError(input_path, "path must name a file.")
    return normalized


def to_native_path(posix_path: str) -> str:
    """Convert a validated POSIX relative path to the platform separator."""
    return os.sep.join(posix_path.split("/"))


def parse_ref(text: str) -> RemoteFile:
    """Parse ``<repo>@<ref>:<path>`` into a RemoteFile.

    The last ``:`` splits off the path and the last ``@`` before it splits
    off the ref, because repo URLs may themselves contain both characters
    (``https://``, ``git@host:org/repo.git``, ``user:token@host``).

    Examples:
        https://github.com/org/repo.git@v1.2:src/a.py -> repo=https://github.com/org/repo.git, ref=v1.2
        git@github.com:org/repo.git@main:LICENSE -> repo=git@github.com:org/repo.git, ref=main
        /srv/repo:README.md -> repo=/srv/repo, ref=main

    Raises:
        InvalidRefFormatError: If there is no ``:`` at all, or the repo or
            ref starts with ``-``.
        InvalidPathError: If the embedded path is unsafe.
    """
    idx = text.rfind(":")
    if idx == -1:
        raise InvalidRefFormatError(text)

    repo_ref = text[:idx]
    raw_path = text[idx + 1:]
    at = repo_ref.rfind("@")
    if at == -1:
        repo, ref = repo_ref, DEFAULT_REF
    else:
        repo, ref = repo_ref[:at], repo_ref[at + 1:]

    # git would parse these as options, e.g. --upload-pack=<cmd>
    if repo.startswith("-"):
        raise InvalidRefFormatError(text, "repo must not start with '-'")
    if ref.startswith("-"):
        raise InvalidRefFormatError(text, "ref must not start with '-'")

    file_path = normalize_and_validate_relative_path(raw_path)
    return RemoteFile(
        repo=repo,
        ref=ref,
        file_path=file_path,
        dest_path=to_native_path(file_path),
    )
