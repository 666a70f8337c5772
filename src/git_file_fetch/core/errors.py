"""Core exception types for git-file-fetch.

Every error that can end a single fetch carries a stable ``code`` so that
callers (the CLI JSON report in particular) can branch on the kind of
failure without parsing messages.
"""
from typing import Sequence

from git_file_fetch.core.redact import redact_secrets

UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GitFileFetchError(Exception):
    """Base exception for all git-file-fetch errors."""

    code = UNKNOWN_ERROR


class InvalidRefFormatError(GitFileFetchError):
    """Raised when a reference string lacks the ``<repo>@<ref>:<path>`` shape."""

    code = "INVALID_REF_FORMAT"

    def __init__(self, ref: str, reason: str = ""):
        self.ref = ref
        message = f"Invalid ref '{ref}'. Expected '<repo.git>@<ref>:<path>'"
        if reason:
            message += f" ({reason})"
        super().__init__(redact_secrets(message))


class InvalidPathError(GitFileFetchError):
    """Raised when the file path inside a reference is unsafe."""

    code = "INVALID_PATH"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class SourceFileNotFoundError(GitFileFetchError):
    """Raised when the path does not exist at the resolved revision."""

    code = "SOURCE_FILE_NOT_FOUND"

    def __init__(self, file_path: str, repo: str, ref: str, detail: str = ""):
        self.file_path = file_path
        self.repo = repo
        self.ref = ref
        message = f"Source file '{file_path}' not found in {redact_secrets(f'{repo}@{ref}')}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class FileTooLargeError(GitFileFetchError):
    """Raised when fetched content exceeds the configured byte ceiling."""

    code = "FILE_TOO_LARGE"

    def __init__(self, file_path: str, size: int, limit: int):
        self.file_path = file_path
        self.size = size
        self.limit = limit
        super().__init__(
            f"Source file '{file_path}' is too large ({size} bytes). "
            f"Limit is {limit} bytes. Use --max-bytes to adjust."
        )


class DestOutOfBoundsError(GitFileFetchError):
    """Raised when a destination resolves outside the output root."""

    code = "DEST_OUT_OF_BOUNDS"

    def __init__(self, dest_path: str):
        self.dest_path = dest_path
        super().__init__(f"Destination escapes output directory: '{dest_path}'")


class GitCommandError(GitFileFetchError):
    """Raised when a git invocation fails after all retries."""

    code = "GIT_COMMAND_FAILED"

    def __init__(self, args: Sequence[str], detail: str):
        self.args_list = list(args)
        self.detail = detail
        super().__init__(redact_secrets(f"git {' '.join(args)} failed: {detail}"))


class FetchCancelledError(GitFileFetchError):
    """Raised when a run is cancelled through its cancel event."""

    code = "CANCELLED"


class ConfigError(GitFileFetchError):
    """Base for structured-source (config file) failures."""

    code = "CONFIG_ERROR"


class ConfigNotFoundError(ConfigError):
    code = "CONFIG_NOT_FOUND"


class ConfigParseError(ConfigError):
    code = "CONFIG_PARSE_ERROR"


class ConfigInvalidError(ConfigError):
    code = "CONFIG_INVALID"


def error_code(exc: BaseException) -> str:
    """Return the taxonomy code for ``exc`` (``UNKNOWN_ERROR`` if uncategorized)."""
    if isinstance(exc, GitFileFetchError):
        return exc.code
    return UNKNOWN_ERROR
