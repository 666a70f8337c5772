"""Logging setup for the git-file-fetch CLI."""
import logging
import sys

from git_file_fetch.core.redact import redact_secrets

LOGGER_NAME = "git_file_fetch"


class RedactingFilter(logging.Filter):
    """Strip URL credentials from every record before it is emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_secrets(record.getMessage())
        record.args = None
        return True


def configure_logging(quiet: bool = False, verbose: bool = False) -> logging.Logger:
    """Attach a single redacting stderr handler to the package logger.

    ``quiet`` keeps errors only, ``verbose`` enables debug traces. Calling
    this again replaces the previous handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.addFilter(RedactingFilter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
