"""Git invocation with per-attempt timeout, retries and exponential backoff."""
import logging
import os
import subprocess
import threading
import time
from pathlib import Path
from typing import Optional, Sequence

from git_file_fetch.core.errors import FetchCancelledError, GitCommandError
from git_file_fetch.core.redact import redact_secrets

logger = logging.getLogger(__name__)

# How often a running git child checks the cancel event (seconds)
_POLL_INTERVAL = 0.1

# Inherited from a calling git process (e.g. inside a hook); they would
# point our git at the caller's repository instead of the scratch one
_REPO_ENV_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
    "GIT_COMMON_DIR",
    "GIT_NAMESPACE",
    "GIT_PREFIX",
)


def _wait(seconds: float, cancel_event: Optional[threading.Event]) -> bool:
    """Sleep for ``seconds``; return True if the cancel event fired first."""
    if cancel_event is None:
        time.sleep(seconds)
        return False
    return cancel_event.wait(seconds)


def _invoke(
    cmd: Sequence[str],
    cwd: Optional[Path],
    timeout_s: float,
    cancel_event: Optional[threading.Event],
) -> bytes:
    """Run one git process and return its stdout.

    Raises:
        subprocess.CalledProcessError: Non-zero exit status.
        subprocess.TimeoutExpired: The process outlived ``timeout_s`` and was killed.
        FetchCancelledError: The cancel event was set while git was running.
        OSError: The executable could not be started.
    """
    env = {k: v for k, v in os.environ.items() if k not in _REPO_ENV_VARS}
    env["GIT_TERMINAL_PROMPT"] = "0"
    deadline = time.monotonic() + timeout_s
    with subprocess.Popen(
        list(cmd),
        cwd=cwd,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    ) as proc:
        while True:
            remaining = deadline - time.monotonic()
            try:
                stdout, stderr = proc.communicate(timeout=max(0.0, min(_POLL_INTERVAL, remaining)))
                break
            except subprocess.TimeoutExpired:
                if cancel_event is not None and cancel_event.is_set():
                    proc.kill()
                    proc.communicate()
                    raise FetchCancelledError(f"Cancelled while running {cmd[0]} {cmd[1]}")
                if time.monotonic() >= deadline:
                    proc.kill()
                    proc.communicate()
                    raise subprocess.TimeoutExpired(list(cmd), timeout_s)

    if proc.returncode != 0:
        raise subprocess.CalledProcessError(proc.returncode, list(cmd), stdout, stderr)
    return stdout


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        return stderr or f"exit status {exc.returncode}"
    if isinstance(exc, subprocess.TimeoutExpired):
        return f"timed out after {int(exc.timeout * 1000)}ms"
    return str(exc)


def run_git_with_retry(
    args: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    timeout_ms: int,
    retries: int,
    backoff_ms: int,
    git_executable: str = "git",
    cancel_event: Optional[threading.Event] = None,
) -> bytes:
    """Run ``git <args>`` up to ``retries + 1`` times.

    After failed attempt ``n`` (0-based, not the last one) waits
    ``backoff_ms * 2**n`` milliseconds. The wait returns early and raises
    ``FetchCancelledError`` when ``cancel_event`` is set.

    Returns:
        Raw stdout bytes of the successful attempt.

    Raises:
        GitCommandError: Every attempt failed; carries the last failure.
        FetchCancelledError: The run was cancelled.
    """
    cmd = [git_executable, *args]
    printable = redact_secrets(" ".join(args))
    last_error: Optional[Exception] = None

    for attempt in range(retries + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError(f"Cancelled before git {printable}")
        try:
            logger.debug(f"Running git {printable} (attempt {attempt + 1} of {retries + 1})")
            return _invoke(cmd, cwd, timeout_ms / 1000, cancel_event)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            last_error = e
            if attempt < retries:
                delay_ms = backoff_ms * 2 ** attempt
                logger.warning(
                    f"git {printable} failed (attempt {attempt + 1} of {retries + 1}). "
                    f"Retrying in {delay_ms}ms..."
                )
                if _wait(delay_ms / 1000, cancel_event):
                    raise FetchCancelledError(f"Cancelled while waiting to retry git {printable}")

    raise GitCommandError(args, redact_secrets(_describe_failure(last_error))) from last_error
