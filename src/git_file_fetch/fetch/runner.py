"""Run orchestrator: fetch a batch of refs, one isolated item at a time."""
import json
import logging
import tempfile
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from git_file_fetch.config import FetchConfig
from git_file_fetch.core.errors import FetchCancelledError, error_code
from git_file_fetch.core.redact import redact_secrets
from git_file_fetch.fetch.manifest import ManifestEntry, ManifestStore
from git_file_fetch.fetch.reference import RemoteFile, parse_ref
from git_file_fetch.fetch.retriever import fetch_file_minimal
from git_file_fetch.fetch.sources import RefSpec
from git_file_fetch.fetch.writer import write_dest_file

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "git-file-fetch-"


class FetchResult(BaseModel):
    """Outcome of one requested ref. Never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    input: str
    success: bool
    dest_file: Optional[str] = Field(default=None, alias="destFile")
    wrote: Optional[bool] = Field(default=None)
    skipped: Optional[bool] = Field(default=None)
    remote: Optional[RemoteFile] = Field(default=None)
    error_code: Optional[str] = Field(default=None, alias="errorCode")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")


class RunReport(BaseModel):
    """All per-item results of one run, in input order."""

    results: List[FetchResult] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(not r.success for r in self.results)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Pretty-printed report with credentials redacted."""
        return redact_secrets(json.dumps(self.to_dict(), indent=2))


def fetch_one(
    spec: RefSpec,
    config: FetchConfig,
    manifest: ManifestStore,
    cancel_event: Optional[threading.Event] = None,
) -> FetchResult:
    """Parse, retrieve, write and record one ref inside its own scratch dir.

    Any failure is returned as an unsuccessful FetchResult. Only
    FetchCancelledError propagates, since it ends the whole run.
    """
    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=config.scratch_root) as tmpdir:
        try:
            remote = parse_ref(spec.raw)
            if spec.dest:
                remote.dest_path = spec.dest
            retrieved = fetch_file_minimal(remote, Path(tmpdir), config, cancel_event)
            remote.commit_sha = retrieved.commit_sha
            outcome = write_dest_file(retrieved.contents, remote, config)
            if outcome.wrote and config.records_manifest:
                manifest.append(ManifestEntry.model_validate(remote.to_dict()))
            return FetchResult(
                input=spec.raw,
                success=True,
                dest_file=str(outcome.dest_file),
                wrote=outcome.wrote,
                skipped=outcome.skipped,
                remote=remote,
            )
        except FetchCancelledError:
            raise
        except Exception as e:
            code = error_code(e)
            message = redact_secrets(str(e))
            logger.error(f"Error: {code}: {message}")
            return FetchResult(
                input=spec.raw,
                success=False,
                error_code=code,
                error_message=message,
            )


def run_fetch(
    refs: Iterable[Union[str, RefSpec]],
    config: FetchConfig,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """Fetch every ref in order and collect one result per ref.

    A failing item never stops the items after it; ``report.failed`` is
    True if any of them failed.

    Args:
        refs: Raw ``<repo>@<ref>:<path>`` strings or RefSpec values
        config: Run configuration
        cancel_event: Optional event; when set, the current git step or
            backoff wait is interrupted and FetchCancelledError is raised

    Returns:
        RunReport with results in input order
    """
    manifest = ManifestStore(config.manifest_path)
    report = RunReport()
    if config.scratch_root is not None:
        Path(config.scratch_root).mkdir(parents=True, exist_ok=True)

    for item in refs:
        spec = item if isinstance(item, RefSpec) else RefSpec(raw=item)
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError(f"Run cancelled before {redact_secrets(spec.raw)}")
        report.results.append(fetch_one(spec, config, manifest, cancel_event))

    logger.debug(
        f"Run finished: {report.succeeded_count} succeeded, "
        f"{len(report.results) - report.succeeded_count} failed"
    )
    return report
