"""Single-file fetch engine: parsing, shallow retrieval, writing, manifest."""
from git_file_fetch.fetch.manifest import ManifestEntry, ManifestStore
from git_file_fetch.fetch.reference import RemoteFile, normalize_and_validate_relative_path, parse_ref
from git_file_fetch.fetch.retriever import RetrievedFile, fetch_file_minimal
from git_file_fetch.fetch.runner import FetchResult, RunReport, fetch_one, run_fetch
from git_file_fetch.fetch.sources import RefSpec, load_config_file
from git_file_fetch.fetch.writer import WriteOutcome, write_dest_file

__all__ = [
    "FetchResult",
    "ManifestEntry",
    "ManifestStore",
    "RefSpec",
    "RemoteFile",
    "RetrievedFile",
    "RunReport",
    "WriteOutcome",
    "fetch_file_minimal",
    "fetch_one",
    "load_config_file",
    "normalize_and_validate_relative_path",
    "parse_ref",
    "run_fetch",
    "write_dest_file",
]
