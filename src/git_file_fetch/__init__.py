"""git-file-fetch: fetch single files from remote git repos with provenance."""
from git_file_fetch.config import FetchConfig
from git_file_fetch.fetch import RefSpec, RunReport, parse_ref, run_fetch

__version__ = "0.1.0"

__all__ = ["FetchConfig", "RefSpec", "RunReport", "parse_ref", "run_fetch", "__version__"]
