"""git-file-fetch CLI - fetch single files from remote git repositories."""
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from git_file_fetch import config as cfg
from git_file_fetch.config import FetchConfig
from git_file_fetch.core.errors import ConfigError
from git_file_fetch.core.redact import redact_secrets
from git_file_fetch.fetch import ManifestStore, RefSpec, load_config_file, run_fetch
from git_file_fetch.logging_config import configure_logging

logger = logging.getLogger("git_file_fetch")


def _under(base: Path, value: Optional[Path]) -> Optional[Path]:
    if value is None:
        return None
    return (base / value).resolve()


@click.group()
@click.version_option(package_name="git-file-fetch")
def main():
    """git-file-fetch - fetch specific files from remote git repos.

    Fetched files are tracked in a manifest (.git-remote-files.json) with the
    resolved commit, so they can be audited and reproduced later.
    """
    pass


@main.command()
@click.argument("refs", nargs=-1)
@click.option("--dry-run", is_flag=True, help="Simulate only; do not write files or update the manifest")
@click.option("--force", is_flag=True, help="Overwrite existing local files when present")
@click.option(
    "--out",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory for fetched files (default: --cwd or current directory)",
)
@click.option(
    "--cwd",
    "base_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Resolve relative --out, --manifest and --config paths against this directory",
)
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Manifest path (default: <out>/{cfg.DEFAULT_MANIFEST_FILE})",
)
@click.option(
    "--max-bytes",
    type=click.IntRange(min=0),
    envvar=cfg.ENV_MAX_BYTES,
    default=cfg.DEFAULT_MAX_BYTES,
    show_default=True,
    help="Maximum allowed file size in bytes",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with an array of refs (strings or { repo, ref, path, dest? } objects)",
)
@click.option(
    "--timeout-ms",
    type=click.IntRange(min=1),
    envvar=cfg.ENV_TIMEOUT_MS,
    default=cfg.DEFAULT_TIMEOUT_MS,
    show_default=True,
    help="Timeout for each git operation in milliseconds",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    envvar=cfg.ENV_RETRIES,
    default=cfg.DEFAULT_RETRIES,
    show_default=True,
    help="Retries for transient git failures",
)
@click.option(
    "--retry-backoff-ms",
    type=click.IntRange(min=0),
    envvar=cfg.ENV_RETRY_BACKOFF_MS,
    default=cfg.DEFAULT_RETRY_BACKOFF_MS,
    show_default=True,
    help="Initial backoff between retries in milliseconds (doubles each retry)",
)
@click.option(
    "--git",
    "git_executable",
    envvar=cfg.ENV_GIT_EXECUTABLE,
    default="git",
    show_default=True,
    help="git executable to run",
)
@click.option("--eject", "--no-manifest", "eject", is_flag=True, help="Do not update the manifest; write files only")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output with per-item results")
@click.option("--quiet", is_flag=True, help="Suppress normal logs (errors still printed)")
@click.option("--verbose", is_flag=True, help="Print verbose logs for debugging")
@click.pass_context
def fetch(
    ctx: click.Context,
    refs: Tuple[str, ...],
    dry_run: bool,
    force: bool,
    out: Optional[Path],
    base_dir: Optional[Path],
    manifest: Optional[Path],
    max_bytes: int,
    config_file: Optional[Path],
    timeout_ms: int,
    retries: int,
    retry_backoff_ms: int,
    git_executable: str,
    eject: bool,
    json_output: bool,
    quiet: bool,
    verbose: bool,
):
    """Fetch files given as '<repo.git>@<ref>:<path>' and record them.

    Examples:
        git-file-fetch fetch "https://github.com/user/repo.git@main:src/utils/logger.ts"
        git-file-fetch fetch "https://github.com/user/repo.git@v1.2.3:LICENSE" --force
        git-file-fetch fetch --out third_party "https://github.com/user/repo.git@main:tools/script.sh"
        git-file-fetch fetch --config refs.json --out vendor --json

    Exit codes:
        0: Success
        1: One or more fetches failed (or the config file is unusable)
        2: Invalid usage (no refs provided)
    """
    configure_logging(quiet=quiet or json_output, verbose=verbose)

    base = (base_dir or Path.cwd()).resolve()
    output_root = _under(base, out) or base

    specs = [RefSpec(raw=r) for r in refs]
    if config_file is not None:
        try:
            specs.extend(load_config_file(_under(base, config_file)))
        except ConfigError as e:
            logger.error(f"Error: {e.code}: {e}")
            sys.exit(1)

    if not specs:
        click.echo(ctx.get_help())
        sys.exit(2)

    run_config = FetchConfig(
        output_root=output_root,
        manifest_path=_under(base, manifest),
        max_bytes=max_bytes,
        timeout_ms=timeout_ms,
        retries=retries,
        retry_backoff_ms=retry_backoff_ms,
        dry_run=dry_run,
        force=force,
        eject=eject,
        git_executable=git_executable,
    )

    report = run_fetch(specs, run_config)

    if json_output:
        click.echo(report.to_json())
    elif not quiet:
        for result in report.results:
            if result.success:
                status = "[SKIPPED]" if result.skipped else "[OK]"
                click.echo(redact_secrets(f"{status} {result.input} -> {result.dest_file}"))
            else:
                click.echo(redact_secrets(f"[FAILED] {result.input}: {result.error_code}"))
        failed = len(report.results) - report.succeeded_count
        click.echo(f"{report.succeeded_count} fetched, {failed} failed")

    sys.exit(1 if report.failed else 0)


@main.command(name="list")
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(cfg.DEFAULT_MANIFEST_FILE),
    show_default=True,
    help="Manifest file to read",
)
@click.option("--json", "json_output", is_flag=True, help="Print the entries as a JSON array")
def list_entries(manifest: Path, json_output: bool):
    """List the files recorded in a manifest.

    Examples:
        git-file-fetch list
        git-file-fetch list --manifest vendor/.git-remote-files.json --json
    """
    configure_logging()
    entries = ManifestStore(manifest).entries()

    if json_output:
        click.echo(redact_secrets(json.dumps([e.to_dict() for e in entries], indent=2)))
        return

    if not entries:
        click.echo(f"No entries in {manifest}")
        return

    for entry in entries:
        click.echo(entry.dest_path)
        click.echo(redact_secrets(f"  Source: {entry.repo}@{entry.ref}:{entry.file_path}"))
        click.echo(f"  Commit: {entry.commit_sha[:12]}")
        if entry.comment:
            click.echo(f"  Comment: {entry.comment}")


if __name__ == "__main__":
    main()
