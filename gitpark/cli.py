"""
Command-line interface for gitpark.

Operates on the current working directory:

    gitpark --mode out     park nested metadata in the archive
    gitpark --mode in      restore parked metadata
    gitpark --mode status  show where the metadata currently is
"""

import sys
from pathlib import Path

import click

from gitpark import __version__
from gitpark.core.config import Config
from gitpark.core.exceptions import ParkError
from gitpark.core.results import OperationReport, WorkingState
from gitpark.utils.logging_config import setup_logging
from gitpark.utils.validation import validate_root


def _info(message: str) -> None:
    click.echo(message)


def _success(message: str) -> None:
    click.secho(message, fg="green")


def _warn(message: str) -> None:
    click.secho(message, fg="yellow")


def _fail(message: str) -> None:
    click.secho(message, fg="red", err=True)


def _report_item_problems(report: OperationReport) -> None:
    for failure in report.failures:
        _warn(f"  failed: {failure.path} ({failure.reason})")
    for warning in report.warnings:
        _warn(f"  cleanup: {warning.path} ({warning.reason}); clean up manually")


def _run_out(archiver) -> int:
    _info(f"Extracting nested VCS metadata from {archiver.root}")
    report = archiver.extract()

    if report.is_noop:
        _success("No nested VCS metadata found; nothing to do.")
        return 0

    for entry in report.entries:
        _info(f"  {entry}")
    _report_item_problems(report)

    if not report.succeeded:
        _fail("Extract failed: no metadata could be moved.")
        return 1

    pack = report.get_phase("pack")
    stage = report.get_phase("stage")
    summary = (
        f"Parked {stage.metrics['moved']} entries in {archiver.archive_path.name} "
        f"({pack.metrics['files_packed']} files, {pack.metrics['compressed_size']:,} bytes)"
    )
    if report.failures:
        _warn(f"Partially extracted: {summary}; {len(report.failures)} entries were left in place.")
    else:
        _success(summary)
    return 0


def _run_in(archiver) -> int:
    _info(f"Restoring nested VCS metadata into {archiver.root}")
    report = archiver.restore()

    _report_item_problems(report)

    restore = report.get_phase("restore")
    summary = (
        f"Restored {restore.metrics['files_restored']} files "
        f"and {restore.metrics['dirs_created']} directories"
    )
    if report.failures:
        _warn(
            f"Partially restored: {summary}; {len(report.failures)} entries failed "
            f"and {archiver.archive_path.name} was kept."
        )
    else:
        _success(summary)
    return 0


def _run_status(archiver) -> int:
    state = archiver.state()
    messages = {
        WorkingState.RESTORED: "restored (metadata in place, no archive)",
        WorkingState.EXTRACTED: f"extracted (metadata parked in {archiver.archive_path.name})",
        WorkingState.INCONSISTENT: (
            f"inconsistent (staging area {archiver.staging_path.name} present; "
            "a previous run did not finish)"
        ),
    }
    if state == WorkingState.INCONSISTENT:
        _warn(messages[state])
    else:
        _info(messages[state])
    return 0


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--mode", "-m",
    type=click.Choice(["out", "in", "status"]),
    required=True,
    help="out: park nested metadata; in: restore it; status: show current state"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
def cli(mode, verbose, log_file):
    """
    Park nested VCS metadata in a sidecar archive and restore it.

    Works on the current directory. Metadata directly in the current
    directory is never touched.
    """
    settings = Config.load_from_env()
    runtime = settings.runtime
    runtime.verbose = verbose or runtime.verbose
    runtime.log_file = log_file or runtime.log_file

    setup_logging(
        level=runtime.log_level,
        log_file=Path(runtime.log_file) if runtime.log_file else None,
    )

    root = Path.cwd()
    is_valid, error = validate_root(root)
    if not is_valid:
        _fail(f"Error: {error}")
        sys.exit(1)

    from gitpark.archive.archiver import Archiver

    handlers = {
        "out": _run_out,
        "in": _run_in,
        "status": _run_status,
    }

    try:
        archiver = Archiver(root, settings.park)
        exit_code = handlers[mode](archiver)
    except ParkError as e:
        _fail(f"Error: {e}")
        sys.exit(1)

    sys.exit(exit_code)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
