"""CLI entry point: command definitions using Click.

Commands:
    init     Generate a template config file
    check    Fail when pmd.xml holds violations at or above a priority
"""

import logging
import sys

import click

from pmd_report import __version__


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load config. Exits on error."""
    from pmd_report.config import ConfigError, load

    try:
        return load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


class _EchoHandler(logging.Handler):
    """Send log records through click.echo so they follow the current stdout."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record))
        except Exception:
            self.handleError(record)


def _setup_logging(verbose: bool) -> None:
    handler = _EchoHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("pmd_report")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file (default: ./pmd-report.yaml if present).")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging, including violations below the threshold.")
@click.version_option(__version__, prog_name="pmd-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """PMD report tool: gate a build on PMD results."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="pmd-report.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template pmd-report.yaml file."""
    from pmd_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

@cli.command("check")
@click.option("--target-dir", "target_directory", default=None,
              help="Directory containing the results file (overrides config).")
@click.option("--results-file", default=None,
              help="Results file name inside the target directory (overrides config).")
@click.option("--failure-priority", type=int, default=None,
              help="Fail on violations with a priority <= this value (overrides config).")
@click.option("--skip", is_flag=True, default=False,
              help="Skip the check entirely.")
@click.option("--no-fail", is_flag=True, default=False,
              help="Report violations without failing.")
@click.pass_context
def check_command(ctx: click.Context, target_directory: str | None, results_file: str | None,
                  failure_priority: int | None, skip: bool, no_fail: bool) -> None:
    """Check target/pmd.xml against the failure priority."""
    from pmd_report.check import (
        MAX_PRIORITY,
        MIN_PRIORITY,
        ResultsFileError,
        ViolationCheckFailure,
        ViolationChecker,
    )

    if skip:
        click.echo("PMD check skipped.", err=True)
        return

    config = _load_config(ctx)
    if config.skip:
        click.echo("PMD check skipped.", err=True)
        return

    verbose = ctx.obj["verbose"] or config.verbose
    _setup_logging(verbose)

    if target_directory is not None:
        config.target_directory = target_directory
    if results_file is not None:
        config.results_file = results_file
    if failure_priority is not None:
        if not MAX_PRIORITY <= failure_priority <= MIN_PRIORITY:
            raise click.BadParameter(
                f"must be between {MAX_PRIORITY} and {MIN_PRIORITY}",
                param_hint="'--failure-priority'",
            )
        config.failure_priority = failure_priority

    checker = ViolationChecker(
        verbose=verbose,
        fail_on_violation=config.fail_on_violation and not no_fail,
    )

    try:
        failed = checker.check_pmd(
            config.target_directory, config.failure_priority, config.results_file
        )
    except ViolationCheckFailure as exc:
        click.echo(f"Check failed: {exc}", err=True)
        sys.exit(1)
    except ResultsFileError as exc:
        click.echo(f"Results error: {exc}", err=True)
        sys.exit(1)

    if failed:
        click.echo("PMD violations found (not failing: --no-fail or fail_on_violation is off).",
                   err=True)
