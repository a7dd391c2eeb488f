from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from pmdgate.config import CheckConfig, load_config
from pmdgate.constants import EXIT_CHECK_FAILURE, EXIT_INTERNAL_ERROR, EXIT_SUCCESS
from pmdgate.engine import CPD_CHECK, PMD_CHECK, CheckKind, execute_check
from pmdgate.errors import CheckExecutionError, CheckFailure

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _version_callback(value: bool) -> None:
    if value:
        from pmdgate import __version__

        typer.echo(f"pmdgate {__version__}")
        raise typer.Exit()


app = typer.Typer(add_completion=False, help="Fail builds on PMD violations and CPD duplications")


@app.callback(invoke_without_command=True)
def _main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit."
    ),
) -> None:
    pass


_TARGET_DIR = typer.Option(None, "--target-dir", help="Build output directory holding pmd.xml / cpd.xml")
_CONFIG = typer.Option(None, "--config", exists=True, file_okay=True, dir_okay=False, help="YAML config file")
_FAIL_ON_VIOLATION = typer.Option(
    None, "--fail-on-violation/--no-fail-on-violation", help="Fail the build when failures are found"
)
_AGGREGATE = typer.Option(None, "--aggregate/--no-aggregate", help="Check one aggregated report at the root")
_EXECUTION_ROOT = typer.Option(
    None, "--execution-root/--not-execution-root", help="Whether this invocation is the aggregation root"
)
_VERBOSE = typer.Option(None, "--verbose/--quiet", help="Print every warning and failure")
_PRINT_FAILING = typer.Option(
    None, "--print-failing-errors/--no-print-failing-errors", help="Print failures as they are found"
)
_EXCLUDE_FILE = typer.Option(None, "--exclude-from-failure-file", help="Classes/rules excluded from failures")
_LANGUAGE = typer.Option(None, "--language", help="Language of the project being checked")
_FAILURE_PRIORITY = typer.Option(None, "--failure-priority", help="Highest priority value that fails the build")
_SKIP = typer.Option(None, "--skip/--no-skip", help="Skip the check entirely")
_LOG_LEVEL = typer.Option("INFO", "--log-level", help="DEBUG | INFO | WARNING | ERROR")


@contextmanager
def _cli_logging(level: str) -> Iterator[None]:
    """Send ``pmdgate`` log records to stdout for one command, then restore the logger."""
    normalized = level.strip().upper()
    if normalized not in _LOG_LEVELS:
        raise typer.BadParameter(f"Unsupported log level: {level}", param_hint="--log-level")

    logger = logging.getLogger("pmdgate")
    previous_level, previous_propagate = logger.level, logger.propagate
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(normalized)
    logger.propagate = False
    try:
        yield
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        logger.propagate = previous_propagate


def _resolve_config(config_path: Path | None, kind: CheckKind, overrides: dict[str, object]) -> CheckConfig:
    base = load_config(config_path.resolve(), check=kind.name) if config_path is not None else CheckConfig()
    values = dict(overrides)
    target = values.pop("target_directory", None)
    if isinstance(target, Path):
        values["target_directory"] = target.resolve()
    return base.with_overrides(**values)


def _run_kind(kind: CheckKind, config_path: Path | None, overrides: dict[str, object]) -> int:
    try:
        config = _resolve_config(config_path, kind, overrides)
        execute_check(kind, config)
    except CheckFailure as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        return EXIT_CHECK_FAILURE
    except CheckExecutionError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        return EXIT_INTERNAL_ERROR
    return EXIT_SUCCESS


def _run(
    runs: list[tuple[CheckKind, dict[str, object]]],
    *,
    config_path: Path | None,
    log_level: str,
) -> None:
    exit_code = EXIT_SUCCESS
    with _cli_logging(log_level):
        for kind, overrides in runs:
            exit_code = max(exit_code, _run_kind(kind, config_path, overrides))
    raise typer.Exit(exit_code)


@app.command()
def check(
    target_dir: Path | None = _TARGET_DIR,
    config: Path | None = _CONFIG,
    fail_on_violation: bool | None = _FAIL_ON_VIOLATION,
    aggregate: bool | None = _AGGREGATE,
    execution_root: bool | None = _EXECUTION_ROOT,
    verbose: bool | None = _VERBOSE,
    print_failing_errors: bool | None = _PRINT_FAILING,
    exclude_from_failure_file: str | None = _EXCLUDE_FILE,
    language: str | None = _LANGUAGE,
    failure_priority: int | None = _FAILURE_PRIORITY,
    skip: bool | None = _SKIP,
    log_level: str = _LOG_LEVEL,
) -> None:
    """Fail when pmd.xml holds violations at or above the failure priority."""
    overrides: dict[str, object] = {
        "target_directory": target_dir,
        "fail_on_violation": fail_on_violation,
        "aggregate": aggregate,
        "execution_root": execution_root,
        "verbose": verbose,
        "print_failing_errors": print_failing_errors,
        "exclude_from_failure_file": exclude_from_failure_file,
        "language": language,
        "failure_priority": failure_priority,
        "skip": skip,
    }
    _run([(PMD_CHECK, overrides)], config_path=config, log_level=log_level)


@app.command("cpd-check")
def cpd_check(
    target_dir: Path | None = _TARGET_DIR,
    config: Path | None = _CONFIG,
    fail_on_violation: bool | None = _FAIL_ON_VIOLATION,
    aggregate: bool | None = _AGGREGATE,
    execution_root: bool | None = _EXECUTION_ROOT,
    verbose: bool | None = _VERBOSE,
    print_failing_errors: bool | None = _PRINT_FAILING,
    exclude_from_failure_file: str | None = _EXCLUDE_FILE,
    language: str | None = _LANGUAGE,
    skip: bool | None = _SKIP,
    log_level: str = _LOG_LEVEL,
) -> None:
    """Fail when cpd.xml reports duplicated code."""
    overrides: dict[str, object] = {
        "target_directory": target_dir,
        "fail_on_violation": fail_on_violation,
        "aggregate": aggregate,
        "execution_root": execution_root,
        "verbose": verbose,
        "print_failing_errors": print_failing_errors,
        "exclude_from_failure_file": exclude_from_failure_file,
        "language": language,
        "skip": skip,
    }
    _run([(CPD_CHECK, overrides)], config_path=config, log_level=log_level)


@app.command("check-all")
def check_all(
    target_dir: Path | None = _TARGET_DIR,
    config: Path | None = _CONFIG,
    fail_on_violation: bool | None = _FAIL_ON_VIOLATION,
    aggregate: bool | None = _AGGREGATE,
    execution_root: bool | None = _EXECUTION_ROOT,
    verbose: bool | None = _VERBOSE,
    print_failing_errors: bool | None = _PRINT_FAILING,
    pmd_exclude_file: str | None = typer.Option(
        None, "--pmd-exclude-from-failure-file", help="Properties file of class -> excluded PMD rules"
    ),
    cpd_exclude_file: str | None = typer.Option(
        None, "--cpd-exclude-from-failure-file", help="Comma-separated class groups allowed to duplicate"
    ),
    language: str | None = _LANGUAGE,
    failure_priority: int | None = _FAILURE_PRIORITY,
    skip: bool | None = _SKIP,
    log_level: str = _LOG_LEVEL,
) -> None:
    """Run the PMD check and then the CPD check; exit with the worse result."""
    shared: dict[str, object] = {
        "target_directory": target_dir,
        "fail_on_violation": fail_on_violation,
        "aggregate": aggregate,
        "execution_root": execution_root,
        "verbose": verbose,
        "print_failing_errors": print_failing_errors,
        "language": language,
        "skip": skip,
    }
    _run(
        [
            (
                PMD_CHECK,
                {**shared, "exclude_from_failure_file": pmd_exclude_file, "failure_priority": failure_priority},
            ),
            (CPD_CHECK, {**shared, "exclude_from_failure_file": cpd_exclude_file}),
        ],
        config_path=config,
        log_level=log_level,
    )
