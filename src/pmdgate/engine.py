"""Drives one threshold check from gating to the pass/fail decision.

Every call to :func:`execute_check` is independent: it builds its own
exclusion registry, reads its own report and keeps nothing afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from pmdgate.classify import classify
from pmdgate.config import CheckConfig
from pmdgate.constants import (
    CPD_CHECK_NAME,
    CPD_DEFAULT_FAILURE_PRIORITY,
    CPD_DUPLICATION_NOUN,
    CPD_REPORT_FILENAME,
    PMD_CHECK_NAME,
    PMD_DEFAULT_FAILURE_PRIORITY,
    PMD_MAX_PRIORITY,
    PMD_MIN_PRIORITY,
    PMD_REPORT_FILENAME,
    PMD_VIOLATION_NOUN,
    SEVERITY_FAILURE,
    SEVERITY_WARNING,
)
from pmdgate.errors import CheckConfigurationError, ReportMissingError, ThresholdViolation
from pmdgate.exclusions import CpdExclusions, ExclusionRegistry, PmdExclusions
from pmdgate.findings import CheckOutcome, Duplication, Finding
from pmdgate.message import compose_message
from pmdgate.report import read_cpd_report, read_pmd_report

_LOG = logging.getLogger(__name__)


def _print_finding(finding: Finding, severity: str) -> None:
    for line in finding.describe(severity).splitlines():
        _LOG.info(line)
    if isinstance(finding, Duplication):
        _LOG.debug("CPD %s: Code Fragment ", severity)
        _LOG.debug(finding.code_fragment)


@dataclass(slots=True, frozen=True)
class CheckKind:
    name: str
    filename: str
    noun: str
    log_label: str
    default_failure_priority: int
    reader: Callable[[Path], Sequence[Finding]]
    exclusions_factory: Callable[[], ExclusionRegistry]
    priority_range: tuple[int, int] | None = None

    def resolve_failure_priority(self, configured: int | None) -> int:
        priority = self.default_failure_priority if configured is None else configured
        if self.priority_range is not None:
            low, high = self.priority_range
            if not low <= priority <= high:
                raise CheckConfigurationError(
                    f"Invalid {self.name} failure priority: {priority}. Valid range: [{low},{high}]"
                )
        return priority


PMD_CHECK = CheckKind(
    name=PMD_CHECK_NAME,
    filename=PMD_REPORT_FILENAME,
    noun=PMD_VIOLATION_NOUN,
    log_label="PMD",
    default_failure_priority=PMD_DEFAULT_FAILURE_PRIORITY,
    reader=read_pmd_report,
    exclusions_factory=PmdExclusions,
    priority_range=(PMD_MIN_PRIORITY, PMD_MAX_PRIORITY),
)

CPD_CHECK = CheckKind(
    name=CPD_CHECK_NAME,
    filename=CPD_REPORT_FILENAME,
    noun=CPD_DUPLICATION_NOUN,
    log_label="CPD",
    default_failure_priority=CPD_DEFAULT_FAILURE_PRIORITY,
    reader=read_cpd_report,
    exclusions_factory=CpdExclusions,
)


def should_run(config: CheckConfig) -> bool:
    if config.skip:
        return False
    if config.aggregate and not config.execution_root:
        return False
    return config.language == config.target_language or config.aggregate


def report_path_for(kind: CheckKind, config: CheckConfig) -> Path:
    return (config.target_directory / kind.filename).resolve()


def execute_check(kind: CheckKind, config: CheckConfig) -> CheckOutcome:
    """Run ``kind`` against the report under ``config.target_directory``.

    Returns a passing outcome, or raises :class:`ThresholdViolation` when
    failures exist and ``fail_on_violation`` is set. A missing report raises
    :class:`ReportMissingError` whatever ``fail_on_violation`` says. Read,
    parse, exclusion and configuration problems surface as
    :class:`~pmdgate.errors.CheckExecutionError` subclasses.
    """
    if not should_run(config):
        _LOG.debug(
            "Skipping %s check (skip=%s, aggregate=%s, execution_root=%s, language=%s)",
            kind.log_label,
            config.skip,
            config.aggregate,
            config.execution_root,
            config.language,
        )
        return CheckOutcome.skip()

    failure_priority = kind.resolve_failure_priority(config.failure_priority)

    report_path = report_path_for(kind, config)
    if not report_path.exists():
        raise ReportMissingError(report_path)

    exclusions = kind.exclusions_factory()
    if config.exclude_from_failure_file:
        exclusions.load(config.exclude_from_failure_file)

    findings = kind.reader(report_path)

    # The verbose dump below already prints failures.
    echo_failures = config.print_failing_errors and not config.verbose
    result = classify(
        findings,
        failure_priority,
        exclusions,
        on_failure=(lambda finding: _print_finding(finding, SEVERITY_FAILURE)) if echo_failures else None,
    )

    if config.verbose:
        for warning in result.warnings:
            _print_finding(warning, SEVERITY_WARNING)
        for failure in result.failures:
            _print_finding(failure, SEVERITY_FAILURE)

    failure_count = len(result.failures)
    warning_count = len(result.warnings)
    message = compose_message(failure_count, warning_count, kind.noun, report_path)
    _LOG.debug("%s failureCount: %d, warningCount: %d", kind.log_label, failure_count, warning_count)

    blocked = failure_count > 0 and config.fail_on_violation
    outcome = CheckOutcome(
        passed=not blocked,
        message=message,
        failure_count=failure_count,
        warning_count=warning_count,
        report_path=report_path,
    )
    if blocked:
        raise ThresholdViolation(message, outcome)

    if message:
        _LOG.info(message)
    return outcome


def run_pmd_check(config: CheckConfig) -> CheckOutcome:
    return execute_check(PMD_CHECK, config)


def run_cpd_check(config: CheckConfig) -> CheckOutcome:
    return execute_check(CPD_CHECK, config)


__all__ = [
    "CPD_CHECK",
    "PMD_CHECK",
    "CheckKind",
    "execute_check",
    "report_path_for",
    "run_cpd_check",
    "run_pmd_check",
    "should_run",
]
