from __future__ import annotations

from pathlib import Path

from pmdgate.errors import (
    CheckConfigurationError,
    CheckExecutionError,
    CheckFailure,
    ExclusionLoadError,
    PmdGateError,
    ReportIOError,
    ReportMissingError,
    ReportParseError,
    ThresholdViolation,
)
from pmdgate.findings import CheckOutcome


def test_check_failures_and_execution_errors_are_distinct() -> None:
    assert issubclass(ThresholdViolation, CheckFailure)
    assert issubclass(ReportMissingError, CheckFailure)
    for error_type in (ReportIOError, ReportParseError, ExclusionLoadError, CheckConfigurationError):
        assert issubclass(error_type, CheckExecutionError)
        assert not issubclass(error_type, CheckFailure)
    assert issubclass(CheckFailure, PmdGateError)
    assert issubclass(CheckExecutionError, PmdGateError)


def test_report_errors_carry_the_path() -> None:
    path = Path("/build/target/pmd.xml")

    error = ReportParseError(path, "malformed XML")

    assert error.path == path
    assert str(error) == "Unable to read PMD results xml: /build/target/pmd.xml (malformed XML)"


def test_threshold_violation_carries_outcome() -> None:
    outcome = CheckOutcome(passed=False, message="You have 1 duplication.", failure_count=1)

    error = ThresholdViolation(outcome.message, outcome)

    assert error.outcome is outcome
    assert str(error) == "You have 1 duplication."
