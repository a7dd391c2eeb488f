from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pmdgate.findings import CheckOutcome


class PmdGateError(Exception):
    """Base class for everything the checker raises on purpose."""


class CheckFailure(PmdGateError):
    """The check blocks the build."""


class CheckExecutionError(PmdGateError):
    """The check could not run at all."""


class ThresholdViolation(CheckFailure):
    def __init__(self, message: str, outcome: CheckOutcome) -> None:
        super().__init__(message)
        self.outcome = outcome


class ReportMissingError(CheckFailure):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Unable to perform check, unable to find {path}")
        self.path = path


class _ReportError(CheckExecutionError):
    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Unable to read PMD results xml: {path} ({detail})")
        self.path = path
        self.detail = detail


class ReportIOError(_ReportError):
    pass


class ReportParseError(_ReportError):
    pass


class ExclusionLoadError(CheckExecutionError):
    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"Unable to load exclude-from-failure file {path}: {detail}")
        self.path = Path(path)
        self.detail = detail


class CheckConfigurationError(CheckExecutionError, ValueError):
    pass


__all__ = [
    "CheckConfigurationError",
    "CheckExecutionError",
    "CheckFailure",
    "ExclusionLoadError",
    "PmdGateError",
    "ReportIOError",
    "ReportMissingError",
    "ReportParseError",
    "ThresholdViolation",
]
