from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Protocol

from pmdgate.findings import ClassificationResult, Finding


class ExclusionCheck(Protocol):
    def is_excluded(self, finding: Any) -> bool:
        ...


class NoExclusions:
    def is_excluded(self, finding: Any) -> bool:
        return False


def classify(
    findings: Iterable[Finding],
    failure_priority: int,
    exclusions: ExclusionCheck | None = None,
    *,
    on_failure: Callable[[Finding], None] | None = None,
) -> ClassificationResult:
    """Split findings into failures and warnings, preserving input order.

    A finding fails when its priority is at or below ``failure_priority`` and
    the exclusions do not cover it. Everything else, excluded failures
    included, lands in ``warnings``.
    """
    registry = exclusions if exclusions is not None else NoExclusions()
    result = ClassificationResult()
    for finding in findings:
        if finding.priority() <= failure_priority and not registry.is_excluded(finding):
            result.failures.append(finding)
            if on_failure is not None:
                on_failure(finding)
        else:
            result.warnings.append(finding)
    return result


__all__ = ["ExclusionCheck", "NoExclusions", "classify"]
