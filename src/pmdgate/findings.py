from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from pmdgate.constants import CPD_DUPLICATION_PRIORITY, JAVA_SOURCE_ROOTS


class Finding(Protocol):
    def priority(self) -> int:
        ...

    def identity(self) -> Hashable:
        ...

    def describe(self, severity: str) -> str:
        ...


@dataclass(slots=True, frozen=True)
class Violation:
    rule: str
    priority_level: int
    text: str = ""
    file_name: str = ""
    ruleset: str | None = None
    package: str | None = None
    class_name: str | None = None
    method: str | None = None
    begin_line: int = 0
    end_line: int = 0
    begin_column: int = 0
    end_column: int = 0
    external_info_url: str | None = None

    @property
    def qualified_class(self) -> str | None:
        if self.class_name is None:
            return None
        if self.package:
            return f"{self.package}.{self.class_name}"
        return self.class_name

    def priority(self) -> int:
        return self.priority_level

    def identity(self) -> tuple[str | None, str]:
        return (self.qualified_class, self.rule)

    def describe(self, severity: str) -> str:
        location = self.qualified_class or self.file_name
        return (
            f"PMD {severity}: {location}:{self.begin_line} Rule:{self.rule} "
            f"Priority:{self.priority_level} {self.text}."
        )


@dataclass(slots=True, frozen=True)
class DuplicationFile:
    path: str
    line: int = 0


def class_name_from_path(path: str) -> str:
    """Turn ``/repo/src/main/java/com/acme/Foo.java`` into ``com.acme.Foo``.

    Paths outside a known source root keep their full relative structure so
    that exclusion lines can still name them explicitly.
    """
    normalized = path.replace("\\", "/")
    for root in JAVA_SOURCE_ROOTS:
        marker = f"/{root}/"
        index = normalized.rfind(marker)
        if index >= 0:
            normalized = normalized[index + len(marker) :]
            break
        if normalized.startswith(f"{root}/"):
            normalized = normalized[len(root) + 1 :]
            break
    normalized = normalized.lstrip("/")
    suffix = Path(normalized).suffix
    if suffix:
        normalized = normalized[: -len(suffix)]
    return normalized.replace("/", ".")


@dataclass(slots=True, frozen=True)
class Duplication:
    lines: int
    tokens: int = 0
    files: tuple[DuplicationFile, ...] = ()
    code_fragment: str = ""

    def priority(self) -> int:
        return CPD_DUPLICATION_PRIORITY

    def identity(self) -> frozenset[str]:
        return frozenset(class_name_from_path(item.path) for item in self.files)

    def describe(self, severity: str) -> str:
        lines = [f"CPD {severity}: Found {self.lines} lines of duplicated code at locations:"]
        for item in self.files:
            lines.append(f"    {item.path} line {item.line}")
        return "\n".join(lines)


@dataclass(slots=True)
class ClassificationResult:
    failures: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.failures) + len(self.warnings)


@dataclass(slots=True, frozen=True)
class CheckOutcome:
    passed: bool
    message: str = ""
    failure_count: int = 0
    warning_count: int = 0
    skipped: bool = False
    report_path: Path | None = None

    @classmethod
    def skip(cls) -> CheckOutcome:
        return cls(passed=True, skipped=True)


__all__ = [
    "CheckOutcome",
    "ClassificationResult",
    "Duplication",
    "DuplicationFile",
    "Finding",
    "Violation",
    "class_name_from_path",
]
