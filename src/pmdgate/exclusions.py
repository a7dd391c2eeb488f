from __future__ import annotations

import logging
import string
from pathlib import Path
from typing import Any, Protocol

from pmdgate.errors import ExclusionLoadError
from pmdgate.findings import Duplication, Violation

_LOG = logging.getLogger(__name__)

_CONTROL_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class ExclusionRegistry(Protocol):
    def load(self, location: str | Path | None) -> None:
        ...

    def is_excluded(self, finding: Any) -> bool:
        ...


def _read_lines(path: Path) -> list[str]:
    if not path.is_file():
        raise ExclusionLoadError(path, "file does not exist")
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise ExclusionLoadError(path, str(exc)) from exc


def _exclusion_path(location: str | Path | None) -> Path | None:
    if location is None or not str(location).strip():
        return None
    return Path(location)


def _split_names(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unescape(text: str, *, source: Path, lineno: int) -> str:
    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\" or index + 1 == len(text):
            chars.append(char)
            index += 1
            continue
        code = text[index + 1]
        if code == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) != 4 or any(digit not in string.hexdigits for digit in digits):
                raise ExclusionLoadError(source, f"line {lineno} has a malformed \\uXXXX escape")
            chars.append(chr(int(digits, 16)))
            index += 6
            continue
        chars.append(_CONTROL_ESCAPES.get(code, code))
        index += 2
    return "".join(chars)


def _key_end(line: str) -> int:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char.isspace():
            return index
        index += 1
    return len(line)


def parse_properties(lines: list[str], *, source: Path) -> dict[str, str]:
    """Parse ``key=value`` lines the way Java ``.properties`` files read.

    Handles ``#``/``!`` comments, ``=``/``:``/whitespace separators,
    trailing-backslash continuation lines and backslash escapes (``\\,``,
    ``\\=``, ``\\:``, ``\\ ``, ``\\t`` and ``\\uXXXX``) in keys and values.
    """
    logical: list[tuple[int, str]] = []
    pending: str | None = None
    pending_lineno = 0
    for lineno, raw in enumerate(lines, start=1):
        stripped = raw.lstrip()
        if pending is None:
            if not stripped or stripped[0] in "#!":
                continue
            pending_lineno = lineno
            pending = ""
        pending += stripped
        trailing = len(pending) - len(pending.rstrip("\\"))
        if trailing % 2 == 1:
            pending = pending[:-1]
            continue
        logical.append((pending_lineno, pending))
        pending = None
    if pending is not None:
        logical.append((pending_lineno, pending))

    entries: dict[str, str] = {}
    for lineno, line in logical:
        split_at = _key_end(line)
        key = _unescape(line[:split_at], source=source, lineno=lineno)
        value = line[split_at:].lstrip()
        if value[:1] in ("=", ":"):
            value = value[1:].lstrip()
        if not key:
            raise ExclusionLoadError(source, f"line {lineno} has no key")
        entries[key] = _unescape(value, source=source, lineno=lineno)
    return entries


class PmdExclusions:
    """Class name -> rules that may not fail the build for that class."""

    def __init__(self) -> None:
        self.loaded = False
        self.source: Path | None = None
        self._rules_by_class: dict[str, frozenset[str]] = {}

    def load(self, location: str | Path | None) -> None:
        if self.loaded:
            return
        self.loaded = True
        self.source = _exclusion_path(location)
        if self.source is None:
            return
        entries = parse_properties(_read_lines(self.source), source=self.source)
        self._rules_by_class = {name: frozenset(_split_names(rules)) for name, rules in entries.items()}
        _LOG.debug("Loaded PMD exclusions for %d class(es) from %s", len(self._rules_by_class), self.source)

    def __len__(self) -> int:
        return len(self._rules_by_class)

    def is_excluded(self, finding: Violation) -> bool:
        class_name, rule = finding.identity()
        if class_name is None:
            return False
        return rule in self._rules_by_class.get(class_name, frozenset())


class CpdExclusions:
    """Groups of classes that are allowed to duplicate each other."""

    def __init__(self) -> None:
        self.loaded = False
        self.source: Path | None = None
        self._groups: list[frozenset[str]] = []

    def load(self, location: str | Path | None) -> None:
        if self.loaded:
            return
        self.loaded = True
        self.source = _exclusion_path(location)
        if self.source is None:
            return
        groups: list[frozenset[str]] = []
        for line in _read_lines(self.source):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            names = _split_names(stripped)
            if names:
                groups.append(frozenset(names))
        self._groups = groups
        _LOG.debug("Loaded %d CPD exclusion group(s) from %s", len(groups), self.source)

    def __len__(self) -> int:
        return len(self._groups)

    def is_excluded(self, finding: Duplication) -> bool:
        classes = finding.identity()
        if not classes:
            return False
        return any(classes <= group for group in self._groups)


__all__ = [
    "CpdExclusions",
    "ExclusionRegistry",
    "PmdExclusions",
    "parse_properties",
]
