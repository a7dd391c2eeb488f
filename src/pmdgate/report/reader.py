"""Readers for the XML reports PMD and CPD leave in the build directory.

Both readers return findings in document order and never keep the file
open past the call. Documents that declare a DTD or entities are refused
before any element is visited.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from defusedxml import ElementTree as DefusedET
from defusedxml.common import DefusedXmlException

from pmdgate.constants import PMD_MAX_PRIORITY
from pmdgate.errors import ReportIOError, ReportParseError
from pmdgate.findings import Duplication, DuplicationFile, Violation

_LOG = logging.getLogger(__name__)

PMD_ROOT_TAG = "pmd"
CPD_ROOT_TAG = "pmd-cpd"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _load_root(path: Path, expected_root: str) -> ET.Element:
    try:
        with path.open("rb") as handle:
            tree = DefusedET.parse(handle, forbid_dtd=True)
    except DefusedXmlException as exc:
        raise ReportParseError(path, f"forbidden XML construct: {exc}") from exc
    except ET.ParseError as exc:
        raise ReportParseError(path, f"malformed XML: {exc}") from exc
    except OSError as exc:
        raise ReportIOError(path, exc.strerror or str(exc)) from exc

    root = tree.getroot()
    if _local_name(root.tag) != expected_root:
        raise ReportParseError(path, f"expected <{expected_root}> root, found <{_local_name(root.tag)}>")
    return root


def _int_attr(path: Path, element: ET.Element, name: str, default: int | None = None) -> int:
    raw = element.get(name)
    if raw is None or not raw.strip():
        if default is None:
            raise ReportParseError(path, f"<{_local_name(element.tag)}> is missing required attribute `{name}`")
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ReportParseError(
            path, f"<{_local_name(element.tag)}> attribute `{name}` must be an integer, got {raw!r}"
        ) from exc


def _str_attr(element: ET.Element, name: str) -> str | None:
    value = element.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def read_pmd_report(path: Path) -> list[Violation]:
    root = _load_root(path, PMD_ROOT_TAG)
    violations: list[Violation] = []
    for file_element in _children(root, "file"):
        file_name = file_element.get("name", "")
        for element in _children(file_element, "violation"):
            rule = _str_attr(element, "rule")
            if rule is None:
                raise ReportParseError(path, f"violation in {file_name or '<unknown>'} has no `rule`")
            violations.append(
                Violation(
                    rule=rule,
                    priority_level=_int_attr(path, element, "priority", PMD_MAX_PRIORITY),
                    text=(element.text or "").strip(),
                    file_name=file_name,
                    ruleset=_str_attr(element, "ruleset"),
                    package=_str_attr(element, "package"),
                    class_name=_str_attr(element, "class"),
                    method=_str_attr(element, "method"),
                    begin_line=_int_attr(path, element, "beginline", 0),
                    end_line=_int_attr(path, element, "endline", 0),
                    begin_column=_int_attr(path, element, "begincolumn", 0),
                    end_column=_int_attr(path, element, "endcolumn", 0),
                    external_info_url=_str_attr(element, "externalInfoUrl"),
                )
            )
    _LOG.debug("Read %d PMD violation(s) from %s", len(violations), path)
    return violations


def read_cpd_report(path: Path) -> list[Duplication]:
    root = _load_root(path, CPD_ROOT_TAG)
    duplications: list[Duplication] = []
    for element in _children(root, "duplication"):
        files = tuple(
            DuplicationFile(path=file_element.get("path", ""), line=_int_attr(path, file_element, "line", 0))
            for file_element in _children(element, "file")
        )
        fragments = _children(element, "codefragment")
        duplications.append(
            Duplication(
                lines=_int_attr(path, element, "lines"),
                tokens=_int_attr(path, element, "tokens", 0),
                files=files,
                code_fragment=(fragments[0].text or "") if fragments else "",
            )
        )
    _LOG.debug("Read %d CPD duplication(s) from %s", len(duplications), path)
    return duplications


__all__ = [
    "CPD_ROOT_TAG",
    "PMD_ROOT_TAG",
    "read_cpd_report",
    "read_pmd_report",
]
