from __future__ import annotations

from pathlib import Path

from pmdgate.message import compose_message


def test_no_findings_produces_empty_message() -> None:
    assert compose_message(0, 0, "Violation", "/r.xml") == ""


def test_single_failure_is_not_pluralised() -> None:
    assert compose_message(1, 0, "Violation", "/r.xml") == "You have 1 Violation. For more details see:/r.xml"


def test_failures_and_warnings_are_joined_with_and() -> None:
    assert (
        compose_message(2, 3, "Violation", "/r.xml")
        == "You have 2 Violations and 3 warnings. For more details see:/r.xml"
    )


def test_warnings_only_starts_with_you_have() -> None:
    assert compose_message(0, 1, "Violation", "/r.xml") == "You have 1 warning. For more details see:/r.xml"


def test_single_warning_after_failures() -> None:
    assert (
        compose_message(3, 1, "duplication", Path("/out/cpd.xml"))
        == "You have 3 duplications and 1 warning. For more details see:/out/cpd.xml"
    )
