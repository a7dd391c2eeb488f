"""CLI tests: exit codes and output of check, cpd-check and check-all."""
from __future__ import annotations

import logging
from pathlib import Path

from typer.testing import CliRunner

from pmdgate import __version__
from pmdgate.cli import app

runner = CliRunner()

PMD_XML = """
<pmd version="6.55.0">
<file name="/repo/src/main/java/com/acme/Foo.java">
<violation beginline="3" rule="EmptyCatchBlock" package="com.acme" class="Foo" priority="1">Empty catch</violation>
<violation beginline="7" rule="ShortVariable" package="com.acme" class="Foo" priority="4">Short name</violation>
</file>
</pmd>
"""

CPD_XML = """
<pmd-cpd>
<duplication lines="14" tokens="75">
<file line="10" path="/repo/src/main/java/com/acme/Foo.java"/>
<file line="30" path="/repo/src/main/java/com/acme/Bar.java"/>
<codefragment>int a = 1;</codefragment>
</duplication>
</pmd-cpd>
"""


def _write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content.strip() + "\n", encoding="utf-8")
    return path


def _setup_target(tmp_path: Path, *, pmd: bool = True, cpd: bool = True) -> Path:
    target = tmp_path / "target"
    target.mkdir()
    if pmd:
        _write_file(target / "pmd.xml", PMD_XML)
    if cpd:
        _write_file(target / "cpd.xml", CPD_XML)
    return target


class TestCliCheck:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_check_fails_with_exit_one(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)

        result = runner.invoke(app, ["check", "--target-dir", str(target), "--failure-priority", "3"])

        assert result.exit_code == 1
        assert "ERROR: You have 1 PMD violation and 1 warning. For more details see:" in result.output

    def test_check_passes_without_fail_on_violation(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)

        result = runner.invoke(app, ["check", "--target-dir", str(target), "--no-fail-on-violation"])

        assert result.exit_code == 0
        assert "You have 2 PMD violations. For more details see:" in result.output
        assert "ERROR" not in result.output

    def test_missing_report_fails_even_without_fail_on_violation(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path, pmd=False)

        result = runner.invoke(app, ["check", "--target-dir", str(target), "--no-fail-on-violation"])

        assert result.exit_code == 1
        assert "unable to find" in result.output

    def test_malformed_report_exits_with_internal_error(self, tmp_path: Path) -> None:
        target = tmp_path / "target"
        _write_file(target / "pmd.xml", "<pmd><file>")

        result = runner.invoke(app, ["check", "--target-dir", str(target)])

        assert result.exit_code == 2
        assert "Unable to read PMD results xml" in result.output

    def test_invalid_failure_priority_exits_with_internal_error(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)

        result = runner.invoke(app, ["check", "--target-dir", str(target), "--failure-priority", "0"])

        assert result.exit_code == 2
        assert "Valid range: [1,5]" in result.output

    def test_verbose_prints_findings(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)

        result = runner.invoke(
            app,
            ["check", "--target-dir", str(target), "--failure-priority", "1", "--verbose", "--no-fail-on-violation"],
        )

        assert result.exit_code == 0
        warning_at = result.output.index("PMD Warning: com.acme.Foo:7 Rule:ShortVariable Priority:4 Short name.")
        failure_at = result.output.index("PMD Failure: com.acme.Foo:3 Rule:EmptyCatchBlock Priority:1 Empty catch.")
        assert warning_at < failure_at

    def test_aggregate_outside_root_is_silent(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["check", "--target-dir", str(tmp_path / "nowhere"), "--aggregate", "--not-execution-root"],
        )

        assert result.exit_code == 0
        assert result.output.strip() == ""

    def test_cpd_check_with_exclusions(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)
        exclusions = _write_file(tmp_path / "cpd-exclusions.txt", "com.acme.Foo,com.acme.Bar")

        result = runner.invoke(
            app,
            ["cpd-check", "--target-dir", str(target), "--exclude-from-failure-file", str(exclusions)],
        )

        assert result.exit_code == 0
        assert "You have 1 warning. For more details see:" in result.output

    def test_check_all_reports_worst_exit_code(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path, pmd=False)

        result = runner.invoke(app, ["check-all", "--target-dir", str(target), "--no-fail-on-violation"])

        assert result.exit_code == 1
        assert "unable to find" in result.output
        assert "You have 1 duplication. For more details see:" in result.output

    def test_config_file_drives_both_checks(self, tmp_path: Path) -> None:
        _setup_target(tmp_path)
        _write_file(tmp_path / "exclude-pmd.properties", "com.acme.Foo=EmptyCatchBlock,ShortVariable")
        _write_file(tmp_path / "exclude-cpd.txt", "com.acme.Foo, com.acme.Bar")
        config = _write_file(
            tmp_path / "pmdgate.yaml",
            """
pmdgate:
  targetDirectory: target
  failOnViolation: true
  pmd:
    excludeFromFailureFile: exclude-pmd.properties
  cpd:
    excludeFromFailureFile: exclude-cpd.txt
""",
        )

        result = runner.invoke(app, ["check-all", "--config", str(config)])

        assert result.exit_code == 0
        assert "You have 2 warnings. For more details see:" in result.output
        assert "You have 1 warning. For more details see:" in result.output

    def test_bad_config_exits_with_internal_error(self, tmp_path: Path) -> None:
        config = _write_file(tmp_path / "pmdgate.yaml", "colour: blue")

        result = runner.invoke(app, ["check", "--config", str(config)])

        assert result.exit_code == 2
        assert "Unknown configuration option: colour" in result.output

    def test_shared_exclusion_file_in_config_is_rejected(self, tmp_path: Path) -> None:
        _setup_target(tmp_path)
        _write_file(tmp_path / "exclude.properties", "com.acme.Foo=EmptyCatchBlock")
        config = _write_file(
            tmp_path / "pmdgate.yaml",
            """
targetDirectory: target
excludeFromFailureFile: exclude.properties
""",
        )

        result = runner.invoke(app, ["check-all", "--config", str(config)])

        assert result.exit_code == 2
        assert "excludeFromFailureFile must be set under `pmd:` or `cpd:`" in result.output
        assert "duplication" not in result.output

    def test_log_level_does_not_outlive_the_command(self, tmp_path: Path) -> None:
        target = _setup_target(tmp_path)
        logger = logging.getLogger("pmdgate")
        handlers_before = list(logger.handlers)

        result = runner.invoke(
            app, ["check", "--target-dir", str(target), "--no-fail-on-violation", "--log-level", "ERROR"]
        )

        assert result.exit_code == 0
        assert logger.level == logging.NOTSET
        assert logger.propagate is True
        assert logger.handlers == handlers_before
