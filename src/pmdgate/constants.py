from __future__ import annotations

from pathlib import Path

PMD_CHECK_NAME = "pmd"
CPD_CHECK_NAME = "cpd"

PMD_REPORT_FILENAME = "pmd.xml"
CPD_REPORT_FILENAME = "cpd.xml"

DEFAULT_TARGET_DIR = Path("target")
DEFAULT_LANGUAGE = "java"

# PMD priorities run from 1 (highest) to 5 (lowest).
PMD_MIN_PRIORITY = 1
PMD_MAX_PRIORITY = 5
PMD_DEFAULT_FAILURE_PRIORITY = PMD_MAX_PRIORITY

# CPD findings carry no priority; every duplication sits at 0.
CPD_DUPLICATION_PRIORITY = 0
CPD_DEFAULT_FAILURE_PRIORITY = 10

PMD_VIOLATION_NOUN = "PMD violation"
CPD_DUPLICATION_NOUN = "duplication"

SEVERITY_FAILURE = "Failure"
SEVERITY_WARNING = "Warning"

JAVA_SOURCE_ROOTS = ("src/main/java", "src/test/java", "java")

EXIT_SUCCESS = 0
EXIT_CHECK_FAILURE = 1
EXIT_INTERNAL_ERROR = 2
