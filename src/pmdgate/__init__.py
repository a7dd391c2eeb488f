"""Threshold checks over PMD and CPD XML reports."""
from __future__ import annotations

__version__ = "0.1.0"
