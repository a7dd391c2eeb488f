from __future__ import annotations

from pathlib import Path


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def compose_message(failure_count: int, warning_count: int, noun: str, report_path: Path | str) -> str:
    if failure_count <= 0 and warning_count <= 0:
        return ""

    parts: list[str] = []
    if failure_count > 0:
        parts.append(f"You have {failure_count} {noun}{_plural(failure_count)}")
    if warning_count > 0:
        parts.append(" and " if failure_count > 0 else "You have ")
        parts.append(f"{warning_count} warning{_plural(warning_count)}")
    parts.append(f". For more details see:{report_path}")
    return "".join(parts)


__all__ = ["compose_message"]
