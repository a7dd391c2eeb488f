from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from pmdgate.constants import CPD_CHECK_NAME, DEFAULT_LANGUAGE, DEFAULT_TARGET_DIR, PMD_CHECK_NAME
from pmdgate.errors import CheckConfigurationError

CONFIG_SECTION = "pmdgate"
CHECK_SECTIONS = (PMD_CHECK_NAME, CPD_CHECK_NAME)


@dataclass(slots=True, frozen=True)
class CheckConfig:
    target_directory: Path = DEFAULT_TARGET_DIR
    fail_on_violation: bool = True
    aggregate: bool = False
    verbose: bool = False
    print_failing_errors: bool = False
    exclude_from_failure_file: str = ""
    language: str = DEFAULT_LANGUAGE
    target_language: str = DEFAULT_LANGUAGE
    execution_root: bool = True
    failure_priority: int | None = None
    skip: bool = False

    def with_overrides(self, **values: Any) -> CheckConfig:
        provided = {key: value for key, value in values.items() if value is not None}
        unknown = sorted(set(provided) - _FIELD_NAMES)
        if unknown:
            raise CheckConfigurationError(f"Unknown configuration option(s): {', '.join(unknown)}")
        return _coerce(replace(self, **provided))


_FIELD_NAMES = {item.name for item in fields(CheckConfig)}
_BOOL_FIELDS = {
    "fail_on_violation",
    "aggregate",
    "verbose",
    "print_failing_errors",
    "execution_root",
    "skip",
}
_STR_FIELDS = {"exclude_from_failure_file", "language", "target_language"}
_CHECK_ONLY_FIELDS = {"exclude_from_failure_file"}


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).replace("-", "_").lower()


def _coerce(config: CheckConfig) -> CheckConfig:
    for name in _BOOL_FIELDS:
        if not isinstance(getattr(config, name), bool):
            raise CheckConfigurationError(f"{name} must be a boolean")
    for name in _STR_FIELDS:
        if not isinstance(getattr(config, name), str):
            raise CheckConfigurationError(f"{name} must be a string")

    priority = config.failure_priority
    if priority is not None and (isinstance(priority, bool) or not isinstance(priority, int)):
        raise CheckConfigurationError("failure_priority must be an integer")

    target = config.target_directory
    if isinstance(target, str):
        target = Path(target)
    if not isinstance(target, Path):
        raise CheckConfigurationError("target_directory must be a path")
    return replace(config, target_directory=target)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CheckConfigurationError(f"Unable to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CheckConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise CheckConfigurationError(f"Config file must be a mapping: {path}")
    return loaded


def _section_values(section: dict[str, Any], *, scoped: bool) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, value in section.items():
        if key in CHECK_SECTIONS:
            continue
        name = _snake_case(str(key))
        if name not in _FIELD_NAMES:
            raise CheckConfigurationError(f"Unknown configuration option: {key}")
        if name in _CHECK_ONLY_FIELDS and not scoped:
            # PMD and CPD exclusion files have different formats.
            raise CheckConfigurationError(
                f"{key} must be set under `{PMD_CHECK_NAME}:` or `{CPD_CHECK_NAME}:`, not shared by both checks"
            )
        values[name] = "" if name == "exclude_from_failure_file" and value is None else value
    return values


def parse_config(raw: dict[str, Any], *, check: str | None = None, base: CheckConfig | None = None) -> CheckConfig:
    """Build a config from a parsed YAML document.

    Keys may sit under a top-level ``pmdgate:`` mapping or at the top level,
    in snake_case or camelCase. A ``pmd:`` or ``cpd:`` sub-mapping overrides
    the shared keys for that check only. The exclusion file is only accepted
    inside such a sub-mapping.
    """
    section = raw.get(CONFIG_SECTION, raw)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise CheckConfigurationError(f"`{CONFIG_SECTION}` must be a mapping")

    values = _section_values(section, scoped=False)
    if check is not None:
        scoped = section.get(check) or {}
        if not isinstance(scoped, dict):
            raise CheckConfigurationError(f"`{check}` must be a mapping")
        values.update(_section_values(scoped, scoped=True))
    return _coerce(replace(base or CheckConfig(), **values))


def load_config(path: Path, *, check: str | None = None, base: CheckConfig | None = None) -> CheckConfig:
    config = parse_config(_load_yaml(path), check=check, base=base)
    target = config.target_directory
    if not target.is_absolute():
        target = (path.parent / target).resolve()
    exclude = config.exclude_from_failure_file
    if exclude and not Path(exclude).is_absolute():
        exclude = str((path.parent / exclude).resolve())
    return replace(config, target_directory=target, exclude_from_failure_file=exclude)


__all__ = ["CHECK_SECTIONS", "CONFIG_SECTION", "CheckConfig", "load_config", "parse_config"]
