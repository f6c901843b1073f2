"""Pattern-set YAML loader.

Loads extra pattern sets from ``config/patterns/*.yaml``.  A file lists only
the fields it overrides; every other field inherits the built-in default
patterns.

Example::

    name: ca_property
    version: "1.0.0"
    fields:
      property_address:
        - regex: '([0-9]+\\s+[A-Za-z0-9\\s,]+[A-Z][0-9][A-Z]\\s?[0-9][A-Z][0-9])'
          ignore_case: true
"""
from __future__ import annotations

import re
from pathlib import Path

import yaml

from claimfix.core.constants import ValidatedField
from claimfix.extraction.patterns import DEFAULT_PATTERN_SET, FieldPattern, PatternSet

_REQUIRED_KEYS: frozenset[str] = frozenset({"name", "version", "fields"})
_VALID_FIELDS: frozenset[str] = frozenset(f.value for f in ValidatedField)


class PatternConfigError(ValueError):
    """Raised when a pattern-set file is malformed."""


def _parse_pattern(path: Path, field_name: str, index: int, entry: object) -> FieldPattern:
    if not isinstance(entry, dict) or "regex" not in entry:
        raise PatternConfigError(f"{path}: {field_name}[{index}] must be a mapping with a 'regex' key")

    pattern = FieldPattern(regex=str(entry["regex"]), ignore_case=bool(entry.get("ignore_case", False)))
    try:
        pattern.compile()
    except re.error as exc:
        raise PatternConfigError(f"{path}: {field_name}[{index}] does not compile: {exc}") from exc
    return pattern


def load_pattern_set(path: str | Path, base: PatternSet = DEFAULT_PATTERN_SET) -> PatternSet:
    """Load a single pattern set from a YAML file.

    Raises
    ------
    PatternConfigError
        If a required key is missing, a field name is outside the validated
        field set, or a regex fails to compile.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        raise PatternConfigError(f"{path}: expected a YAML mapping, got {type(data).__name__}")

    missing = _REQUIRED_KEYS - data.keys()
    if missing:
        raise PatternConfigError(f"{path}: missing required keys: {sorted(missing)}")

    raw_fields = data["fields"] or {}
    if not isinstance(raw_fields, dict):
        raise PatternConfigError(f"{path}: 'fields' must be a mapping")

    unknown = set(raw_fields) - _VALID_FIELDS
    if unknown:
        raise PatternConfigError(f"{path}: unknown fields: {sorted(unknown)}")

    overrides: dict[ValidatedField, tuple[FieldPattern, ...]] = {}
    for field_name, entries in raw_fields.items():
        if not isinstance(entries, list) or not entries:
            raise PatternConfigError(f"{path}: {field_name} must be a non-empty list of patterns")
        overrides[ValidatedField(field_name)] = tuple(
            _parse_pattern(path, field_name, i, entry) for i, entry in enumerate(entries)
        )

    return base.with_overrides(str(data["name"]), str(data["version"]), overrides)


def load_all_pattern_sets(directory: str | Path = "config/patterns") -> list[PatternSet]:
    """Load every ``*.yaml`` pattern set in *directory*; missing directory → ``[]``."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    pattern_sets: list[PatternSet] = []
    for path in sorted(directory.iterdir()):
        if path.suffix not in (".yaml", ".yml"):
            continue
        pattern_sets.append(load_pattern_set(path))
    return pattern_sets
