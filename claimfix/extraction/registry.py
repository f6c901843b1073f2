"""Pattern-set registry.

Lookup table of available pattern sets (built-in + YAML) keyed by name.
Built once per process and consulted whenever an extractor is created.
"""
from __future__ import annotations

from pathlib import Path

from claimfix.extraction.loader import load_all_pattern_sets
from claimfix.extraction.patterns import DEFAULT_PATTERN_SET, PatternSet


class PatternRegistry:
    """In-memory registry of extraction pattern sets."""

    def __init__(self, pattern_sets: list[PatternSet] | None = None) -> None:
        self._pattern_sets: dict[str, PatternSet] = {DEFAULT_PATTERN_SET.name: DEFAULT_PATTERN_SET}
        for ps in pattern_sets or []:
            self._pattern_sets[ps.name] = ps

    def register(self, pattern_set: PatternSet) -> None:
        """Register (or replace) a pattern set."""
        self._pattern_sets[pattern_set.name] = pattern_set

    def get(self, name: str) -> PatternSet:
        """Return the pattern set called *name* or raise ``KeyError``."""
        try:
            return self._pattern_sets[name]
        except KeyError:
            raise KeyError(f"Pattern set not found: {name!r}")

    def list_all(self) -> list[PatternSet]:
        """Return all registered pattern sets sorted by name."""
        return sorted(self._pattern_sets.values(), key=lambda ps: ps.name)

    @classmethod
    def default(cls, directory: str | Path | None = None) -> PatternRegistry:
        """Return a registry with the built-in set plus every YAML set in *directory*.

        *directory* defaults to ``settings.pattern_dir``.
        """
        if directory is None:
            from claimfix.core.settings import get_settings

            directory = get_settings().pattern_dir
        return cls(load_all_pattern_sets(directory))
