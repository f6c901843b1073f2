"""FastAPI dependency injection: pattern registry, extractor and schema store."""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from claimfix.adapters.schema_store import SchemaStore
from claimfix.core.settings import get_settings
from claimfix.extraction.field_extractor import FieldExtractor
from claimfix.extraction.registry import PatternRegistry


@lru_cache(maxsize=1)
def get_pattern_registry() -> PatternRegistry:
    """Return the built-in pattern sets plus any YAML sets in PATTERN_DIR.

    Loaded once per process; call ``get_pattern_registry.cache_clear()``
    after changing PATTERN_DIR.
    """
    return PatternRegistry.default()


def get_field_extractor(registry: PatternRegistry = Depends(get_pattern_registry)) -> FieldExtractor:
    """Return an extractor bound to the ACTIVE_PATTERN_SET."""
    settings = get_settings()
    return FieldExtractor(
        registry.get(settings.active_pattern_set),
        phone_min_digits=settings.phone_min_digits,
    )


def get_schema_store() -> SchemaStore:
    """Return the schema store rooted at CORRECTION_SCHEMA_DIR."""
    return SchemaStore(get_settings().correction_schema_dir)
