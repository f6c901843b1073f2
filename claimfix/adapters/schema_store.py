"""Operator-configurable JSON Schema for incoming correction payloads.

Two files live in the schema directory:

``correction_payload.schema.json``  shipped default
``active_schema.json``              operator upload; wins when present

No schema at all disables validation (every payload passes).  An
unreadable schema file reads as absent through ``active_schema()`` but
makes ``validate()`` reject every payload.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_FILE = "correction_payload.schema.json"
ACTIVE_SCHEMA_FILE = "active_schema.json"


class SchemaValidationError(ValueError):
    """A payload violated the active schema; ``errors`` lists every violated path."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Payload failed schema validation ({len(errors)} errors)")
        self.errors = errors


def _pointer(path: Any) -> str:
    parts = [str(p) for p in path]
    return "/" + "/".join(parts) if parts else "/"


class SchemaStore:
    def __init__(self, schema_dir: str | Path | None = None) -> None:
        if schema_dir is None:
            from claimfix.core.settings import get_settings

            schema_dir = get_settings().correction_schema_dir
        self.schema_dir = Path(schema_dir)

    def active_schema_path(self) -> Path:
        custom = self.schema_dir / ACTIVE_SCHEMA_FILE
        if custom.is_file():
            return custom
        return self.schema_dir / DEFAULT_SCHEMA_FILE

    def _load(self) -> tuple[dict[str, Any] | None, str | None]:
        """Return (schema, parse error) for the active schema file."""
        path = self.active_schema_path()
        if not path.is_file():
            return None, None
        try:
            schema = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Active schema %s is unreadable: %s", path.name, type(exc).__name__)
            return None, f"{path.name} is not valid JSON"
        if not isinstance(schema, dict):
            logger.warning("Active schema %s is not a JSON object", path.name)
            return None, f"{path.name} is not a JSON object"
        return schema, None

    def active_schema(self) -> dict[str, Any] | None:
        """Return the active schema, or ``None`` when absent or unreadable."""
        schema, _ = self._load()
        return schema

    def schema_version(self) -> str:
        schema = self.active_schema() or {}
        return str(schema.get("version", "unknown"))

    def schema_title(self) -> str:
        schema = self.active_schema() or {}
        return str(schema.get("title", "Unknown Schema"))

    def save_active_schema(self, schema: Any) -> Path:
        """Persist *schema* as the operator schema.

        Raises ``ValueError`` when *schema* is not a mapping, lacks both
        ``$schema`` and ``type``, or is not itself a valid Draft 2020-12
        schema.
        """
        if not isinstance(schema, Mapping):
            raise ValueError("Schema must be a valid JSON object")
        if "$schema" not in schema and "type" not in schema:
            raise ValueError("Schema must be a valid JSON Schema (missing $schema or type)")
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as exc:
            raise ValueError(f"Invalid JSON Schema: {exc.message}") from exc

        self.schema_dir.mkdir(parents=True, exist_ok=True)
        path = self.schema_dir / ACTIVE_SCHEMA_FILE
        path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
        logger.info("Saved active correction schema to %s", path)
        return path

    def validate(self, payload: Any) -> list[str]:
        """Return one ``"<pointer>: <message>"`` per violation (empty when valid)."""
        schema, load_error = self._load()
        if load_error is not None:
            return [f"/: Schema compilation error: {load_error}"]
        if schema is None:
            return []
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as exc:
            return [f"/: Schema compilation error: {exc.message}"]

        validator = Draft202012Validator(schema)
        errors = sorted(
            validator.iter_errors(payload),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
        return [f"{_pointer(err.absolute_path)}: {err.message}" for err in errors]
