"""Tests for claimfix/extraction/: pattern sets, YAML loader, registry."""
from __future__ import annotations

import dataclasses
import textwrap
from pathlib import Path

import pytest

from claimfix.core.constants import ValidatedField
from claimfix.extraction.field_extractor import FieldExtractor
from claimfix.extraction.loader import PatternConfigError, load_all_pattern_sets, load_pattern_set
from claimfix.extraction.patterns import DEFAULT_PATTERN_SET, FieldPattern, PatternSet
from claimfix.extraction.registry import PatternRegistry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

BUILTIN_DIR = Path(__file__).resolve().parents[1] / "config" / "patterns"


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


# ===========================================================================
# PatternSet
# ===========================================================================

class TestPatternSet:
    def test_default_set_covers_every_field(self):
        for field in ValidatedField:
            assert DEFAULT_PATTERN_SET.patterns_for(field), field

    def test_default_set_identity(self):
        assert DEFAULT_PATTERN_SET.name == "default"
        assert DEFAULT_PATTERN_SET.version == "1.0.0"

    def test_fields_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_PATTERN_SET.fields[ValidatedField.CLAIM_NUMBER] = ()

    def test_attributes_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_PATTERN_SET.version = "2.0.0"

    def test_patterns_for_accepts_string(self):
        assert DEFAULT_PATTERN_SET.patterns_for("claim_number") == DEFAULT_PATTERN_SET.patterns_for(
            ValidatedField.CLAIM_NUMBER
        )

    def test_with_overrides_replaces_only_listed_fields(self):
        override = (FieldPattern(regex=r"ref[\s:]*([0-9]+)", ignore_case=True),)
        derived = DEFAULT_PATTERN_SET.with_overrides("custom", "0.1.0", {ValidatedField.CLAIM_NUMBER: override})

        assert derived.name == "custom"
        assert derived.patterns_for(ValidatedField.CLAIM_NUMBER) == override
        assert derived.patterns_for(ValidatedField.POLICY_NUMBER) == DEFAULT_PATTERN_SET.patterns_for(
            ValidatedField.POLICY_NUMBER
        )
        # the base set is untouched
        assert DEFAULT_PATTERN_SET.patterns_for(ValidatedField.CLAIM_NUMBER) != override

    def test_empty_set_extracts_nothing(self):
        extractor = FieldExtractor(PatternSet(name="empty", version="0"), phone_min_digits=10)
        assert extractor.extract("Claim Number: CLM-1") == {}


# ===========================================================================
# load_pattern_set
# ===========================================================================

class TestLoadPatternSet:
    def test_valid_yaml_loads(self, tmp_path):
        path = _write(tmp_path, "ref.yaml", """\
            name: ref_numbers
            version: "2.1.0"
            fields:
              claim_number:
                - regex: 'ref[\\s:]*([0-9]+)'
                  ignore_case: true
            """)

        ps = load_pattern_set(path)

        assert ps.name == "ref_numbers"
        assert ps.version == "2.1.0"
        assert ps.patterns_for(ValidatedField.CLAIM_NUMBER)[0].ignore_case is True

    def test_unlisted_fields_inherit_default(self, tmp_path):
        path = _write(tmp_path, "ref.yaml", """\
            name: ref_numbers
            version: "1"
            fields:
              claim_number:
                - regex: 'ref[\\s:]*([0-9]+)'
            """)

        ps = load_pattern_set(path)

        assert ps.patterns_for(ValidatedField.INSURED_EMAIL) == DEFAULT_PATTERN_SET.patterns_for(
            ValidatedField.INSURED_EMAIL
        )

    def test_loaded_set_drives_extraction(self, tmp_path):
        path = _write(tmp_path, "ref.yaml", """\
            name: ref_numbers
            version: "1"
            fields:
              claim_number:
                - regex: 'ref[\\s:]*([0-9]+)'
                  ignore_case: true
            """)

        fields = FieldExtractor(load_pattern_set(path), phone_min_digits=10).extract("REF: 99812")

        assert fields[ValidatedField.CLAIM_NUMBER].value == "99812"

    def test_missing_key_raises(self, tmp_path):
        path = _write(tmp_path, "bad.yaml", """\
            name: no_version
            fields: {}
            """)

        with pytest.raises(PatternConfigError, match="version"):
            load_pattern_set(path)

    def test_unknown_field_raises(self, tmp_path):
        path = _write(tmp_path, "bad.yaml", """\
            name: typo
            version: "1"
            fields:
              claim_numbr:
                - regex: 'x'
            """)

        with pytest.raises(PatternConfigError, match="claim_numbr"):
            load_pattern_set(path)

    def test_uncompilable_regex_raises(self, tmp_path):
        path = _write(tmp_path, "bad.yaml", """\
            name: broken
            version: "1"
            fields:
              claim_number:
                - regex: '(unclosed'
            """)

        with pytest.raises(PatternConfigError, match="does not compile"):
            load_pattern_set(path)

    def test_non_mapping_document_raises(self, tmp_path):
        path = _write(tmp_path, "bad.yaml", "- just\n- a list\n")

        with pytest.raises(PatternConfigError):
            load_pattern_set(path)

    def test_config_error_is_value_error(self):
        assert issubclass(PatternConfigError, ValueError)


# ===========================================================================
# load_all_pattern_sets / PatternRegistry
# ===========================================================================

class TestRegistry:
    def test_missing_directory_returns_empty(self, tmp_path):
        assert load_all_pattern_sets(tmp_path / "nope") == []

    def test_non_yaml_files_ignored(self, tmp_path):
        (tmp_path / "README.txt").write_text("not a pattern set", encoding="utf-8")
        assert load_all_pattern_sets(tmp_path) == []

    def test_builtin_directory_loads(self):
        names = [ps.name for ps in load_all_pattern_sets(BUILTIN_DIR)]
        assert "ca_property" in names

    def test_default_registry_always_has_default(self, tmp_path):
        registry = PatternRegistry.default(tmp_path)
        assert registry.get("default") is DEFAULT_PATTERN_SET

    def test_default_registry_includes_yaml_sets(self):
        registry = PatternRegistry.default(BUILTIN_DIR)
        assert [ps.name for ps in registry.list_all()] == ["ca_property", "default"]

    def test_unknown_name_raises_key_error(self):
        with pytest.raises(KeyError):
            PatternRegistry().get("missing")

    def test_register_replaces(self):
        registry = PatternRegistry()
        custom = PatternSet(name="default", version="9")
        registry.register(custom)
        assert registry.get("default").version == "9"

    def test_canadian_postal_code_address(self):
        ca = PatternRegistry.default(BUILTIN_DIR).get("ca_property")
        text = "Address: 100 King Street West, Toronto, ON M5X 1A9"

        ca_fields = FieldExtractor(ca, phone_min_digits=10).extract(text)
        default_fields = FieldExtractor(phone_min_digits=10).extract(text)

        assert ca_fields[ValidatedField.PROPERTY_ADDRESS].value == "100 King Street West, Toronto, ON M5X 1A9"
        assert ValidatedField.PROPERTY_ADDRESS not in default_fields
