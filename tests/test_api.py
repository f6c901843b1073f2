"""Tests for the FastAPI routes.

Covers:
- POST /claims/extract: text and per-page input, active pattern set
- POST /claims/{claim_id}/validate: cross-document disagreements
- POST /corrections/payload: adapt, schema rejection (422)
- POST /corrections/payload/issue-bundle: legacy bundle output
- GET/PUT /corrections/schema: active schema and operator upload
- POST /corrections/transition: workflow transitions and error mapping
"""
from __future__ import annotations

import copy
from pathlib import Path

import pytest

from claimfix.core.settings import get_settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PAYLOAD = {
    "correction_job_id": "job-7",
    "claim_context": {"claim_number": "CLM-2024-001", "policy_number": "POL-889911"},
    "documents": [
        {
            "document_id": "doc-1",
            "source_filename": "FNOL.pdf",
            "corrections": [
                {
                    "type": "typo",
                    "severity": "info",
                    "location": {"page": 1, "bbox": {"x": 5, "y": 5, "width": 50, "height": 10}},
                    "original_value": "Sprngfield",
                    "corrected_value": "Springfield",
                    "confidence": 0.99,
                    "requires_human_review": False,
                    "reason": "Spelling",
                }
            ],
        }
    ],
}


def _payload(**overrides) -> dict:
    data = copy.deepcopy(_PAYLOAD)
    data.update(overrides)
    return data


def _correction_record(client) -> dict:
    body = client.post("/corrections/payload", json=_payload()).json()
    return body["documents"][0]["corrections"][0]


# ===========================================================================
# /claims/extract
# ===========================================================================

class TestExtract:
    def test_text(self, client):
        response = client.post(
            "/claims/extract",
            json={"document_id": "fnol", "text": "Claim Number: CLM-2024-12345\nDate of Loss: 01/15/2024"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["document_id"] == "fnol"
        assert body["pattern_set"] == "default"
        assert body["fields"]["claim_number"]["value"] == "CLM-2024-12345"
        assert body["fields"]["claim_number"]["confidence"] == 0.85
        assert body["fields"]["claim_number"]["location"]["search_text"]["text"] == "CLM-2024-12345"
        assert body["fields"]["date_of_loss"]["value"] == "01/15/2024"

    def test_pages_joined_in_order(self, client):
        response = client.post(
            "/claims/extract",
            json={
                "pages": [
                    {"pageIndex": 1, "text": "Policy Number: POL-889911"},
                    {"pageIndex": 0, "text": "Claim Number: CLM-2024-12345"},
                ]
            },
        )

        fields = response.json()["fields"]
        assert set(fields) == {"claim_number", "policy_number"}

    def test_empty_body_rejected(self, client):
        assert client.post("/claims/extract", json={}).status_code == 400

    def test_pattern_registry_loaded_once(self, client, monkeypatch):
        from claimfix.api import deps

        loads = []
        load_default = deps.PatternRegistry.default

        def counting_default(cls, directory=None):
            loads.append(directory)
            return load_default(directory)

        monkeypatch.setattr(deps.PatternRegistry, "default", classmethod(counting_default))
        deps.get_pattern_registry.cache_clear()

        for _ in range(3):
            assert client.post("/claims/extract", json={"text": "Claim Number: CLM-1"}).status_code == 200

        assert len(loads) == 1

    def test_active_pattern_set(self, client, monkeypatch):
        monkeypatch.setenv("ACTIVE_PATTERN_SET", "ca_property")
        get_settings.cache_clear()

        response = client.post(
            "/claims/extract",
            json={"text": "Address: 100 King Street West, Toronto, ON M5X 1A9"},
        )

        body = response.json()
        assert body["pattern_set"] == "ca_property"
        assert body["fields"]["property_address"]["value"] == "100 King Street West, Toronto, ON M5X 1A9"


# ===========================================================================
# /claims/{claim_id}/validate
# ===========================================================================

class TestValidate:
    def test_reports_disagreement(self, client):
        response = client.post(
            "/claims/CLM-1/validate",
            json={
                "documents": [
                    {"document_id": "a", "document_name": "FNOL",
                     "content": "Claim Number: CLM-1\nPolicy Number: POL-889911"},
                    {"document_id": "b", "document_name": "Declarations",
                     "content": "Claim Number: CLM-1\nPolicy Number: POL-889912"},
                ]
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["claim_id"] == "CLM-1"
        assert body["documents_compared"] == 2
        assert len(body["validations"]) == 1

        validation = body["validations"][0]
        assert validation["field"] == "policy_number"
        assert validation["severity"] == "critical"
        assert validation["recommended_action"] == "escalate"
        assert [d["document_name"] for d in validation["documents"]] == ["FNOL", "Declarations"]

    def test_consistent_documents(self, client):
        doc = {"document_id": "a", "content": "Claim Number: CLM-1"}
        response = client.post("/claims/CLM-1/validate", json={"documents": [doc, {**doc, "document_id": "b"}]})

        assert response.json()["validations"] == []


# ===========================================================================
# /corrections/payload
# ===========================================================================

class TestPayload:
    def test_adapts(self, client):
        response = client.post("/corrections/payload", json=_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["claim_id"] == "CLM-2024-001"
        correction = body["documents"][0]["corrections"][0]
        assert correction["recommended_action"] == "auto_correct"
        assert correction["location"]["bbox"]["pageIndex"] == 0
        assert body["summary"]["total_corrections"] == 1

    def test_schema_violation_lists_errors(self, client):
        payload = _payload()
        payload["documents"][0]["corrections"][0]["confidence"] = 2

        response = client.post("/corrections/payload", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["errors"] == ["/documents/0/corrections/0/confidence: 2 is greater than the maximum of 1"]

    def test_not_a_payload_with_validation_off(self, client, monkeypatch):
        monkeypatch.setenv("SCHEMA_VALIDATION_ENABLED", "false")
        get_settings.cache_clear()

        response = client.post("/corrections/payload", json={"documents": []})

        assert response.status_code == 422
        assert "Not a correction payload" in response.json()["detail"]

    def test_malformed_correction_with_validation_off(self, client, monkeypatch):
        monkeypatch.setenv("SCHEMA_VALIDATION_ENABLED", "false")
        get_settings.cache_clear()
        payload = _payload()
        del payload["documents"][0]["corrections"][0]["type"]

        response = client.post("/corrections/payload", json=payload)

        assert response.status_code == 422

    def test_operator_schema_without_record_rules(self, client):
        client.put("/corrections/schema", json={"type": "object"})
        payload = _payload()
        del payload["documents"][0]["document_id"]

        response = client.post("/corrections/payload/issue-bundle?document_id=viewer-doc", json=payload)

        assert response.status_code == 422
        assert "document_id" in response.json()["detail"]

    def test_issue_bundle(self, client):
        response = client.post("/corrections/payload/issue-bundle?document_id=viewer-doc", json=_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["claimId"] == "CLM-2024-001"
        assert body["document"]["documentId"] == "viewer-doc"
        assert body["issues"][0]["severity"] == "low"
        assert body["issues"][0]["suggestedFix"]["strategy"] == "auto"

    def test_issue_bundle_needs_document_id(self, client):
        assert client.post("/corrections/payload/issue-bundle", json=_payload()).status_code == 422


# ===========================================================================
# /corrections/schema
# ===========================================================================

class TestSchema:
    def test_get_shipped_schema(self, client):
        body = client.get("/corrections/schema").json()

        assert body["title"] == "Claim Correction Payload"
        assert body["version"] == "1.0.0"
        assert body["schema"]["type"] == "object"

    def test_put_replaces_active_schema(self, client):
        schema = {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "title": "Strict Payload",
            "version": "3.0.0",
            "type": "object",
            "required": ["correction_job_id", "claim_context", "documents", "summary"],
        }

        response = client.put("/corrections/schema", json=schema)

        assert response.json() == {"success": True, "title": "Strict Payload", "version": "3.0.0"}
        rejected = client.post("/corrections/payload", json=_payload())
        assert rejected.status_code == 422
        assert rejected.json()["errors"] == ["/: 'summary' is a required property"]

    def test_get_unreadable_schema_file(self, client):
        schema_dir = Path(get_settings().correction_schema_dir)
        (schema_dir / "active_schema.json").write_text("{not json")

        response = client.get("/corrections/schema")

        assert response.status_code == 200
        assert response.json() == {"title": "Unknown Schema", "version": "unknown", "schema": None}
        assert client.post("/corrections/payload", json=_payload()).status_code == 422

    @pytest.mark.parametrize("schema", [[1, 2], {"title": "no type"}, {"type": "bogus"}])
    def test_put_rejects_bad_schema(self, client, schema):
        response = client.put("/corrections/schema", json=schema)

        assert response.status_code == 400
        assert client.get("/corrections/schema").json()["title"] == "Claim Correction Payload"


# ===========================================================================
# /corrections/transition
# ===========================================================================

class TestTransition:
    def test_apply_correction(self, client):
        correction = _correction_record(client)

        response = client.post(
            "/corrections/transition",
            json={"correction": correction, "to_status": "applied", "actor": "adjuster-7", "method": "content_edit"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "applied"
        assert body["applied_by"] == "adjuster-7"
        assert body["applied_method"] == "content_edit"

    def test_terminal_correction_conflicts(self, client):
        correction = _correction_record(client)
        correction["status"] = "rejected"

        response = client.post(
            "/corrections/transition",
            json={"correction": correction, "to_status": "manual", "actor": "adjuster-7"},
        )

        assert response.status_code == 409

    def test_resolve_validation(self, client):
        validation = client.post(
            "/claims/CLM-1/validate",
            json={
                "documents": [
                    {"document_id": "a", "content": "Policy Number: POL-889911"},
                    {"document_id": "b", "content": "Policy Number: POL-889912"},
                ]
            },
        ).json()["validations"][0]

        response = client.post(
            "/corrections/transition",
            json={"validation": validation, "to_status": "resolved", "actor": "supervisor", "value": "POL-889911"},
        )

        assert response.status_code == 200
        assert response.json()["resolved_value"] == "POL-889911"

    def test_needs_exactly_one_record(self, client):
        response = client.post("/corrections/transition", json={"to_status": "applied", "actor": "x"})
        assert response.status_code == 400

    def test_unknown_status(self, client):
        correction = _correction_record(client)

        response = client.post(
            "/corrections/transition",
            json={"correction": correction, "to_status": "archived", "actor": "adjuster-7"},
        )

        assert response.status_code == 422
