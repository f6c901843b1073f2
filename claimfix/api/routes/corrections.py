"""Correction payload routes.

POST /corrections/payload                 validate + adapt an upstream payload
POST /corrections/payload/issue-bundle    same, flattened to a legacy issue bundle
GET  /corrections/schema                  active payload schema
PUT  /corrections/schema                  replace the operator schema
POST /corrections/transition              move a correction/validation out of pending
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from claimfix.adapters.correction_payload import adapt_correction_payload, adapt_to_issue_bundle
from claimfix.adapters.schema_store import SchemaStore, SchemaValidationError
from claimfix.api.deps import get_schema_store
from claimfix.core.constants import FixMethod
from claimfix.review.workflow import CorrectionWorkflow, InvalidTransitionError, ValidationWorkflow
from claimfix.schemas.correction import Correction
from claimfix.schemas.validation import CrossDocumentValidation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/corrections", tags=["corrections"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class TransitionBody(BaseModel):
    correction: Correction | None = None
    validation: CrossDocumentValidation | None = None
    to_status: str
    actor: str
    method: FixMethod | None = None
    value: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _schema_rejection(exc: SchemaValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/payload", summary="Adapt an upstream correction payload")
def adapt_payload(
    payload: dict[str, Any] = Body(...),
    store: SchemaStore = Depends(get_schema_store),
):
    try:
        adapted = adapt_correction_payload(payload, schema_store=store)
    except SchemaValidationError as exc:
        return _schema_rejection(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return adapted.model_dump(mode="json", by_alias=True)


@router.post("/payload/issue-bundle", summary="Adapt a payload to a legacy issue bundle")
def adapt_payload_to_issue_bundle(
    payload: dict[str, Any] = Body(...),
    document_id: str = Query(...),
    store: SchemaStore = Depends(get_schema_store),
):
    try:
        return adapt_to_issue_bundle(payload, document_id, schema_store=store)
    except SchemaValidationError as exc:
        return _schema_rejection(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.get("/schema", summary="Active correction payload schema")
def get_schema(store: SchemaStore = Depends(get_schema_store)):
    return {
        "title": store.schema_title(),
        "version": store.schema_version(),
        "schema": store.active_schema(),
    }


@router.put("/schema", summary="Replace the operator correction schema")
def put_schema(
    schema: Any = Body(...),
    store: SchemaStore = Depends(get_schema_store),
):
    try:
        store.save_active_schema(schema)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"success": True, "title": store.schema_title(), "version": store.schema_version()}


@router.post("/transition", summary="Apply a status transition to a record")
def transition(body: TransitionBody):
    if (body.correction is None) == (body.validation is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of correction or validation")

    try:
        if body.correction is not None:
            updated = CorrectionWorkflow().transition(
                body.correction, body.to_status, body.actor, method=body.method,
            )
        else:
            updated = ValidationWorkflow().transition(
                body.validation, body.to_status, body.actor, value=body.value,
            )
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return updated.model_dump(mode="json", by_alias=True)
