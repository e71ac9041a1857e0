from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from formbuilder.core.config.settings import Settings, get_settings
from formbuilder.crud.access import verify_token_db
from formbuilder.crud.fields import (
    add_field_db, delete_field_db, duplicate_field_db, move_field_db, reorder_fields_db, update_field_db,
)
from formbuilder.crud.forms import (
    create_form_db, get_form_or_404, get_public_form_db, get_templates_db, get_user_forms_db,
)
from formbuilder.crud.publish import publish_form_db
from formbuilder.crud.responses import export_responses_csv, get_responses_db, get_summary_db, submit_response_db
from formbuilder.db.session import get_db
from formbuilder.schemas.form import (
    FieldCreateRequest, FieldMoveRequest, FieldOrderRequest, FieldsResult, FieldUpdateRequest,
    FormCreateRequest, FormCreated, PublicForm, PublishRequest, PublishResult,
    SubmitRequest, SubmitResult, ValidateRequest, ValidateResult, VerifyTokenRequest,
)
from formbuilder.services.email import Notifier, get_notifier
from formbuilder.validation import validate_answers

# Handlers are plain functions: they block on the database and on SMTP, so
# FastAPI runs them in its threadpool instead of on the event loop.
router = APIRouter(prefix="/forms", tags=["forms"])


@router.post("", response_model=FormCreated, status_code=201)
def api_create_form(form_data: FormCreateRequest, db: Session = Depends(get_db)):
    """Create a new form"""
    result = create_form_db(form_data, db)
    return JSONResponse(status_code=201, content=result)


@router.post("/templates", response_model=FormCreated, status_code=201)
def api_create_template(form_data: FormCreateRequest, db: Session = Depends(get_db)):
    """Create a form that anyone can open"""
    form_data.isTemplate = True
    result = create_form_db(form_data, db)
    return JSONResponse(status_code=201, content=result)


@router.get("/templates/public", response_model=List[PublicForm])
def api_get_templates(db: Session = Depends(get_db)):
    """List public template forms"""
    return get_templates_db(db)


@router.get("/user/{user_id}", response_model=List[PublicForm])
def api_get_user_forms(user_id: int, db: Session = Depends(get_db)):
    """List the forms a user created"""
    return get_user_forms_db(user_id, db)


@router.get("/{form_id}", response_model=PublicForm)
def api_get_form(form_id: str, db: Session = Depends(get_db)):
    """Get a form without its tokens or responses"""
    return get_public_form_db(form_id, db)


@router.post("/{form_id}/publish", response_model=PublishResult)
def api_publish_form(
    form_id: str,
    payload: PublishRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    notifier: Notifier = Depends(get_notifier),
):
    """Issue tokens for recipients and email them their links"""
    return publish_form_db(form_id, payload.emails, db, settings, notifier)


@router.post("/{form_id}/verify-token")
def api_verify_token(form_id: str, payload: VerifyTokenRequest, db: Session = Depends(get_db)):
    """Check recipient or owner credentials for a form"""
    return verify_token_db(form_id, payload, db)


@router.post("/{form_id}/validate", response_model=ValidateResult)
def api_validate_answers(form_id: str, payload: ValidateRequest, db: Session = Depends(get_db)):
    """Preview-validate answers against the form's field rules"""
    form = get_form_or_404(form_id, db)
    errors = validate_answers(form.fields, payload.response)
    return {"valid": not errors, "errors": errors}


@router.post("/{form_id}/submit", response_model=SubmitResult)
def api_submit_response(
    form_id: str,
    payload: SubmitRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    notifier: Notifier = Depends(get_notifier),
):
    """Submit a recipient's response; each token is accepted once"""
    return submit_response_db(form_id, payload, db, settings, notifier)


@router.get("/{form_id}/responses")
def api_get_responses(form_id: str, token: Optional[str] = None, db: Session = Depends(get_db)):
    """Get all responses of a form (owner token required)"""
    return get_responses_db(form_id, token, db)


@router.get("/{form_id}/summary")
def api_get_summary(form_id: str, token: Optional[str] = None, db: Session = Depends(get_db)):
    """Per-question answer distributions (owner token required)"""
    return get_summary_db(form_id, token, db)


@router.get("/{form_id}/export")
def api_export_responses(form_id: str, token: Optional[str] = None, db: Session = Depends(get_db)):
    """Download responses as CSV (owner token required)"""
    content = export_responses_csv(form_id, token, db)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="form-{form_id}-responses.csv"'},
    )


# Field editing (owner token required)

@router.post("/{form_id}/fields", response_model=FieldsResult, status_code=201)
def api_add_field(form_id: str, payload: FieldCreateRequest, token: Optional[str] = None,
                  db: Session = Depends(get_db)):
    """Add a field with the defaults of its type"""
    return JSONResponse(status_code=201, content=add_field_db(form_id, token, payload, db))


@router.put("/{form_id}/fields", response_model=FieldsResult)
def api_reorder_fields(form_id: str, payload: FieldOrderRequest, token: Optional[str] = None,
                       db: Session = Depends(get_db)):
    """Reorder fields; the ids must list every field exactly once"""
    return reorder_fields_db(form_id, token, payload.fieldIds, db)


@router.patch("/{form_id}/fields/{field_id}", response_model=FieldsResult)
def api_update_field(form_id: str, field_id: str, payload: FieldUpdateRequest, token: Optional[str] = None,
                     db: Session = Depends(get_db)):
    return update_field_db(form_id, token, field_id, payload, db)


@router.delete("/{form_id}/fields/{field_id}", response_model=FieldsResult)
def api_delete_field(form_id: str, field_id: str, token: Optional[str] = None, db: Session = Depends(get_db)):
    return delete_field_db(form_id, token, field_id, db)


@router.post("/{form_id}/fields/{field_id}/duplicate", response_model=FieldsResult, status_code=201)
def api_duplicate_field(form_id: str, field_id: str, token: Optional[str] = None, db: Session = Depends(get_db)):
    """Copy a field right after itself, with fresh ids"""
    return JSONResponse(status_code=201, content=duplicate_field_db(form_id, token, field_id, db))


@router.put("/{form_id}/fields/{field_id}/position", response_model=FieldsResult)
def api_move_field(form_id: str, field_id: str, payload: FieldMoveRequest, token: Optional[str] = None,
                   db: Session = Depends(get_db)):
    return move_field_db(form_id, token, field_id, payload.index, db)
