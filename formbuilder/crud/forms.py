import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from formbuilder.core.exceptions import InvalidInput, NotFound
from formbuilder.models.form import Form
from formbuilder.models.user import User
from formbuilder.schemas.field import dump_fields, field_list_adapter
from formbuilder.schemas.form import FormCreateRequest
from formbuilder.utils.helpers import format_datetime

logger = logging.getLogger("formbuilder.forms")


def validation_errors(error: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic ValidationError into loc/message pairs"""
    return [
        {"loc": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


def parse_fields(raw_fields: List[Dict[str, Any]]):
    """
    Parse raw field dictionaries into typed field definitions

    Raises:
        InvalidInput: if the list is empty, a field is malformed or two
            fields share an id
    """
    if not raw_fields:
        raise InvalidInput("Form must have at least one field")
    for index, raw in enumerate(raw_fields):
        if not raw.get("type"):
            raise InvalidInput(f"Field {index} is missing a type")
    try:
        fields = field_list_adapter.validate_python(raw_fields)
    except ValidationError as e:
        raise InvalidInput("Malformed field definitions", errors=validation_errors(e))

    seen = set()
    for field in fields:
        if field.id in seen:
            raise InvalidInput(f"Duplicate field id: {field.id}")
        seen.add(field.id)
    return fields


def create_form_db(form_data: FormCreateRequest, db: Session) -> Dict[str, Any]:
    """
    Create a new form in the database

    Parameters:
    - form_data: FormCreateRequest object
    - db: Database session

    Returns:
    - Dictionary with the generated form id
    """
    fields = parse_fields(form_data.fields)
    if form_data.createdBy is not None and db.get(User, form_data.createdBy) is None:
        raise InvalidInput(f"Unknown user: {form_data.createdBy}")
    new_form = Form(
        title=form_data.title,
        description=form_data.description or "",
        fields=dump_fields(fields),
        is_template=form_data.isTemplate,
        created_by=form_data.createdBy,
        custom_styles=form_data.customStyles,
    )
    db.add(new_form)
    db.commit()
    db.refresh(new_form)

    logger.info("Created form %s with %d fields", new_form.id, len(fields))
    return {"formId": new_form.id}


def get_form_or_404(form_id: str, db: Session) -> Form:
    form = db.query(Form).filter(Form.id == form_id).first()
    if not form:
        raise NotFound("Form not found")
    return form


def public_projection(form: Form) -> Dict[str, Any]:
    """Form as seen by anyone holding its id: no tokens, no recipients, no responses"""
    return {
        "formId": form.id,
        "title": form.title,
        "description": form.description or "",
        "fields": list(form.fields or []),
        "publishedUrl": form.published_url or "",
        "isTemplate": bool(form.is_template),
        "customStyles": form.custom_styles,
    }


def serialize_response(response) -> Dict[str, Any]:
    return {
        "email": response.email,
        "responses": dict(response.answers or {}),
        "submittedAt": format_datetime(response.submitted_at),
    }


def admin_projection(form: Form) -> Dict[str, Any]:
    """Full form for its owner, including responses and recipient status"""
    data = public_projection(form)
    data.update({
        "createdAt": format_datetime(form.created_at),
        "createdBy": form.created_by,
        "updatedAt": format_datetime(form.updated_at),
        "recipients": [
            {
                "email": recipient.email,
                "used": bool(recipient.used),
                "usedAt": format_datetime(recipient.used_at),
            }
            for recipient in form.recipients
        ],
        "responses": [serialize_response(response) for response in form.responses],
    })
    return data


def get_public_form_db(form_id: str, db: Session) -> Dict[str, Any]:
    """
    Retrieve the public projection of a form by its ID
    """
    return public_projection(get_form_or_404(form_id, db))


def get_templates_db(db: Session) -> List[Dict[str, Any]]:
    """
    Get all forms marked as public templates, oldest first
    """
    templates = (
        db.query(Form)
        .filter(Form.is_template.is_(True))
        .order_by(Form.created_at.asc())
        .all()
    )
    return [public_projection(template) for template in templates]


def get_user_forms_db(user_id: int, db: Session) -> List[Dict[str, Any]]:
    """
    List the forms a user created, oldest first

    Only the public projection of each form is returned; owner links are
    handed out by publish and never listed.
    """
    if db.get(User, user_id) is None:
        raise NotFound("User not found")
    forms = (
        db.query(Form)
        .filter(Form.created_by == user_id)
        .order_by(Form.created_at.asc())
        .all()
    )
    return [public_projection(form) for form in forms]
