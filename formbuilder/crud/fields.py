"""
Owner edits to the field list of a stored form.

Each edit loads the form's fields into a ``FormDraft``, applies one draft
operation and saves the result after the same checks form creation runs.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from formbuilder.builder import FormDraft
from formbuilder.core.exceptions import InvalidInput, NotFound
from formbuilder.crud.access import require_owner
from formbuilder.crud.forms import parse_fields, validation_errors
from formbuilder.schemas.field import dump_fields
from formbuilder.schemas.form import FieldCreateRequest, FieldUpdateRequest

logger = logging.getLogger("formbuilder.fields")


def _edit_fields(form_id: str, token: Optional[str], db: Session, edit: Callable[[FormDraft], Any]) -> Dict[str, Any]:
    form = require_owner(form_id, token, db)
    draft = FormDraft(form.fields)
    try:
        field = edit(draft)
    except KeyError as e:
        raise NotFound(f"Field not found: {e.args[0]}")
    except ValidationError as e:
        raise InvalidInput("Malformed field definition", errors=validation_errors(e))
    except ValueError as e:
        raise InvalidInput(str(e))

    form.fields = dump_fields(parse_fields(draft.dump()))
    db.commit()
    db.refresh(form)

    logger.info("Updated fields of form %s (%d fields)", form.id, len(form.fields))
    result = {"formId": form.id, "fields": list(form.fields)}
    if field is not None:
        result["field"] = field.model_dump(mode="json")
    return result


def add_field_db(form_id: str, token: Optional[str], request: FieldCreateRequest, db: Session) -> Dict[str, Any]:
    """Append a field, or insert it at ``request.index``, with type defaults"""
    return _edit_fields(form_id, token, db, lambda draft: draft.add_field(
        request.type,
        label=request.label,
        required=request.required,
        properties=request.properties,
        index=request.index,
    ))


def update_field_db(form_id: str, token: Optional[str], field_id: str,
                    request: FieldUpdateRequest, db: Session) -> Dict[str, Any]:
    """Change a field's label, required flag or properties; id and type stay"""
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    return _edit_fields(form_id, token, db, lambda draft: draft.update_field(field_id, **changes))


def delete_field_db(form_id: str, token: Optional[str], field_id: str, db: Session) -> Dict[str, Any]:
    return _edit_fields(form_id, token, db, lambda draft: draft.delete_field(field_id))


def duplicate_field_db(form_id: str, token: Optional[str], field_id: str, db: Session) -> Dict[str, Any]:
    return _edit_fields(form_id, token, db, lambda draft: draft.duplicate_field(field_id))


def move_field_db(form_id: str, token: Optional[str], field_id: str, index: int, db: Session) -> Dict[str, Any]:
    return _edit_fields(form_id, token, db, lambda draft: draft.move_field(field_id, index))


def reorder_fields_db(form_id: str, token: Optional[str], field_ids: List[str], db: Session) -> Dict[str, Any]:
    return _edit_fields(form_id, token, db, lambda draft: draft.reorder_fields(field_ids))
