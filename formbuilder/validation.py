"""
Answer validation against the rules configured on each field.

The same checks the builder's preview runs: required answers, text length,
email pattern, numeric ranges for ratings and sliders, date bounds and known
choice options. Submissions are only held to these rules when
``ENFORCE_FIELD_VALIDATION`` is enabled.
"""

import math
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from formbuilder.schemas.field import CHOICE_TYPES, DISPLAY_TYPES, TEXT_TYPES, field_list_adapter
from formbuilder.utils.helpers import validate_email


def is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, list) and len(value) == 0)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _check_text(field, value) -> List[str]:
    if not isinstance(value, str):
        return ["Expected a text answer"]
    errors = []
    rules = field.properties.validation
    if rules.minLength and len(value) < rules.minLength:
        errors.append(f"Minimum length is {rules.minLength} characters")
    if rules.maxLength and len(value) > rules.maxLength:
        errors.append(f"Maximum length is {rules.maxLength} characters")
    if field.type == "email":
        if rules.pattern:
            if not re.search(rules.pattern, value):
                errors.append("Please enter a valid email address")
        elif not validate_email(value):
            errors.append("Please enter a valid email address")
    elif rules.pattern and not re.search(rules.pattern, value):
        errors.append("Answer does not match the expected format")
    return errors


def _check_choice(field, value) -> List[str]:
    options = field.properties.options
    known = {option.id for option in options} | {option.text for option in options}
    allow_multiple = getattr(field.properties, "allowMultiple", False)

    if isinstance(value, list):
        selected = value
        if len(selected) > 1 and not allow_multiple:
            return ["Only one option may be selected"]
    elif isinstance(value, str):
        selected = [value]
    else:
        return ["Expected a selected option"]

    unknown = [item for item in selected if item not in known]
    if unknown:
        return [f"Unknown option: {', '.join(unknown)}"]
    return []


def _check_date(field, value) -> List[str]:
    parsed = _parse_date(value) if isinstance(value, str) else None
    if parsed is None:
        return ["Expected a date (YYYY-MM-DD)"]
    errors = []
    rules = field.properties.validation
    if rules.min and parsed < rules.min:
        errors.append(f"Date must be on or after {rules.min.isoformat()}")
    if rules.max and parsed > rules.max:
        errors.append(f"Date must be on or before {rules.max.isoformat()}")
    return errors


def _check_time(field, value) -> List[str]:
    if isinstance(value, str):
        try:
            time.fromisoformat(value)
            return []
        except ValueError:
            pass
    return ["Expected a time (HH:MM)"]


def _check_rating(field, value) -> List[str]:
    max_rating = field.properties.maxRating
    if not _is_number(value) or int(value) != value or not 1 <= value <= max_rating:
        return [f"Rating must be a whole number between 1 and {max_rating}"]
    return []


def _check_slider(field, value) -> List[str]:
    if not _is_number(value):
        return ["Expected a number"]
    errors = []
    if value < field.properties.min:
        errors.append(f"Minimum value is {field.properties.min:g}")
    if value > field.properties.max:
        errors.append(f"Maximum value is {field.properties.max:g}")
    return errors


CHECKS = {
    "date": _check_date,
    "time": _check_time,
    "rating": _check_rating,
    "slider": _check_slider,
}
CHECKS.update({field_type: _check_text for field_type in TEXT_TYPES})
CHECKS.update({field_type: _check_choice for field_type in CHOICE_TYPES})


def validate_answers(fields: List[Dict[str, Any]], answers: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Check submitted answers against a form's field rules

    Args:
        fields: Stored field definitions of the form
        answers: Mapping of field id to submitted value

    Returns:
        A list of {fieldId, message} errors, empty when the answers pass
    """
    definitions = field_list_adapter.validate_python(fields)
    errors = []
    known_ids = set()

    for field in definitions:
        known_ids.add(field.id)
        if field.type in DISPLAY_TYPES:
            continue

        value = answers.get(field.id)
        if is_empty(value):
            if field.required:
                errors.append({"fieldId": field.id, "message": "This field is required"})
            continue

        for message in CHECKS[field.type](field, value):
            errors.append({"fieldId": field.id, "message": message})

    for field_id in answers:
        if field_id not in known_ids:
            errors.append({"fieldId": field_id, "message": "Unknown field"})
    return errors
