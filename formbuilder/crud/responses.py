import logging
from collections import OrderedDict
from typing import Any, Dict, List

import pandas as pd
from sqlalchemy.orm import Session

from formbuilder.core.config.settings import Settings
from formbuilder.core.exceptions import AlreadySubmitted, InvalidInput
from formbuilder.crud.access import match_recipient, require_owner
from formbuilder.crud.forms import get_form_or_404, serialize_response
from formbuilder.models.form import FormResponse, Recipient
from formbuilder.schemas.field import CHOICE_TYPES, DISPLAY_TYPES
from formbuilder.schemas.form import SubmitRequest
from formbuilder.services.email import Notifier
from formbuilder.utils.helpers import format_datetime, get_utc_now
from formbuilder.validation import is_empty, validate_answers

logger = logging.getLogger("formbuilder.responses")


def submit_response_db(
    form_id: str,
    submission: SubmitRequest,
    db: Session,
    settings: Settings,
    notifier: Notifier,
) -> Dict[str, Any]:
    """
    Record a recipient's response and consume their token

    The token is claimed with one conditional update (unused -> used) in the
    same transaction that stores the response, so of two concurrent submissions
    with the same token exactly one is accepted and a used token always has its
    response.

    Parameters:
    - form_id: Form being answered
    - submission: Email, token and answers
    - db: Database session
    - settings: Application settings
    - notifier: Mailer for the acknowledgement

    Returns:
    - Dictionary with status and the server-assigned submission time
    """
    form = get_form_or_404(form_id, db)
    recipient = match_recipient(form_id, submission.email, submission.token, db)
    if recipient.used:
        logger.info("Rejected resubmission for form %s by %s", form_id, recipient.email)
        raise AlreadySubmitted()

    answers = dict(submission.response)
    if settings.ENFORCE_FIELD_VALIDATION:
        errors = validate_answers(form.fields, answers)
        if errors:
            raise InvalidInput("Response failed validation", errors=errors)

    submitted_at = get_utc_now()
    try:
        claimed = db.query(Recipient).filter(
            Recipient.id == recipient.id,
            Recipient.token == recipient.token,
            Recipient.used.is_(False),
        ).update({Recipient.used: True, Recipient.used_at: submitted_at}, synchronize_session=False)
        if claimed != 1:
            db.rollback()
            logger.info("Lost submission race for form %s by %s", form_id, recipient.email)
            raise AlreadySubmitted()

        db.add(FormResponse(
            form_id=form_id,
            email=recipient.email,
            answers=answers,
            submitted_at=submitted_at,
        ))
        db.commit()
    except AlreadySubmitted:
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("Recorded response for form %s", form_id)
    try:
        notifier.send_acknowledgement(recipient.email, form.title)
    except Exception:
        logger.exception("Acknowledgement email to %s failed", recipient.email)

    return {"status": "ok", "submittedAt": format_datetime(submitted_at)}


def get_responses_db(form_id: str, token: str, db: Session) -> Dict[str, Any]:
    """
    Get every response of a form for its owner, in submission order
    """
    form = require_owner(form_id, token, db)
    responses = [serialize_response(response) for response in form.responses]
    return {
        "formId": form.id,
        "responses": responses,
        "recipientCount": len(form.recipients),
        "responseCount": len(responses),
    }


def summarize_responses(fields: List[Dict[str, Any]], answers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Build per-question answer distributions

    Choice fields count each option (by its text, in option order, including
    options nobody picked); other fields count distinct answers. Percentages
    are relative to the number of responses that answered the question.

    Args:
        fields: Stored field definitions
        answers: Answer mappings, one per response

    Returns:
        One distribution per answerable field, in field order
    """
    distributions = []
    for field in fields:
        if field.get("type") in DISPLAY_TYPES:
            continue

        field_id = field["id"]
        counts = OrderedDict()
        labels = {}
        if field.get("type") in CHOICE_TYPES:
            for option in field.get("properties", {}).get("options", []):
                labels[option["id"]] = option.get("text") or option["id"]
                counts[labels[option["id"]]] = 0

        answered = 0
        for answer in answers:
            value = answer.get(field_id)
            if is_empty(value):
                continue
            answered += 1
            for item in value if isinstance(value, list) else [value]:
                key = labels.get(item, item) if isinstance(item, str) else item
                key = str(key)
                counts[key] = counts.get(key, 0) + 1

        distributions.append({
            "fieldId": field_id,
            "question_text": field.get("label") or field_id,
            "answered": answered,
            "options": [
                {
                    "selected_option": option,
                    "count": count,
                    "percentage": round(count / answered * 100, 1) if answered else 0.0,
                }
                for option, count in counts.items()
            ],
        })
    return distributions


def get_summary_db(form_id: str, token: str, db: Session) -> Dict[str, Any]:
    form = require_owner(form_id, token, db)
    answers = [response.answers or {} for response in form.responses]
    return {
        "formId": form.id,
        "responseCount": len(answers),
        "distributions": summarize_responses(form.fields or [], answers),
    }


def _cell(value: Any) -> Any:
    if isinstance(value, list):
        return ", ".join(map(str, value))
    return value


def export_responses_csv(form_id: str, token: str, db: Session) -> str:
    """
    Render a form's responses as CSV, one row per response

    Columns are email, submittedAt and one column per answerable field,
    headed by the field label.
    """
    form = require_owner(form_id, token, db)
    fields = [field for field in form.fields or [] if field.get("type") not in DISPLAY_TYPES]
    columns = ["email", "submittedAt"] + [field.get("label") or field["id"] for field in fields]

    rows = []
    for response in form.responses:
        answers = response.answers or {}
        rows.append(
            [response.email, format_datetime(response.submitted_at)]
            + [_cell(answers.get(field["id"])) for field in fields]
        )

    df = pd.DataFrame(rows, columns=columns)
    return df.to_csv(index=False)
