from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from formbuilder.core.exceptions import AlreadySubmitted, Forbidden, InvalidInput
from formbuilder.crud.forms import admin_projection, get_form_or_404, public_projection
from formbuilder.models.form import Form, Recipient
from formbuilder.schemas.form import VerifyTokenRequest
from formbuilder.services.tokens import tokens_match
from formbuilder.utils.helpers import normalize_email


def match_recipient(form_id: str, email: Optional[str], token: Optional[str], db: Session) -> Recipient:
    """
    Find the recipient of a form holding both the email and the token

    Raises:
        Forbidden: if no recipient matches the pair
    """
    if not email or not token:
        raise Forbidden("Invalid token or email")
    recipient = db.query(Recipient).filter(
        Recipient.form_id == form_id,
        Recipient.email == normalize_email(email),
    ).first()
    if recipient is None or not tokens_match(token, recipient.token):
        raise Forbidden("Invalid token or email")
    return recipient


def verify_recipient_db(form_id: str, email: Optional[str], token: Optional[str], db: Session) -> Dict[str, Any]:
    """
    Check a recipient's credentials before they open the form

    Read only: the token stays unused.
    """
    form = get_form_or_404(form_id, db)
    recipient = match_recipient(form_id, email, token, db)
    if recipient.used:
        raise AlreadySubmitted("This token has already been used")

    projection = public_projection(form)
    return {
        "valid": True,
        "formId": form.id,
        "title": projection["title"],
        "description": projection["description"],
        "fields": projection["fields"],
    }


def require_owner(form_id: str, token: Optional[str], db: Session) -> Form:
    """
    Resolve a form for its owner

    Raises:
        NotFound: if the form does not exist
        Forbidden: unless the token equals the form's owner access token
    """
    form = get_form_or_404(form_id, db)
    if not tokens_match(token, form.owner_access_token):
        raise Forbidden("Invalid admin token")
    return form


def verify_token_db(form_id: str, request: VerifyTokenRequest, db: Session) -> Dict[str, Any]:
    if request.adminToken is not None:
        form = require_owner(form_id, request.adminToken, db)
        return {"valid": True, "form": admin_projection(form)}

    form = get_form_or_404(form_id, db)
    if form.is_template:
        projection = public_projection(form)
        return {
            "valid": True,
            "formId": form.id,
            "title": projection["title"],
            "description": projection["description"],
            "fields": projection["fields"],
        }

    if request.email is None and request.token is None:
        raise InvalidInput("Either email and token or adminToken is required")
    return verify_recipient_db(form_id, request.email, request.token, db)
