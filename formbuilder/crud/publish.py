import logging
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formbuilder.core.config.settings import Settings
from formbuilder.core.exceptions import InvalidInput
from formbuilder.crud.forms import get_form_or_404
from formbuilder.models.form import Form, Recipient
from formbuilder.services.email import Notifier
from formbuilder.services.tokens import generate_token
from formbuilder.utils.helpers import build_link, get_utc_now, normalize_email, validate_email

logger = logging.getLogger("formbuilder.publish")


def clean_emails(emails: List[str]) -> List[str]:
    """
    Validate and normalize the addresses of a publish request

    Returns:
        Lower-cased addresses, duplicates removed, request order kept

    Raises:
        InvalidInput: if the list is empty or holds a malformed address
    """
    if not emails:
        raise InvalidInput("At least one email is required")

    invalid = [email for email in emails if not validate_email(email.strip())]
    if invalid:
        raise InvalidInput(
            f"Invalid email address: {', '.join(invalid)}",
            errors=[{"email": email, "message": "Invalid email address"} for email in invalid],
        )

    cleaned = []
    for email in emails:
        email = normalize_email(email)
        if email not in cleaned:
            cleaned.append(email)
    return cleaned


def recipient_link(settings: Settings, form_id: str, email: str, token: str) -> str:
    return build_link(settings.PUBLIC_BASE_URL, f"forms/{form_id}", email=email, token=token)


def owner_link(settings: Settings, form_id: str, token: str) -> str:
    return build_link(settings.PUBLIC_BASE_URL, f"forms/{form_id}/admin", token=token)


def published_url(settings: Settings, form_id: str) -> str:
    return build_link(settings.PUBLIC_BASE_URL, f"forms/{form_id}")


def _insert_recipient(db: Session, form_id: str, email: str) -> bool:
    """
    Add a recipient unless the form already has one with this email

    The existence check and the insert are one statement so overlapping
    publish calls cannot hand out two tokens for the same address.

    Returns:
        True if a new recipient row was written
    """
    values = {
        "form_id": form_id,
        "email": email,
        "token": generate_token(),
        "used": False,
        "created_at": get_utc_now(),
    }
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        # Dialects without ON CONFLICT fall back to the unique constraint
        try:
            with db.begin_nested():
                db.add(Recipient(**values))
            return True
        except IntegrityError:
            return False

    stmt = insert(Recipient).values(**values).on_conflict_do_nothing(index_elements=["form_id", "email"])
    result = db.execute(stmt)
    return result.rowcount == 1


def publish_form_db(form_id: str, emails: List[str], db: Session, settings: Settings, notifier: Notifier) -> Dict[str, Any]:
    """
    Publish a form to a set of recipients

    Issues the owner access token on first publish, a fresh single-use token for
    every address that is not yet a recipient, and emails an invitation to each
    newly added recipient. Addresses that already are recipients keep their
    token and are not emailed again.

    Parameters:
    - form_id: Form to publish
    - emails: Recipient addresses
    - db: Database session
    - settings: Application settings, for building links
    - notifier: Mailer for the invitations

    Returns:
    - Dictionary with the owner link and one link per requested recipient
    """
    form = get_form_or_404(form_id, db)
    addresses = clean_emails(emails)

    new_emails = set()
    try:
        db.query(Form).filter(
            Form.id == form_id,
            Form.owner_access_token.is_(None),
        ).update({Form.owner_access_token: generate_token()}, synchronize_session=False)
        db.query(Form).filter(Form.id == form_id).update(
            {Form.published_url: published_url(settings, form_id), Form.updated_at: get_utc_now()},
            synchronize_session=False,
        )
        for email in addresses:
            if _insert_recipient(db, form_id, email):
                new_emails.add(email)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(form)
    tokens = {
        recipient.email: recipient.token
        for recipient in db.query(Recipient).filter(
            Recipient.form_id == form_id,
            Recipient.email.in_(addresses),
        )
    }

    recipients = [
        {
            "email": email,
            "link": recipient_link(settings, form_id, email, tokens[email]),
            "isNew": email in new_emails,
        }
        for email in addresses
    ]
    logger.info(
        "Published form %s: %d new recipients, %d already invited",
        form_id, len(new_emails), len(addresses) - len(new_emails),
    )

    for recipient in recipients:
        if not recipient["isNew"]:
            continue
        try:
            notifier.send_invitation(recipient["email"], form.title, recipient["link"])
        except Exception:
            logger.exception("Invitation email to %s failed", recipient["email"])

    return {
        "formId": form_id,
        "publishedUrl": form.published_url,
        "ownerAccessLink": owner_link(settings, form_id, form.owner_access_token),
        "recipients": recipients,
    }
