import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formbuilder.core.exceptions import InvalidInput
from formbuilder.models.user import User
from formbuilder.schemas.user import UserCreateRequest
from formbuilder.utils.helpers import format_datetime, normalize_email, validate_email

logger = logging.getLogger("formbuilder.users")


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name or "",
        "createdAt": format_datetime(user.created_at),
    }


def create_user_db(user_data: UserCreateRequest, db: Session) -> Dict[str, Any]:
    """
    Register a form creator

    Parameters:
    - user_data: Email and display name
    - db: Database session

    Returns:
    - The stored user

    Raises:
    - InvalidInput: if the email is malformed or already registered
    """
    if not validate_email(user_data.email.strip()):
        raise InvalidInput(f"Invalid email address: {user_data.email}")
    email = normalize_email(user_data.email)

    if db.query(User).filter(User.email == email).first():
        raise InvalidInput("User with this email already exists")

    user = User(email=email, name=user_data.name.strip())
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Registered concurrently between the lookup and the insert
        db.rollback()
        raise InvalidInput("User with this email already exists")
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return serialize_user(user)
