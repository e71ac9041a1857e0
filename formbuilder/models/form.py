import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from formbuilder.db.base import Base
from formbuilder.utils.helpers import get_utc_now


def _new_form_id():
    return uuid.uuid4().hex


class Form(Base):
    __tablename__ = "forms"

    id = Column(String(32), primary_key=True, default=_new_form_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    fields = Column(JSON, nullable=False)  # ordered list of field definitions
    owner_access_token = Column(String(64), nullable=True)
    published_url = Column(String, nullable=False, default="")
    is_template = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    custom_styles = Column(JSON, nullable=True)  # passed through to the renderer untouched
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    recipients = relationship(
        "Recipient", back_populates="form", order_by="Recipient.id", cascade="all, delete-orphan"
    )
    responses = relationship(
        "FormResponse", back_populates="form", order_by="FormResponse.id", cascade="all, delete-orphan"
    )


class Recipient(Base):
    __tablename__ = "form_recipients"
    __table_args__ = (
        UniqueConstraint("form_id", "email", name="uq_form_recipient_email"),
    )

    id = Column(Integer, primary_key=True)
    form_id = Column(String(32), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String, nullable=False)
    token = Column(String(64), nullable=False, unique=True)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    used_at = Column(DateTime(timezone=True), nullable=True)

    form = relationship("Form", back_populates="recipients")


class FormResponse(Base):
    __tablename__ = "form_responses"

    id = Column(Integer, primary_key=True)
    form_id = Column(String(32), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String, nullable=False)
    answers = Column(JSON, nullable=False)  # field id -> submitted value
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)

    form = relationship("Form", back_populates="responses")
