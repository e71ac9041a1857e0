from sqlalchemy import Column, Integer, String, DateTime

from formbuilder.db.base import Base
from formbuilder.utils.helpers import get_utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
