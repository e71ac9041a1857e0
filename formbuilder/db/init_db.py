from sqlalchemy.engine import Engine

from formbuilder.db.base import Base
# Imported for its side effect of registering the tables on Base.metadata
from formbuilder.models import form, user  # noqa: F401

def init_db(engine: Engine) -> None:
    """Create any missing tables"""
    Base.metadata.create_all(bind=engine)
