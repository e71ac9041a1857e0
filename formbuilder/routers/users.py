from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from formbuilder.crud.users import create_user_db
from formbuilder.db.session import get_db
from formbuilder.schemas.user import UserCreateRequest, UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=201)
def api_create_user(user_data: UserCreateRequest, db: Session = Depends(get_db)):
    """Register a form creator by email"""
    return JSONResponse(status_code=201, content=create_user_db(user_data, db))
