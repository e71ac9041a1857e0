from pydantic import BaseModel


class UserCreateRequest(BaseModel):
    email: str
    name: str = ""


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    createdAt: str
