import math
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional

from formbuilder.schemas.field import AnswerValue


def _all_finite(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(_all_finite(item) for item in value.values())
    if isinstance(value, list):
        return all(_all_finite(item) for item in value)
    return True


class FormCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    # Parsed into field definitions by the form store so malformed fields
    # are reported as InvalidInput
    fields: List[Dict[str, Any]] = Field(..., validation_alias=AliasChoices("fields", "formFields"))
    isTemplate: bool = False
    createdBy: Optional[int] = None
    customStyles: Optional[Dict[str, Any]] = None

    @field_validator("customStyles")
    @classmethod
    def check_finite_numbers(cls, v):
        if v is not None and not _all_finite(v):
            raise ValueError("Style values must not contain NaN or infinite numbers")
        return v


class FormCreated(BaseModel):
    formId: str


class PublicForm(BaseModel):
    formId: str
    title: str
    description: str
    fields: List[Dict[str, Any]]
    publishedUrl: str
    isTemplate: bool
    customStyles: Optional[Dict[str, Any]] = None


class PublishRequest(BaseModel):
    emails: List[str]


class RecipientLink(BaseModel):
    email: str
    link: str
    isNew: bool


class PublishResult(BaseModel):
    formId: str
    publishedUrl: str
    ownerAccessLink: str
    recipients: List[RecipientLink]


class VerifyTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    token: Optional[str] = None
    adminToken: Optional[str] = Field(None, validation_alias=AliasChoices("adminToken", "admin_token"))


class SubmitRequest(BaseModel):
    email: str
    token: str
    response: Dict[str, AnswerValue] = Field(..., validation_alias=AliasChoices("response", "responses"))


class SubmitResult(BaseModel):
    status: str = "ok"
    submittedAt: str


class ValidateRequest(BaseModel):
    response: Dict[str, AnswerValue] = Field(..., validation_alias=AliasChoices("response", "responses"))


class FieldError(BaseModel):
    fieldId: str
    message: str


class ValidateResult(BaseModel):
    valid: bool
    errors: List[FieldError]


class FieldCreateRequest(BaseModel):
    type: str
    label: str = ""
    required: bool = False
    properties: Optional[Dict[str, Any]] = None
    index: Optional[int] = None


class FieldUpdateRequest(BaseModel):
    label: Optional[str] = None
    required: Optional[bool] = None
    properties: Optional[Dict[str, Any]] = None


class FieldMoveRequest(BaseModel):
    index: int


class FieldOrderRequest(BaseModel):
    fieldIds: List[str]


class FieldsResult(BaseModel):
    formId: str
    fields: List[Dict[str, Any]]
    field: Optional[Dict[str, Any]] = None
