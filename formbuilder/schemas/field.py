"""
Field definitions for form builder forms.

Every field carries ``id``, ``type``, ``label`` and ``required``; the shape of
``properties`` depends on ``type``. ``FieldDefinition`` is a discriminated union
on ``type`` so a definition is resolved to its variant when it is parsed.
"""

import re
from datetime import date
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

CHOICE_TYPES = ("multipleChoice", "dropdown", "pictureChoice")
DISPLAY_TYPES = ("heading", "paragraph")
TEXT_TYPES = ("shortAnswer", "longAnswer", "email")


class ChoiceOption(BaseModel):
    id: str = Field(..., min_length=1)
    text: str = ""


class PictureOption(ChoiceOption):
    imageUrl: Optional[str] = None


class TextValidation(BaseModel):
    minLength: Optional[int] = Field(None, ge=0)
    maxLength: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v):
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern: {e}")
        return v

    @model_validator(mode="after")
    def check_length_bounds(self):
        if self.minLength is not None and self.maxLength is not None and self.minLength > self.maxLength:
            raise ValueError("minLength must not exceed maxLength")
        return self


class TextProperties(BaseModel):
    placeholder: Optional[str] = None
    validation: TextValidation = Field(default_factory=TextValidation)


class ChoiceProperties(BaseModel):
    options: List[ChoiceOption] = Field(..., min_length=1)
    allowMultiple: bool = False

    @field_validator("options")
    @classmethod
    def check_distinct_option_ids(cls, options):
        seen = set()
        for option in options:
            if option.id in seen:
                raise ValueError(f"Duplicate option id: {option.id}")
            seen.add(option.id)
        return options


class PictureChoiceProperties(ChoiceProperties):
    options: List[PictureOption] = Field(..., min_length=1)


class DateValidation(BaseModel):
    min: Optional[date] = None
    max: Optional[date] = None


class DateProperties(BaseModel):
    validation: DateValidation = Field(default_factory=DateValidation)


class RatingProperties(BaseModel):
    maxRating: int = Field(5, ge=1, le=10)


class SliderProperties(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    min: float = 0
    max: float = 100
    step: float = Field(1, gt=0)

    @model_validator(mode="after")
    def check_range(self):
        if self.min >= self.max:
            raise ValueError("Slider min must be lower than max")
        return self


class DisplayProperties(BaseModel):
    text: Optional[str] = None


class EmptyProperties(BaseModel):
    pass


class FieldBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    label: str = Field("", validation_alias=AliasChoices("label", "title"))
    required: bool = False


class ChoiceFieldBase(FieldBase):
    @model_validator(mode="before")
    @classmethod
    def lift_legacy_options(cls, data: Any) -> Any:
        return _lift_legacy_options(data)


def _lift_legacy_options(data: Any) -> Any:
    # Older clients sent choice options as a top-level list of strings.
    if not isinstance(data, dict) or "options" not in data:
        return data
    properties = dict(data.get("properties") or {})
    if not properties.get("options"):
        properties["options"] = [
            {"id": f"option-{index + 1}", "text": text} if isinstance(text, str) else text
            for index, text in enumerate(data["options"] or [])
        ]
    data = {key: value for key, value in data.items() if key != "options"}
    data["properties"] = properties
    return data


class ShortAnswerField(FieldBase):
    type: Literal["shortAnswer"]
    properties: TextProperties = Field(default_factory=TextProperties)


class LongAnswerField(FieldBase):
    type: Literal["longAnswer"]
    properties: TextProperties = Field(default_factory=TextProperties)


class EmailField(FieldBase):
    type: Literal["email"]
    properties: TextProperties = Field(default_factory=TextProperties)


class MultipleChoiceField(ChoiceFieldBase):
    type: Literal["multipleChoice"]
    properties: ChoiceProperties


class DropdownField(ChoiceFieldBase):
    type: Literal["dropdown"]
    properties: ChoiceProperties


class PictureChoiceField(ChoiceFieldBase):
    type: Literal["pictureChoice"]
    properties: PictureChoiceProperties


class DateField(FieldBase):
    type: Literal["date"]
    properties: DateProperties = Field(default_factory=DateProperties)


class TimeField(FieldBase):
    type: Literal["time"]
    properties: EmptyProperties = Field(default_factory=EmptyProperties)


class RatingField(FieldBase):
    type: Literal["rating"]
    properties: RatingProperties = Field(default_factory=RatingProperties)


class SliderField(FieldBase):
    type: Literal["slider"]
    properties: SliderProperties = Field(default_factory=SliderProperties)


class HeadingField(FieldBase):
    type: Literal["heading"]
    properties: DisplayProperties = Field(default_factory=DisplayProperties)


class ParagraphField(FieldBase):
    type: Literal["paragraph"]
    properties: DisplayProperties = Field(default_factory=DisplayProperties)


FieldDefinition = Annotated[
    Union[
        ShortAnswerField,
        LongAnswerField,
        EmailField,
        MultipleChoiceField,
        DropdownField,
        PictureChoiceField,
        DateField,
        TimeField,
        RatingField,
        SliderField,
        HeadingField,
        ParagraphField,
    ],
    Field(discriminator="type"),
]

FIELD_TYPES = (
    "shortAnswer", "longAnswer", "email", "multipleChoice", "dropdown", "pictureChoice",
    "date", "time", "rating", "slider", "heading", "paragraph",
)

field_adapter = TypeAdapter(FieldDefinition)
field_list_adapter = TypeAdapter(List[FieldDefinition])

# A submitted answer: text, number, selected option list or a yes/no flag.
# NaN and infinities are refused, they cannot be rendered back as JSON.
AnswerValue = Union[bool, int, Annotated[float, Field(allow_inf_nan=False)], str, List[str], None]


def dump_fields(fields) -> List[Dict[str, Any]]:
    """Serialize parsed field definitions for storage in a JSON column."""
    return [field.model_dump(mode="json") for field in fields]
