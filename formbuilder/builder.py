import uuid
from typing import Any, Dict, List, Optional

from formbuilder.schemas.field import CHOICE_TYPES, FIELD_TYPES, dump_fields, field_adapter, field_list_adapter


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def default_properties(field_type: str) -> Dict[str, Any]:
    """Properties a freshly dropped field of this type starts with"""
    if field_type in CHOICE_TYPES:
        return {"options": [{"id": new_id(), "text": f"Option {index}"} for index in (1, 2)]}
    return {}


class FormDraft:
    """
    Editable copy of a form's field list.

    Fields are kept as typed definitions, so every edit is checked against
    the same rules the form store applies when a form is created.
    """

    def __init__(self, fields=None):
        self.fields = list(field_list_adapter.validate_python(fields or []))

    def _index(self, field_id: str) -> int:
        for index, field in enumerate(self.fields):
            if field.id == field_id:
                return index
        raise KeyError(field_id)

    def add_field(self, field_type: str, label: str = "", required: bool = False,
                  properties: Optional[Dict[str, Any]] = None, index: Optional[int] = None):
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type: {field_type}")
        field = field_adapter.validate_python({
            "id": new_id(),
            "type": field_type,
            "label": label,
            "required": required,
            "properties": properties if properties is not None else default_properties(field_type),
        })
        if index is None:
            self.fields.append(field)
        else:
            self.fields.insert(max(0, min(index, len(self.fields))), field)
        return field

    def update_field(self, field_id: str, **changes):
        index = self._index(field_id)
        data = self.fields[index].model_dump(mode="json")
        changes.pop("id", None)
        changes.pop("type", None)
        data.update(changes)
        self.fields[index] = field_adapter.validate_python(data)
        return self.fields[index]

    def delete_field(self, field_id: str) -> None:
        del self.fields[self._index(field_id)]

    def duplicate_field(self, field_id: str):
        """Insert a copy right after the source field, with fresh ids"""
        index = self._index(field_id)
        data = self.fields[index].model_dump(mode="json")
        data["id"] = new_id()
        for option in data.get("properties", {}).get("options", []):
            option["id"] = new_id()
        copy = field_adapter.validate_python(data)
        self.fields.insert(index + 1, copy)
        return copy

    def reorder_fields(self, field_ids: List[str]) -> None:
        if sorted(field_ids) != sorted(field.id for field in self.fields):
            raise ValueError("Reorder must list every field exactly once")
        by_id = {field.id: field for field in self.fields}
        self.fields = [by_id[field_id] for field_id in field_ids]

    def move_field(self, field_id: str, index: int) -> None:
        field = self.fields.pop(self._index(field_id))
        self.fields.insert(max(0, min(index, len(self.fields))), field)

    def dump(self) -> List[Dict[str, Any]]:
        """Field definitions ready for the form's JSON column"""
        return dump_fields(self.fields)
