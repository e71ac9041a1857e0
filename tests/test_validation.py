import pytest

from formbuilder.validation import validate_answers

FIELDS = [
    {"id": "intro", "type": "heading", "label": "About you", "required": True},
    {"id": "name", "type": "shortAnswer", "label": "Name", "required": True,
     "properties": {"validation": {"minLength": 2, "maxLength": 10}}},
    {"id": "mail", "type": "email", "label": "Email"},
    {"id": "work_mail", "type": "email", "label": "Work email",
     "properties": {"validation": {"pattern": r"@company\.com$"}}},
    {"id": "start", "type": "date", "label": "Start date",
     "properties": {"validation": {"min": "2024-01-01", "max": "2024-12-31"}}},
    {"id": "at", "type": "time", "label": "Time"},
    {"id": "stars", "type": "rating", "label": "Stars", "properties": {"maxRating": 5}},
    {"id": "level", "type": "slider", "label": "Level", "properties": {"min": 0, "max": 10}},
    {"id": "size", "type": "dropdown", "label": "Size",
     "properties": {"options": [{"id": "s", "text": "Small"}, {"id": "l", "text": "Large"}]}},
    {"id": "tags", "type": "multipleChoice", "label": "Tags",
     "properties": {"options": [{"id": "a", "text": "A"}, {"id": "b", "text": "B"}], "allowMultiple": True}},
]


def errors_for(answers):
    return {(error["fieldId"], error["message"]) for error in validate_answers(FIELDS, answers)}


def test_valid_answers_pass():
    answers = {
        "name": "Ada",
        "mail": "ada@example.org",
        "work_mail": "ada@company.com",
        "start": "2024-06-01",
        "at": "09:30",
        "stars": 4,
        "level": 7.5,
        "size": "l",
        "tags": ["a", "B"],
    }

    assert validate_answers(FIELDS, answers) == []


def test_required_field_missing_and_heading_ignored():
    assert errors_for({}) == {("name", "This field is required")}
    assert errors_for({"name": ""}) == {("name", "This field is required")}


def test_text_length_bounds():
    assert ("name", "Minimum length is 2 characters") in errors_for({"name": "A"})
    assert ("name", "Maximum length is 10 characters") in errors_for({"name": "A" * 11})


def test_email_format_and_pattern():
    assert ("mail", "Please enter a valid email address") in errors_for({"name": "Ada", "mail": "nope"})
    assert ("work_mail", "Please enter a valid email address") in errors_for(
        {"name": "Ada", "work_mail": "ada@gmail.com"}
    )


@pytest.mark.parametrize("value, message", [
    ("2023-12-31", "Date must be on or after 2024-01-01"),
    ("2025-01-01", "Date must be on or before 2024-12-31"),
    ("yesterday", "Expected a date (YYYY-MM-DD)"),
])
def test_date_bounds(value, message):
    assert errors_for({"name": "Ada", "start": value}) == {("start", message)}


def test_numeric_ranges():
    assert errors_for({"name": "Ada", "stars": 6}) == {("stars", "Rating must be a whole number between 1 and 5")}
    assert errors_for({"name": "Ada", "stars": True}) == {("stars", "Rating must be a whole number between 1 and 5")}
    assert errors_for({"name": "Ada", "level": 11}) == {("level", "Maximum value is 10")}
    assert errors_for({"name": "Ada", "level": "high"}) == {("level", "Expected a number")}


def test_choice_answers():
    assert errors_for({"name": "Ada", "size": "m"}) == {("size", "Unknown option: m")}
    assert errors_for({"name": "Ada", "size": ["s", "l"]}) == {("size", "Only one option may be selected")}
    assert errors_for({"name": "Ada", "tags": ["a", "z"]}) == {("tags", "Unknown option: z")}


def test_time_and_unknown_field():
    assert errors_for({"name": "Ada", "at": "25:99"}) == {("at", "Expected a time (HH:MM)")}
    assert errors_for({"name": "Ada", "ghost": 1}) == {("ghost", "Unknown field")}


def test_non_finite_numbers_are_not_numbers():
    assert errors_for({"name": "Ada", "stars": float("inf")}) == {("stars", "Rating must be a whole number between 1 and 5")}
    assert errors_for({"name": "Ada", "level": float("nan")}) == {("level", "Expected a number")}
