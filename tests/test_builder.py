import pytest
from pydantic import ValidationError

from formbuilder.builder import FormDraft
from tests.helpers import COLOR_CHOICE, SHORT_ANSWER, owner_token


def test_add_field_with_type_defaults():
    draft = FormDraft()

    text = draft.add_field("shortAnswer", label="Name", required=True)
    choice = draft.add_field("multipleChoice", label="Pick one")

    assert [field.id for field in draft.fields] == [text.id, choice.id]
    assert text.required is True
    assert [option.text for option in choice.properties.options] == ["Option 1", "Option 2"]


def test_add_field_rejects_unknown_type():
    with pytest.raises(ValueError):
        FormDraft().add_field("signature")


def test_update_field_keeps_id_and_revalidates():
    draft = FormDraft()
    field = draft.add_field("slider", label="Level")

    updated = draft.update_field(field.id, label="Energy", id="other", properties={"min": 1, "max": 5})

    assert updated.id == field.id
    assert updated.label == "Energy"
    assert updated.properties.max == 5
    with pytest.raises(ValidationError):
        draft.update_field(field.id, properties={"min": 5, "max": 1})


def test_delete_unknown_field_raises():
    draft = FormDraft()
    field = draft.add_field("date")

    draft.delete_field(field.id)

    assert draft.fields == []
    with pytest.raises(KeyError):
        draft.delete_field(field.id)


def test_duplicate_field_inserts_copy_after_source():
    draft = FormDraft()
    first = draft.add_field("dropdown", label="Size")
    last = draft.add_field("paragraph")

    copy = draft.duplicate_field(first.id)

    assert [field.id for field in draft.fields] == [first.id, copy.id, last.id]
    assert copy.id != first.id
    assert copy.label == "Size"
    original_ids = {option.id for option in first.properties.options}
    assert original_ids.isdisjoint(option.id for option in copy.properties.options)


def test_reorder_and_move():
    draft = FormDraft()
    a, b, c = (draft.add_field("shortAnswer", label=label) for label in "abc")

    draft.reorder_fields([c.id, a.id, b.id])
    assert [field.label for field in draft.fields] == ["c", "a", "b"]

    draft.move_field(c.id, 10)
    assert [field.label for field in draft.fields] == ["a", "b", "c"]

    with pytest.raises(ValueError):
        draft.reorder_fields([a.id, b.id])


@pytest.fixture
def owned_form(create_form, publish):
    form_id = create_form(fields=[SHORT_ANSWER, COLOR_CHOICE])
    return form_id, owner_token(publish(form_id, ["u@test.com"]))


def test_owner_adds_and_updates_fields(client, owned_form):
    form_id, token = owned_form
    url = f"/api/forms/{form_id}/fields"

    added = client.post(url, params={"token": token}, json={"type": "rating", "label": "Stars", "index": 1})
    assert added.status_code == 201
    new_id = added.json()["field"]["id"]
    assert [field["id"] for field in added.json()["fields"]] == ["name", new_id, "color"]
    assert added.json()["field"]["properties"] == {"maxRating": 5}

    updated = client.patch(f"{url}/{new_id}", params={"token": token},
                           json={"label": "Score", "properties": {"maxRating": 10}})
    assert updated.status_code == 200
    assert updated.json()["field"]["label"] == "Score"

    stored = client.get(f"/api/forms/{form_id}").json()["fields"]
    assert stored[1]["properties"]["maxRating"] == 10


def test_owner_duplicates_moves_and_deletes_fields(client, owned_form):
    form_id, token = owned_form
    url = f"/api/forms/{form_id}/fields"

    duplicated = client.post(f"{url}/color/duplicate", params={"token": token})
    assert duplicated.status_code == 201
    copy_id = duplicated.json()["field"]["id"]

    moved = client.put(f"{url}/{copy_id}/position", params={"token": token}, json={"index": 0})
    assert [field["id"] for field in moved.json()["fields"]] == [copy_id, "name", "color"]

    reordered = client.put(url, params={"token": token}, json={"fieldIds": ["color", "name", copy_id]})
    assert [field["id"] for field in reordered.json()["fields"]] == ["color", "name", copy_id]

    deleted = client.delete(f"{url}/name", params={"token": token})
    assert [field["id"] for field in deleted.json()["fields"]] == ["color", copy_id]


def test_field_edits_are_checked(client, owned_form, create_form):
    form_id, token = owned_form
    url = f"/api/forms/{form_id}/fields"

    assert client.post(url, params={"token": "wrong"}, json={"type": "date"}).status_code == 403
    assert client.post(url, params={"token": token}, json={"type": "signature"}).status_code == 400
    assert client.patch(f"{url}/ghost", params={"token": token}, json={"label": "x"}).status_code == 404
    assert client.put(url, params={"token": token}, json={"fieldIds": ["name"]}).status_code == 400
    bad_slider = client.post(url, params={"token": token},
                             json={"type": "slider", "properties": {"min": 10, "max": 1}})
    assert bad_slider.status_code == 400

    client.delete(f"{url}/color", params={"token": token})
    last = client.delete(f"{url}/name", params={"token": token})
    assert last.status_code == 400
    assert [field["id"] for field in client.get(f"/api/forms/{form_id}").json()["fields"]] == ["name"]

    unpublished = create_form()
    assert client.post(f"/api/forms/{unpublished}/fields", json={"type": "date"}).status_code == 403
