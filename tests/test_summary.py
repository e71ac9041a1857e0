import io

import pandas as pd

from formbuilder.crud.responses import summarize_responses
from tests.helpers import COLOR_CHOICE, SHORT_ANSWER, owner_token, recipient_credentials

FIELDS = [
    {"id": "intro", "type": "heading", "label": "Intro"},
    {"id": "color", "type": "multipleChoice", "label": "Color",
     "properties": {"options": [{"id": "red", "text": "Red"}, {"id": "blue", "text": "Blue"}, {"id": "green", "text": "Green"}]}},
    {"id": "stars", "type": "rating", "label": "Stars"},
]


def test_summarize_choice_and_plain_fields():
    answers = [
        {"color": ["red", "blue"], "stars": 5},
        {"color": "red", "stars": 5},
        {"color": [], "stars": 3},
        {},
    ]

    color, stars = summarize_responses(FIELDS, answers)

    assert color["question_text"] == "Color"
    assert color["answered"] == 2
    assert color["options"] == [
        {"selected_option": "Red", "count": 2, "percentage": 100.0},
        {"selected_option": "Blue", "count": 1, "percentage": 50.0},
        {"selected_option": "Green", "count": 0, "percentage": 0.0},
    ]
    assert stars["answered"] == 3
    assert stars["options"] == [
        {"selected_option": "5", "count": 2, "percentage": 66.7},
        {"selected_option": "3", "count": 1, "percentage": 33.3},
    ]


def test_summary_and_export_endpoints(client, create_form, publish):
    form_id = create_form(fields=[SHORT_ANSWER, COLOR_CHOICE])
    result = publish(form_id, ["a@x.com", "b@x.com"])
    for address, answers in (("a@x.com", {"name": "Ann", "color": ["red", "blue"]}),
                             ("b@x.com", {"name": "Bob", "color": ["blue"]})):
        email, token = recipient_credentials(result, address)
        client.post(f"/api/forms/{form_id}/submit", json={"email": email, "token": token, "response": answers})
    token = owner_token(result)

    summary = client.get(f"/api/forms/{form_id}/summary", params={"token": token})
    assert summary.status_code == 200
    color = summary.json()["distributions"][1]
    assert {o["selected_option"]: o["count"] for o in color["options"]} == {"Red": 1, "Blue": 2}

    export = client.get(f"/api/forms/{form_id}/export", params={"token": token})
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    df = pd.read_csv(io.StringIO(export.text))
    assert list(df.columns) == ["email", "submittedAt", "Your name", "Favourite color"]
    assert df["Favourite color"].tolist() == ["red, blue", "blue"]

    assert client.get(f"/api/forms/{form_id}/export", params={"token": "wrong"}).status_code == 403
