from urllib.parse import parse_qs, urlparse


def link_params(link):
    """Query parameters of a recipient or owner link as a flat dict"""
    return {key: values[0] for key, values in parse_qs(urlparse(link).query).items()}


def recipient_credentials(publish_result, email):
    for recipient in publish_result["recipients"]:
        if recipient["email"] == email:
            params = link_params(recipient["link"])
            return params["email"], params["token"]
    raise AssertionError(f"{email} not in publish result")


def owner_token(publish_result):
    return link_params(publish_result["ownerAccessLink"])["token"]


SHORT_ANSWER = {"id": "name", "type": "shortAnswer", "label": "Your name", "required": True}
COLOR_CHOICE = {
    "id": "color",
    "type": "multipleChoice",
    "label": "Favourite color",
    "properties": {
        "options": [{"id": "red", "text": "Red"}, {"id": "blue", "text": "Blue"}],
        "allowMultiple": True,
    },
}


class RecordingNotifier:
    """Stands in for the SMTP notifier and remembers what it was asked to send"""

    def __init__(self, fail=False):
        self.fail = fail
        self.invitations = []
        self.acknowledgements = []

    def send_invitation(self, to_email, form_title, link):
        self.invitations.append({"email": to_email, "title": form_title, "link": link})
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        return True

    def send_acknowledgement(self, to_email, form_title):
        self.acknowledgements.append({"email": to_email, "title": form_title})
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        return True
