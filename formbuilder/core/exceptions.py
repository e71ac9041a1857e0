from fastapi import status


class FormBuilderError(Exception):
    """Base class for errors surfaced to API callers with a message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "FormBuilderError"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(FormBuilderError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"


class InvalidInput(FormBuilderError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "InvalidInput"

    def __init__(self, detail: str, errors=None):
        super().__init__(detail)
        self.errors = errors or []


class Forbidden(FormBuilderError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"


class AlreadySubmitted(Forbidden):
    """The recipient's token has been consumed by an earlier submission."""

    error = "AlreadySubmitted"

    def __init__(self, detail: str = "This form has already been submitted with this token"):
        super().__init__(detail)
