from typing import Iterable


class DonorError(Exception):
    """Base class for errors surfaced to API clients as ``{"error": ...}``."""

    status_code = 400
    default_message = "Invalid donor request"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class DonorValidationError(DonorError):
    """One or more donor field rules failed."""

    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__(". ".join(self.messages))


class DuplicateEmailError(DonorError):
    default_message = "A donor with this email already exists"


class StoreUnavailable(DonorError):
    status_code = 500
    default_message = "Server error. Please try again later."
