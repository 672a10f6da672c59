"""
Error taxonomy shared by the library layer and the HTTP routes.

ValidationError        -> pre-flight, no model call was made      (422)
ExternalServiceError   -> Gemini rejected the call / error payload (502)
MalformedResponseError -> call succeeded but the text is unusable  (502)
"""

import json
from typing import Optional

from speechcraft import i18n

# Marker put in front of every message that originates at the model boundary.
API_ERROR_PREFIX = "Gemini API Error: "


class PromptError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PromptError):
    status_code = 422

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code


class ExternalServiceError(PromptError):
    status_code = 502

    @classmethod
    def from_body(cls, body: dict) -> "ExternalServiceError":
        return cls(API_ERROR_PREFIX + json.dumps(body, ensure_ascii=False))

    @classmethod
    def from_message(cls, message: str) -> "ExternalServiceError":
        return cls(API_ERROR_PREFIX + message)


class MalformedResponseError(PromptError):
    status_code = 502


def pretty_error_message(message: str, lang: Optional[str] = None) -> str:
    """
    Turn a raw error message into what the user should see.

    "Gemini API Error: {"error": {"message": "quota exceeded"}}"
        -> "<localized prefix>quota exceeded"
    "Gemini API Error: socket closed"
        -> "<localized prefix>socket closed"
    Anything else is returned unchanged.
    """
    if not message:
        return i18n.text("unexpected", lang)
    if not message.startswith(API_ERROR_PREFIX):
        return message

    prefix = i18n.text("api_error_prefix", lang)
    suffix = message[len(API_ERROR_PREFIX):]
    try:
        parsed = json.loads(suffix)
    except ValueError:
        return prefix + suffix

    err = parsed.get("error") if isinstance(parsed, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return prefix + str(err["message"])
    return message


def display_message(exc: PromptError, lang: Optional[str] = None) -> str:
    if isinstance(exc, ValidationError):
        return i18n.text(exc.code, lang)
    return pretty_error_message(exc.message, lang)
