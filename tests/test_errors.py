from speechcraft.errors import (
    ExternalServiceError,
    MalformedResponseError,
    ValidationError,
    display_message,
    pretty_error_message,
)


def test_quota_exceeded_is_unwrapped():
    raw = 'Gemini API Error: {"error":{"message":"quota exceeded"}}'
    assert pretty_error_message(raw, "en") == "Gemini API Error: quota exceeded"
    assert pretty_error_message(raw, "ko") == "Gemini API 오류: quota exceeded"


def test_plain_suffix_keeps_text():
    assert pretty_error_message("Gemini API Error: socket closed", "en") == "Gemini API Error: socket closed"


def test_json_without_message_is_left_alone():
    raw = 'Gemini API Error: {"status": "bad"}'
    assert pretty_error_message(raw, "en") == raw


def test_other_messages_pass_through():
    assert pretty_error_message("Model returned invalid JSON", "en") == "Model returned invalid JSON"


def test_empty_message_uses_unexpected_text():
    assert pretty_error_message("", "en") == "An unexpected error occurred."


def test_from_body_round_trip():
    exc = ExternalServiceError.from_body({"error": {"code": 429, "message": "quota exceeded"}})
    assert display_message(exc, "en") == "Gemini API Error: quota exceeded"
    assert exc.status_code == 502


def test_validation_error_is_localized():
    exc = ValidationError("character_needed")
    assert exc.status_code == 422
    assert "at least one character" in display_message(exc, "en")
    assert display_message(exc, "zz") == display_message(exc, "ko")


def test_malformed_message_shown_as_is():
    exc = MalformedResponseError("Model returned invalid JSON: Expecting value")
    assert display_message(exc, "en") == "Model returned invalid JSON: Expecting value"
