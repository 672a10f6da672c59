import json
import logging
from typing import Any

from pydantic import ValidationError as SchemaMismatch

from speechcraft.errors import ExternalServiceError, MalformedResponseError
from speechcraft.schemas import GeneratedPrompt, NarratorDetails

log = logging.getLogger(__name__)

MISSING_INTEGRATED_TEXT = "Failed to generate integrated text."


def _strip_fences(txt: str) -> str:
    txt = txt.strip()
    # Gemini sometimes wraps JSON in code fences even in JSON mode
    if txt.startswith("```"):
        txt = txt.strip("`")
        if txt.startswith("json"):
            txt = txt[len("json"):]
        txt = txt.strip()
    return txt


def _is_error_payload(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("error"), dict)
        and "message" in data["error"]
    )


def parse_json(raw: str) -> Any:
    """Decode the model text; API error payloads surface as ExternalServiceError."""
    txt = _strip_fences(raw or "")
    try:
        data = json.loads(txt)
    except json.JSONDecodeError as e:
        log.warning("Model returned invalid JSON: %s", e)
        raise MalformedResponseError(f"Model returned invalid JSON: {e}") from e
    if _is_error_payload(data):
        raise ExternalServiceError.from_body(data)
    return data


def normalize_response(raw: str) -> GeneratedPrompt:
    data = parse_json(raw)
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Model returned a JSON {type(data).__name__}, expected an object."
        )
    integrated = data.get("integrated_text")
    if not isinstance(integrated, str) or not integrated:
        # partial output is still worth showing
        log.warning("integrated_text missing from model output; using fallback")
        integrated = MISSING_INTEGRATED_TEXT
    return GeneratedPrompt(structured=data, integrated=integrated)


def parse_narrator_details(raw: str) -> NarratorDetails:
    """Strict: every field must be present, no fallback."""
    data = parse_json(raw)
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Narrator details must be a JSON object, got {type(data).__name__}."
        )
    try:
        return NarratorDetails.model_validate(data, strict=True)
    except SchemaMismatch as e:
        raise MalformedResponseError(f"Narrator details do not match the schema: {e}") from e
