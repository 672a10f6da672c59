import asyncio
import json
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as api_exceptions

from speechcraft import config
from speechcraft.errors import ExternalServiceError, MalformedResponseError, ValidationError
from speechcraft.generation import gemini_client, prompts
from speechcraft.schemas import Character, DialogueRequest, NarrationRequest, ScriptLine, SpeechMode
from tests.conftest import narration_reply


def _narration(**kw):
    return NarrationRequest(
        scenario="A stormy night at sea", persona="weary sailor", emotion="dread",
        tone="hushed", environment="ship deck", **kw,
    )


# ---------- generate_prompts ----------
def test_generate_single_prompt(fake_model):
    fake = fake_model(narration_reply())
    results = asyncio.run(gemini_client.generate_prompts(_narration(duration="30")))

    assert len(results) == 1
    assert results[0].integrated.startswith("[hushed, dread]")
    call = fake.calls[0]
    assert call["schema"] is prompts.NARRATION_SCHEMA
    assert call["system_instruction"] == prompts.SYSTEM_INSTRUCTION
    assert call["model_name"] == config.GENERATION_MODEL
    assert "approximately 30 seconds" in call["instruction"]


def test_sections_run_in_order(fake_model):
    fake = fake_model(
        narration_reply(integrated_text="part one"),
        narration_reply(integrated_text="part two"),
    )
    results = asyncio.run(gemini_client.generate_prompts(_narration(sections="2"), model_name="gemini-test"))

    assert [r.integrated for r in results] == ["part one", "part two"]
    assert "section 1 of 2" in fake.calls[0]["instruction"]
    assert "section 2 of 2" in fake.calls[1]["instruction"]
    assert {c["model_name"] for c in fake.calls} == {"gemini-test"}


def test_dialogue_uses_dialogue_schema(fake_model):
    alice = Character(name="Alice", persona="inventor")
    request = DialogueRequest(
        mode=SpeechMode.ONE_ON_ONE,
        scenario="workshop",
        characters=[alice, Character(name="Bob", persona="mechanic")],
        script=[ScriptLine(character_id=alice.id, line="Pass the wrench.")],
    )
    fake = fake_model(json.dumps({"type": "dialogue", "integrated_text": "Alice: Pass the wrench."}))
    results = asyncio.run(gemini_client.generate_prompts(request))

    assert fake.calls[0]["schema"] is prompts.DIALOGUE_SCHEMA
    assert '"Pass the wrench."' in fake.calls[0]["instruction"]
    assert results[0].integrated == "Alice: Pass the wrench."


def test_malformed_generation_fails(fake_model):
    fake_model("{oops")
    with pytest.raises(MalformedResponseError):
        asyncio.run(gemini_client.generate_prompts(_narration()))


def test_external_error_is_not_retried(fake_model):
    fake = fake_model(ExternalServiceError.from_message("boom"), narration_reply())
    with pytest.raises(ExternalServiceError):
        asyncio.run(gemini_client.generate_prompts(_narration()))
    assert len(fake.calls) == 1


# ---------- suggestions ----------
def test_scenario_suggestion_passthrough(fake_model):
    fake = fake_model("A lighthouse keeper hears a knock at midnight.")
    text = asyncio.run(gemini_client.suggest_scenario("lighthouse", "en"))
    assert text == "A lighthouse keeper hears a knock at midnight."
    assert fake.calls[0]["schema"] is None
    assert fake.calls[0]["model_name"] == config.SUGGESTION_MODEL


def test_narrator_details_suggestion(fake_model):
    fake = fake_model('{"persona": "keeper", "emotion": "awe", "tone": "low", "environment": "tower"}')
    details = asyncio.run(gemini_client.suggest_narrator_details("A lighthouse", "ko"))
    assert details.environment == "tower"
    assert fake.calls[0]["schema"] is prompts.NARRATOR_DETAILS_SCHEMA
    assert "시나리오" in fake.calls[0]["instruction"]


def test_narrator_details_missing_field(fake_model):
    fake_model('{"persona": "keeper"}')
    with pytest.raises(MalformedResponseError):
        asyncio.run(gemini_client.suggest_narrator_details("A lighthouse", "en"))


def test_image_touch_suggestion(fake_model):
    fake = fake_model("Raised left brow, rounded 'o' on key vowels.")
    text = asyncio.run(gemini_client.suggest_image_touch("Mira", "sly witch", "en"))
    assert text.startswith("Raised")
    assert '"Mira"' in fake.calls[0]["instruction"]


@pytest.mark.parametrize("call,code", [
    (lambda: gemini_client.suggest_scenario("  ", "en"), "theme_needed"),
    (lambda: gemini_client.suggest_narrator_details("", "en"), "scenario_needed"),
    (lambda: gemini_client.suggest_image_touch("Mira", "", "en"), "character_info_needed"),
    (lambda: gemini_client.suggest_image_touch("", "witch", "en"), "character_info_needed"),
])
def test_suggestion_validation_skips_model(fake_model, call, code):
    fake = fake_model()
    with pytest.raises(ValidationError) as exc:
        asyncio.run(call())
    assert exc.value.code == code
    assert fake.calls == []


# ---------- call_model against a fake SDK ----------
class _FakeGenerativeModel:
    behaviour = None
    seen = []

    def __init__(self, model_name, system_instruction=None):
        self.model_name = model_name
        self.system_instruction = system_instruction

    async def generate_content_async(self, contents, generation_config=None):
        self.seen.append((self.model_name, contents, generation_config))
        if isinstance(self.behaviour, Exception):
            raise self.behaviour
        return SimpleNamespace(text=self.behaviour)


@pytest.fixture
def fake_sdk(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    _FakeGenerativeModel.seen = []
    sdk = SimpleNamespace(
        configure=lambda api_key: None,
        GenerationConfig=lambda **kw: kw,
        GenerativeModel=_FakeGenerativeModel,
    )
    monkeypatch.setattr(gemini_client, "genai", sdk)
    return _FakeGenerativeModel


def test_call_model_returns_stripped_text(fake_sdk):
    fake_sdk.behaviour = "  {\"a\": 1}\n"
    text = asyncio.run(gemini_client.call_model("hi", {"type": "OBJECT"}, model_name="m"))
    assert text == '{"a": 1}'
    _, _, generation_config = fake_sdk.seen[0]
    assert generation_config == {"response_mime_type": "application/json", "response_schema": {"type": "OBJECT"}}


def test_call_model_plain_text_has_no_config(fake_sdk):
    fake_sdk.behaviour = "plain"
    asyncio.run(gemini_client.call_model("hi", model_name="m"))
    assert fake_sdk.seen[0][2] is None


def test_api_error_becomes_json_body(fake_sdk):
    fake_sdk.behaviour = api_exceptions.ResourceExhausted("quota exceeded")
    with pytest.raises(ExternalServiceError) as exc:
        asyncio.run(gemini_client.call_model("hi", model_name="m"))
    prefix = "Gemini API Error: "
    assert exc.value.message.startswith(prefix)
    body = json.loads(exc.value.message[len(prefix):])
    assert body["error"]["message"] == "quota exceeded"
    assert body["error"]["code"] == 429


def test_other_failures_become_plain_message(fake_sdk):
    fake_sdk.behaviour = ValueError("response was blocked")
    with pytest.raises(ExternalServiceError) as exc:
        asyncio.run(gemini_client.call_model("hi", model_name="m"))
    assert exc.value.message == "Gemini API Error: response was blocked"


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        gemini_client.configure_gemini()
