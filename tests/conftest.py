import json

import pytest

from speechcraft.generation import gemini_client


class FakeModel:
    """Stands in for call_model; replies are consumed in order."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    async def __call__(self, instruction, schema=None, *, model_name, system_instruction=None):
        self.calls.append({
            "instruction": instruction,
            "schema": schema,
            "model_name": model_name,
            "system_instruction": system_instruction,
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_model(monkeypatch):
    def install(*replies):
        fake = FakeModel(replies)
        monkeypatch.setattr(gemini_client, "call_model", fake)
        return fake
    return install


def narration_reply(**overrides):
    data = {
        "type": "narration",
        "scenario": "A stormy night at sea",
        "persona": "weary sailor",
        "content": "The waves rose like walls...",
        "emotion": "dread",
        "tones": ["hushed"],
        "environment": "ship deck",
        "integrated_text": "[hushed, dread] The waves rose like walls...",
    }
    data.update(overrides)
    return json.dumps(data)
