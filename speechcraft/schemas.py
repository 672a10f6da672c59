# speechcraft/schemas.py
import json
import uuid
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from speechcraft.utils.constraints import parse_positive_int

# Duration / sections arrive as text or numbers; anything unusable becomes None.
Constraint = Annotated[Optional[int], BeforeValidator(parse_positive_int)]


class SpeechMode(str, Enum):
    NARRATION = "narration"
    ONE_ON_ONE = "one_on_one"
    MULTI = "multi"


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


class Character(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: _new_id("char"))
    name: str = ""
    persona: str = ""
    image_touch: Optional[str] = Field(None, description="Performance notes: expression, lip shapes, gestures, makeup")


class ScriptLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: _new_id("line"))
    character_id: str = Field("", description="Character id; empty means unassigned")
    line: str = ""
    emotion: str = ""
    tone: str = ""


class NarrationRequest(BaseModel):
    mode: Literal[SpeechMode.NARRATION] = SpeechMode.NARRATION
    scenario: str
    persona: str
    emotion: str
    tone: str
    environment: str
    duration: Constraint = Field(None, description="Target length in seconds")
    sections: Constraint = Field(None, description="Number of sections to generate")


class DialogueRequest(BaseModel):
    mode: Literal[SpeechMode.ONE_ON_ONE, SpeechMode.MULTI]
    scenario: str
    characters: List[Character]
    script: List[ScriptLine] = []
    duration: Constraint = Field(None, description="Target length in seconds")
    sections: Constraint = Field(None, description="Number of sections to generate")


PromptRequest = Annotated[Union[NarrationRequest, DialogueRequest], Field(discriminator="mode")]


class FormState(BaseModel):
    """Everything the form holds at submit time, before filtering."""
    mode: SpeechMode = SpeechMode.NARRATION
    scenario: str = ""
    persona: str = ""
    emotion: str = ""
    tone: str = ""
    environment: str = ""
    characters: List[Character] = []
    script: List[ScriptLine] = []
    duration: Constraint = None
    sections: Constraint = None
    lang: Optional[str] = Field(None, description="'en' or 'ko'")
    model: Optional[str] = Field(None, description="Gemini model name override")


class GeneratedPrompt(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    structured: Dict[str, Any] = Field(..., alias="json")
    integrated: str

    def json_text(self) -> str:
        return json.dumps(self.structured, ensure_ascii=False, indent=2)


class GenerateResponse(BaseModel):
    prompts: List[GeneratedPrompt]
    integrated_text: str


class ScenarioSuggestionRequest(BaseModel):
    theme: str
    lang: Optional[str] = None


class NarratorDetailsRequest(BaseModel):
    scenario: str
    lang: Optional[str] = None


class ImageTouchRequest(BaseModel):
    name: str
    persona: str
    lang: Optional[str] = None


class NarratorDetails(BaseModel):
    persona: str
    emotion: str
    tone: str
    environment: str


class TextSuggestion(BaseModel):
    text: str
