"""
Request builder: form request -> (instruction text, response schema).

Everything here is pure string work; nothing talks to Gemini. User text is
substituted after dedent() since it may carry its own line breaks.
"""

from dataclasses import dataclass
from textwrap import dedent
from typing import Any, Dict, List, Optional, Tuple

from speechcraft.schemas import (
    Character,
    DialogueRequest,
    NarrationRequest,
    PromptRequest,
    ScriptLine,
    SpeechMode,
)
from speechcraft.utils.constraints import parse_positive_int

NARRATION = "narration"
DIALOGUE = "dialogue"
NARRATOR_DETAILS = "narrator_details"

FORMAT_EXISTING = "format_existing"
GENERATE_FROM_SCRATCH = "generate_from_scratch"

NARRATION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "type": {"type": "STRING", "description": "Should be 'narration'."},
        "scenario": {"type": "STRING", "description": "A brief summary of the scene or context."},
        "persona": {"type": "STRING", "description": "The personality or role of the narrator."},
        "content": {"type": "STRING", "description": "The full text of the narration."},
        "emotion": {"type": "STRING", "description": "The primary emotion to convey (e.g., 'Sad', 'Joyful', 'Tense')."},
        "tones": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of vocal tones or styles (e.g., 'Whispering', 'Booming', 'Fast-paced').",
        },
        "environment": {
            "type": "STRING",
            "description": "The physical setting or acoustic environment for the narration (e.g., 'In a vast cave', 'Outdoors in a storm').",
        },
        "integrated_text": {
            "type": "STRING",
            "description": "A single string combining all elements into a comprehensive prompt for a text-to-speech engine, formatted for readability.",
        },
    },
    "required": ["type", "scenario", "persona", "content", "emotion", "tones", "environment", "integrated_text"],
}

DIALOGUE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "type": {"type": "STRING", "description": "Should be 'dialogue'."},
        "scenario": {"type": "STRING", "description": "A brief summary of the scene or context for the dialogue."},
        "characters": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "persona": {"type": "STRING", "description": "The personality or role of the character."},
                },
                "required": ["name", "persona"],
            },
        },
        "script": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "character": {"type": "STRING", "description": "The name of the character speaking."},
                    "line": {"type": "STRING", "description": "The dialogue line."},
                    "emotion": {"type": "STRING", "description": "The primary emotion for this line."},
                    "tone": {"type": "STRING", "description": "A specific vocal tone or parenthetical direction."},
                },
                "required": ["character", "line", "emotion", "tone"],
            },
        },
        "integrated_text": {
            "type": "STRING",
            "description": "A single string combining all elements into a comprehensive prompt for a text-to-speech engine, formatted as a script.",
        },
    },
    "required": ["type", "scenario", "characters", "script", "integrated_text"],
}

NARRATOR_DETAILS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "persona": {"type": "STRING", "description": "A suitable persona for the narrator (e.g., 'Tired traveler', 'Excited scientist')."},
        "emotion": {"type": "STRING", "description": "The primary emotion the narrator should convey (e.g., 'Sadness', 'Wonder')."},
        "tone": {"type": "STRING", "description": "The vocal tone or style of the narration (e.g., 'Whispering tone', 'Booming voice')."},
        "environment": {"type": "STRING", "description": "The physical acoustic environment for the narration (e.g., 'In a vast cave')."},
    },
    "required": ["persona", "emotion", "tone", "environment"],
}

SCHEMAS: Dict[str, Dict[str, Any]] = {
    NARRATION: NARRATION_SCHEMA,
    DIALOGUE: DIALOGUE_SCHEMA,
    NARRATOR_DETAILS: NARRATOR_DETAILS_SCHEMA,
}

SYSTEM_INSTRUCTION = (
    "You are a master scriptwriter for 'cosplay' style voice acting and advanced text-to-speech generation. "
    "Your goal is to create vivid, emotionally-rich, and character-driven scenarios. "
    "You must generate a detailed prompt based on the user's specifications. "
    "The final output must be a single JSON object that strictly adheres to the provided schema. "
    "The 'integrated_text' field must be a complete, well-formatted string combining all information "
    "into a final, readable script or narration prompt."
)

NOT_SPECIFIED = "not specified"
UNKNOWN_CHARACTER = "Unknown Character"


@dataclass(frozen=True)
class BuiltRequest:
    instruction: str
    schema_id: str
    sub_mode: Optional[str] = None

    @property
    def schema(self) -> Dict[str, Any]:
        return SCHEMAS[self.schema_id]


def duration_clause(duration) -> str:
    seconds = parse_positive_int(duration)
    if seconds is None:
        return ""
    return f"\n- The total length should be approximately {seconds} seconds."


def section_clause(section: Optional[Tuple[int, int]]) -> str:
    if not section:
        return ""
    index, total = section
    if total <= 1:
        return ""
    return (
        f"\n- This is section {index} of {total} of a longer piece; "
        "keep it consistent with the other sections."
    )


def section_count(sections) -> int:
    return parse_positive_int(sections) or 1


def _has_text(line: ScriptLine) -> bool:
    return bool(line.line.strip()) and bool(line.character_id)


def select_sub_mode(script: List[ScriptLine]) -> str:
    if any(_has_text(l) for l in script):
        return FORMAT_EXISTING
    return GENERATE_FROM_SCRATCH


def _roster(characters: List[Character]) -> str:
    return "\n".join(f"- {c.name}: {c.persona}" for c in characters)


def _script_block(characters: List[Character], script: List[ScriptLine]) -> str:
    names = {c.id: c.name for c in characters}
    out = []
    for l in script:
        if not _has_text(l):
            continue
        name = names.get(l.character_id) or UNKNOWN_CHARACTER
        out.append(
            f'{name}: "{l.line}" '
            f"(Emotion: {l.emotion or NOT_SPECIFIED}, Tone: {l.tone or NOT_SPECIFIED})"
        )
    return "\n".join(out)


def build_narration(r: NarrationRequest, section: Optional[Tuple[int, int]] = None) -> BuiltRequest:
    instruction = dedent(
        """
        Generate a speech prompt for a narration.
        - Scenario: {scenario}
        - Narrator's Persona: {persona}
        - Primary Emotion: {emotion}
        - Vocal Tones: {tone}
        - Environment: {environment}
        The narration should be descriptive, immersive, and set a clear mood based on these details. The environment should influence the tone and description.
        """
    ).strip().format(
        scenario=r.scenario,
        persona=r.persona,
        emotion=r.emotion,
        tone=r.tone,
        environment=r.environment,
    )
    instruction += duration_clause(r.duration) + section_clause(section)
    return BuiltRequest(instruction=instruction, schema_id=NARRATION)


def build_dialogue(r: DialogueRequest, section: Optional[Tuple[int, int]] = None) -> BuiltRequest:
    sub_mode = select_sub_mode(r.script)
    if sub_mode == FORMAT_EXISTING:
        instruction = dedent(
            """
            Generate and format a speech prompt for a dialogue based on the user-provided script.
            - Scenario: {scenario}
            - Characters:
            {roster}
            - User-provided Script:
            {script}

            Your task is to take the provided script and format it perfectly into the required JSON structure.
            Refine the emotion and tone descriptions to be more evocative and detailed where appropriate, but strictly adhere to the dialogue lines and character assignments from the script.
            The 'integrated_text' should be a clean, readable script format of the final dialogue.
            """
        ).strip().format(
            scenario=r.scenario,
            roster=_roster(r.characters),
            script=_script_block(r.characters, r.script),
        )
    else:
        instruction = dedent(
            """
            Generate a speech prompt for a dialogue.
            - Scenario: {scenario}
            - Characters:
            {roster}
            The dialogue should be dramatic and engaging. Each line in the script must have a specified character, the line of dialogue, a primary emotion, and a specific tone/direction.
            Generate a complete script from scratch based on the scenario and characters provided.
            """
        ).strip().format(scenario=r.scenario, roster=_roster(r.characters))
    instruction += duration_clause(r.duration) + section_clause(section)
    return BuiltRequest(instruction=instruction, schema_id=DIALOGUE, sub_mode=sub_mode)


def build_request(request: PromptRequest, section: Optional[Tuple[int, int]] = None) -> BuiltRequest:
    """Dispatch on the request mode. `section` is (index, total), 1-based."""
    if request.mode == SpeechMode.NARRATION:
        return build_narration(request, section)
    return build_dialogue(request, section)


# ─── suggestion templates ─────────────────────────────────────────────────
_SCENARIO_TEMPLATES = {
    "en": 'Based on the theme "{theme}", generate an engaging and descriptive one-paragraph scenario for a narration.',
    "ko": '주제 "{theme}"를 바탕으로, 나레이션을 위한 매력적이고 서술적인 시나리오를 한 문단으로 생성해주세요.',
}

_NARRATOR_DETAILS_TEMPLATES = {
    "en": (
        "Based on the following narration scenario, suggest the ideal narrator details.\n"
        'Scenario: "{scenario}"\n\n'
        "Provide an appropriate persona, primary emotion, a specific vocal tone, and a suitable acoustic environment."
    ),
    "ko": (
        "다음 나레이션 시나리오를 보고, 이상적인 나레이터 정보를 제안해주세요.\n"
        '시나리오: "{scenario}"\n\n'
        "적절한 페르소나, 주요 감정, 구체적인 목소리 톤, 그리고 어울리는 음향 환경을 제공해주세요."
    ),
}

_IMAGE_TOUCH_TEMPLATES = {
    "en": (
        'For a character named "{name}" with the persona "{persona}", suggest some detailed \'image touches\' '
        "assuming they are portrayed by a world-class lip-sync expert cosplayer. This should include specific "
        "suggestions for facial expressions, key lip shapes for emphasis, subtle gestures, and makeup details "
        "that would enhance their performance."
    ),
    "ko": (
        '캐릭터 이름 "{name}"(페르소나: {persona})에 대해, 세계적인 립싱크 전문가 코스플레이어가 연기한다고 가정하고 '
        "섬세한 '이미지 터치'를 제안해주세요. 여기에는 표정, 강조를 위한 주요 입 모양, 미묘한 제스처, "
        "메이크업 디테일 등 연기를 향상시킬 구체적인 제안이 포함되어야 합니다."
    ),
}


def scenario_prompt(theme: str, lang: str) -> str:
    return _SCENARIO_TEMPLATES[lang].format(theme=theme)


def narrator_details_prompt(scenario: str, lang: str) -> str:
    return _NARRATOR_DETAILS_TEMPLATES[lang].format(scenario=scenario)


def image_touch_prompt(name: str, persona: str, lang: str) -> str:
    return _IMAGE_TOUCH_TEMPLATES[lang].format(name=name, persona=persona)
