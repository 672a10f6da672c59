"""
Form state for the dialogue editor and the submission boundary.

Characters and script lines are ordered lists of frozen records keyed by id.
Every operation returns new lists; the inputs are never mutated.
"""

from typing import List, Tuple

from speechcraft.errors import ValidationError
from speechcraft.schemas import (
    Character,
    DialogueRequest,
    FormState,
    NarrationRequest,
    PromptRequest,
    ScriptLine,
    SpeechMode,
)


def new_character() -> Character:
    return Character()


def new_script_line() -> ScriptLine:
    return ScriptLine()


def _check_fields(model, fields) -> None:
    # ids are immutable; they key the lists and script references
    bad = set(fields) - (set(model.model_fields) - {"id"})
    if bad:
        raise ValueError(f"Cannot update {model.__name__} field(s): {', '.join(sorted(bad))}")


def _updated(record, fields):
    return type(record).model_validate({**record.model_dump(), **fields})


def add_character(characters: List[Character]) -> List[Character]:
    return [*characters, new_character()]


def update_character(characters: List[Character], char_id: str, **fields) -> List[Character]:
    _check_fields(Character, fields)
    return [_updated(c, fields) if c.id == char_id else c for c in characters]


def remove_character(
    characters: List[Character], script: List[ScriptLine], char_id: str
) -> Tuple[List[Character], List[ScriptLine]]:
    """Drop a character and unassign every line that pointed at it."""
    characters = [c for c in characters if c.id != char_id]
    script = [
        l.model_copy(update={"character_id": ""}) if l.character_id == char_id else l
        for l in script
    ]
    return characters, script


def add_script_line(script: List[ScriptLine]) -> List[ScriptLine]:
    return [*script, new_script_line()]


def update_script_line(script: List[ScriptLine], line_id: str, **fields) -> List[ScriptLine]:
    _check_fields(ScriptLine, fields)
    return [_updated(l, fields) if l.id == line_id else l for l in script]


def remove_script_line(script: List[ScriptLine], line_id: str) -> List[ScriptLine]:
    return [l for l in script if l.id != line_id]


def valid_characters(characters: List[Character]) -> List[Character]:
    return [c for c in characters if c.name.strip() and c.persona.strip()]


def submittable_lines(script: List[ScriptLine]) -> List[ScriptLine]:
    return [l for l in script if l.line.strip() and l.character_id]


def build_prompt_request(form: FormState) -> PromptRequest:
    """
    Filter the form and produce the request handed to the builder.

    Raises ValidationError("character_needed") for a dialogue form without a
    single character that has both name and persona.
    """
    if form.mode == SpeechMode.NARRATION:
        return NarrationRequest(
            scenario=form.scenario,
            persona=form.persona,
            emotion=form.emotion,
            tone=form.tone,
            environment=form.environment,
            duration=form.duration,
            sections=form.sections,
        )

    characters = valid_characters(form.characters)
    if not characters:
        raise ValidationError("character_needed")
    return DialogueRequest(
        mode=form.mode,
        scenario=form.scenario,
        characters=characters,
        script=submittable_lines(form.script),
        duration=form.duration,
        sections=form.sections,
    )
