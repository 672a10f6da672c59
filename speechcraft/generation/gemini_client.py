import logging
import os
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as api_exceptions

from speechcraft import config, i18n
from speechcraft.errors import ExternalServiceError, ValidationError
from speechcraft.generation import prompts
from speechcraft.generation.normalize import normalize_response, parse_narrator_details
from speechcraft.schemas import GeneratedPrompt, NarratorDetails, PromptRequest

log = logging.getLogger(__name__)


def configure_gemini():
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        raise RuntimeError("GOOGLE_API_KEY not set. Put it in your .env file.")
    genai.configure(api_key=api_key)


def _error_body(e: api_exceptions.GoogleAPICallError) -> Dict[str, Any]:
    err: Dict[str, Any] = {"message": e.message or str(e)}
    if e.code is not None:
        err["code"] = int(e.code)
    return {"error": err}


async def call_model(
    instruction: str,
    schema: Optional[Dict[str, Any]] = None,
    *,
    model_name: str,
    system_instruction: Optional[str] = None,
) -> str:
    """
    One request to Gemini, returns the raw response text.

    With a schema the text is JSON constrained to it. Failures are raised as
    ExternalServiceError carrying the "Gemini API Error: " marker. No retry,
    no timeout of our own.
    """
    configure_gemini()
    generation_config = None
    if schema is not None:
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
    model = genai.GenerativeModel(model_name, system_instruction=system_instruction)
    log.info("Gemini call model=%s chars=%d structured=%s", model_name, len(instruction), schema is not None)
    try:
        resp = await model.generate_content_async(instruction, generation_config=generation_config)
        # .text raises ValueError when the candidate was blocked / empty
        return resp.text.strip()
    except api_exceptions.GoogleAPICallError as e:
        log.error("Gemini rejected the call: %s", e)
        raise ExternalServiceError.from_body(_error_body(e)) from e
    except Exception as e:
        log.error("Error calling Gemini API: %s", e)
        raise ExternalServiceError.from_message(str(e) or type(e).__name__) from e


async def generate_prompts(request: PromptRequest, model_name: Optional[str] = None) -> List[GeneratedPrompt]:
    """Build, call, normalize. One call per section, in order."""
    model_name = model_name or config.GENERATION_MODEL
    total = prompts.section_count(request.sections)
    results: List[GeneratedPrompt] = []
    for index in range(1, total + 1):
        built = prompts.build_request(request, (index, total))
        log.info(
            "Generating %s prompt section %d/%d (sub_mode=%s)",
            built.schema_id, index, total, built.sub_mode,
        )
        raw = await call_model(
            built.instruction,
            built.schema,
            model_name=model_name,
            system_instruction=prompts.SYSTEM_INSTRUCTION,
        )
        results.append(normalize_response(raw))
    return results


async def suggest_scenario(theme: str, lang: Optional[str] = None) -> str:
    if not theme or not theme.strip():
        raise ValidationError("theme_needed")
    prompt = prompts.scenario_prompt(theme, i18n.normalize_lang(lang))
    return await call_model(prompt, model_name=config.SUGGESTION_MODEL)


async def suggest_narrator_details(scenario: str, lang: Optional[str] = None) -> NarratorDetails:
    if not scenario or not scenario.strip():
        raise ValidationError("scenario_needed")
    prompt = prompts.narrator_details_prompt(scenario, i18n.normalize_lang(lang))
    raw = await call_model(
        prompt,
        prompts.NARRATOR_DETAILS_SCHEMA,
        model_name=config.DETAILS_MODEL,
    )
    return parse_narrator_details(raw)


async def suggest_image_touch(name: str, persona: str, lang: Optional[str] = None) -> str:
    if not (name or "").strip() or not (persona or "").strip():
        raise ValidationError("character_info_needed")
    prompt = prompts.image_touch_prompt(name, persona, i18n.normalize_lang(lang))
    return await call_model(prompt, model_name=config.SUGGESTION_MODEL)
