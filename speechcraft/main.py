import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from speechcraft import config
from speechcraft.errors import PromptError, display_message
from speechcraft.form import build_prompt_request
from speechcraft.generation import gemini_client
from speechcraft.schemas import (
    FormState,
    GenerateResponse,
    ImageTouchRequest,
    NarratorDetails,
    NarratorDetailsRequest,
    ScenarioSuggestionRequest,
    TextSuggestion,
)
from speechcraft.utils import logconf

logconf.init(config.LOG_LEVEL)
log = logging.getLogger(__name__)

app = FastAPI(title="Speech Prompt Generator")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten later
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"status": "ok"}


# ---------- Helper: NOT a route ----------
def _fail(exc: PromptError, lang) -> HTTPException:
    detail = display_message(exc, lang)
    log.info("Request failed (%s): %s", type(exc).__name__, detail)
    return HTTPException(status_code=exc.status_code, detail=detail)


# ---------- Public routes ----------
@app.post("/generate", response_model=GenerateResponse)
async def generate(form: FormState):
    try:
        request = build_prompt_request(form)
        results = await gemini_client.generate_prompts(request, model_name=form.model)
    except PromptError as e:
        raise _fail(e, form.lang) from e

    return GenerateResponse(
        prompts=results,
        integrated_text="\n\n".join(p.integrated for p in results),
    )


@app.post("/suggest/scenario", response_model=TextSuggestion)
async def suggest_scenario(payload: ScenarioSuggestionRequest):
    try:
        text = await gemini_client.suggest_scenario(payload.theme, payload.lang)
    except PromptError as e:
        raise _fail(e, payload.lang) from e
    return TextSuggestion(text=text)


@app.post("/suggest/narrator", response_model=NarratorDetails)
async def suggest_narrator(payload: NarratorDetailsRequest):
    try:
        return await gemini_client.suggest_narrator_details(payload.scenario, payload.lang)
    except PromptError as e:
        raise _fail(e, payload.lang) from e


@app.post("/suggest/image-touch", response_model=TextSuggestion)
async def suggest_image_touch(payload: ImageTouchRequest):
    try:
        text = await gemini_client.suggest_image_touch(payload.name, payload.persona, payload.lang)
    except PromptError as e:
        raise _fail(e, payload.lang) from e
    return TextSuggestion(text=text)

    # uvicorn speechcraft.main:app --reload
