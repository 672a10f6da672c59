from typing import Dict, Optional

from speechcraft.config import DEFAULT_LANGUAGE

UI_TEXT: Dict[str, Dict[str, str]] = {
    "en": {
        "character_needed": "Please add at least one character with both a name and a persona.",
        "scenario_needed": "Please enter a scenario first to get narrator suggestions.",
        "character_info_needed": "Please enter the character's name and persona first.",
        "theme_needed": "Please enter a theme to generate a scenario.",
        "unexpected": "An unexpected error occurred.",
        "api_error_prefix": "Gemini API Error: ",
    },
    "ko": {
        "character_needed": "이름과 페르소나가 모두 입력된 캐릭터를 최소 한 명 추가해주세요.",
        "scenario_needed": "나레이터 제안을 받으려면 먼저 시나리오를 입력해주세요.",
        "character_info_needed": "먼저 캐릭터의 이름과 페르소나를 입력해주세요.",
        "theme_needed": "시나리오를 생성하려면 주제를 입력해주세요.",
        "unexpected": "예기치 않은 오류가 발생했습니다.",
        "api_error_prefix": "Gemini API 오류: ",
    },
}


def normalize_lang(lang: Optional[str]) -> str:
    lang = (lang or "").strip().lower()
    if lang in UI_TEXT:
        return lang
    return DEFAULT_LANGUAGE if DEFAULT_LANGUAGE in UI_TEXT else "en"


def text(key: str, lang: Optional[str] = None) -> str:
    table = UI_TEXT[normalize_lang(lang)]
    return table.get(key, table["unexpected"])
