import os
from dotenv import load_dotenv

load_dotenv()

# Main generation needs the stronger model; suggestions are short free text.
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "gemini-2.5-pro")
SUGGESTION_MODEL = os.getenv("SUGGESTION_MODEL", "gemini-2.5-flash")
DETAILS_MODEL = os.getenv("DETAILS_MODEL", "gemini-2.5-pro")

DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "ko")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
