import os
from pathlib import Path
from dotenv import load_dotenv

# ----------------------------
# Load .env file (if exists)
# ----------------------------
load_dotenv()

# ----------------------------
# Base directories
# ----------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Local flashcard-set history lives here
DATA_DIR = os.getenv("DATA_DIR", str(BASE_DIR / "data"))
HISTORY_FILE = os.getenv("HISTORY_FILE", "flashcard_sets.json")
HISTORY_CAPACITY = int(os.getenv("HISTORY_CAPACITY", "20"))

# ----------------------------
# Chat completions (OpenRouter, OpenAI-compatible)
# ----------------------------
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
CHAT_MODEL = os.getenv("CHAT_MODEL", "openai/gpt-5-mini")
SITE_URL = os.getenv("SITE_URL", "http://localhost:3000")

# ----------------------------
# Speech-to-text / text-to-speech (OpenAI)
# ----------------------------
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

STT_MODEL = os.getenv("STT_MODEL", "whisper-1")
STT_LANGUAGE = os.getenv("STT_LANGUAGE", "en")

TTS_MODEL = os.getenv("TTS_MODEL", "tts-1")
TTS_VOICE = os.getenv("TTS_VOICE", "alloy")

# ----------------------------
# Prompt limits
# ----------------------------
TITLE_CONTEXT_CHARS = 500
AUTO_MIN_CARDS = 3
AUTO_MAX_CARDS = 20

# ----------------------------
# Logging
# ----------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ----------------------------
# CORS Allowed Origins
# ----------------------------
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]
