"""Configuration loaded from .env"""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# API server
API_PORT = int(os.getenv("PORT", "3001"))
FRONTEND_ORIGINS = [
    o.strip() for o in os.getenv("FRONTEND_ORIGINS", "").split(",") if o.strip()
] or [
    "http://localhost:8501",
    "http://127.0.0.1:8501",
    "http://localhost:5173",
]
AUTO_MIGRATE = _flag("AUTO_MIGRATE", "true")
AI_PARSE_RATE_LIMIT = os.getenv("AI_PARSE_RATE_LIMIT", "20/minute")

# Completion API
LLM_MODEL = os.getenv("LLM_MODEL", "gemini/gemini-2.5-flash")
LLM_API_KEY = os.getenv("LLM_API_KEY") or os.getenv("GOOGLE_API_KEY")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
# Request a JSON-object reply via response_format
LLM_JSON_MODE = _flag("LLM_JSON_MODE", "true")
LLM_MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))
LLM_BREAKER_THRESHOLD = int(os.getenv("LLM_BREAKER_THRESHOLD", "5"))
LLM_BREAKER_RESET_SEC = float(os.getenv("LLM_BREAKER_RESET_SEC", "60"))

# Frontend
API_URL = os.getenv("GYM_TRACKER_API_URL", "http://localhost:3001")
API_TIMEOUT_SEC = float(os.getenv("GYM_TRACKER_API_TIMEOUT", "60"))
DEFAULT_USER_ID = os.getenv("GYM_TRACKER_USER_ID", "")
