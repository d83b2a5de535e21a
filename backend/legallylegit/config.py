"""Legally Legit configuration

All settings come from the environment (backend/.env is loaded first).
Values are read once at import time.
"""

from pathlib import Path
from typing import Tuple
import os

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / '.env')


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def parse_risk_thresholds(raw: str) -> Tuple[int, int, int]:
    """Parse "low,medium,high" inclusive upper bounds, e.g. "20,50,80".

    Scores above the last bound are Critical.
    """
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) != 3:
        raise ValueError(f"RISK_LEVEL_THRESHOLDS needs 3 values, got {raw!r}")
    bounds = tuple(int(p) for p in parts)
    if not (0 <= bounds[0] < bounds[1] < bounds[2] < 100):
        raise ValueError(f"RISK_LEVEL_THRESHOLDS must be strictly increasing within 0..99, got {raw!r}")
    return bounds


# Database
MONGO_URL = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.environ.get("DB_NAME", "legally_legit")

# LLM (Gemini API key from Google AI Studio)
LLM_API_KEY = os.environ.get("LLM_API_KEY")
LLM_MODEL = os.environ.get("LLM_MODEL", "gemini-2.5-flash")
LLM_TIMEOUT_SECONDS = _float_env("LLM_TIMEOUT_SECONDS", 60.0)
GENERATION_TEMPERATURE = _float_env("GENERATION_TEMPERATURE", 0.2)
ASSISTANT_TEMPERATURE = _float_env("ASSISTANT_TEMPERATURE", 0.1)

# Risk policy
RISK_LEVEL_THRESHOLDS = parse_risk_thresholds(os.environ.get("RISK_LEVEL_THRESHOLDS", "20,50,80"))

# Free tier allowances granted on first email capture
FREE_TIER_AI_QUERIES = _int_env("FREE_TIER_AI_QUERIES", 5)
FREE_TIER_DOC_SLOTS = _int_env("FREE_TIER_DOC_SLOTS", 0)

# Assistant rate limit per user
ASSISTANT_MAX_QUESTIONS = _int_env("ASSISTANT_MAX_QUESTIONS", 10)
ASSISTANT_WINDOW_MINUTES = _int_env("ASSISTANT_WINDOW_MINUTES", 10)

# Payments
STRIPE_API_KEY = os.environ.get("STRIPE_API_KEY")
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# Newsletter (Kit)
KIT_API_KEY = os.environ.get("KIT_API_KEY")
KIT_API_BASE = os.environ.get("KIT_API_BASE", "https://api.kit.com/v4")

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
