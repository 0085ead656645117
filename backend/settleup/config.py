"""Settings read from the environment."""
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./settleup.db")

_origins_env = os.getenv("ALLOWED_ORIGINS", "")
ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()] if _origins_env else ["*"]

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
