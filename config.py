import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Oracle (LLM completion API)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
ORACLE_TIMEOUT_SECONDS = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "30"))
ORACLE_MAX_ATTEMPTS = int(os.getenv("ORACLE_MAX_ATTEMPTS", "3"))
ORACLE_BACKOFF_SECONDS = float(os.getenv("ORACLE_BACKOFF_SECONDS", "1"))
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "500"))

# Sessions
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "sid")
SESSION_COOKIE_SECURE = _flag("SESSION_COOKIE_SECURE")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", str(60 * 60 * 24 * 7)))

# App
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")
SEED_DEMO_OPPORTUNITIES = _flag("SEED_DEMO_OPPORTUNITIES", "1")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
