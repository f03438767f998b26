import os

from config import database_uri

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "opsdesk"),
}
SQLALCHEMY_DATABASE_URI = database_uri(DB_CONFIG)
SQLALCHEMY_TRACK_MODIFICATIONS = False

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Create missing tables on startup
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed a super admin and demo staff on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# OpenAI-compatible chat provider
AI_API_KEY = os.getenv("AI_API_KEY", os.getenv("PERPLEXITY_API_KEY", ""))
AI_BASE_URL = os.getenv("AI_BASE_URL", "https://api.perplexity.ai")
AI_MODEL = os.getenv("AI_MODEL", "sonar")
AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "1024"))
AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE", "0.7"))

CHAT_RATE_LIMIT = int(os.getenv("CHAT_RATE_LIMIT", "20"))
CHAT_RATE_WINDOW_SECONDS = int(os.getenv("CHAT_RATE_WINDOW_SECONDS", "60"))
# Flask-Limiter counters; point at redis:// when running several workers
RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

# Clock-ins after this local time are marked LATE
LATE_AFTER = os.getenv("LATE_AFTER", "09:30")
