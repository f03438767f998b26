SECRET_KEY = "test-secret"

SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
SQLALCHEMY_TRACK_MODIFICATIONS = False

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = True
AUTO_SEED_DB = False

# No key: the assistant answers from keyword replies unless a test swaps the client
AI_API_KEY = ""
AI_BASE_URL = "https://api.perplexity.ai"
AI_MODEL = "sonar"
AI_MAX_TOKENS = 1024
AI_TEMPERATURE = 0.7

CHAT_RATE_LIMIT = 5
CHAT_RATE_WINDOW_SECONDS = 60
RATELIMIT_STORAGE_URI = "memory://"

LATE_AFTER = "09:30"
