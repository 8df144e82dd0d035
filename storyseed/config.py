import os


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    """Base configuration shared across environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-change-me")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    GENERATION_BACKEND = os.environ.get("GENERATION_BACKEND", "replicate")
    REPLICATE_API_TOKEN = os.environ.get("REPLICATE_API_TOKEN")
    STORY_MODEL = os.environ.get("STORY_MODEL", "meta/meta-llama-3-8b-instruct")
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    STORY_TEMPERATURE = _float_env("STORY_TEMPERATURE", 0.75)
    STORY_TOP_P = _float_env("STORY_TOP_P", 0.9)

    STORY_RATE_LIMIT = os.environ.get("STORY_RATE_LIMIT", "6 per 10 seconds")
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_STRATEGY = "fixed-window"
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")


class TestConfig(Config):
    TESTING = True
    GENERATION_BACKEND = "replicate"
    REPLICATE_API_TOKEN = "r8_test-token"
    RATELIMIT_ENABLED = False
