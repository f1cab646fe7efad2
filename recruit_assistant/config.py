import os
from typing import Optional

class Config:
    # API Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # OpenAI Configuration
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
    ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "gpt-4o-mini")
    ASSISTANT_NAME = "Missouri State Highway Patrol Recruiting Assistant"
    ASSISTANT_VERSION = os.getenv("ASSISTANT_VERSION", "1")
    ASSISTANT_ID: Optional[str] = os.getenv("ASSISTANT_ID")  # pre-provisioned, skips creation
    VECTOR_STORE_ID: Optional[str] = os.getenv("VECTOR_STORE_ID")

    # Run polling
    RUN_TIMEOUT_SECONDS = float(os.getenv("RUN_TIMEOUT_SECONDS", "60"))
    RUN_POLL_INTERVAL_SECONDS = float(os.getenv("RUN_POLL_INTERVAL_SECONDS", "0.5"))
    RUN_POLL_MAX_INTERVAL_SECONDS = float(os.getenv("RUN_POLL_MAX_INTERVAL_SECONDS", "4"))

    # Analytics store (Redis / Upstash)
    REDIS_URL = os.getenv("REDIS_URL") or os.getenv("KV_URL") or "redis://localhost:6379"
    REDIS_TOKEN: Optional[str] = os.getenv("REDIS_TOKEN") or os.getenv("KV_REST_API_TOKEN")
    ANALYTICS_PREFIX = os.getenv("ANALYTICS_PREFIX", "mshp")
    ANALYTICS_TOP_N = int(os.getenv("ANALYTICS_TOP_N", "20"))
    REDIS_SOCKET_TIMEOUT_SECONDS = float(os.getenv("REDIS_SOCKET_TIMEOUT_SECONDS", "5"))
    REDIS_CONNECT_TIMEOUT_SECONDS = float(os.getenv("REDIS_CONNECT_TIMEOUT_SECONDS", "5"))

    # Response cache
    CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "3600"))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "100"))
    CACHE_SIMILARITY_THRESHOLD = float(os.getenv("CACHE_SIMILARITY_THRESHOLD", "0.6"))

config = Config()
