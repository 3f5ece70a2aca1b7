"""
Application configuration.
Values come from the environment (or a local .env file in development).
"""
import os
from dotenv import load_dotenv

load_dotenv()  # loads .env in local dev; no effect in Docker if env vars provided


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# -------------------------------------------------
# Database
# -------------------------------------------------

DATABASE_URL = os.getenv("DATABASE_URL")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
RUN_MIGRATIONS = _env_bool("RUN_MIGRATIONS", True)

# -------------------------------------------------
# AI providers
# -------------------------------------------------

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
EMBED_MODEL = os.getenv("EMBED_MODEL", "text-embedding-3-large")
# Must match the vector(...) columns in db/scripts
EMBEDDING_DIM = int(os.getenv("EMBEDDING_DIM", "3072"))

# "openai:<model>" or "ollama:<model>"
LLM_MODEL = os.getenv("LLM_MODEL", "openai:gpt-4o-mini")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
QA_TEMPERATURE = float(os.getenv("QA_TEMPERATURE", "0.3"))
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://ollama:11434")

# -------------------------------------------------
# Search policy
# -------------------------------------------------

# A match is "close" only when its cosine distance is strictly below this value
SEARCH_DISTANCE_THRESHOLD = float(os.getenv("SEARCH_DISTANCE_THRESHOLD", "0.4"))
SEARCH_TOP_K = int(os.getenv("SEARCH_TOP_K", "3"))

# -------------------------------------------------
# Document ingestion
# -------------------------------------------------

CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "1000"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "200"))
QA_SOURCE_MAX_CHARS = int(os.getenv("QA_SOURCE_MAX_CHARS", "30000"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))  # 20 MB
MIN_EXTRACTED_CHARS = int(os.getenv("MIN_EXTRACTED_CHARS", "50"))

# -------------------------------------------------
# Stats
# -------------------------------------------------

UNANSWERED_PREVIEW_LIMIT = int(os.getenv("UNANSWERED_PREVIEW_LIMIT", "10"))
RECENT_QUESTIONS_LIMIT = int(os.getenv("RECENT_QUESTIONS_LIMIT", "5"))

# -------------------------------------------------
# Logging
# -------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _env_bool("LOG_JSON", False)

# -------------------------------------------------
# Server
# -------------------------------------------------

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
