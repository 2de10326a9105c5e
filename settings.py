"""Central configuration for the saree catalog service and client."""

import os

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Environment-backed settings, read once at import time."""

    # --- Database ---
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "saree_catalog")
    MAX_POOL_SIZE: int = int(os.getenv("MONGODB_MAX_POOL_SIZE", "10"))
    MIN_POOL_SIZE: int = int(os.getenv("MONGODB_MIN_POOL_SIZE", "2"))
    MAX_IDLE_TIME_MS: int = 30000
    SERVER_SELECTION_TIMEOUT_MS: int = 5000
    SOCKET_TIMEOUT_MS: int = 45000

    # --- HTTP server ---
    PORT: int = int(os.getenv("PORT", "8000"))
    CORS_ORIGINS: list[str] = _csv(os.getenv("CORS_ORIGINS", "*"))
    DEFAULT_COLLECTION_LIMIT: int = 6

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- Client ---
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    CLIENT_TIMEOUT: float = float(os.getenv("CLIENT_TIMEOUT", "10"))
