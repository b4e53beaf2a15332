# config.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_MONGODB_URL = "mongodb://localhost:27017"
DEFAULT_DB_NAME = "transaction_db"
DEFAULT_COLLECTION = "transactions"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    """Runtime configuration read from the environment"""

    mongodb_url: str = DEFAULT_MONGODB_URL
    db_name: str = DEFAULT_DB_NAME
    collection_name: str = DEFAULT_COLLECTION
    server_selection_timeout_ms: int = 5000
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongodb_url=os.getenv("MONGODB_URL") or os.getenv("MONGO_URI") or DEFAULT_MONGODB_URL,
            db_name=os.getenv("MONGODB_DB_NAME", DEFAULT_DB_NAME),
            collection_name=os.getenv("MONGODB_COLLECTION", DEFAULT_COLLECTION),
            server_selection_timeout_ms=_get_int("MONGODB_TIMEOUT_MS", 5000),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_get_int("PORT", 5000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_allow_origins=_get_origins(os.getenv("CORS_ALLOW_ORIGINS")),
        )
