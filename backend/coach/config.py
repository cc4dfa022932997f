import os, logging
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_DEV_JWT_SECRET = "dev-only-change-me"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173", "http://127.0.0.1:5173",
    "http://localhost:5174", "http://127.0.0.1:5174",
]


def _flag(value: str) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


class Settings:
    """Runtime settings, read from the environment (and .env)."""

    def __init__(
        self,
        use_gemini: bool = True,
        gemini_api_key: str = None,
        gemini_model: str = "gemini-1.5-flash",
        ai_timeout_seconds: float = 15.0,
        database_url: str = "sqlite:///./coach.db",
        jwt_secret: str = _DEV_JWT_SECRET,
        jwt_expires_days: int = 30,
        free_daily_session_limit: int = 2,
        cors_origins: List[str] = None,
        log_level: str = "INFO",
    ):
        self.use_gemini = use_gemini
        self.gemini_api_key = gemini_api_key
        self.gemini_model = gemini_model
        self.ai_timeout_seconds = ai_timeout_seconds
        self.database_url = database_url
        self.jwt_secret = jwt_secret
        self.jwt_expires_days = jwt_expires_days
        self.free_daily_session_limit = free_daily_session_limit
        self.cors_origins = cors_origins or list(DEFAULT_CORS_ORIGINS)
        self.log_level = log_level

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "")
        return cls(
            use_gemini=_flag(os.getenv("USE_GEMINI", "true")),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            ai_timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "15")),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./coach.db"),
            jwt_secret=os.getenv("JWT_SECRET", _DEV_JWT_SECRET),
            jwt_expires_days=int(os.getenv("JWT_EXPIRES_DAYS", "30")),
            free_daily_session_limit=int(os.getenv("FREE_DAILY_SESSION_LIMIT", "2")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def ai_enabled(self) -> bool:
        return bool(self.use_gemini and self.gemini_api_key)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings.from_env()
    if settings.jwt_secret == _DEV_JWT_SECRET:
        logger.warning("JWT_SECRET not set; using the development secret.")
    return settings
