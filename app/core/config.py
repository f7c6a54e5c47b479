"""Centralised settings — read from env vars once."""
import os
from zoneinfo import ZoneInfo


class Settings:
    SERVICE_NAME: str = "ponto-api"
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Sao_Paulo")

    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    RATE_LIMIT_MAX: int = int(os.getenv("RATE_LIMIT_MAX", "1000"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
    RATE_LIMIT_BYPASS: tuple[str, ...] = ("/health", "/health/ready", "/metrics")

    RANKING_LIMIT: int = int(os.getenv("RANKING_LIMIT", "20"))
    STATS_LOOKBACK_DAYS: int = int(os.getenv("STATS_LOOKBACK_DAYS", "90"))
    ALERT_THRESHOLD_HOURS: int = int(os.getenv("ALERT_THRESHOLD_HOURS", "12"))
    ACTIVITY_FEED_LIMIT: int = int(os.getenv("ACTIVITY_FEED_LIMIT", "5"))
    WEEKLY_ACTIVITY_DAYS: int = 7

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    @property
    def RATE_LIMIT_ENABLED(self) -> bool:
        return self.RATE_LIMIT_MAX > 0


# Most senior first. Matching is by substring, see app.services.hierarchy.
ROLE_HIERARCHY: tuple[str, ...] = (
    "Inspetor Superintendente",
    "Inspetor de Agrupamento",
    "Inspetor de Divisão",
    "Inspetor",
    "Subinspetor",
    "Classe Distinta",
    "Classe Especial",
    "Agente de 1ª Classe",
    "Agente de 2ª Classe",
    "Agente de 3ª Classe",
    "Estágio",
)

# Members hidden from the roster endpoint.
IGNORED_MEMBER_IDS: frozenset[str] = frozenset({
    "459055303573635084",
    "425045919025725440",
    "511297052844621827",
})


settings = Settings()
