from pathlib import Path
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Exchange'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Document store backend: in-process dict (dev/test) or Kvrocks
    EXCHANGE_STORE_BACKEND: Literal['memory', 'kvrocks'] = 'memory'

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''
    REDIS_DECODE_RESPONSES: bool = True  # Kvrocks speaks the Redis protocol

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 50
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # seconds

    # Pairing score weights (max score is their sum)
    SCORE_WEIGHT_GAME: int = 30
    SCORE_WEIGHT_SECTION: int = 20
    SCORE_WEIGHT_QUANTITY: int = 20
    SCORE_WEIGHT_PRICE: int = 20
    SCORE_WEIGHT_ADJACENCY: int = 10
    SCORE_DONATION_MISMATCH_PENALTY: int = -100
    SCORE_NEGOTIATION_MARGIN: float = 0.25

    # Share of the max score a pairing must exceed to count as a "best match"
    MATCH_ACCEPTANCE_RATIO: float = 0.4
    BEST_PAIRINGS_LIMIT: int = 3

    # Unset means matches never expire
    MATCH_TTL_HOURS: Optional[int] = None

    # Purchase limits for buy requests
    PURCHASE_MAX_TICKETS_PER_GAME: int = 2
    PURCHASE_MAX_TICKETS_PER_WINDOW: int = 3
    PURCHASE_WINDOW_GAMES: int = 4

    # OpenTelemetry
    OTEL_SERVICE_NAME: str = 'ticket-exchange'
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None
    OTEL_CONSOLE_EXPORT: bool = False


settings = Settings()  # type: ignore
