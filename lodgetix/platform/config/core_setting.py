from pathlib import Path
from typing import List

from pydantic import SecretStr, field_validator
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

    PROJECT_NAME: str = 'LodgeTix'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    PUBLIC_SITE_URL: str = 'http://localhost:5173'

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ALGORITHM: str = 'HS256'
    AUTH_SERVICE_ROLE_KEY: SecretStr | None = None  # Elevated credentials for admin user lookups
    OTP_EXPIRE_SECONDS: int = 600
    OTP_LENGTH: int = 6

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'lodgetix'
    POSTGRES_PASSWORD: SecretStr = SecretStr('lodgetix')
    POSTGRES_DB: str = 'lodgetix'

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # asyncpg pool (RPC calls and row-change LISTEN)
    ASYNCPG_POOL_MIN_SIZE: int = 2
    ASYNCPG_POOL_MAX_SIZE: int = 10
    ASYNCPG_POOL_COMMAND_TIMEOUT: float = 10.0
    ASYNCPG_POOL_MAX_INACTIVE_LIFETIME: float = 300.0
    ASYNCPG_POOL_TIMEOUT: float = 10.0
    ASYNCPG_POOL_MAX_QUERIES: int = 50000
    ROW_CHANGE_NOTIFY_CHANNEL: str = 'lodgetix_row_changes'
    ROW_CHANGE_RECONNECT_DELAY_SECONDS: float = 2.0

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''
    REDIS_DECODE_RESPONSES: bool = True

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 100  # Max connections in pool
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10  # Socket read/write timeout (seconds)
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10  # Connection timeout (seconds)
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True  # Enable TCP keepalive
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # Health check interval (seconds)

    # Client storage and presence
    CLIENT_STORAGE_TTL_SECONDS: int = 60 * 60 * 24 * 7
    PRESENCE_TTL_SECONDS: int = 90
    PRESENCE_HEARTBEAT_SECONDS: float = 30.0

    # Idle clients (no request and no open stream) are disposed by a background sweep
    CLIENT_IDLE_TIMEOUT_SECONDS: int = 60 * 30
    CLIENT_IDLE_SWEEP_INTERVAL_SECONDS: float = 60.0

    # Reservation
    RESERVATION_HOLD_MINUTES: int = 15
    RESERVATION_OPERATION_TIMEOUT_SECONDS: float = 10.0
    HIGH_DEMAND_THRESHOLD_PERCENT: int = 80
    PRESENCE_STREAM_BUFFER_SIZE: int = 10

    @property
    def OTP_REDIRECT_URL(self) -> str:
        return f'{self.PUBLIC_SITE_URL.rstrip("/")}/auth/callback'


settings = Settings()  # type: ignore
