from pydantic_settings import BaseSettings
from dotenv import load_dotenv, find_dotenv
from os import getenv
from typing import List, Optional

_env_path = find_dotenv(usecwd=True)  # locate a .env file in this folder or parent folders
if _env_path:
    load_dotenv(_env_path)

# execution contexts where background timers must not run
EPHEMERAL_ENVS = ("test", "ephemeral")


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseSettings):
    APP_ENV: str = getenv('APP_ENV', 'development')

    # Server
    HOST: str = getenv('HOST', '0.0.0.0')
    PORT: int = int(getenv('PORT', '3000'))

    # Database related
    # DATABASE_URL wins when set; otherwise postgres is built from the DB_* vars
    DATABASE_URL: Optional[str] = getenv('DATABASE_URL')
    DB_HOST_IP: Optional[str] = getenv('DB_HOST_IP')
    DB_USER: Optional[str] = getenv('DB_USER')
    DB_PASSWORD: Optional[str] = getenv('DB_PASSWORD')
    DB_NAME: Optional[str] = getenv('DB_NAME')
    SCAN_BATCH_SIZE: int = int(getenv('SCAN_BATCH_SIZE', '500'))

    # Cache
    CACHE_TTL_MS: int = int(getenv('CACHE_TTL_MS', '300000'))
    CACHE_SWEEP_INTERVAL_MS: int = int(getenv('CACHE_SWEEP_INTERVAL_MS', '60000'))
    CACHE_SWEEP_ENABLED: bool = _as_bool(getenv('CACHE_SWEEP_ENABLED'), True)

    # Comma separated list of allowed origins, empty disables CORS
    CORS_ORIGINS: str = getenv('CORS_ORIGINS', '')

    LOG_LEVEL: str = getenv('LOG_LEVEL', 'INFO')

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST_IP and self.DB_USER and self.DB_NAME:
            return (
                f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD or ''}"
                f"@{self.DB_HOST_IP}:5432/{self.DB_NAME}"
            )
        return "sqlite:///./data/kvstream.db"

    @property
    def cache_ttl_seconds(self) -> float:
        return self.CACHE_TTL_MS / 1000

    @property
    def sweep_interval_seconds(self) -> float:
        return self.CACHE_SWEEP_INTERVAL_MS / 1000

    @property
    def sweep_enabled(self) -> bool:
        return self.CACHE_SWEEP_ENABLED and self.APP_ENV.lower() not in EPHEMERAL_ENVS

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(',') if o.strip()]


settings = Settings()
