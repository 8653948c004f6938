from __future__ import annotations

import os

APP_VERSION = "1.0.0"

# Secrets that ship as defaults; startup refuses them outside development.
_DEFAULT_SECRET_KEYS = (
    "your-secret-key-change-in-production",
    "change-me-in-production",
)

_DEFAULT_FRONTEND_ORIGINS = ",".join(f"http://localhost:{port}" for port in range(5173, 5179))


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


class Settings:
    PROJECT_NAME: str = "Bragger"
    API_PREFIX: str = "/api"

    PORT: int = int(os.getenv("PORT", "3001"))
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Full SQLAlchemy URL wins over the individual POSTGRES_* parts
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "bragger")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "bragger")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "bragger")

    RESET_DB: bool = _env_flag("RESET_DB")
    SEED_DEMO: bool = _env_flag("SEED_DEMO")

    JWT_SECRET: str = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
    JWT_EXPIRES_IN: str = os.getenv("JWT_EXPIRES_IN", "7d")

    # Comma-separated CORS allow-list
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", _DEFAULT_FRONTEND_ORIGINS)

    RATE_LIMIT: str = os.getenv("RATE_LIMIT", "100/15minutes")

    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "5"))
    MAX_UPLOAD_FILES: int = int(os.getenv("MAX_UPLOAD_FILES", "10"))

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.FRONTEND_URL.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
