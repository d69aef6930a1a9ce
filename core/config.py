import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(val: str | None, default=False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _as_list(val: str | None) -> list[str]:
    return [item.strip() for item in (val or "").split(",") if item.strip()]


class Settings:
    PROJECT_NAME = "Classfolio"
    APP_ENV = os.getenv("APP_ENV", "development")

    # DB
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./classfolio.db")

    # Identity provider. Without a secret the bearer claims are read unverified.
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # Google OAuth client used for refresh-token grants
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_TOKEN_URI = os.getenv("GOOGLE_TOKEN_URI", "https://oauth2.googleapis.com/token")
    DRIVE_HTTP_TIMEOUT = float(os.getenv("DRIVE_HTTP_TIMEOUT", "30"))

    # Provider tokens are encrypted at rest with a key derived from this secret
    TOKEN_ENCRYPTION_KEY = os.getenv("TOKEN_ENCRYPTION_KEY", "dev-token-encryption-key-change-me")

    # Public share links are built on top of the client URL
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5000")
    CORS_ORIGINS = _as_list(os.getenv("CORS_ORIGINS", "http://localhost:5000,http://localhost:3000"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON = _as_bool(os.getenv("LOG_JSON", "0"))

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


settings = Settings()
