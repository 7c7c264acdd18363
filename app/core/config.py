"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
)

DEFAULT_UPLOAD_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".doc", ".docx")


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # memory: process-lifetime dict store; database: SQLAlchemy against DATABASE_URL
    STORAGE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite:///./desa_portal.db"

    # JWT authentication
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Local file uploads
    UPLOAD_DIR: str = "uploads"
    UPLOAD_MAX_FILE_BYTES: int = 5 * 1024 * 1024
    UPLOAD_MAX_FILES: int = 5
    UPLOAD_ALLOWED_EXTENSIONS: Annotated[tuple[str, ...], NoDecode] = DEFAULT_UPLOAD_EXTENSIONS

    # First admin account, created on startup when missing
    SEED_DEFAULT_ADMIN: bool = True
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: SecretStr = SecretStr("admin12345")
    DEFAULT_ADMIN_FULL_NAME: str = "Admin Desa"
    DEFAULT_ADMIN_EMAIL: str = "admin@desaairkulim.desa.id"

    # Organization profile shown on the portal until an admin edits it
    ORGANIZATION_NAME: str = "Pemerintah Desa Air Kulim"
    ORGANIZATION_ADDRESS: str = "Jl. Raya Desa Air Kulim"
    ORGANIZATION_PHONE: str = "0761000000"
    ORGANIZATION_EMAIL: str = "info@desaairkulim.desa.id"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL "
                "(e.g. postgresql+psycopg2:// or sqlite:///./desa_portal.db)"
            )
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("UPLOAD_DIR")
    @classmethod
    def validate_upload_dir(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("UPLOAD_DIR must be set and non-empty")
        return v.strip()

    @field_validator("UPLOAD_MAX_FILE_BYTES")
    @classmethod
    def validate_upload_max_file_bytes(cls, v: int) -> int:
        if v < 1 or v > 100 * 1024 * 1024:
            raise ValueError("UPLOAD_MAX_FILE_BYTES must be between 1 byte and 100 MB")
        return v

    @field_validator("UPLOAD_MAX_FILES")
    @classmethod
    def validate_upload_max_files(cls, v: int) -> int:
        if v < 1 or v > 50:
            raise ValueError("UPLOAD_MAX_FILES must be between 1 and 50")
        return v

    @field_validator("UPLOAD_ALLOWED_EXTENSIONS", mode="before")
    @classmethod
    def validate_upload_extensions(cls, v: object) -> tuple[str, ...]:
        # Env values arrive as a comma list, e.g. "pdf,.png".
        items = v.split(",") if isinstance(v, str) else list(v)  # type: ignore[arg-type]
        normalized = []
        for item in items:
            ext = str(item).strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("UPLOAD_ALLOWED_EXTENSIONS must list at least one extension")
        return tuple(normalized)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
