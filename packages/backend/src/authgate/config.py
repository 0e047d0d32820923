"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with AUTHGATE_ prefix
(and a local .env file when one exists).

Learn: The settings object is built once at startup and handed to the
app factory. Anything downstream that needs a slice of it (the JWT
strategy, the token helpers) gets an explicit JwtConfig instead of
reaching for a global.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

DEV_SECRET = "change-me-in-production"


@dataclass(frozen=True)
class JwtConfig:
    """Key material and options for signing and verifying tokens."""

    secret: str
    algorithm: str = "HS256"
    expire_minutes: int = 60
    header: str = "authorization"
    scheme: str = ""  # "" = raw token in the header, "Bearer" = standard scheme


class Settings(BaseSettings):
    """All app configuration. Set via AUTHGATE_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./authgate.db"
    create_tables: bool = True  # create_all on startup (no migrations)

    # Auth
    auth_secret: str = Field(
        default=DEV_SECRET,
        validation_alias=AliasChoices("AUTHGATE_AUTH_SECRET", "AUTH_SECRET"),
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    token_header: str = "authorization"
    token_scheme: str = ""
    bcrypt_rounds: int = 12

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {
        "env_prefix": "AUTHGATE_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_secret(self):
        """Token signing is impossible without a secret; fail at startup."""
        if not self.auth_secret:
            raise ValueError("AUTHGATE_AUTH_SECRET must not be empty")
        if self.environment != "development" and self.auth_secret == DEV_SECRET:
            raise ValueError(
                "AUTHGATE_AUTH_SECRET must be set to a secure value in "
                "non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self

    def jwt_config(self) -> JwtConfig:
        return JwtConfig(
            secret=self.auth_secret,
            algorithm=self.jwt_algorithm,
            expire_minutes=self.access_token_expire_minutes,
            header=self.token_header,
            scheme=self.token_scheme,
        )


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
