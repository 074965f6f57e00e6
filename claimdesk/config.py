from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./claimdesk.db"

    jwt_secret_key: str = "change-this-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # Prefix for generated invoice numbers, e.g. INV-20261019-K3M9QZ
    invoice_number_prefix: str = "INV"

    # Maximum rows returned by the invoice listing
    list_limit: int = 50

    # Log overpayments (paid > amount) separately so staff can review them
    flag_overpayment: bool = True

    log_level: str = "INFO"

    # CORS configuration - comma-separated list of allowed origins
    # Example: "https://portal.example.com,https://admin.example.com"
    cors_allowed_origins: Optional[str] = None

    # Auto-run alembic migrations on startup (set to "true" in staging)
    run_migrations_on_startup: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_cors_origins(self) -> list[str]:
        """Get list of CORS allowed origins, combining defaults with env var.

        - Strips whitespace
        - Removes trailing slashes
        - Deduplicates
        """
        default_origins = [
            "http://localhost:3000",
            "http://localhost:5173",
        ]

        all_origins = list(default_origins)

        if self.cors_allowed_origins:
            for origin in self.cors_allowed_origins.split(","):
                cleaned = origin.strip().rstrip("/")
                if cleaned and cleaned not in all_origins:
                    all_origins.append(cleaned)

        return all_origins


@lru_cache()
def get_settings() -> Settings:
    return Settings()
