from dataclasses import dataclass
from decimal import Decimal
from pydantic_settings import BaseSettings
from pydantic import model_validator
from urllib.parse import quote_plus
import os


@dataclass(frozen=True)
class LedgerConfig:
    """Knobs the ledger engines read. Built from Settings and passed in explicitly."""
    tds_rate: Decimal = Decimal("0.001")
    clamp_running_balance: bool = False
    reconcile_tolerance: Decimal = Decimal("0.01")
    max_write_attempts: int = 3


class Settings(BaseSettings):
    APP_ENV: str = "local"
    APP_TITLE: str = "Poultry Ledger"
    LOCAL_URL: str = "http://127.0.0.1:8000"
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Database URL - can be provided directly or constructed from components
    DATABASE_URL: str | None = None

    # Individual database components (for constructing DATABASE_URL)
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    SQLITE_PATH: str = "poultry_ledger.db"

    # Ledger engine
    LEDGER_TDS_RATE: Decimal = Decimal("0.001")
    LEDGER_CLAMP_RUNNING_BALANCE: bool = False
    LEDGER_RECONCILE_TOLERANCE: Decimal = Decimal("0.01")
    LEDGER_MAX_WRITE_ATTEMPTS: int = 3

    class Config:
        env_file = ".env" if os.getenv("APP_ENV", "local") == "local" else ".env.prod"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @model_validator(mode='after')
    def construct_database_url(self):
        """Construct DATABASE_URL from components if not provided directly."""
        if self.LEDGER_MAX_WRITE_ATTEMPTS < 1:
            raise ValueError("LEDGER_MAX_WRITE_ATTEMPTS must be at least 1")

        if not self.DATABASE_URL:
            if not self.DB_NAME:
                # local development without postgres
                self.DATABASE_URL = f"sqlite:///{self.SQLITE_PATH}"
                return self

            # URL encode password to handle special characters
            password_part = f":{quote_plus(self.DB_PASSWORD)}" if self.DB_PASSWORD else ""
            self.DATABASE_URL = f"postgresql://{self.DB_USER}{password_part}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return self

    @property
    def database_url(self) -> str:
        """Get DATABASE_URL as a guaranteed string."""
        assert self.DATABASE_URL is not None, "DATABASE_URL must be set"
        return self.DATABASE_URL

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def ledger_config(self) -> LedgerConfig:
        return LedgerConfig(
            tds_rate=self.LEDGER_TDS_RATE,
            clamp_running_balance=self.LEDGER_CLAMP_RUNNING_BALANCE,
            reconcile_tolerance=self.LEDGER_RECONCILE_TOLERANCE,
            max_write_attempts=self.LEDGER_MAX_WRITE_ATTEMPTS,
        )


settings = Settings()
