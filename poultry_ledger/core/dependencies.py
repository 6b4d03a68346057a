from poultry_ledger.core.config import LedgerConfig, settings
from poultry_ledger.core.database import SessionLocal


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_ledger_config() -> LedgerConfig:
    """Dependency for the ledger engine settings."""
    return settings.ledger_config()
