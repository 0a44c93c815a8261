from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COURTSLOT_",
        case_sensitive=False,
    )

    # App
    env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    db_url: str = "sqlite+aiosqlite:///./courtslot.db"

    # Booking policy defaults
    commission_pct: float = 10.0
    min_advance_hours: int = 0
    max_advance_days: int = 7
    cancellation_cutoff_hours: int = 2

    # Courts
    default_court_price: float = 500.0
    max_availability_days: int = 7


def get_settings() -> Settings:
    return Settings()
