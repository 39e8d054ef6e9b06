from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "Habit Momentum"
    DATABASE_URL: str = "sqlite:///data/habits.db"
    DATA_DIR: Path = Path("data")
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8050",
        "http://127.0.0.1:8050",
    ]
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str | None = None  # IANA name used for "today"; UTC when unset
    ONBOARDING_DAYS_BEFORE: int = 7
    ONBOARDING_DAYS_AFTER: int = 3
    WEEK_DAYS_BEFORE: int = 3
    WEEK_DAYS_AFTER: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    def validate_configuration(self) -> None:
        errors: list[str] = []
        if self.ONBOARDING_DAYS_BEFORE < 0 or self.ONBOARDING_DAYS_AFTER < 0:
            errors.append("ONBOARDING_DAYS_BEFORE/AFTER must not be negative")
        if self.WEEK_DAYS_BEFORE < 0 or self.WEEK_DAYS_AFTER < 0:
            errors.append("WEEK_DAYS_BEFORE/AFTER must not be negative")
        if self.is_production_like and self.DATABASE_URL.startswith("sqlite:///:memory:"):
            errors.append("DATABASE_URL must not be an in-memory database in production-like environments")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Invalid configuration: {joined}")


settings = Settings()
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
