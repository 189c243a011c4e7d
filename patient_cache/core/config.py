from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Patient Cache"
    VERSION: str = "1.0.0"

    DATABASE_URL: str = "sqlite:///./patient_cache.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # Populate the patient cache during application startup instead of on first access
    PATIENT_CACHE_EAGER_LOAD: bool = True

    # Create a demo study with a few patients on startup (idempotent)
    SEED_DEMO_DATA: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
