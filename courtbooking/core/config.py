from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Court Booking API"
    API_V1_STR: str = "/api/v1"

    # Shared secret for the /admin endpoints (sent as X-Admin-Key)
    ADMIN_SECRET_KEY: str = "change-this-admin-secret"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "court_booking"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Club
    CLUB_TIMEZONE: str = "UTC"
    BOOKING_PAYMENT_REQUIRED: bool = False

    # Seconds between completion sweeps; 0 disables the background task
    COMPLETION_CHECK_INTERVAL_SECONDS: int = 60

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")


settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
