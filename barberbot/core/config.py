from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
    TELEGRAM_WEBHOOK_SECRET: str | None = None
    # Chat that receives new-booking notices; skipped when unset.
    TELEGRAM_PROVIDER_CHAT_ID: str | None = None

    BUSINESS_NAME: str = "Your Barbershop"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "json"
    STORE_DATA_DIR: str = "./data"
    SESSION_MAX_ENTRIES: int = 10_000

    OPENING_HOUR: int = 9
    CLOSING_HOUR: int = 18
    CLOSED_WEEKDAY: int = 5
    BOOKING_WINDOW_DAYS: int = 7
    DAYS_OFF_WINDOW_DAYS: int = 14

    PROVIDER_LABEL: str = "barber"
    PLACEHOLDER_EMAIL_DOMAIN: str = "temp.com"


settings = Settings()
