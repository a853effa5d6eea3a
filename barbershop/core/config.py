from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_API_URL: str = "https://graph.facebook.com/v18.0"
    WHATSAPP_MAX_RETRIES: int = 2

    BUSINESS_NAME: str = "Madison MVP Barbería"
    BUSINESS_ADDRESS: str = "Centro Comercial Acropolis, Local 108 (primer piso), Entrada trasera"
    BUSINESS_TIMEZONE: str = "America/Bogota"
    LUNCH_START: str = "13:00"
    LUNCH_END: str = "14:30"
    DEFAULT_SLOT_MINUTES: int = 30

    CONVERSATION_TIMEOUT_MS: int = 300000
    SWEEP_INTERVAL_SECONDS: int = 60

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False
    DATA_DIR: str = "./data"

    GOOGLE_CALENDAR_ACCESS_TOKEN: str | None = None
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    CALENDAR_TIMEOUT_SECONDS: float = 5.0


settings = Settings()
