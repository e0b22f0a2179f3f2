from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # Frontend origins allowed to call the API with credentials
    FRONTEND_URL: str | None = None
    EXTRA_ALLOWED_ORIGINS: list[str] = []

    # Google Sheets settings
    GOOGLE_SHEET_ID: str | None = None
    GOOGLE_SHEET_NAME: str = "Sheet1"
    GOOGLE_SERVICE_ACCOUNT_FILE: str = "shiftraa-moving-credentials.json"

    # Google Maps (browser script proxied through the backend)
    GOOGLE_MAPS_API_KEY: str | None = None

    # ZeptoMail settings
    ZEPTO_URL: str = "https://api.zeptomail.com/v1.1/email"
    ZEPTO_TOKEN: str | None = None
    OWNER_EMAIL: str | None = None
    SENDER_EMAIL: str | None = None
    SENDER_NAME: str = "Shiftraa Moving"

    # Session cookie carrying the submission id between part 1 and part 2
    SESSION_COOKIE_NAME: str = "shiftraa_uuid"
    SESSION_COOKIE_MAX_AGE: int = 24 * 60 * 60  # 1 day

    # Proxy settings
    TRUST_X_FORWARDED_FOR: bool = False
    TRUSTED_PROXY_IPS: list[str] = []

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def is_production(self) -> bool:
        return self.environment == "production"

    def allowed_origins(self) -> list[str]:
        """Origins allowed by CORS. Empty entries are dropped."""
        origins = [self.FRONTEND_URL, *self.EXTRA_ALLOWED_ORIGINS]
        return [origin.rstrip("/") for origin in origins if origin]

    def mail_configured(self) -> bool:
        return bool(self.ZEPTO_TOKEN and self.SENDER_EMAIL)

    def sheets_configured(self) -> bool:
        return bool(self.GOOGLE_SHEET_ID)


settings = Settings()
