from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    WHATSAPP_TOKEN: str = ""
    WHATSAPP_PHONE_NUMBER_ID: str = ""
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_API_BASE: str = "https://graph.facebook.com/v21.0"

    STT_PROVIDER: str = "none"
    STT_API_KEY: str | None = None
    STT_MODEL: str = "whisper-1"

    DEFAULT_LOCALE: str = "fr"
    SUPPORTED_LOCALES: str = "fr,en"

    KNOWLEDGE_BASE_PATH: str | None = None

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = True

    @property
    def supported_locales(self) -> list[str]:
        return [locale.strip() for locale in self.SUPPORTED_LOCALES.split(",") if locale.strip()]

    def missing_required(self) -> list[str]:
        missing: list[str] = []
        if not self.WHATSAPP_TOKEN:
            missing.append("WHATSAPP_TOKEN")
        if not self.WHATSAPP_PHONE_NUMBER_ID:
            missing.append("WHATSAPP_PHONE_NUMBER_ID")
        if not self.WHATSAPP_VERIFY_TOKEN:
            missing.append("WHATSAPP_VERIFY_TOKEN")
        return missing


settings = Settings()
