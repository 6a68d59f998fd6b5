"""
Общие настройки бота и админ-панели
"""
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, field_validator


class Settings(BaseSettings):
    """Общие настройки приложения"""

    # Telegram Bot
    telegram_bot_token: str = Field(default="", env="TELEGRAM_BOT_TOKEN")

    # Публичный адрес сервиса для вебхука; Render сам задаёт RENDER_EXTERNAL_URL
    public_base_url: str = Field(
        default="",
        validation_alias=AliasChoices("PUBLIC_BASE_URL", "RENDER_EXTERNAL_URL"),
    )
    webhook_path: str = Field(default="/webhook", env="WEBHOOK_PATH")
    use_webhook: bool = Field(default=True, env="USE_WEBHOOK")

    # Хранилище: json | sql | memory
    storage_backend: str = Field(default="json", env="STORAGE_BACKEND")
    data_dir: Path = Field(default=Path("data"), env="DATA_DIR")
    database_url: str = Field(default="sqlite+aiosqlite:///./deals_bot.db", env="DATABASE_URL")

    # Admin Settings
    admin_pin: str = Field(default="6300", env="ADMIN_PIN")  # Проверяется на стороне дашборда

    # Help Center (/help)
    help_email: str = Field(default="gggamer9848@gmail.com", env="HELP_EMAIL")
    help_website: str = Field(default="https://kpavan63.github.io/Help-Center/#", env="HELP_WEBSITE")

    # Поведение бота
    onboarding_delay: float = Field(default=1.0, env="ONBOARDING_DELAY")  # Пауза между приветственными сообщениями (сек)
    search_result_limit: int = Field(default=5, env="SEARCH_RESULT_LIMIT")

    # HTTP API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "API_PORT"))
    cors_origins: str = Field(default="*", env="CORS_ORIGINS")

    # Other Settings
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    @field_validator("storage_backend")
    @classmethod
    def check_storage_backend(cls, value: str) -> str:
        """Допустимы только известные бэкенды"""
        value = value.strip().lower()
        if value not in ("json", "sql", "memory"):
            raise ValueError(f"Unknown storage backend: {value}")
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        """Преобразует строку CORS-источников в список"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def webhook_url(self) -> str:
        """Полный адрес вебхука или пустая строка, если публичный URL не задан"""
        if not self.public_base_url:
            return ""
        return f"{self.public_base_url.rstrip('/')}{self.webhook_path}"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


# Глобальный экземпляр настроек (используется только точками входа)
settings = Settings()
