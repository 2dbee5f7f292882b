from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_STORAGE_ROOT = PROJECT_ROOT / "storage"
DEFAULT_DB_PATH = DEFAULT_STORAGE_ROOT / "app.db"


class Settings(BaseSettings):
    app_name: str = "WeChat Formatting Assistant API"
    api_prefix: str = "/api"

    storage_root: Path = DEFAULT_STORAGE_ROOT
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH.as_posix()}"
    frontend_origin: str = "http://localhost:5173"

    default_llm_provider: str = "deepseek"
    deepseek_api_key: str | None = None
    deepseek_api_endpoint: str = "https://api.deepseek.com/v1/chat/completions"
    deepseek_model: str = "deepseek-chat"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    completion_temperature: float = 0.7
    completion_max_tokens: int = 4000
    completion_timeout_seconds: int = 60
    completion_retries: int = 1

    templates_storage_key: str = "wx_format_templates"
    image_alt_placeholder: str = "图片"
    theme_sample_chars: int = 1000

    log_level: str = "INFO"
    suppress_http_client_logs: bool = True
    log_preview_chars: int = 180

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()

settings.storage_root.mkdir(parents=True, exist_ok=True)
