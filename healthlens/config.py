from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    log_level: str = "INFO"

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    extraction_temperature: float = 0.0
    summary_temperature: float = 0.2
    summary_max_tokens: int = 1200

    llama_cloud_api_key: str | None = None
    labs_enable_regex_fallback: bool = True

    allowed_origins: str = "*"
    max_upload_size_mb: int = 10
    ocr_max_files: int = 7
    ocr_max_pdfs: int = 1
    ocr_max_images: int = 6
    rate_limit_per_minute: int = 6


settings = Settings()
