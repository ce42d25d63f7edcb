"""Configuration management using pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the alt text service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API Settings
    api_title: str = "Alt Text Service"
    api_version: str = "1.0.0"
    api_description: str = "Generates accessibility alt text for images on a web page"
    host: str = "0.0.0.0"
    port: int = 8787

    # CORS: origins not in this list get the first entry back
    allowed_origins: list[str] = [
        "https://localhost:5173",
        "https://magic-alt-plugin.pages.dev",
    ]

    # Request handling
    require_site_url: bool = True
    page_parser: Literal["regex", "html"] = "regex"
    user_agent: str = "alt-text-service/1.0"
    fetch_timeout: float = 15.0
    task_timeout: float = 60.0

    # Inference (Cloudflare Workers AI REST API)
    cloudflare_account_id: str = ""
    cloudflare_api_token: str = ""  # Change via environment variable
    workers_ai_base_url: str = "https://api.cloudflare.com/client/v4"
    caption_model: str = "@cf/llava-hf/llava-1.5-7b-hf"
    max_tokens: int = 35
    inference_timeout: float = 45.0


# Global settings instance
settings = Settings()
