"""Configuration for the PR Assistant."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=True, env="DEBUG")
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8080, env="PORT")

    # LLM - OpenRouter (multi-provider gateway)
    openrouter_api_key: Optional[str] = Field(default=None, env="OPENROUTER_API_KEY")
    generation_model: str = Field(default="claude-sonnet-4", env="GENERATION_MODEL")

    # GitHub App Authentication
    github_app_id: Optional[str] = Field(default=None, env="GITHUB_APP_ID")
    github_private_key: Optional[str] = Field(default=None, env="GITHUB_PRIVATE_KEY")

    # Content store (change log)
    content_store_url: str = Field(
        default="https://zeno-server-preview.api.vertesia.io", env="CONTENT_STORE_URL"
    )
    content_store_api_key: Optional[str] = Field(default=None, env="CONTENT_STORE_API_KEY")
    change_entry_content_type: str = Field(
        default="6821524ef3aed394f1ec4931", env="CHANGE_ENTRY_CONTENT_TYPE"
    )

    # Assistant identity
    assistant_login_prefix: str = Field(default="vertesia", env="ASSISTANT_LOGIN_PREFIX")
    preview_bot_login: str = Field(default="vercel[bot]", env="PREVIEW_BOT_LOGIN")
    review_trigger_phrase: str = Field(
        default="Vertesia, please review", env="REVIEW_TRIGGER_PHRASE"
    )

    # Activity retry policy
    activity_timeout_seconds: float = Field(default=300.0, env="ACTIVITY_TIMEOUT_SECONDS")
    activity_initial_interval: float = Field(default=5.0, env="ACTIVITY_INITIAL_INTERVAL")
    activity_backoff_coefficient: float = Field(default=2.0, env="ACTIVITY_BACKOFF_COEFFICIENT")
    activity_max_attempts: int = Field(default=3, env="ACTIVITY_MAX_ATTEMPTS")
    activity_max_interval: float = Field(default=3000.0, env="ACTIVITY_MAX_INTERVAL")

    # Instance snapshots
    state_db_path: str = Field(default=".pr-assistant/state.db", env="STATE_DB_PATH")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
