"""
The Daily Dog configuration
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Project paths
    BASE_DIR: Path = Path(__file__).parent.parent

    # Public site
    site_url: str = Field(default="https://thedailydog.com", env="SITE_URL")
    secret_key: str = Field(default="change-me", env="SECRET_KEY")

    # Database
    database_url: str = Field(
        default="sqlite:///./data/dailydog.db",
        env="DATABASE_URL"
    )

    # Article generation
    llm_provider: str = Field(default="openai", env="LLM_PROVIDER")  # openai | ollama
    openai_api_key: str = Field(default="", env="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", env="OPENAI_MODEL")
    openai_image_model: str = Field(default="dall-e-3", env="OPENAI_IMAGE_MODEL")
    ollama_host: str = Field(default="http://localhost:11434", env="OLLAMA_HOST")
    ollama_model: str = Field(default="qwen2.5:7b", env="OLLAMA_MODEL")
    generation_timeout: float = Field(default=60.0, env="GENERATION_TIMEOUT")
    generate_images: bool = Field(default=False, env="GENERATE_IMAGES")

    # Uploaded/generated images
    media_dir: Path = Field(default=Path(__file__).parent.parent / "media", env="MEDIA_DIR")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Return the settings singleton"""
    return Settings()


settings = get_settings()
