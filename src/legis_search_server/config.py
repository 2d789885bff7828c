from typing import Optional

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Embedding provider (Gemini embedContent). No key -> hashed fallback only.
    gemini_api_key: Optional[SecretStr] = None
    embedding_model: str = "embedding-001"
    embedding_base_url: AnyHttpUrl = "https://generativelanguage.googleapis.com/v1beta"
    embedding_dimension: int = Field(default=768, ge=1)
    embedding_max_chars: int = Field(default=1000, ge=1)
    embedding_timeout: float = 15.0
    embedding_throttle_seconds: float = Field(default=0.1, ge=0.0)

    # Document source (Congress.gov v3)
    congress_api_key: Optional[SecretStr] = None
    congress_api_base_url: AnyHttpUrl = "https://api.congress.gov/v3"
    congress_number: int = 118
    congress_timeout: float = 15.0
    document_fetch_limit: int = Field(default=100, ge=1, le=250)

    # Index lifecycle
    index_ttl_seconds: float = Field(default=30 * 60, gt=0)
    default_min_similarity: float = Field(default=0.2, ge=0.0, le=1.0)
    default_top_k: int = Field(default=10, ge=1)
    warm_index_on_startup: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
