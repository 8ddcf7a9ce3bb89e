"""API settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    max_upload_mb: int = 50
    upload_dir: str = "/tmp/uploads"
    preview_row_count: int = 5
    preview_chunk_size: int = 10000
    preview_max_bytes: int = 1024 * 1024
    session_ttl_seconds: int = 3600
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def preview_options(self) -> dict[str, int]:
        """Bounded-prefix limits passed through to the preview parser."""
        return {
            "row_count": self.preview_row_count,
            "chunk_size": self.preview_chunk_size,
            "max_prefix_bytes": self.preview_max_bytes,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
