"""Configuration settings for the Atlassian Community tools."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream search API
    api_base_url: str = Field(
        default="https://community.atlassian.com/forums/s/api/2.0/search",
        description="Community search endpoint queried with ?q=<query>",
    )
    request_timeout_seconds: float = Field(default=30.0, description="HTTP timeout per request")

    # Query defaults
    default_limit: int = Field(default=25, ge=1, le=100, description="Default page size")

    # Tool exposure
    expose_popular_tags: bool = Field(
        default=False,
        description="Register the getPopularTags tool (upstream rejects aggregation queries)",
    )

    # Output settings
    output_dir: str = Field(default="./output", description="JSON output directory")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    model_config = {
        "env_prefix": "ATLASSIAN_COMMUNITY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
