"""Global application settings."""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


STORE_BACKENDS = ("memory", "file", "dynamodb")


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    # Service Info
    APP_NAME: str = "Prompt Spellbook Backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Data files
    DATA_DIR: str = "/lzcapp/var/data"
    SEED_FILE: str = "init.json"
    SEED_SOURCE_URL: Optional[str] = None  # Fetch seed data from another backend instead of SEED_FILE

    # Document store
    STORE_BACKEND: str = "file"  # memory | file | dynamodb
    DYNAMODB_ENDPOINT: str = "http://dynamodb-local:8000"
    DYNAMODB_REGION: str = "us-east-1"
    DYNAMODB_ACCESS_KEY: str = "fake"
    DYNAMODB_SECRET_KEY: str = "fake"
    DYNAMODB_TABLE_PREFIX: str = "spellbook_"

    # catimg hand-off
    CATIMG_URL: str = "https://catimg.kagee.heiyu.space/"
    CATIMG_STORE_URL: str = "lzc://appstore?path=detail/cloud.lazycat.aipod.catimg"
    CATIMG_PROMPT_FILE: str = "/lzcapp/run/mnt/home/default/.catimg_prompt.json"
    CATIMG_CHECK_TIMEOUT: float = 5.0

    # Logging
    LOGGING_HOST: Optional[str] = None
    LOGGING_PORT: int = 9999
    LOG_LEVEL: str = "INFO"
    NOISY_LOGGERS: str = "botocore,boto3,aioboto3,aiobotocore,urllib3,httpx,httpcore"  # raised to WARNING

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    def model_post_init(self, __context) -> None:
        """Validate settings after initialization (Pydantic v2)."""
        if self.STORE_BACKEND not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND '{self.STORE_BACKEND}' is not supported. "
                f"Available: {', '.join(STORE_BACKENDS)}"
            )

    @property
    def data_path(self) -> Path:
        return Path(self.DATA_DIR)

    @property
    def seed_path(self) -> Path:
        return self.data_path / self.SEED_FILE


settings = Settings()
