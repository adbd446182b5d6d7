from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# api/.env first, then the working directory
ENV_FILE_CANDIDATES = [
    Path(__file__).parent.parent.parent / ".env",
    Path(".env"),
]

# Plain env vars used by container volume mounts
ENV_OVERRIDES = {
    "data_path": "DATA_PATH",
    "backups_path": "BACKUPS_PATH",
    "environment": "ENVIRONMENT",
}


def load_env_file() -> None:
    """Load the first .env file found, before Settings reads the environment."""
    for env_path in ENV_FILE_CANDIDATES:
        if env_path.exists():
            load_dotenv(env_path, override=True)
            logger.info(f"Loaded .env file from: {env_path.absolute()}")
            return


load_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = "production"

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: List[str] = ["*"]

    # Data files (DATA_PATH keeps the dataset outside the source tree)
    data_path: str = ""
    backups_path: str = ""

    # Spreadsheet uploads
    max_upload_size_mb: int = 10
    allowed_upload_extensions: List[str] = [".xlsx", ".xls"]

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        for field_name, env_name in ENV_OVERRIDES.items():
            if not kwargs.get(field_name) and os.getenv(env_name):
                kwargs[field_name] = os.getenv(env_name)
        super().__init__(**kwargs)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


settings = Settings()
