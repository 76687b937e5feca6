from pydantic_settings import BaseSettings
from dotenv import load_dotenv, find_dotenv
from os import getenv
from typing import List, Optional

_env_path = find_dotenv()  # locate a .env file in this folder or parent folders
if _env_path:
    load_dotenv(_env_path)


class Settings(BaseSettings):
    # Upstream feeds
    # Left unset here; provider construction rejects a missing url.
    BBC_URL: Optional[str] = getenv('BBC_URL')
    SKY_URL: Optional[str] = getenv('SKY_URL')
    FEED_CATEGORIES: List[str] = ["uk", "technology"]

    # Timeouts / retries
    UPSTREAM_TIMEOUT_SECONDS: float = 1.0
    UPSTREAM_MAX_RETRIES: int = 0
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Service metadata
    SERVICE_NAME: str = "news-api"
    LOG_LEVEL: str = "INFO"
    VERSION: str = "v1.0.0"

settings = Settings()
