import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class Settings:
    replicate_api_token: str = ""
    base_url: str = DEFAULT_BASE_URL
    tryon_function_url: str = f"{DEFAULT_BASE_URL}/virtual-tryon"
    tryon_service_key: str = ""
    log_level: str = "INFO"

    @property
    def replicate_configured(self) -> bool:
        return bool(self.replicate_api_token)


def load_settings() -> Settings:
    """Build settings from the process environment (and .env, if present)."""
    base_url = os.getenv("BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    return Settings(
        replicate_api_token=os.getenv("REPLICATE_API_TOKEN", ""),
        base_url=base_url,
        tryon_function_url=os.getenv("TRYON_FUNCTION_URL", f"{base_url}/virtual-tryon"),
        tryon_service_key=os.getenv("TRYON_SERVICE_KEY", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
