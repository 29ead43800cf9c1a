import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv


class ConfigError(Exception):
    """Raised when a required setting is missing or invalid"""
    pass


PLAID_ENVIRONMENTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    plaid_client_id: Optional[str] = None
    plaid_secret: Optional[str] = None
    plaid_env: str = "sandbox"
    plaid_webhook_url: Optional[str] = None
    plaid_max_pages: int = 10
    google_places_api_key: Optional[str] = None
    places_max_concurrency: int = 0
    food_rules_path: Optional[str] = None
    log_level: str = "INFO"
    port: int = 8000

    @property
    def plaid_base_url(self) -> str:
        return PLAID_ENVIRONMENTS[self.plaid_env]

    def require(self, *names: str) -> None:
        """
        Check that every named setting has a value

        Raises:
            ConfigError: listing all missing settings at once
        """
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_settings() -> Settings:
    """Build Settings from the environment (and a .env file when present)"""
    load_dotenv(find_dotenv(usecwd=True))

    plaid_env = os.getenv("PLAID_ENV", "sandbox").lower()
    if plaid_env not in PLAID_ENVIRONMENTS:
        raise ConfigError(
            f"PLAID_ENV must be one of {', '.join(PLAID_ENVIRONMENTS)}, got {plaid_env!r}"
        )

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_service_key=os.getenv("SUPABASE_SERVICE_KEY"),
        plaid_client_id=os.getenv("PLAID_CLIENT_ID"),
        plaid_secret=os.getenv("PLAID_SECRET"),
        plaid_env=plaid_env,
        plaid_webhook_url=os.getenv("PLAID_WEBHOOK_URL") or None,
        plaid_max_pages=_int_env("PLAID_MAX_PAGES", 10),
        google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY"),
        places_max_concurrency=_int_env("PLACES_MAX_CONCURRENCY", 0),
        food_rules_path=os.getenv("FOOD_RULES_PATH") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        port=_int_env("PORT", 8000),
    )
