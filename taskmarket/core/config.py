from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASKMARKET_",
        env_file=".env",
        extra="ignore",
    )

    # Firebase (falls back to application default credentials when the key file is missing)
    firebase_credentials_path: str = "service-account-key.json"
    firebase_config_path: str = "Firebase.json"
    firebase_project_id: Optional[str] = None

    # Custom claim on the ID token that grants access to /admin
    admin_claim: str = "admin"

    recent_tasks_limit: int = 5
    active_user_window_days: int = 30

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
