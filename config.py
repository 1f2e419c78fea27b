from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    baserow_url: str = Field("https://api.baserow.io", description="Base URL of the Baserow instance")
    baserow_token: str = Field("", description="Database token sent as 'Authorization: Token ...'")
    baserow_table_id: str = Field("", description="Products table id")
    baserow_category_table_id: str = Field("517", description="Categories table id")
    field_map_path: Path = ROOT_DIR / "field_map.json"
    request_timeout: float = 30.0
    log_level: str = "INFO"
    session_cookie: str = "catalog_session"
    session_cookie_secure: bool = Field(True, description="Send the session cookie over HTTPS only")
    session_max_age: int = Field(86400, description="Seconds a session cookie and its server state live while idle")
    max_sessions: int = Field(500, description="Admin sessions kept in memory before the least recent is dropped")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
