from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Vinted Publisher"
    app_env: str = "dev"
    log_level: str = "INFO"
    database_url: str = "sqlite:///./vinted_publisher.db"

    # Target site
    vinted_base_url: str = "https://www.vinted.fr"
    vinted_login_path: str = "/member/login"
    vinted_new_item_path: str = "/items/new"
    vinted_session_file: str = "./playwright-state/vinted-session.json"

    # Default credentials for the command line publisher
    vinted_email: Optional[str] = None
    vinted_password: Optional[str] = None

    # Browser
    browser_headless: bool = True
    browser_slow_mo_ms: int = 100
    browser_locale: str = "fr-FR"
    browser_viewport_width: int = 1280
    browser_viewport_height: int = 720
    browser_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Waits (milliseconds for Playwright, seconds for settle delays)
    navigation_timeout_ms: int = 30000
    login_form_timeout_ms: int = 10000
    field_timeout_ms: int = 5000
    submit_timeout_ms: int = 30000
    page_settle_seconds: float = 2.0
    photo_settle_seconds: float = 1.5
    field_settle_seconds: float = 0.5
    photo_download_timeout_seconds: float = 15.0

    # Finished publish jobs stay pollable this long
    progress_retention_seconds: float = 3600.0

    class Config:
        env_file = ".env"

    @property
    def home_url(self) -> str:
        return self.vinted_base_url.rstrip("/")

    @property
    def login_url(self) -> str:
        return f"{self.home_url}{self.vinted_login_path}"

    @property
    def new_item_url(self) -> str:
        return f"{self.home_url}{self.vinted_new_item_path}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
