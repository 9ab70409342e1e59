from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379"

    # "production" hides exception details from API error bodies
    environment: str = "development"
    log_level: str = "info"

    # QR payloads point here: {connect_base_url}/connect?to=<user>&event=<event>
    connect_base_url: str = "https://winengrind.com"
    brand_wordmark: str = "WINE & GRIND"

    assets_dir: Path = Path("public")
    asset_fetch_timeout_seconds: float = 15.0

    default_overlay_opacity: int = 25
    default_header_color: str = "#7A1E1E"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
