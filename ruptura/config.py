"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from ruptura.domain.enums import BuildingCategory


class Settings(BaseSettings):
    app_name: str = "ruptura"
    debug: bool = False
    log_level: str = "INFO"

    # Ingestion
    default_building_category: BuildingCategory = BuildingCategory.RESIDENTIAL

    # Event stream
    event_poll_limit: int = 200
    dashboard_replay_count: int = 20

    model_config = {"env_prefix": "RUPTURA_"}


settings = Settings()
