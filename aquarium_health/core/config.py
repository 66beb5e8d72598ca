from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from aquarium_health.schemas import AnalysisThresholds


class Settings(BaseSettings):
    PROJECT_NAME: str = "aquarium-health-service"
    LOG_LEVEL: str = "INFO"

    # unset -> auth off (demo mode)
    FUNCTION_KEY: Optional[str] = None

    # per-deployment threshold bands
    PH_MIN: float = 6.5
    PH_MAX: float = 8.5
    TEMP_MIN_C: float = 22.0
    TEMP_MAX_C: float = 28.0
    AMMONIA_DANGER_PPM: float = 0.5
    OVERCROWDING_FISH_COUNT: int = 50

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


@lru_cache(maxsize=1)
def get_thresholds() -> AnalysisThresholds:
    s = get_settings()
    return AnalysisThresholds(
        min_acceptable_ph=s.PH_MIN,
        max_acceptable_ph=s.PH_MAX,
        min_safe_temperature=s.TEMP_MIN_C,
        max_safe_temperature=s.TEMP_MAX_C,
        ammonia_danger_level=s.AMMONIA_DANGER_PPM,
        overcrowding_threshold=s.OVERCROWDING_FISH_COUNT,
    )
