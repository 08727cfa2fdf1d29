"""
Engine settings.

Values come from the environment (prefix ``XUANSHU_``) or a local ``.env``
file, falling back to the defaults below. Policy constants for the two
calendar ambiguities live here so that every caller applies the same rule.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ZiHourPolicy(str, Enum):
    """How the 23:00-00:59 Zi hour relates to the day pillar."""

    # From 23:00 the day pillar is already the following day's (早子时 school)
    ROLLOVER = "rollover"
    # 23:00-23:59 keeps today's day pillar; only the hour stem uses tomorrow's (夜子时)
    SPLIT = "split"


class StartAgeMethod(str, Enum):
    """How the luck-pillar start age finds the neighbouring Jie solar term."""

    EPHEMERIS = "ephemeris"
    APPROXIMATE = "approximate"


class EngineSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="XUANSHU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # China Standard Time meridian (UTC+8)
    standard_meridian: float = 120.0

    zi_hour_policy: ZiHourPolicy = ZiHourPolicy.ROLLOVER
    start_age_method: StartAgeMethod = StartAgeMethod.EPHEMERIS

    luck_pillar_count: int = 10

    # Supported birth-year range
    min_year: int = 1900
    max_year: int = 2100

    # Swiss Ephemeris data directory; None uses the built-in Moshier ephemeris
    ephe_path: Optional[str] = None

    log_level: str = "INFO"


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
