"""
Luck-cycle generator.

Handles:
- Luck direction from gender and year-stem polarity
- Start age from the distance to the neighbouring Jie solar term
- The ten-year Luck Pillars (大运)
- Minor Fortunes (小运) for the years before the first Luck Pillar
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import swisseph as swe

from xuanshu.astro_calendar import approximate_nearest_jie, find_nearest_jie
from xuanshu.ganzhi import GanZhi, StemBranch, read_ganzhi
from xuanshu.settings import StartAgeMethod
from xuanshu.tables import HeavenlyStem

logger = logging.getLogger(__name__)

# Traditional rule: 3 days between birth and the Jie = 1 year of luck time
DAYS_PER_LUCK_YEAR = 3
YEARS_PER_PILLAR = 10


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def chinese(self) -> str:
        return "男" if self is Gender.MALE else "女"

    @property
    def chart_name(self) -> str:
        # 乾造 for a male chart, 坤造 for a female one
        return "乾造" if self is Gender.MALE else "坤造"


@dataclass(frozen=True)
class LuckPillar:
    index: int  # 1-based
    start_age: int
    start_year: int
    end_year: int
    ganzhi: GanZhi

    @property
    def label(self) -> str:
        return self.ganzhi.label

    @property
    def end_age(self) -> int:
        return self.start_age + YEARS_PER_PILLAR - 1

    def covers(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year

    def to_dict(self):
        return {
            "number": self.index,
            "label": self.label,
            "stem": self.ganzhi.stem.chinese,
            "stem_element": self.ganzhi.stem_element.value,
            "branch": self.ganzhi.branch.chinese,
            "branch_animal": self.ganzhi.branch.animal,
            "branch_element": self.ganzhi.branch_element.value,
            "ten_god": self.ganzhi.ten_god.value if self.ganzhi.ten_god else None,
            "na_yin": self.ganzhi.na_yin,
            "age_start": self.start_age,
            "age_end": self.end_age,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "description": f"大运{self.index}: {self.label} "
                           f"{self.start_age}-{self.end_age}岁 ({self.start_year}-{self.end_year})",
        }


@dataclass(frozen=True)
class MinorFortune:
    age: int  # nominal age (虚岁), 1 in the birth year
    year: int
    ganzhi: GanZhi

    def to_dict(self):
        return {"age": self.age, "year": self.year, "label": self.ganzhi.label}


@dataclass(frozen=True)
class LuckStart:
    days_to_jie: float
    start_age: int
    jie_name: str
    description: str


def is_forward(gender: Gender, year_stem: HeavenlyStem) -> bool:
    """
    Luck direction.

    Yang year + male or yin year + female → forward; otherwise backward.
    """
    return (gender is Gender.MALE) == year_stem.is_yang


def describe_luck_start(days_to_jie: float) -> str:
    """
    Precise start-luck wording: 3 days = 1 year, 1 day = 4 months and a
    two-hour shichen = 10 days.
    """
    years, remainder = divmod(days_to_jie, DAYS_PER_LUCK_YEAR)
    total_months = remainder * 12 / DAYS_PER_LUCK_YEAR
    months = int(total_months)
    days = int((total_months - months) * 30)
    return f"出生后{int(years)}年{months}个月{days}天起运"


def luck_start_age(days_to_jie: float) -> int:
    """Whole start age at 3 days per year, half a year rounding up."""
    return int(days_to_jie / DAYS_PER_LUCK_YEAR + 0.5)


def compute_luck_start(birth_local: datetime, jd_ut: float, forward: bool,
                       method: StartAgeMethod = StartAgeMethod.EPHEMERIS,
                       flags: int = swe.FLG_MOSEPH) -> LuckStart:
    """
    Distance from birth to the next (forward) or previous (backward) Jie.

    Args:
        birth_local: naive local standard time of birth
        jd_ut: Julian Day (UT) of the same instant
        forward: luck direction
        method: exact ephemeris crossing, or the 6th-of-the-month approximation
    """
    if method is StartAgeMethod.APPROXIMATE:
        jie_time = approximate_nearest_jie(birth_local, forward)
        days = abs((jie_time - birth_local).total_seconds()) / 86400.0
        jie_name = f"{jie_time.month}月{jie_time.day}日节"
    else:
        jie = find_nearest_jie(jd_ut, birth_local.year, forward, flags)
        days = abs(jie["jd"] - jd_ut)
        jie_name = jie["term_name"]

    start_age = luck_start_age(days)
    description = f"{describe_luck_start(days)}，约{start_age}岁上运"
    logger.debug("Luck start: %.2f days to %s (%s), start age %d",
                 days, jie_name, method.value, start_age)
    return LuckStart(days_to_jie=days, start_age=start_age,
                     jie_name=jie_name, description=description)


def compute_luck_pillars(month: StemBranch, day_master: HeavenlyStem, forward: bool,
                         start_age: int, birth_year: int, count: int = 10) -> tuple:
    """
    Luck Pillars (大运 Da Yun): the month pillar stepped ±i along the 60-cycle.

    Ages and years are contiguous: each pillar covers ten years starting
    where the previous one ended.
    """
    step = 1 if forward else -1
    pillars = []
    for i in range(1, count + 1):
        age_start = start_age + (i - 1) * YEARS_PER_PILLAR
        start_year = birth_year + age_start
        pillars.append(LuckPillar(
            index=i,
            start_age=age_start,
            start_year=start_year,
            end_year=start_year + YEARS_PER_PILLAR - 1,
            ganzhi=read_ganzhi(month.step(step * i), day_master),
        ))
    return tuple(pillars)


def compute_minor_fortunes(hour: StemBranch, day_master: HeavenlyStem, forward: bool,
                           birth_year: int, first_luck_year: int) -> tuple:
    """
    Minor Fortunes (小运): one per year before the first Luck Pillar,
    the hour pillar stepped by the nominal age in the luck direction.
    """
    step = 1 if forward else -1
    return tuple(
        MinorFortune(
            age=year - birth_year + 1,
            year=year,
            ganzhi=read_ganzhi(hour.step(step * (year - birth_year + 1)), day_master),
        )
        for year in range(birth_year, first_luck_year)
    )
