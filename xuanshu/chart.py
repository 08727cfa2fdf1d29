"""
Chart assembly: the single entry point from birth data to a BaziChart.

Handles:
- Input validation and the supported year range
- Timezone / DST handling and true solar time
- Pillars, luck cycle, minor fortunes
- Palaces (命宫, 身宫, 胎元, 胎息)
- Element tally, natal interactions, balance and pattern

All validation happens here. Once a chart exists every computation on it
is total.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from xuanshu.astro_calendar import (
    ephemeris_flags,
    hour_branch_index,
    parse_birth_datetime,
    solar_to_sexagenary,
    true_solar_time_correction,
    utc_offset_for,
    year_cycle,
)
from xuanshu.balance import BalanceAnalysis, analyze_balance
from xuanshu.errors import InvalidBirthData, UnsupportedCalendarRange
from xuanshu.ganzhi import (
    StemBranch,
    six_combination_partner,
    stem_combination_partner,
    tiger_month_stem,
)
from xuanshu.interactions import find_branch_interactions, find_stem_interactions
from xuanshu.locations import find_city
from xuanshu.luck import (
    Gender,
    LuckStart,
    compute_luck_pillars,
    compute_luck_start,
    compute_minor_fortunes,
    is_forward,
)
from xuanshu.pattern import PatternAnalysis, analyze_pattern
from xuanshu.pillars import NatalPillars, Pillar, build_pillars
from xuanshu.settings import EngineSettings, get_settings
from xuanshu.tables import EARTHLY_BRANCHES, Element, HeavenlyStem

logger = logging.getLogger(__name__)


# ============================================================
# INPUT / OUTPUT TYPES
# ============================================================

@dataclass(frozen=True)
class UserProfile:
    name: str
    gender: Union[Gender, str]
    birth_date: Union[date, str]
    birth_time: Union[time, str]
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    use_true_solar_time: bool = False
    city: Optional[str] = None
    profile_id: str = ""


@dataclass(frozen=True)
class SolarTimeInfo:
    clock_time: datetime
    effective_time: datetime
    correction_minutes: float
    standard_meridian: float
    utc_offset: float
    dst_stripped: bool = False
    timezone_name: Optional[str] = None
    applied: bool = False

    def to_dict(self):
        return {
            "clock_time": self.clock_time.strftime("%Y-%m-%d %H:%M"),
            "effective_time": self.effective_time.strftime("%Y-%m-%d %H:%M"),
            "correction_minutes": round(self.correction_minutes, 1),
            "standard_meridian": self.standard_meridian,
            "utc_offset": self.utc_offset,
            "dst_stripped": self.dst_stripped,
            "timezone": self.timezone_name,
            "true_solar_time": self.applied,
        }


@dataclass(frozen=True)
class BaziChart:
    profile: UserProfile
    gender: Gender
    birth_time: datetime  # local standard time, DST stripped
    day_master: HeavenlyStem
    pillars: NatalPillars
    luck_pillars: tuple
    minor_fortunes: tuple
    luck_forward: bool
    luck_start: LuckStart
    life_palace: StemBranch
    body_palace: StemBranch
    fetal_origin: StemBranch
    fetal_breath: StemBranch
    element_counts: dict
    branch_interactions: tuple
    stem_interactions: tuple
    balance: BalanceAnalysis
    pattern: PatternAnalysis
    solar_time: SolarTimeInfo
    shensha_summary: tuple = field(default=())

    @property
    def year(self) -> Pillar:
        return self.pillars.year

    @property
    def month(self) -> Pillar:
        return self.pillars.month

    @property
    def day(self) -> Pillar:
        return self.pillars.day

    @property
    def hour(self) -> Pillar:
        return self.pillars.hour

    @property
    def birth_year(self) -> int:
        return self.birth_time.year

    @property
    def bazi_year(self) -> int:
        """Year the year pillar belongs to; births before Li Chun count to the previous one."""
        if year_cycle(self.birth_year) == self.year.position:
            return self.birth_year
        return self.birth_year - 1

    @property
    def start_luck_text(self) -> str:
        return self.luck_start.description


# ============================================================
# PALACES
# ============================================================

def _month_number(month_branch_index: int) -> int:
    # 寅 = 1 ... 丑 = 12
    return (month_branch_index - 2) % 12 + 1


def _hour_number(hour_branch: int) -> int:
    # 子 = 1 ... 亥 = 12
    return hour_branch + 1


def life_palace(year_stem: HeavenlyStem, month_branch_index: int, hour_branch: int) -> StemBranch:
    """
    命宫: counted from the month and hour numbers.

    s = month number (寅 = 1) + hour number (子 = 1); the palace number in
    寅 = 1 numbering is 14 - s, or 26 - s once s reaches 14. The stem
    follows the Five Tigers rule from the year stem.
    """
    s = _month_number(month_branch_index) + _hour_number(hour_branch)
    number = 14 - s if s < 14 else 26 - s
    branch = EARTHLY_BRANCHES[(number + 1) % 12]
    return StemBranch(tiger_month_stem(year_stem, branch), branch)


def body_palace(year_stem: HeavenlyStem, month_branch_index: int, hour_branch: int) -> StemBranch:
    """身宫: branch (month number + hour number) mod 12 in 子 = 0 indexing."""
    s = _month_number(month_branch_index) + _hour_number(hour_branch)
    branch = EARTHLY_BRANCHES[s % 12]
    return StemBranch(tiger_month_stem(year_stem, branch), branch)


def fetal_origin(month: StemBranch) -> StemBranch:
    """胎元: one stem and three branches after the month pillar."""
    return StemBranch.from_indices(month.stem.index + 1, month.branch.index + 3)


def fetal_breath(day: StemBranch) -> StemBranch:
    """胎息: the day stem's combining partner over the day branch's six-combination partner."""
    return StemBranch(stem_combination_partner(day.stem), six_combination_partner(day.branch))


# ============================================================
# ELEMENT TALLY
# ============================================================

def element_counts(pillars: NatalPillars) -> dict:
    """
    Element presence across the chart.

    Each of the eight visible characters counts 1.0 by its own element;
    hidden stems add weight/100 by theirs.
    """
    counts = {e.value: 0.0 for e in Element}
    for pillar in pillars:
        gz = pillar.ganzhi
        counts[gz.stem_element.value] += 1.0
        counts[gz.branch_element.value] += 1.0
        for hidden in gz.hidden_stems:
            counts[hidden.stem.element.value] += hidden.weight / 100
    return {k: round(v, 2) for k, v in counts.items()}


# ============================================================
# ASSEMBLY
# ============================================================

def _check_coordinates(latitude: Optional[float], longitude: Optional[float]):
    if latitude is not None and not -90.0 <= latitude <= 90.0:
        raise InvalidBirthData(f"Latitude must be in [-90, 90], got {latitude}")
    if longitude is not None and not -180.0 <= longitude <= 180.0:
        raise InvalidBirthData(f"Longitude must be in [-180, 180], got {longitude}")


def _parse_gender(value) -> Gender:
    try:
        return Gender(value)
    except ValueError as e:
        raise InvalidBirthData(f"Gender must be 'male' or 'female', got {value!r}") from e


def assemble_chart(profile: UserProfile, settings: Optional[EngineSettings] = None) -> BaziChart:
    """
    Build a complete chart from a user profile.

    Args:
        profile: birth data
        settings: engine settings; defaults to the environment-derived ones

    Raises:
        InvalidBirthData: malformed date/time, gender, coordinates or city
        UnsupportedCalendarRange: birth year outside the configured range
    """
    settings = settings or get_settings()

    clock_time = parse_birth_datetime(profile.birth_date, profile.birth_time)
    if not settings.min_year <= clock_time.year <= settings.max_year:
        raise UnsupportedCalendarRange(clock_time.year, settings.min_year, settings.max_year)

    gender = _parse_gender(profile.gender)

    longitude = profile.longitude
    latitude = profile.latitude
    if profile.city and (longitude is None or latitude is None):
        city = find_city(profile.city)
        if longitude is None:
            longitude = city.longitude
        if latitude is None and profile.longitude is None:
            latitude = city.latitude

    _check_coordinates(latitude, longitude)

    if profile.use_true_solar_time and longitude is None:
        raise InvalidBirthData("True solar time requires a longitude or a known city")

    # Timezone: detected from coordinates when a latitude is known,
    # otherwise the configured standard meridian (UTC+8 by default)
    standard_time = clock_time
    tz_name = None
    dst_stripped = False
    utc_offset = settings.standard_meridian / 15.0
    if latitude is not None and longitude is not None:
        clock_offset, standard_offset, tz_name, dst_stripped = utc_offset_for(
            latitude, longitude, clock_time
        )
        utc_offset = standard_offset
        if dst_stripped:
            standard_time = clock_time - timedelta(hours=clock_offset - standard_offset)
            logger.warning("DST active at birth in %s; using standard time %s",
                           tz_name, standard_time)

    meridian = utc_offset * 15.0
    flags = ephemeris_flags(settings)

    sexagenary = solar_to_sexagenary(
        standard_time,
        utc_offset=utc_offset,
        longitude=longitude,
        use_true_solar_time=profile.use_true_solar_time,
        zi_hour_policy=settings.zi_hour_policy,
        flags=flags,
    )

    pillars = build_pillars(sexagenary.year, sexagenary.month, sexagenary.day, sexagenary.hour)
    day_master = pillars.day_master

    forward = is_forward(gender, sexagenary.year.stem)
    luck_start = compute_luck_start(standard_time, sexagenary.jd_ut, forward,
                                    settings.start_age_method, flags)
    luck_pillars = compute_luck_pillars(sexagenary.month, day_master, forward,
                                        luck_start.start_age, clock_time.year,
                                        settings.luck_pillar_count)
    first_luck_year = luck_pillars[0].start_year if luck_pillars else clock_time.year
    minor_fortunes = compute_minor_fortunes(sexagenary.hour, day_master, forward,
                                            clock_time.year, first_luck_year)

    hour_branch = hour_branch_index(sexagenary.effective_time.hour)
    month_branch = sexagenary.month.branch.index
    year_stem = sexagenary.year.stem

    labels = [p.kind.value for p in pillars]
    branch_interactions = find_branch_interactions([p.ganzhi.branch for p in pillars], labels)
    stem_interactions = find_stem_interactions([p.ganzhi.stem for p in pillars], labels)

    balance = analyze_balance(pillars)
    pattern = analyze_pattern(pillars, balance)

    correction = 0.0
    if longitude is not None:
        correction = true_solar_time_correction(longitude, meridian)
    solar_time = SolarTimeInfo(
        clock_time=clock_time,
        effective_time=sexagenary.effective_time,
        correction_minutes=correction,
        standard_meridian=meridian,
        utc_offset=utc_offset,
        dst_stripped=dst_stripped,
        timezone_name=tz_name,
        applied=profile.use_true_solar_time,
    )

    shensha_summary = []
    for pillar in pillars:
        for tag in pillar.shensha:
            if tag not in shensha_summary:
                shensha_summary.append(tag)

    chart = BaziChart(
        profile=profile,
        gender=gender,
        birth_time=standard_time,
        day_master=day_master,
        pillars=pillars,
        luck_pillars=luck_pillars,
        minor_fortunes=minor_fortunes,
        luck_forward=forward,
        luck_start=luck_start,
        life_palace=life_palace(year_stem, month_branch, hour_branch),
        body_palace=body_palace(year_stem, month_branch, hour_branch),
        fetal_origin=fetal_origin(sexagenary.month),
        fetal_breath=fetal_breath(sexagenary.day),
        element_counts=element_counts(pillars),
        branch_interactions=tuple(branch_interactions),
        stem_interactions=tuple(stem_interactions),
        balance=balance,
        pattern=pattern,
        solar_time=solar_time,
        shensha_summary=tuple(shensha_summary),
    )
    logger.info("Assembled chart for %s: %s %s %s %s (%s, %s)",
                profile.name or "anonymous", chart.year.label, chart.month.label,
                chart.day.label, chart.hour.label, balance.level.value, pattern.name)
    return chart
