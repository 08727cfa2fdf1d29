"""
Calendar utilities for BaZi calculation.

Handles:
- Birth input parsing
- True solar time (longitude) correction and timezone/DST detection
- Solar term (Jie) lookups via Swiss Ephemeris
- Gregorian instant → four sexagenary pillars (year, month, day, hour)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo

import swisseph as swe
from timezonefinder import TimezoneFinder

from xuanshu.errors import InvalidBirthData
from xuanshu.ganzhi import StemBranch, rat_hour_stem, tiger_month_stem
from xuanshu.settings import EngineSettings, ZiHourPolicy
from xuanshu.tables import EARTHLY_BRANCHES, HeavenlyStem

logger = logging.getLogger(__name__)


# ============================================================
# INPUT PARSING
# ============================================================

def parse_birth_datetime(birth_date: Union[date, str], birth_time: Union[time, str]) -> datetime:
    """
    Combine a birth date and clock time into a naive local datetime.

    Args:
        birth_date: date or "YYYY-MM-DD"
        birth_time: time or "HH:MM" (24h, local clock time)

    Raises:
        InvalidBirthData: if either part cannot be parsed
    """
    try:
        if isinstance(birth_date, str):
            birth_date = datetime.strptime(birth_date.strip(), "%Y-%m-%d").date()
        if isinstance(birth_time, str):
            birth_time = datetime.strptime(birth_time.strip(), "%H:%M").time()
    except ValueError as e:
        raise InvalidBirthData(f"Cannot parse birth date/time: {e}") from e
    if not isinstance(birth_date, date) or not isinstance(birth_time, time):
        raise InvalidBirthData("Birth date and time are required")
    return datetime.combine(birth_date, birth_time)


# ============================================================
# TRUE SOLAR TIME
# ============================================================

def true_solar_time_correction(longitude: float, standard_meridian: float = 120.0) -> float:
    """
    Longitude correction in minutes.

    China uses a single timezone based on 120°E. For locations
    significantly west of this the clock time runs ahead of solar time.

    Args:
        longitude: birth location longitude in degrees (east positive)
        standard_meridian: timezone standard meridian (120.0 for China/CST)

    Returns:
        Correction in minutes (negative = subtract from clock time)

    Example:
        Beijing (116.40°E): correction = (116.40 - 120.0) * 4 = -14.4 min
    """
    if not -180.0 <= longitude <= 180.0:
        raise InvalidBirthData(f"Longitude out of range: {longitude}")
    return (longitude - standard_meridian) * 4.0


def apply_true_solar_time(clock_time: datetime, longitude: float,
                          standard_meridian: float = 120.0) -> datetime:
    """Convert clock time to longitude-corrected solar time."""
    correction_minutes = true_solar_time_correction(longitude, standard_meridian)
    return clock_time + timedelta(minutes=correction_minutes)


@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


def utc_offset_for(latitude: float, longitude: float, clock_time: datetime):
    """
    Determine UTC offset from coordinates and date.
    Detects historical DST (e.g., China 1986-1991).

    Returns:
        (clock_offset, standard_offset, timezone_name, dst_detected)

        clock_offset:    what the clock was actually set to (includes DST if active)
        standard_offset: the zone's standard (non-DST) offset
        dst_detected:    True if DST was active at birth time

    BaZi uses standard_offset: DST is stripped before any solar-time work.
    """
    try:
        tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    except ValueError as e:
        raise InvalidBirthData(f"Invalid coordinates ({latitude}, {longitude})") from e
    if tz_name is None:
        raise InvalidBirthData(f"Could not determine timezone for ({latitude}, {longitude})")

    local_dt = clock_time.replace(tzinfo=ZoneInfo(tz_name))
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst_seconds = local_dt.dst()
    dst_detected = dst_seconds is not None and dst_seconds.total_seconds() > 0

    if dst_detected:
        standard_offset = clock_offset - (dst_seconds.total_seconds() / 3600)
    else:
        standard_offset = clock_offset

    return clock_offset, standard_offset, tz_name, dst_detected


# ============================================================
# EPHEMERIS HELPERS
# ============================================================

@lru_cache(maxsize=None)
def _point_ephemeris(path: str):
    swe.set_ephe_path(path)
    logger.debug("Swiss Ephemeris data path set to %s", path)


def ephemeris_flags(settings: EngineSettings) -> int:
    """
    Swiss Ephemeris flags for the configured data source.

    With no ephemeris directory configured the built-in Moshier
    ephemeris is used; its Sun position is accurate to well under a
    minute of solar-term time for 1900-2100.
    A configured data directory is handed to Swiss Ephemeris once per path.
    """
    if settings.ephe_path:
        _point_ephemeris(settings.ephe_path)
        return swe.FLG_SWIEPH
    return swe.FLG_MOSEPH


def julian_day_ut(local_time: datetime, utc_offset: float) -> float:
    """Julian Day (UT) of a naive local datetime at the given UTC offset."""
    ut = local_time - timedelta(hours=utc_offset)
    hours = ut.hour + ut.minute / 60.0 + ut.second / 3600.0
    return swe.julday(ut.year, ut.month, ut.day, hours)


def sun_longitude(jd_ut: float, flags: int = swe.FLG_MOSEPH) -> float:
    """Tropical ecliptic longitude of the Sun."""
    result, _ = swe.calc_ut(jd_ut, swe.SUN, flags)
    return result[0]


# ============================================================
# SOLAR TERM COMPUTATION
# ============================================================
#
# The 12 Jie (节) solar terms mark BaZi month boundaries.
# Each Jie is defined by the Sun reaching a specific ecliptic longitude.
# Swiss Ephemeris swe.solcross_ut() finds the exact crossing moment.
#
# Li Chun (315°) → Tiger month (month 1), also the BaZi new year
# Jing Zhe (345°) → Rabbit month (month 2)
# ...
# Xiao Han (285°) → Ox month (month 12)

# (longitude, term_name, branch_index)
JIE_DEFINITIONS = (
    (285, "小寒", 1),
    (315, "立春", 2),
    (345, "惊蛰", 3),
    (15,  "清明", 4),
    (45,  "立夏", 5),
    (75,  "芒种", 6),
    (105, "小暑", 7),
    (135, "立秋", 8),
    (165, "白露", 9),
    (195, "寒露", 10),
    (225, "立冬", 11),
    (255, "大雪", 0),
)

LI_CHUN_LONGITUDE = 315.0

# Approximate-method Jie day: every Jie falls within a couple of days of the 6th
APPROXIMATE_JIE_DAY = 6


def sun_longitude_to_month_branch_index(sun_lon: float) -> int:
    """
    Map Sun's ecliptic longitude to BaZi month branch index.

      315° (立春) → 寅 2,  345° (惊蛰) → 卯 3,   15° (清明) → 辰 4,
       45° (立夏) → 巳 5,   75° (芒种) → 午 6,  105° (小暑) → 未 7,
      135° (立秋) → 申 8,  165° (白露) → 酉 9,  195° (寒露) → 戌 10,
      225° (立冬) → 亥 11, 255° (大雪) → 子 0,  285° (小寒) → 丑 1
    """
    adjusted = (sun_lon - LI_CHUN_LONGITUDE) % 360
    month_num = int(adjusted / 30)
    return (month_num + 2) % 12


def li_chun_jd(year: int, flags: int = swe.FLG_MOSEPH) -> float:
    """Julian Day (UT) of Li Chun in a Gregorian year."""
    return swe.solcross_ut(LI_CHUN_LONGITUDE, swe.julday(year, 1, 1, 0), flags)


def find_jie_dates(year: int, flags: int = swe.FLG_MOSEPH) -> list[dict]:
    """
    Compute all 12 Jie solar term dates for a given Gregorian year.

    Returns:
        List of dicts with keys: term_name, branch_index, jd,
        in chronological order
    """
    results = []
    jd_year_start = swe.julday(year, 1, 1, 0)

    for lon, name, branch_idx in JIE_DEFINITIONS:
        jd_cross = swe.solcross_ut(float(lon), jd_year_start, flags)
        y, _, _, _ = swe.revjul(jd_cross)
        # Only include crossings that fall within this Gregorian year
        if y == year:
            results.append({
                "term_name": name,
                "branch_index": branch_idx,
                "jd": jd_cross,
            })

    results.sort(key=lambda x: x["jd"])
    return results


def find_nearest_jie(birth_jd: float, year: int, forward: bool,
                     flags: int = swe.FLG_MOSEPH) -> dict:
    """
    Find the nearest Jie solar term in the given direction from birth.

    Args:
        birth_jd: Julian Day (UT) of birth
        year: birth year (Gregorian)
        forward: True = find next Jie after birth, False = find previous

    Returns:
        The Jie dict (term_name, branch_index, jd)
    """
    all_jie = []
    for y in (year - 1, year, year + 1):
        all_jie.extend(find_jie_dates(y, flags))
    all_jie.sort(key=lambda x: x["jd"])

    if forward:
        for jie in all_jie:
            if jie["jd"] > birth_jd:
                return jie
    else:
        for jie in reversed(all_jie):
            if jie["jd"] <= birth_jd:
                return jie

    raise ValueError(f"Could not find {'next' if forward else 'previous'} Jie from JD {birth_jd}")


def approximate_nearest_jie(local_time: datetime, forward: bool) -> datetime:
    """
    Approximate neighbouring Jie: 00:00 on the 6th of a Gregorian month.

    Real Jie dates wander between the 4th and the 8th, so the result can be
    off by up to two days (under one year of luck start age in the worst case).
    """
    this_month = datetime(local_time.year, local_time.month, APPROXIMATE_JIE_DAY)
    if forward:
        if local_time < this_month:
            return this_month
        year, month = divmod(local_time.year * 12 + local_time.month, 12)
        return datetime(year, month + 1, APPROXIMATE_JIE_DAY)
    if local_time >= this_month:
        return this_month
    year, month = divmod(local_time.year * 12 + local_time.month - 2, 12)
    return datetime(year, month + 1, APPROXIMATE_JIE_DAY)


# ============================================================
# PILLAR COMPUTATION
# ============================================================

def year_pillar(jd_ut: float, gregorian_year: int, flags: int = swe.FLG_MOSEPH) -> StemBranch:
    """
    Compute the Year Pillar.

    The BaZi year starts at Li Chun (Start of Spring), usually Feb 3-5.
    If born before Li Chun, use previous year's pillar.
    """
    effective_year = gregorian_year
    if jd_ut < li_chun_jd(gregorian_year, flags):
        effective_year -= 1
    return year_cycle(effective_year)


def year_cycle(year: int) -> StemBranch:
    """
    Sexagenary position of a BaZi year (Li Chun to Li Chun).

    (Year 4 CE was Jia Zi, the start of the cycle.) Defined for every integer.
    """
    return StemBranch.from_index(year - 4)


def month_pillar(year_stem: HeavenlyStem, month_branch_index: int) -> StemBranch:
    """
    Compute the Month Pillar using the Five Tigers Escape (Wu Hu Dun) formula.

    The month branch is determined by solar terms; the month stem
    is derived from the year stem.
    """
    branch = EARTHLY_BRANCHES[month_branch_index]
    return StemBranch(tiger_month_stem(year_stem, branch), branch)


# JDN offset such that (JDN + 49) % 60 is the sexagenary index (0 = 甲子).
# Anchors: 1949-10-01 = 甲子, 2000-01-01 = 戊午.
_JDN_SEXAGENARY_OFFSET = 49


def day_pillar(day: date) -> StemBranch:
    """Compute the Day Pillar from the Julian Day Number of a civil date."""
    # JD at noon is the integral JDN
    jdn = int(swe.julday(day.year, day.month, day.day, 12.0))
    return StemBranch.from_index(jdn + _JDN_SEXAGENARY_OFFSET)


def hour_branch_index(hour: int) -> int:
    """
    Chinese hours (shi chen) are 2-hour blocks:
    23:00-00:59 = Zi (Rat) = 0, 01:00-02:59 = Chou (Ox) = 1, ...,
    21:00-22:59 = Hai (Pig) = 11
    """
    return ((hour + 1) // 2) % 12


def hour_pillar(day_stem: HeavenlyStem, hour: int) -> StemBranch:
    """Compute the Hour Pillar using the Five Rats Escape (Wu Shu Dun) formula."""
    branch = EARTHLY_BRANCHES[hour_branch_index(hour)]
    return StemBranch(rat_hour_stem(day_stem, branch), branch)


@dataclass(frozen=True)
class SexagenaryDate:
    year: StemBranch
    month: StemBranch
    day: StemBranch
    hour: StemBranch
    effective_time: datetime  # the local time the day/hour pillars were read from
    jd_ut: float


def solar_to_sexagenary(clock_time: datetime, utc_offset: float = 8.0,
                        longitude: Optional[float] = None,
                        use_true_solar_time: bool = False,
                        zi_hour_policy: ZiHourPolicy = ZiHourPolicy.ROLLOVER,
                        flags: int = swe.FLG_MOSEPH) -> SexagenaryDate:
    """
    Convert a local standard-time instant into the four sexagenary pillars.

    Year and month follow the solar terms of the real instant. Day and hour
    are read from local time, corrected to true solar time when requested.

    Zi hour (23:00-23:59):
        ROLLOVER: day pillar and hour stem both come from the following day.
        SPLIT: day pillar stays on the current day; hour stem uses the following day.

    Args:
        clock_time: naive local standard (non-DST) time
        utc_offset: hours east of UTC of the standard time
        longitude: birth longitude, required for true solar time
        use_true_solar_time: apply the longitude correction to day/hour
        zi_hour_policy: resolution of the late-Zi-hour ambiguity
    """
    jd_ut = julian_day_ut(clock_time, utc_offset)

    effective = clock_time
    if use_true_solar_time:
        if longitude is None:
            raise InvalidBirthData("True solar time requires a longitude")
        effective = apply_true_solar_time(clock_time, longitude, utc_offset * 15.0)

    yp = year_pillar(jd_ut, clock_time.year, flags)
    month_branch_index = sun_longitude_to_month_branch_index(sun_longitude(jd_ut, flags))
    mp = month_pillar(yp.stem, month_branch_index)

    if effective.hour == 23:
        next_day = day_pillar(effective.date() + timedelta(days=1))
        if zi_hour_policy is ZiHourPolicy.ROLLOVER:
            dp = next_day
        else:
            dp = day_pillar(effective.date())
        hp = hour_pillar(next_day.stem, effective.hour)
        logger.debug("Zi hour at %s resolved by %s policy: day %s, hour %s",
                     effective, zi_hour_policy.value, dp, hp)
    else:
        dp = day_pillar(effective.date())
        hp = hour_pillar(dp.stem, effective.hour)

    return SexagenaryDate(year=yp, month=mp, day=dp, hour=hp,
                          effective_time=effective, jd_ut=jd_ut)
