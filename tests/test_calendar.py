"""
Calendar tests: solar-term boundaries, day anchors, hour blocks and the
Zi-hour policies.
"""

from datetime import date, datetime

import pytest
import swisseph as swe

from xuanshu import astro_calendar
from xuanshu.astro_calendar import (
    approximate_nearest_jie,
    day_pillar,
    ephemeris_flags,
    find_jie_dates,
    hour_branch_index,
    parse_birth_datetime,
    solar_to_sexagenary,
    sun_longitude_to_month_branch_index,
    true_solar_time_correction,
    utc_offset_for,
    year_cycle,
)
from xuanshu.errors import InvalidBirthData
from xuanshu.settings import EngineSettings, ZiHourPolicy


class TestSolarTerms:

    def test_lichun_boundary_before(self):
        """Before Li Chun: 2025-02-03 → 甲辰 year"""
        result = solar_to_sexagenary(datetime(2025, 2, 3, 12, 0))
        assert result.year.label == "甲辰"

    def test_lichun_boundary_after(self):
        """After Li Chun: 2025-02-05 → 乙巳 year"""
        result = solar_to_sexagenary(datetime(2025, 2, 5, 12, 0))
        assert result.year.label == "乙巳"

    def test_january_months(self):
        """Xiao Han (~Jan 5) opens the 丑 month"""
        assert solar_to_sexagenary(datetime(2025, 1, 3, 12, 0)).month.branch.chinese == "子"
        assert solar_to_sexagenary(datetime(2025, 1, 10, 12, 0)).month.branch.chinese == "丑"

    def test_month_branch_mapping(self):
        assert sun_longitude_to_month_branch_index(315.0) == 2
        assert sun_longitude_to_month_branch_index(314.9) == 1
        assert sun_longitude_to_month_branch_index(0.0) == 3
        assert sun_longitude_to_month_branch_index(260.0) == 0

    def test_twelve_jie_per_year(self):
        jie = find_jie_dates(2024)
        assert len(jie) == 12
        assert [j["jd"] for j in jie] == sorted(j["jd"] for j in jie)
        assert {j["branch_index"] for j in jie} == set(range(12))

    def test_year_cycle_any_integer(self):
        assert year_cycle(4).label == "甲子"
        assert year_cycle(1984).label == "甲子"
        assert year_cycle(2024).label == "甲辰"
        assert year_cycle(-56).label == "甲子"


class TestDayAndHour:

    @pytest.mark.parametrize("day, expected", [
        (date(1949, 10, 1), "甲子"),
        (date(2000, 1, 1), "戊午"),
        (date(1978, 5, 16), "戊寅"),
        (date(1990, 1, 1), "丙寅"),
    ])
    def test_day_pillar_anchors(self, day, expected):
        assert day_pillar(day).label == expected

    def test_consecutive_days_step_by_one(self):
        a = day_pillar(date(2024, 2, 28))
        b = day_pillar(date(2024, 2, 29))
        c = day_pillar(date(2024, 3, 1))
        assert b.index == (a.index + 1) % 60
        assert c.index == (b.index + 1) % 60

    @pytest.mark.parametrize("hour, branch", [
        (23, 0), (0, 0), (1, 1), (2, 1), (11, 6), (12, 6), (21, 11), (22, 11),
    ])
    def test_hour_blocks(self, hour, branch):
        assert hour_branch_index(hour) == branch

    def test_reference_chart_pillars(self):
        result = solar_to_sexagenary(datetime(1990, 1, 1, 12, 0))
        assert [result.year.label, result.month.label, result.day.label, result.hour.label] == \
            ["己巳", "丙子", "丙寅", "甲午"]


class TestZiHour:

    def test_rollover_moves_day_pillar(self):
        """23:30 under rollover reads tomorrow's day pillar"""
        result = solar_to_sexagenary(datetime(2000, 1, 1, 23, 30),
                                     zi_hour_policy=ZiHourPolicy.ROLLOVER)
        assert result.day.label == "己未"
        assert result.hour.label == "甲子"

    def test_split_keeps_day_pillar(self):
        """23:30 under split keeps today's day pillar, hour stem from tomorrow"""
        result = solar_to_sexagenary(datetime(2000, 1, 1, 23, 30),
                                     zi_hour_policy=ZiHourPolicy.SPLIT)
        assert result.day.label == "戊午"
        assert result.hour.label == "甲子"

    def test_early_zi_hour_unaffected_by_policy(self):
        rollover = solar_to_sexagenary(datetime(2000, 1, 2, 0, 30),
                                       zi_hour_policy=ZiHourPolicy.ROLLOVER)
        split = solar_to_sexagenary(datetime(2000, 1, 2, 0, 30),
                                    zi_hour_policy=ZiHourPolicy.SPLIT)
        assert rollover.day == split.day
        assert rollover.hour == split.hour


class TestSolarTime:

    def test_beijing_correction(self):
        assert true_solar_time_correction(116.40) == pytest.approx(-14.4)

    def test_out_of_range_longitude(self):
        with pytest.raises(InvalidBirthData):
            true_solar_time_correction(200.0)

    def test_true_solar_time_shifts_hour(self):
        """Urumqi 11:30 clock time is ~9:20 solar time: 巳 hour, not 午"""
        clock = datetime(2000, 6, 1, 11, 30)
        plain = solar_to_sexagenary(clock)
        solar = solar_to_sexagenary(clock, longitude=87.68, use_true_solar_time=True)
        assert plain.hour.branch.chinese == "午"
        assert solar.hour.branch.chinese == "巳"

    def test_bad_latitude_for_timezone(self):
        with pytest.raises(InvalidBirthData):
            utc_offset_for(123.0, 116.40, datetime(2000, 6, 1, 12, 0))

    def test_true_solar_time_requires_longitude(self):
        with pytest.raises(InvalidBirthData):
            solar_to_sexagenary(datetime(2000, 6, 1, 11, 30), use_true_solar_time=True)


class TestParsing:

    def test_parse_strings(self):
        assert parse_birth_datetime("1990-01-01", "12:05") == datetime(1990, 1, 1, 12, 5)

    @pytest.mark.parametrize("birth_date, birth_time", [
        ("1990-13-01", "12:00"),
        ("1990-02-30", "12:00"),
        ("1990-01-01", "25:00"),
        ("not a date", "12:00"),
    ])
    def test_parse_invalid(self, birth_date, birth_time):
        with pytest.raises(InvalidBirthData):
            parse_birth_datetime(birth_date, birth_time)


class TestApproximateJie:

    def test_forward(self):
        assert approximate_nearest_jie(datetime(1990, 1, 1, 12), True) == datetime(1990, 1, 6)
        assert approximate_nearest_jie(datetime(1990, 12, 20), True) == datetime(1991, 1, 6)

    def test_backward(self):
        assert approximate_nearest_jie(datetime(1990, 1, 1, 12), False) == datetime(1989, 12, 6)
        assert approximate_nearest_jie(datetime(1990, 3, 10), False) == datetime(1990, 3, 6)


def test_explicit_moshier_flag():
    assert solar_to_sexagenary(datetime(2025, 2, 5, 12), flags=swe.FLG_MOSEPH).year.label == "乙巳"


def test_ephemeris_path_set_once(monkeypatch):
    calls = []
    monkeypatch.setattr(swe, "set_ephe_path", calls.append)
    astro_calendar._point_ephemeris.cache_clear()
    settings = EngineSettings(_env_file=None, ephe_path="/opt/ephe")
    assert ephemeris_flags(settings) == swe.FLG_SWIEPH
    assert ephemeris_flags(settings) == swe.FLG_SWIEPH
    assert calls == ["/opt/ephe"]
    astro_calendar._point_ephemeris.cache_clear()


def test_no_ephemeris_path_uses_moshier(settings):
    assert ephemeris_flags(settings) == swe.FLG_MOSEPH
