"""
End-to-end chart assembly tests against the reference birth
(1990-01-01 12:00, Beijing longitude, clock time).
"""

import pytest

from conftest import make_profile
from xuanshu.chart import assemble_chart, element_counts, fetal_breath, fetal_origin
from xuanshu.errors import InvalidBirthData, UnsupportedCalendarRange
from xuanshu.ganzhi import StemBranch
from xuanshu.luck import Gender, describe_luck_start, is_forward, luck_start_age
from xuanshu.pillars import map_ten_gods
from xuanshu.tables import STEM_BY_CHINESE


class TestReferenceChart:

    def test_pillars(self, reference_chart):
        labels = [p.label for p in reference_chart.pillars]
        assert labels == ["己巳", "丙子", "丙寅", "甲午"]
        assert reference_chart.day_master.chinese == "丙"

    def test_day_pillar_is_self(self, reference_chart):
        assert reference_chart.day.ganzhi.ten_god is None
        assert reference_chart.day.to_dict()["ten_god"] == "日主"
        assert reference_chart.year.ganzhi.ten_god.value == "伤官"
        assert reference_chart.hour.ganzhi.ten_god.value == "偏印"

    def test_void_branches(self, reference_chart):
        """丙寅 sits in the 甲子 decade: 戌亥 void, none of the natal branches"""
        assert not any(p.void for p in reference_chart.pillars)

    def test_palaces(self, reference_chart):
        assert reference_chart.life_palace.label == "癸酉"
        assert reference_chart.body_palace.label == "庚午"
        assert reference_chart.fetal_origin.label == "丁卯"
        assert reference_chart.fetal_breath.label == "辛亥"

    def test_element_counts(self, reference_chart):
        counts = reference_chart.element_counts
        assert set(counts) == {"木", "火", "土", "金", "水"}
        assert sum(counts.values()) == pytest.approx(12.0)
        assert counts["火"] > counts["金"]

    def test_natal_interactions(self, reference_chart):
        types = {i["type"] for i in reference_chart.branch_interactions}
        assert {"六冲", "六害", "半合", "相刑"} <= types
        stems = reference_chart.stem_interactions
        assert any(i["type"] == "天干五合" for i in stems)

    def test_solar_time_info(self, reference_chart):
        info = reference_chart.solar_time
        assert not info.applied
        assert info.correction_minutes == pytest.approx(-14.4)
        assert info.effective_time == info.clock_time
        assert info.to_dict()["true_solar_time"] is False

    def test_deterministic(self, reference_profile, settings, reference_chart):
        assert assemble_chart(reference_profile, settings) == reference_chart

    def test_shensha_summary_from_pillars(self, reference_chart):
        tags = [t for p in reference_chart.pillars for t in p.shensha]
        assert set(reference_chart.shensha_summary) == set(tags)
        assert len(reference_chart.shensha_summary) == len(set(tags))

    def test_map_ten_gods(self, reference_chart):
        rows = map_ten_gods(reference_chart.pillars)
        assert [r["position"] for r in rows] == ["year", "month", "day", "hour"]
        assert rows[2]["ten_god_english"] == "Self (Day Master)"
        assert rows[1]["hidden_stem_gods"][0]["ten_god"] == "正官"


class TestLuck:

    def test_direction(self, reference_chart, female_reference_chart):
        """己 is a yin year: male runs backward, female forward"""
        assert reference_chart.luck_forward is False
        assert female_reference_chart.luck_forward is True
        assert is_forward(Gender.MALE, STEM_BY_CHINESE["甲"])
        assert not is_forward(Gender.FEMALE, STEM_BY_CHINESE["甲"])

    def test_luck_pillars_step_from_month(self, reference_chart, female_reference_chart):
        assert [lp.label for lp in reference_chart.luck_pillars[:2]] == ["乙亥", "甲戌"]
        assert female_reference_chart.luck_pillars[0].label == "丁丑"

    def test_start_age(self, reference_chart):
        """大雪 fell on 1989-12-07: about 25 days back, start age 8"""
        assert reference_chart.luck_start.start_age == 8
        assert reference_chart.luck_start.jie_name == "大雪"
        assert reference_chart.luck_pillars[0].start_age == 8
        assert reference_chart.luck_pillars[0].start_year == 1998

    def test_approximate_start_age(self, reference_profile, approximate_settings):
        chart = assemble_chart(reference_profile, approximate_settings)
        assert chart.luck_start.start_age == 9
        assert chart.luck_start.days_to_jie == pytest.approx(26.5)

    def test_start_age_rounds_half_up(self):
        """7.5 days is 2.5 years: rounds to 3, not to even"""
        assert luck_start_age(7.5) == 3
        assert luck_start_age(4.5) == 2
        assert luck_start_age(7.4) == 2
        assert luck_start_age(1.4) == 0

    def test_contiguous(self, reference_chart, settings):
        pillars = reference_chart.luck_pillars
        assert len(pillars) == settings.luck_pillar_count
        for prev, nxt in zip(pillars, pillars[1:]):
            assert nxt.start_age == prev.end_age + 1
            assert nxt.start_year == prev.end_year + 1
            assert nxt.ganzhi.position == prev.ganzhi.position.step(-1)

    def test_covers(self, reference_chart):
        first = reference_chart.luck_pillars[0]
        assert first.covers(1998)
        assert first.covers(2007)
        assert not first.covers(2008)

    def test_minor_fortunes(self, reference_chart):
        minors = reference_chart.minor_fortunes
        assert [m.year for m in minors] == list(range(1990, 1998))
        assert minors[0].age == 1
        assert minors[0].ganzhi.label == "癸巳"
        assert minors[1].ganzhi.label == "壬辰"

    def test_start_text(self, reference_chart):
        assert reference_chart.start_luck_text.startswith("出生后8年")
        assert describe_luck_start(25.5) == "出生后8年6个月0天起运"


class TestInputHandling:

    def test_city_fills_longitude(self, settings):
        chart = assemble_chart(make_profile(longitude=None, city="北京"), settings)
        assert chart.solar_time.timezone_name == "Asia/Shanghai"
        assert [p.label for p in chart.pillars] == ["己巳", "丙子", "丙寅", "甲午"]

    def test_true_solar_time_applied(self, settings):
        """Beijing 11:05 clock time is 10:50 solar time: 午 hour becomes 巳"""
        chart = assemble_chart(
            make_profile(birth_time="11:05", use_true_solar_time=True), settings
        )
        assert chart.solar_time.applied
        assert chart.hour.label == "癸巳"

    def test_dst_stripped(self, settings):
        """China observed DST in 1988: 12:30 clock time is 11:30 standard time"""
        chart = assemble_chart(
            make_profile(birth_date="1988-07-01", birth_time="12:30",
                         latitude=39.90, longitude=116.40),
            settings,
        )
        assert chart.solar_time.dst_stripped
        assert chart.birth_time.hour == 11
        assert chart.hour.ganzhi.branch.chinese == "午"

    def test_invalid_gender(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(gender="other"), settings)

    def test_unknown_city(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(longitude=None, city="亚特兰蒂斯"), settings)

    def test_true_solar_time_without_location(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(longitude=None, use_true_solar_time=True), settings)

    def test_out_of_range_latitude(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(latitude=123.0, longitude=116.40), settings)

    def test_out_of_range_longitude(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(latitude=39.90, longitude=200.0), settings)

    def test_out_of_range_year(self, settings):
        with pytest.raises(UnsupportedCalendarRange) as excinfo:
            assemble_chart(make_profile(birth_date="1850-06-01"), settings)
        assert excinfo.value.year == 1850

    def test_bad_date(self, settings):
        with pytest.raises(InvalidBirthData):
            assemble_chart(make_profile(birth_date="1990-02-30"), settings)


def test_palace_helpers():
    assert fetal_origin(StemBranch.parse("癸亥")).label == "甲寅"
    assert fetal_breath(StemBranch.parse("甲子")).label == "己丑"


def test_element_counts_direct(reference_chart):
    assert element_counts(reference_chart.pillars) == reference_chart.element_counts
