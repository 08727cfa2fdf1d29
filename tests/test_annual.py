"""
Annual fortune evaluation against the reference chart.
"""

from conftest import make_profile
from xuanshu.annual import (
    Rating,
    active_luck_pillar,
    evaluate_luck_pillar_interaction,
    evaluate_year,
    evaluate_years,
    ganzhi_for_year,
)
from xuanshu.chart import assemble_chart
from xuanshu.interactions import involves


def has_reason(fortune, text):
    return any(text in r for r in fortune.reasons)


class TestAnnualPillar:

    def test_birth_year_matches_year_pillar(self, reference_chart):
        """1989 is the BaZi year of a 1990-01-01 birth"""
        assert ganzhi_for_year(1989, reference_chart.day_master).label == reference_chart.year.label

    def test_bazi_year_before_lichun(self, reference_chart):
        """Born 1990-01-01, before Li Chun: the year pillar belongs to 1989"""
        assert reference_chart.birth_year == 1990
        assert reference_chart.bazi_year == 1989
        fortune = evaluate_year(reference_chart, reference_chart.bazi_year)
        assert fortune.ganzhi.label == reference_chart.year.label == "己巳"

    def test_bazi_year_after_lichun(self, settings):
        chart = assemble_chart(make_profile(birth_date="1990-06-01"), settings)
        assert chart.bazi_year == chart.birth_year == 1990
        fortune = evaluate_year(chart, chart.bazi_year)
        assert fortune.ganzhi.label == chart.year.label == "庚午"

    def test_any_year_is_total(self, reference_chart):
        for year in (-500, 0, 1, 1900, 2024, 3000):
            fortune = evaluate_year(reference_chart, year)
            assert fortune.rating in Rating
            assert fortune.ganzhi.label

    def test_2024(self, reference_chart):
        assert evaluate_year(reference_chart, 2024).ganzhi.label == "甲辰"


class TestReasons:

    def test_tai_sui(self, reference_chart):
        """辛巳 2001 repeats the 巳 year branch"""
        assert has_reason(evaluate_year(reference_chart, 2001), "值太岁")

    def test_fu_yin(self, reference_chart):
        """丙寅 1986 repeats the day pillar"""
        fortune = evaluate_year(reference_chart, 1986)
        assert has_reason(fortune, "伏吟日柱（-1）")

    def test_fan_yin(self, reference_chart):
        """壬申 1992 clashes both halves of 丙寅"""
        assert has_reason(evaluate_year(reference_chart, 1992), "反吟日柱（-2）")

    def test_stem_combines_day_master(self, reference_chart):
        """辛巳 2001: 丙辛 combine"""
        assert has_reason(evaluate_year(reference_chart, 2001), "流年辛与日主丙相合（+1）")

    def test_stem_combines_other_natal_stem(self, reference_chart):
        """甲戌 1994 combines the 己 year stem"""
        assert has_reason(evaluate_year(reference_chart, 1994), "流年甲合年柱己（+1）")

    def test_stem_combines_luck_pillar(self, reference_chart):
        """己丑 2009 runs under 甲戌: 甲己 combine"""
        assert has_reason(evaluate_year(reference_chart, 2009), "流年己合大运甲戌天干（+1）")

    def test_stem_clashes_luck_pillar(self, reference_chart):
        """庚寅 2010 runs under 甲戌: 甲庚 clash"""
        assert has_reason(evaluate_year(reference_chart, 2010), "流年庚冲大运甲戌天干（-1）")

    def test_score_matches_reasons(self, reference_chart):
        fortune = evaluate_year(reference_chart, 2024)
        total = sum(int(r.rsplit("（", 1)[1].rstrip("）")) for r in fortune.reasons)
        assert total == fortune.score

    def test_rating_thresholds(self, reference_chart):
        for fortune in evaluate_years(reference_chart, 1990, 2049):
            if fortune.score >= 2:
                assert fortune.rating is Rating.GOOD
            elif fortune.score <= -2:
                assert fortune.rating is Rating.BAD
            else:
                assert fortune.rating is Rating.NEUTRAL


class TestLuckContext:

    def test_active_luck_pillar(self, reference_chart):
        assert active_luck_pillar(reference_chart, 1995) is None
        assert active_luck_pillar(reference_chart, 2000).index == 1
        assert active_luck_pillar(reference_chart, 2008).index == 2

    def test_fortune_carries_luck_pillar(self, reference_chart):
        assert evaluate_year(reference_chart, 2024).luck_pillar.index == 3

    def test_luck_pillar_shensha(self, reference_chart):
        tags = evaluate_luck_pillar_interaction(reference_chart, reference_chart.luck_pillars[0])
        assert "天乙贵人" in tags  # 乙亥 for a 丙 Day Master

    def test_interactions_involve_the_year(self, reference_chart):
        fortune = evaluate_year(reference_chart, 2026)  # 丙午
        assert fortune.interactions
        assert all(involves(i, "annual") for i in fortune.interactions)

    def test_evaluate_years_range(self, reference_chart):
        fortunes = evaluate_years(reference_chart, 2020, 2029)
        assert [f.year for f in fortunes] == list(range(2020, 2030))

    def test_to_dict(self, reference_chart):
        data = evaluate_year(reference_chart, 2024).to_dict()
        assert data["label"] == "甲辰"
        assert data["rating"] in {"吉", "凶", "平"}
        assert data["luck_pillar"]["number"] == 3
