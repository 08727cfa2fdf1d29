"""
GanZhi value types and table lookups: the 60-cycle, hidden stems,
Ten Gods, Life Stages, void branches and Na Yin.
"""

import pytest

from xuanshu.ganzhi import (
    PillarKind,
    StemBranch,
    element_relationship,
    hidden_stems_of,
    life_stage,
    rat_hour_stem,
    read_ganzhi,
    six_combination_partner,
    stem_combination_partner,
    ten_god,
    tiger_month_stem,
    xun_void,
)
from xuanshu.tables import (
    BRANCH_BY_CHINESE,
    EARTHLY_BRANCHES,
    STEM_BY_CHINESE,
    Element,
    HiddenRole,
    LifeStage,
    TenGod,
    three_harmony_frame,
)


def stem(ch):
    return STEM_BY_CHINESE[ch]


def branch(ch):
    return BRANCH_BY_CHINESE[ch]


class TestSixtyCycle:

    def test_from_index_round_trip(self):
        labels = set()
        for i in range(60):
            position = StemBranch.from_index(i)
            assert position.index == i
            labels.add(position.label)
        assert len(labels) == 60

    def test_from_index_reduces_mod_60(self):
        assert StemBranch.from_index(60).label == "甲子"
        assert StemBranch.from_index(-1).label == "癸亥"

    def test_parity_mismatch_rejected(self):
        with pytest.raises(ValueError):
            StemBranch(stem("甲"), branch("丑"))

    def test_parse(self):
        assert StemBranch.parse("丙寅").index == 2
        with pytest.raises(ValueError):
            StemBranch.parse("甲")
        with pytest.raises(ValueError):
            StemBranch.parse("子甲")

    def test_step(self):
        assert StemBranch.parse("甲子").step(-1).label == "癸亥"
        assert StemBranch.parse("癸亥").step(1).label == "甲子"
        assert StemBranch.parse("丙子").step(-2).label == "甲戌"


class TestHiddenStems:

    def test_weights_sum_to_100(self):
        dm = stem("甲")
        for b in EARTHLY_BRANCHES:
            hidden = hidden_stems_of(b, dm)
            assert 1 <= len(hidden) <= 3
            assert sum(h.weight for h in hidden) == 100

    def test_roles_in_order(self):
        hidden = hidden_stems_of(branch("寅"), stem("丙"))
        assert [h.stem.chinese for h in hidden] == ["甲", "丙", "戊"]
        assert [h.role for h in hidden] == [HiddenRole.PRIMARY, HiddenRole.SECONDARY, HiddenRole.RESIDUAL]
        assert [h.weight for h in hidden] == [60, 30, 10]

    def test_single_and_double(self):
        assert [h.weight for h in hidden_stems_of(branch("子"), stem("丙"))] == [100]
        assert [h.stem.chinese for h in hidden_stems_of(branch("午"), stem("丙"))] == ["丁", "己"]
        assert [h.weight for h in hidden_stems_of(branch("午"), stem("丙"))] == [70, 30]

    def test_hidden_ten_gods(self):
        hidden = hidden_stems_of(branch("子"), stem("丙"))
        assert hidden[0].ten_god is TenGod.DIRECT_OFFICER


class TestTenGods:

    @pytest.mark.parametrize("other, expected", [
        ("丙", TenGod.COMPANION),
        ("丁", TenGod.ROB_WEALTH),
        ("戊", TenGod.EATING_GOD),
        ("己", TenGod.HURTING_OFFICER),
        ("庚", TenGod.INDIRECT_WEALTH),
        ("辛", TenGod.DIRECT_WEALTH),
        ("壬", TenGod.SEVEN_KILLINGS),
        ("癸", TenGod.DIRECT_OFFICER),
        ("甲", TenGod.INDIRECT_RESOURCE),
        ("乙", TenGod.DIRECT_RESOURCE),
    ])
    def test_bing_day_master(self, other, expected):
        assert ten_god(stem("丙"), stem(other)) is expected

    def test_every_pair_has_a_god(self):
        for dm in "甲乙丙丁戊己庚辛壬癸":
            gods = {ten_god(stem(dm), stem(o)) for o in "甲乙丙丁戊己庚辛壬癸"}
            assert gods == set(TenGod)

    def test_element_relationship(self):
        assert element_relationship(Element.WOOD, Element.FIRE) == "i_produce"
        assert element_relationship(Element.WOOD, Element.WATER) == "produces_me"
        assert element_relationship(Element.WOOD, Element.EARTH) == "i_control"
        assert element_relationship(Element.WOOD, Element.METAL) == "controls_me"
        assert element_relationship(Element.WOOD, Element.WOOD) == "same"


class TestLifeStages:

    @pytest.mark.parametrize("s, b, expected", [
        ("甲", "亥", LifeStage.BIRTH),
        ("甲", "卯", LifeStage.PROSPERITY),
        ("乙", "午", LifeStage.BIRTH),
        ("乙", "寅", LifeStage.PROSPERITY),
        ("丙", "子", LifeStage.CONCEPTION),
        ("丙", "午", LifeStage.PROSPERITY),
        ("辛", "子", LifeStage.BIRTH),
        ("壬", "子", LifeStage.PROSPERITY),
    ])
    def test_known_stages(self, s, b, expected):
        assert life_stage(stem(s), branch(b)) is expected

    def test_each_stem_visits_every_stage(self):
        for s in "甲乙丙丁戊己庚辛壬癸":
            assert {life_stage(stem(s), b) for b in EARTHLY_BRANCHES} == set(LifeStage)


class TestVoidAndNaYin:

    @pytest.mark.parametrize("label, expected", [
        ("甲子", "戌亥"),
        ("丙寅", "戌亥"),
        ("甲戌", "申酉"),
        ("癸亥", "子丑"),
    ])
    def test_xun_void(self, label, expected):
        assert "".join(b.chinese for b in xun_void(StemBranch.parse(label))) == expected

    @pytest.mark.parametrize("label, expected", [
        ("甲子", "海中金"),
        ("乙丑", "海中金"),
        ("丙寅", "炉中火"),
        ("壬戌", "大海水"),
    ])
    def test_na_yin(self, label, expected):
        assert StemBranch.parse(label).na_yin == expected


class TestDerivedStems:

    def test_five_tigers(self):
        assert tiger_month_stem(stem("甲"), branch("寅")).chinese == "丙"
        assert tiger_month_stem(stem("己"), branch("子")).chinese == "丙"
        assert tiger_month_stem(stem("戊"), branch("寅")).chinese == "甲"
        assert tiger_month_stem(stem("丁"), branch("寅")).chinese == "壬"

    def test_five_rats(self):
        assert rat_hour_stem(stem("甲"), branch("子")).chinese == "甲"
        assert rat_hour_stem(stem("丙"), branch("午")).chinese == "甲"
        assert rat_hour_stem(stem("戊"), branch("子")).chinese == "壬"

    def test_partners(self):
        assert stem_combination_partner(stem("甲")).chinese == "己"
        assert stem_combination_partner(stem("癸")).chinese == "戊"
        assert six_combination_partner(branch("寅")).chinese == "亥"
        assert six_combination_partner(branch("午")).chinese == "未"

    def test_three_harmony_frame(self):
        assert three_harmony_frame(0) == (8, 0, 4)
        with pytest.raises(ValueError):
            three_harmony_frame(12)


class TestReadGanzhi:

    def test_day_pillar_has_no_ten_god(self):
        g = read_ganzhi(StemBranch.parse("丙寅"), stem("丙"), is_day_pillar=True)
        assert g.ten_god is None
        assert g.life_stage is LifeStage.BIRTH

    def test_other_pillar(self):
        g = read_ganzhi(StemBranch.parse("甲午"), stem("丙"))
        assert g.ten_god is TenGod.INDIRECT_RESOURCE
        assert g.na_yin == "沙中金"
        assert g.position.label == "甲午"

    def test_pillar_kind_names(self):
        assert PillarKind.MONTH.chinese == "月柱"
        assert PillarKind.LUCK.chinese == "大运"
