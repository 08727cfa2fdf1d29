"""
Rule-based pillar interpretations and the LLM reading context.
"""

import json

import pytest

from xuanshu.context import build_chart_description, chart_to_dict, generate_reading_context
from xuanshu.ganzhi import StemBranch
from xuanshu.interpret import (
    interpret_annual_pillar,
    interpret_day_pillar,
    interpret_hour_pillar,
    interpret_luck_pillar,
    interpret_month_pillar,
    interpret_year_pillar,
)


class TestInterpretations:

    @pytest.mark.parametrize("fn, name", [
        (interpret_year_pillar, "年柱"),
        (interpret_month_pillar, "月柱"),
        (interpret_day_pillar, "日柱"),
        (interpret_hour_pillar, "时柱"),
    ])
    def test_natal_pillars(self, reference_chart, fn, name):
        interp = fn(reference_chart)
        assert interp.pillar_name == name
        assert interp.core_symbolism
        assert interp.hidden_dynamics
        assert interp.integrated_summary.startswith(f"【{name}")

    def test_day_pillar_reads_as_self(self, reference_chart):
        assert "日元" in interpret_day_pillar(reference_chart).core_symbolism

    def test_month_hidden_dynamics(self, reference_chart):
        """子 holds only 癸, the Direct Officer of 丙"""
        hidden = interpret_month_pillar(reference_chart).hidden_dynamics
        assert "癸" in hidden
        assert "正官" in hidden

    def test_na_yin(self, reference_chart):
        assert interpret_hour_pillar(reference_chart).na_yin_influence.startswith("沙中金")

    def test_luck_pillar_inputs(self, reference_chart):
        by_year = interpret_luck_pillar(reference_chart, year=2000)
        by_label = interpret_luck_pillar(reference_chart, "乙亥")
        by_position = interpret_luck_pillar(reference_chart, StemBranch.parse("乙亥"))
        assert by_year == by_label == by_position
        assert by_year.pillar_name == "大运"
        assert any(e.startswith("天乙贵人") for e in by_year.shensha_effects)

    def test_luck_pillar_before_first(self, reference_chart):
        """Before the first luck pillar starts, the first one is read"""
        assert interpret_luck_pillar(reference_chart, year=1991).integrated_summary.startswith("【大运乙亥】")

    def test_annual_pillar(self, reference_chart):
        interp = interpret_annual_pillar(reference_chart, year=2024)
        assert interp.pillar_name == "流年"
        assert interp.integrated_summary.startswith("【流年甲辰】")
        assert interpret_annual_pillar(reference_chart, "甲辰") == interp

    def test_to_dict(self, reference_chart):
        data = interpret_year_pillar(reference_chart).to_dict()
        assert set(data) >= {"pillar_name", "core_symbolism", "integrated_summary"}
        assert isinstance(data["shensha_effects"], list)


class TestReadingContext:

    def test_chart_description(self, reference_chart):
        text = build_chart_description(reference_chart, 2024)
        assert text.startswith("【核心命盘参数】")
        assert "2024年" in text
        assert "乾造四柱八字：己巳 丙子 丙寅 甲午" in text

    def test_chart_to_dict(self, reference_chart):
        data = chart_to_dict(reference_chart)
        assert set(data["pillars"]) == {"year", "month", "day", "hour"}
        assert data["user"]["chart_name"] == "乾造"
        assert data["luck"]["direction"] == "逆行"
        assert data["palaces"]["life_palace"]["label"] == "癸酉"

    def test_context_is_json_safe(self, reference_chart):
        context = generate_reading_context(reference_chart, 2024)
        encoded = json.dumps(context, ensure_ascii=False)
        assert "甲辰" in encoded
        assert context["target_year"] == 2024
        assert context["bazi"]["current_year"]["label"] == "甲辰"
        assert context["bazi"]["current_luck_pillar"]["number"] == 3
        assert set(context["interpretations"]) == {"year", "month", "day", "hour", "luck", "annual"}

    def test_context_before_luck_starts(self, reference_chart):
        context = generate_reading_context(reference_chart, 1992)
        assert context["bazi"]["current_luck_pillar"] == {}
