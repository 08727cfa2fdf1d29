"""
Generate the reading context for a chart in a given year.

This produces a single JSON-safe payload for the LLM interpretation
layer: the natal chart, the year's fortune, the active luck pillar and
the rule-based pillar readings. Nothing here talks to a network.
"""

from datetime import datetime
from typing import Optional

from xuanshu.annual import active_luck_pillar, evaluate_year
from xuanshu.chart import BaziChart
from xuanshu.interpret import (
    interpret_annual_pillar,
    interpret_day_pillar,
    interpret_hour_pillar,
    interpret_luck_pillar,
    interpret_month_pillar,
    interpret_year_pillar,
)
from xuanshu.pillars import map_ten_gods


def _stem_branch_dict(sb) -> dict:
    return {"label": sb.label, "na_yin": sb.na_yin}


def chart_to_dict(chart: BaziChart) -> dict:
    """Flatten a chart into plain JSON types."""
    profile = chart.profile
    dm = chart.day_master
    return {
        "user": {
            "name": profile.name,
            "profile_id": profile.profile_id,
            "gender": chart.gender.value,
            "chart_name": chart.gender.chart_name,
            "birth_date": chart.solar_time.clock_time.strftime("%Y-%m-%d"),
            "birth_time_clock": chart.solar_time.clock_time.strftime("%H:%M"),
            "city": profile.city,
            "longitude": profile.longitude,
            "latitude": profile.latitude,
            "solar_time": chart.solar_time.to_dict(),
        },
        "day_master": {
            "stem": dm.chinese,
            "pinyin": dm.pinyin,
            "element": dm.element.value,
            "polarity": dm.polarity.value,
        },
        "pillars": {p.kind.value: p.to_dict() for p in chart.pillars},
        "ten_gods": map_ten_gods(chart.pillars),
        "palaces": {
            "life_palace": _stem_branch_dict(chart.life_palace),
            "body_palace": _stem_branch_dict(chart.body_palace),
            "fetal_origin": _stem_branch_dict(chart.fetal_origin),
            "fetal_breath": _stem_branch_dict(chart.fetal_breath),
        },
        "element_counts": dict(chart.element_counts),
        "natal_branch_interactions": list(chart.branch_interactions),
        "natal_stem_interactions": list(chart.stem_interactions),
        "shensha": list(chart.shensha_summary),
        "balance": chart.balance.to_dict(),
        "pattern": chart.pattern.to_dict(),
        "luck": {
            "direction": "顺行" if chart.luck_forward else "逆行",
            "start_age": chart.luck_start.start_age,
            "start_luck_text": chart.start_luck_text,
            "jie": chart.luck_start.jie_name,
            "pillars": [lp.to_dict() for lp in chart.luck_pillars],
            "minor_fortunes": [mf.to_dict() for mf in chart.minor_fortunes],
        },
    }


def build_chart_description(chart: BaziChart, year: int) -> str:
    """The compact Chinese chart summary placed at the top of an LLM prompt."""
    pillars = " ".join(p.label for p in chart.pillars)
    balance = chart.balance
    return "\n".join([
        "【核心命盘参数】",
        f"推演基准年份：{year}年",
        f"{chart.gender.chart_name}四柱八字：{pillars}",
        f"日主：{chart.day_master.chinese} ({chart.day_master.element.value}), 身强弱: {balance.level.value}",
        f"格局：{chart.pattern.name}（{chart.pattern.quality_tier.value}）",
        f"喜用神：{'、'.join(e.value for e in balance.favorable) or '无'}",
        f"忌神：{'、'.join(e.value for e in balance.unfavorable) or '无'}",
        f"起运：{chart.start_luck_text}",
    ]) + "\n"


def generate_reading_context(chart: BaziChart, year: Optional[int] = None) -> dict:
    """
    Generate the complete context payload for a reading.

    This is what gets passed to the LLM alongside its instructions.
    """
    year = year if year is not None else datetime.now().year
    fortune = evaluate_year(chart, year)
    luck = active_luck_pillar(chart, year)

    interpretations = {
        "year": interpret_year_pillar(chart),
        "month": interpret_month_pillar(chart),
        "day": interpret_day_pillar(chart),
        "hour": interpret_hour_pillar(chart),
        "luck": interpret_luck_pillar(chart, year=year),
        "annual": interpret_annual_pillar(chart, year=year),
    }

    return {
        "generated_at": datetime.now().isoformat(),
        "target_year": year,
        "chart_description": build_chart_description(chart, year),
        "bazi": {
            "natal": chart_to_dict(chart),
            "current_year": fortune.to_dict(),
            "current_luck_pillar": luck.to_dict() if luck else {},
        },
        "interpretations": {
            key: interp.integrated_summary for key, interp in interpretations.items()
        },
    }
