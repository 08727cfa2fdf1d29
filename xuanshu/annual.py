"""
Annual and other dynamic pillars measured against a natal chart.

Nothing here is cached on the chart: every call recomputes from the
immutable chart, and every function is total for any integer year.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from xuanshu.astro_calendar import year_cycle
from xuanshu.chart import BaziChart
from xuanshu.ganzhi import GanZhi, PillarKind, StemBranch, read_ganzhi
from xuanshu.interactions import (
    find_branch_interactions,
    involves,
    is_six_clash,
    is_six_combination,
    is_stem_clash,
    is_stem_combination,
)
from xuanshu.luck import LuckPillar
from xuanshu.shensha import evaluate_shensha, is_auspicious, is_inauspicious
from xuanshu.tables import THREE_HARMONY, HeavenlyStem

logger = logging.getLogger(__name__)

GOOD_THRESHOLD = 2
BAD_THRESHOLD = -2


class Rating(Enum):
    GOOD = "吉"
    BAD = "凶"
    NEUTRAL = "平"


@dataclass(frozen=True)
class AnnualFortune:
    year: int
    ganzhi: GanZhi
    rating: Rating
    reasons: tuple
    score: int
    shensha: tuple
    luck_pillar: Optional[LuckPillar]
    interactions: tuple = ()

    def to_dict(self):
        return {
            "year": self.year,
            "label": self.ganzhi.label,
            "ten_god": self.ganzhi.ten_god.value if self.ganzhi.ten_god else None,
            "na_yin": self.ganzhi.na_yin,
            "rating": self.rating.value,
            "score": self.score,
            "reasons": list(self.reasons),
            "shensha": list(self.shensha),
            "luck_pillar": self.luck_pillar.to_dict() if self.luck_pillar else None,
            "interactions_with_natal": list(self.interactions),
        }


def ganzhi_for_year(year: int, day_master: HeavenlyStem) -> GanZhi:
    """Annual pillar for a Gregorian year, read against the Day Master."""
    return read_ganzhi(year_cycle(year), day_master)


def active_luck_pillar(chart: BaziChart, year: int) -> Optional[LuckPillar]:
    for lp in chart.luck_pillars:
        if lp.covers(year):
            return lp
    return None


def dynamic_shensha(chart: BaziChart, position: StemBranch, kind: PillarKind) -> tuple:
    """ShenSha of a transient pillar against the natal context."""
    return evaluate_shensha(chart.pillars.context, position, kind)


def evaluate_luck_pillar_interaction(chart: BaziChart, luck_pillar: LuckPillar) -> tuple:
    return dynamic_shensha(chart, luck_pillar.ganzhi.position, PillarKind.LUCK)


def _rate(score: int) -> Rating:
    if score >= GOOD_THRESHOLD:
        return Rating.GOOD
    if score <= BAD_THRESHOLD:
        return Rating.BAD
    return Rating.NEUTRAL


def evaluate_year(chart: BaziChart, year: int) -> AnnualFortune:
    """
    Score one year against the natal chart.

    Contributions:
        annual stem element: favorable +2, supportive +1, unfavorable -2
        annual branch element: favorable +1, supportive +1, unfavorable -1
        stem combining the Day Master +1, any other natal stem +1;
        stem clash -1 (Day Master -2)
        branch clash -1 (day branch -2); six combination +1;
        completed Three Harmony +2; 值太岁 -1; 伏吟 -1; 反吟 -2
        stem clash / combination with the active luck pillar -1 / +1
        branch clash / combination with the active luck pillar -1 / +1
        each auspicious ShenSha +1, each inauspicious -1

    Rating: score >= 2 吉, <= -2 凶, else 平.
    """
    balance = chart.balance
    annual = ganzhi_for_year(year, chart.day_master)
    luck = active_luck_pillar(chart, year)

    score = 0
    reasons = []

    def add(points: int, reason: str):
        nonlocal score
        score += points
        reasons.append(f"{reason}（{points:+d}）")

    stem_element = annual.stem_element
    if stem_element in balance.favorable:
        add(2, f"流年天干{annual.stem.chinese}{stem_element.value}为喜用")
    elif stem_element in balance.supportive:
        add(1, f"流年天干{annual.stem.chinese}{stem_element.value}为辅助")
    elif stem_element in balance.unfavorable:
        add(-2, f"流年天干{annual.stem.chinese}{stem_element.value}为忌神")

    branch_element = annual.branch_element
    if branch_element in balance.favorable:
        add(1, f"流年地支{annual.branch.chinese}{branch_element.value}为喜用")
    elif branch_element in balance.supportive:
        add(1, f"流年地支{annual.branch.chinese}{branch_element.value}为辅助")
    elif branch_element in balance.unfavorable:
        add(-1, f"流年地支{annual.branch.chinese}{branch_element.value}为忌神")

    day = chart.day.ganzhi
    for pillar in chart.pillars:
        stem = pillar.ganzhi.stem
        if is_stem_combination(annual.stem, stem):
            if pillar.kind is PillarKind.DAY:
                add(1, f"流年{annual.stem.chinese}与日主{stem.chinese}相合")
            else:
                add(1, f"流年{annual.stem.chinese}合{pillar.name}{stem.chinese}")
        if is_stem_clash(annual.stem, stem):
            if pillar.kind is PillarKind.DAY:
                add(-2, f"流年{annual.stem.chinese}冲日主{stem.chinese}")
            else:
                add(-1, f"流年{annual.stem.chinese}冲{pillar.name}{stem.chinese}")

    for pillar in chart.pillars:
        branch = pillar.ganzhi.branch
        if is_six_clash(annual.branch, branch):
            if pillar.kind is PillarKind.DAY:
                add(-2, f"流年{annual.branch.chinese}冲日支{branch.chinese}")
            else:
                add(-1, f"流年{annual.branch.chinese}冲{pillar.name}{branch.chinese}")
        if is_six_combination(annual.branch, branch):
            add(1, f"流年{annual.branch.chinese}合{pillar.name}{branch.chinese}")

    natal_branches = {p.ganzhi.branch.index for p in chart.pillars}
    for triple, element in THREE_HARMONY.items():
        if annual.branch.index in triple and all(
            idx in natal_branches or idx == annual.branch.index for idx in triple
        ) and not all(idx in natal_branches for idx in triple):
            add(2, f"流年{annual.branch.chinese}会成{element.value}局")

    if annual.branch == chart.year.ganzhi.branch:
        add(-1, "值太岁")

    if annual.label == day.label:
        add(-1, "伏吟日柱")
    elif is_stem_clash(annual.stem, day.stem) and is_six_clash(annual.branch, day.branch):
        add(-2, "反吟日柱")

    if luck is not None:
        lp = luck.ganzhi
        if is_stem_clash(annual.stem, lp.stem):
            add(-1, f"流年{annual.stem.chinese}冲大运{lp.label}天干")
        elif is_stem_combination(annual.stem, lp.stem):
            add(1, f"流年{annual.stem.chinese}合大运{lp.label}天干")
        if is_six_clash(annual.branch, lp.branch):
            add(-1, f"流年冲大运{lp.label}")
        elif is_six_combination(annual.branch, lp.branch):
            add(1, f"流年合大运{lp.label}")

    shensha = dynamic_shensha(chart, annual.position, PillarKind.ANNUAL)
    for tag in shensha:
        if is_auspicious(tag):
            add(1, f"流年逢{tag}")
        elif is_inauspicious(tag):
            add(-1, f"流年逢{tag}")

    branches = [p.ganzhi.branch for p in chart.pillars] + [annual.branch]
    labels = [p.kind.value for p in chart.pillars] + ["annual"]
    interactions = tuple(
        i for i in find_branch_interactions(branches, labels) if involves(i, "annual")
    )

    rating = _rate(score)
    logger.debug("Year %d (%s): score %d → %s", year, annual.label, score, rating.value)

    return AnnualFortune(
        year=year,
        ganzhi=annual,
        rating=rating,
        reasons=tuple(reasons),
        score=score,
        shensha=shensha,
        luck_pillar=luck,
        interactions=interactions,
    )


def evaluate_years(chart: BaziChart, start_year: int, end_year: int) -> tuple:
    """Annual fortunes for an inclusive range of years."""
    return tuple(evaluate_year(chart, y) for y in range(start_year, end_year + 1))
