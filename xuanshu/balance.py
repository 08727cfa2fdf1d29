"""
Day Master strength and favorable elements (扶抑法).

The score is the share of the chart's weighted qi that supports the Day
Master (same element + resource), adjusted for the season of the month
branch and for rooting, then bucketed into five ordered levels. The
favorable/supportive/unfavorable elements are a pure function of the
Day Master element and the level.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from xuanshu.ganzhi import PillarKind, element_relationship
from xuanshu.pillars import NatalPillars
from xuanshu.tables import (
    CONTROL_CYCLE,
    CONTROLLED_BY,
    PRODUCED_BY,
    PRODUCTION_CYCLE,
    Element,
    HiddenRole,
)

logger = logging.getLogger(__name__)

METHOD = "扶抑法"

VISIBLE_STEM_POINTS = 1.0
BRANCH_MULTIPLIER = {PillarKind.MONTH: 2.5, PillarKind.DAY: 1.5}

# Seasonal state (旺相休囚死) of the Day Master in the month branch
SEASONAL_ADJUSTMENT = {
    "旺": 12,
    "相": 6,
    "休": -4,
    "囚": -6,
    "死": -10,
}

ROOT_PRIMARY_BONUS = 6
ROOT_MINOR_BONUS = 3


class StrengthLevel(Enum):
    VERY_WEAK = "身极弱"
    WEAK = "身弱"
    BALANCED = "中和"
    STRONG = "身强"
    VERY_STRONG = "身极强"

    @property
    def rank(self) -> int:
        return STRENGTH_ORDER.index(self)

    @property
    def is_weak(self) -> bool:
        return self in (StrengthLevel.VERY_WEAK, StrengthLevel.WEAK)

    @property
    def is_strong(self) -> bool:
        return self in (StrengthLevel.STRONG, StrengthLevel.VERY_STRONG)


STRENGTH_ORDER = tuple(StrengthLevel)


@dataclass(frozen=True)
class BalanceAnalysis:
    score: float
    level: StrengthLevel
    description: str
    favorable: tuple
    supportive: tuple
    unfavorable: tuple
    method: str
    advice: str
    seasonal_state: str = ""

    def to_dict(self):
        return {
            "score": self.score,
            "level": self.level.value,
            "description": self.description,
            "favorable": [e.value for e in self.favorable],
            "supportive": [e.value for e in self.supportive],
            "unfavorable": [e.value for e in self.unfavorable],
            "method": self.method,
            "advice": self.advice,
            "seasonal_state": self.seasonal_state,
        }


def seasonal_state(day_master_element: Element, season_element: Element) -> str:
    """旺 same, 相 season produces me, 休 I produce season, 囚 I control season, 死 season controls me."""
    relationship = element_relationship(day_master_element, season_element)
    return {
        "same": "旺",
        "produces_me": "相",
        "i_produce": "休",
        "i_control": "囚",
        "controls_me": "死",
    }[relationship]


def level_for_score(score: float) -> StrengthLevel:
    if score < 25:
        return StrengthLevel.VERY_WEAK
    if score < 42:
        return StrengthLevel.WEAK
    if score <= 58:
        return StrengthLevel.BALANCED
    if score <= 75:
        return StrengthLevel.STRONG
    return StrengthLevel.VERY_STRONG


def element_roles(day_master_element: Element) -> dict:
    """The five elements keyed by their relationship to the Day Master."""
    return {
        "same": day_master_element,
        "resource": PRODUCED_BY[day_master_element],
        "i_produce": PRODUCTION_CYCLE[day_master_element],
        "i_control": CONTROL_CYCLE[day_master_element],
        "controls_me": CONTROLLED_BY[day_master_element],
    }


# level → (favorable roles, supportive roles); everything else not listed
# is unfavorable for weak/strong charts and neutral for a balanced one
FAVORABLE_ROLES = {
    StrengthLevel.VERY_WEAK: (("resource", "same"), ()),
    StrengthLevel.WEAK: (("resource", "same"), ("controls_me",)),
    StrengthLevel.BALANCED: (("i_produce", "i_control"), ()),
    StrengthLevel.STRONG: (("controls_me", "i_produce"), ("i_control",)),
    StrengthLevel.VERY_STRONG: (("controls_me", "i_produce"), ("i_control",)),
}


def favorable_elements(day_master_element: Element, level: StrengthLevel) -> tuple:
    """Return (favorable, supportive, unfavorable) element tuples; pairwise disjoint."""
    roles = element_roles(day_master_element)
    favorable_roles, supportive_roles = FAVORABLE_ROLES[level]
    favorable = tuple(roles[r] for r in favorable_roles)
    supportive = tuple(roles[r] for r in supportive_roles)
    if level is StrengthLevel.BALANCED:
        unfavorable = ()
    else:
        unfavorable = tuple(
            e for r, e in roles.items() if r not in favorable_roles and r not in supportive_roles
        )
    return favorable, supportive, unfavorable


ADVICE = {
    StrengthLevel.VERY_WEAK: "日主极弱，宜顺势而为，借印比之力，避免硬扛财官。",
    StrengthLevel.WEAK: "日主偏弱，喜印星生扶、比劫帮身，行事宜稳健蓄力。",
    StrengthLevel.BALANCED: "日主中和，宜流通为贵，顺应时运即可发挥所长。",
    StrengthLevel.STRONG: "日主偏强，喜官杀约束、食伤泄秀，宜主动开拓。",
    StrengthLevel.VERY_STRONG: "日主极旺，宜疏导旺气，以食伤泄秀、官杀制衡为用。",
}


def analyze_balance(pillars: NatalPillars) -> BalanceAnalysis:
    """
    Score the Day Master's strength.

    Points: visible stems (year, month, hour) 1.0 each; hidden stems
    weight/100, multiplied ×2.5 in the month branch and ×1.5 in the day
    branch. Support = same element + resource element.
    """
    day_master = pillars.day_master
    dm_element = day_master.element
    resource = PRODUCED_BY[dm_element]

    support = 0.0
    total = 0.0

    for pillar in pillars:
        gz = pillar.ganzhi
        if pillar.kind is not PillarKind.DAY:
            total += VISIBLE_STEM_POINTS
            if gz.stem_element in (dm_element, resource):
                support += VISIBLE_STEM_POINTS
        multiplier = BRANCH_MULTIPLIER.get(pillar.kind, 1.0)
        for hidden in gz.hidden_stems:
            points = hidden.weight / 100 * multiplier
            total += points
            if hidden.stem.element in (dm_element, resource):
                support += points

    share = support / total * 100 if total else 0.0

    month_branch = pillars.month.ganzhi.branch
    state = seasonal_state(dm_element, month_branch.element)

    root_bonus = 0
    for pillar in pillars:
        for hidden in pillar.ganzhi.hidden_stems:
            if hidden.stem.element == dm_element:
                if hidden.role is HiddenRole.PRIMARY:
                    root_bonus = ROOT_PRIMARY_BONUS
                else:
                    root_bonus = max(root_bonus, ROOT_MINOR_BONUS)

    score = share + SEASONAL_ADJUSTMENT[state] + root_bonus
    score = round(min(100.0, max(0.0, score)), 1)
    level = level_for_score(score)
    favorable, supportive, unfavorable = favorable_elements(dm_element, level)

    description = (
        f"日主{day_master.chinese}{dm_element.value}生于{month_branch.chinese}月，"
        f"{state}；同党占比{share:.0f}%，"
        f"{'有根' if root_bonus else '无根'}，综合得分{score:g}，判定{level.value}。"
    )
    logger.debug("Balance: share %.1f, season %s, root +%d → %s (%s)",
                 share, state, root_bonus, score, level.value)

    return BalanceAnalysis(
        score=score,
        level=level,
        description=description,
        favorable=favorable,
        supportive=supportive,
        unfavorable=unfavorable,
        method=METHOD,
        advice=ADVICE[level],
        seasonal_state=state,
    )
