"""
Pattern (格局) classification.

Irregular patterns are checked first. Otherwise the pattern is taken from
the month order: the month branch's primary qi when it is the Day Master's
own element (建禄 / 羊刃 / 月劫), else the first revealed hidden stem in
primary → secondary → residual order, else the primary qi itself. When the
month branch is clashed and nothing in it is revealed, the chart falls back
to a body-strength pattern. Exactly one pattern is always returned.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from xuanshu.balance import BalanceAnalysis, StrengthLevel
from xuanshu.ganzhi import PillarKind
from xuanshu.interactions import is_six_clash, is_stem_combination
from xuanshu.pillars import NatalPillars
from xuanshu.shensha import KUI_GANG, LU_SHEN
from xuanshu.tables import TenGod

logger = logging.getLogger(__name__)


class PatternCategory(Enum):
    ORTHODOX = "正格"
    IRREGULAR = "外格"
    FALLBACK = "身强弱"


class QualityTier(Enum):
    SUPERIOR = "上等"
    MIDDLE = "中等"
    INFERIOR = "下等"
    BROKEN = "破格"


@dataclass(frozen=True)
class PatternAnalysis:
    name: str
    category: PatternCategory
    established: bool
    quality_tier: QualityTier
    beneficial: tuple
    destructive: tuple
    description: str

    def to_dict(self):
        return {
            "name": self.name,
            "category": self.category.value,
            "established": self.established,
            "quality_tier": self.quality_tier.value,
            "beneficial": list(self.beneficial),
            "destructive": list(self.destructive),
            "description": self.description,
        }


OFFICERS = (TenGod.DIRECT_OFFICER, TenGod.SEVEN_KILLINGS)
WEALTH = (TenGod.DIRECT_WEALTH, TenGod.INDIRECT_WEALTH)
RESOURCE = (TenGod.DIRECT_RESOURCE, TenGod.INDIRECT_RESOURCE)
PEERS = (TenGod.COMPANION, TenGod.ROB_WEALTH)
OUTPUT = (TenGod.EATING_GOD, TenGod.HURTING_OFFICER)

# pattern god → [(threat, rescuers, destructive text, rescued text)]
THREATS = {
    TenGod.DIRECT_OFFICER: [
        ((TenGod.HURTING_OFFICER,), RESOURCE, "伤官见官", "伤官见官，有印制伤"),
    ],
    TenGod.DIRECT_WEALTH: [(PEERS, OUTPUT + OFFICERS, "比劫夺财", "比劫争财，有食伤或官杀化解")],
    TenGod.INDIRECT_WEALTH: [(PEERS, OUTPUT + OFFICERS, "比劫夺财", "比劫争财，有食伤或官杀化解")],
    TenGod.DIRECT_RESOURCE: [(WEALTH, PEERS, "财星坏印", "财星坏印，有比劫护印")],
    TenGod.INDIRECT_RESOURCE: [(WEALTH, PEERS, "财星坏印", "财星坏印，有比劫护印")],
    TenGod.EATING_GOD: [((TenGod.INDIRECT_RESOURCE,), WEALTH, "枭神夺食", "枭神夺食，有财制枭")],
    TenGod.HURTING_OFFICER: [((TenGod.DIRECT_OFFICER,), WEALTH + RESOURCE, "伤官见官", "伤官见官，有财通关或印制伤")],
}

# pattern god → [(helpers, text)]
HELPERS = {
    TenGod.DIRECT_OFFICER: [(WEALTH, "财生官"), (RESOURCE, "官印相生")],
    TenGod.SEVEN_KILLINGS: [((TenGod.EATING_GOD,), "食神制杀"), (RESOURCE, "杀印相生")],
    TenGod.DIRECT_WEALTH: [(OUTPUT, "食伤生财"), ((TenGod.DIRECT_OFFICER,), "财官相生")],
    TenGod.INDIRECT_WEALTH: [(OUTPUT, "食伤生财"), ((TenGod.DIRECT_OFFICER,), "财官相生")],
    TenGod.DIRECT_RESOURCE: [(OFFICERS, "官印相生")],
    TenGod.INDIRECT_RESOURCE: [(OFFICERS, "官印相生")],
    TenGod.EATING_GOD: [(WEALTH, "食神生财")],
    TenGod.HURTING_OFFICER: [(WEALTH, "伤官生财"), (RESOURCE, "伤官配印")],
}

PEER_PATTERN_HELPERS = [(OFFICERS, "官杀制刃"), (OUTPUT, "食伤泄秀"), (WEALTH, "财星为用")]

DESCRIPTIONS = {
    "建禄格": "月令为日主之禄，自立自强，宜官财为用。",
    "羊刃格": "月令为日主羊刃，性刚果决，喜官杀制刃。",
    "月劫格": "月令为日主劫财，主独立好胜，喜官杀食伤。",
    "正官格": "月令正官，重名誉守规矩，喜财印护官。",
    "七杀格": "月令七杀，魄力十足，喜食神制杀或印星化杀。",
    "正财格": "月令正财，勤俭务实，喜食伤生财、官星护财。",
    "偏财格": "月令偏财，慷慨善经营，喜食伤生财。",
    "正印格": "月令正印，仁厚好学，喜官杀生印。",
    "偏印格": "月令偏印，思维独特，喜财星制枭。",
    "食神格": "月令食神，温和有才艺，喜财星流通。",
    "伤官格": "月令伤官，聪明外露，喜佩印或生财。",
    "魁罡格": "日坐魁罡，性格刚毅果断，忌冲刑。",
    "从强格": "一方旺气专聚，顺其旺势为用。",
    "从弱格": "日主无根无助，弃命从势为用。",
    "日禄归时格": "时支为日主之禄，晚运可期，忌官星透出。",
    "身强格": "月令受冲，格局不清，以身强论取用。",
    "身弱格": "月令受冲，格局不清，以身弱论取用。",
    "中和格": "月令受冲，格局不清，日主中和，以流通为用。",
}


def _visible_gods(pillars: NatalPillars) -> list:
    return [p.ganzhi.ten_god for p in pillars if p.kind is not PillarKind.DAY]


def _present(gods: list, wanted) -> bool:
    return any(g in wanted for g in gods)


def _month_clashed(pillars: NatalPillars) -> bool:
    month_branch = pillars.month.ganzhi.branch
    return any(
        is_six_clash(month_branch, p.ganzhi.branch)
        for p in pillars if p.kind is not PillarKind.MONTH
    )


def _tier(beneficial: tuple, destructive: tuple) -> QualityTier:
    if destructive and not beneficial:
        return QualityTier.BROKEN
    if destructive:
        return QualityTier.INFERIOR
    if len(beneficial) >= 2:
        return QualityTier.SUPERIOR
    if beneficial:
        return QualityTier.MIDDLE
    return QualityTier.INFERIOR


def _irregular(pillars: NatalPillars, balance: BalanceAnalysis):
    day = pillars.day.ganzhi
    gods = _visible_gods(pillars)
    officer_visible = _present(gods, OFFICERS)

    if day.label in KUI_GANG:
        clashed = any(
            is_six_clash(day.branch, p.ganzhi.branch)
            for p in pillars if p.kind is not PillarKind.DAY
        )
        if clashed:
            return "魁罡格", (), ("魁罡逢冲",)
        repeated = sum(p.ganzhi.label in KUI_GANG for p in pillars) > 1
        return "魁罡格", ("魁罡叠见",) if repeated else (), ()

    if balance.score >= 90 and not officer_visible:
        return "从强格", ("旺气专一",), ()

    if balance.score <= 10:
        return "从弱格", ("弃命从势",), ()

    if pillars.hour.ganzhi.branch.chinese == LU_SHEN[day.stem.chinese] and not officer_visible:
        return "日禄归时格", ("禄归时支",), ()

    return None


def analyze_pattern(pillars: NatalPillars, balance: BalanceAnalysis) -> PatternAnalysis:
    """Classify the chart's pattern; always returns exactly one."""
    irregular = _irregular(pillars, balance)
    if irregular is not None:
        name, beneficial, destructive = irregular
        tier = QualityTier.BROKEN if destructive else QualityTier.SUPERIOR
        logger.debug("Irregular pattern %s", name)
        return PatternAnalysis(
            name=name,
            category=PatternCategory.IRREGULAR,
            established=not destructive,
            quality_tier=tier,
            beneficial=beneficial,
            destructive=destructive,
            description=DESCRIPTIONS[name],
        )

    day_master = pillars.day_master
    month = pillars.month.ganzhi
    hidden = month.hidden_stems
    visible = [p.ganzhi.stem for p in pillars if p.kind is not PillarKind.DAY]
    gods = _visible_gods(pillars)
    clashed = _month_clashed(pillars)

    primary = hidden[0]
    revealed = None
    pattern_god = primary.ten_god

    if primary.ten_god is TenGod.COMPANION:
        name = "建禄格"
    elif primary.ten_god is TenGod.ROB_WEALTH:
        name = "羊刃格" if day_master.is_yang else "月劫格"
    else:
        for h in hidden:
            if h.ten_god in PEERS:
                continue
            if h.stem in visible:
                revealed = h
                break
        if revealed is None and clashed:
            return _fallback(balance)
        if revealed is not None:
            pattern_god = revealed.ten_god
        name = f"{pattern_god.value}格"

    beneficial = []
    destructive = []

    if name in ("建禄格", "羊刃格", "月劫格"):
        for helpers, text in PEER_PATTERN_HELPERS:
            if _present(gods, helpers):
                beneficial.append(text)
        if not beneficial:
            destructive.append("比劫无制")
    else:
        for helpers, text in HELPERS.get(pattern_god, []):
            if _present(gods, helpers):
                beneficial.append(text)
        for threat, rescuers, broken_text, rescued_text in THREATS.get(pattern_god, []):
            if _present(gods, threat):
                if _present(gods, rescuers):
                    beneficial.append(rescued_text)
                else:
                    destructive.append(broken_text)
        if pattern_god is TenGod.DIRECT_OFFICER and _present(gods, (TenGod.SEVEN_KILLINGS,)):
            destructive.append("官杀混杂")

        if revealed is not None:
            others = [p.ganzhi.stem for p in pillars if p.kind is not PillarKind.DAY]
            for stem in others:
                if stem != revealed.stem and is_stem_combination(stem, revealed.stem):
                    destructive.append("格神被合")
                    break

    if clashed:
        destructive.append("月令逢冲")

    beneficial = tuple(beneficial)
    destructive = tuple(destructive)
    tier = _tier(beneficial, destructive)
    logger.debug("Orthodox pattern %s (%s)", name, tier.value)

    return PatternAnalysis(
        name=name,
        category=PatternCategory.ORTHODOX,
        established=tier is not QualityTier.BROKEN,
        quality_tier=tier,
        beneficial=beneficial,
        destructive=destructive,
        description=DESCRIPTIONS[name],
    )


def _fallback(balance: BalanceAnalysis) -> PatternAnalysis:
    if balance.level.is_strong:
        name = "身强格"
    elif balance.level.is_weak:
        name = "身弱格"
    else:
        name = "中和格"
    logger.debug("Month order clashed with nothing revealed; fallback %s", name)
    return PatternAnalysis(
        name=name,
        category=PatternCategory.FALLBACK,
        established=False,
        quality_tier=QualityTier.INFERIOR,
        beneficial=(),
        destructive=("月令逢冲",),
        description=DESCRIPTIONS[name],
    )
