"""
ShenSha (神煞) marker registry.

Each rule is a pure function ``rule(ctx, target, kind) -> iterable of tags``.
``ctx`` holds the four natal pillars; ``target`` is the 60-cycle position
being marked (a natal pillar, or a transient luck/annual pillar) and
``kind`` says which. Rules never see each other's output; tags from all
rules are collected in registry order with duplicates removed.
"""

from dataclasses import dataclass

from xuanshu.ganzhi import PillarKind, StemBranch
from xuanshu.tables import (
    HEAVENLY_STEMS,
    PRODUCTION_CYCLE,
    three_harmony_frame,
)


@dataclass(frozen=True)
class ShenShaContext:
    year: StemBranch
    month: StemBranch
    day: StemBranch
    hour: StemBranch


def _by_stem(table: dict, *keys: str):
    """Build a rule that fires when the target branch is listed for a key stem."""

    def lookup(ctx: ShenShaContext) -> set:
        found = set()
        for key in keys:
            found.update(table.get(getattr(ctx, key).stem.chinese, ""))
        return found

    return lookup


# ============================================================
# NOBLE (贵人) AND BLESSING MARKERS, KEYED BY DAY/YEAR STEM
# ============================================================

TIAN_YI = {
    "甲": "丑未", "戊": "丑未", "庚": "丑未",
    "乙": "子申", "己": "子申",
    "丙": "亥酉", "丁": "亥酉",
    "壬": "卯巳", "癸": "卯巳",
    "辛": "寅午",
}

TAI_JI = {
    "甲": "子午", "乙": "子午",
    "丙": "卯酉", "丁": "卯酉",
    "戊": "辰戌丑未", "己": "辰戌丑未",
    "庚": "寅亥", "辛": "寅亥",
    "壬": "巳申", "癸": "巳申",
}

WEN_CHANG = {
    "甲": "巳", "乙": "午", "丙": "申", "丁": "酉", "戊": "申",
    "己": "酉", "庚": "亥", "辛": "子", "壬": "寅", "癸": "卯",
}

FU_XING = {
    "甲": "寅子", "丙": "寅子",
    "乙": "卯丑", "癸": "卯丑",
    "戊": "申", "己": "未", "丁": "亥",
    "庚": "午", "辛": "巳", "壬": "辰",
}

GUO_YIN = {
    "甲": "戌", "乙": "亥", "丙": "丑", "丁": "寅", "戊": "丑",
    "己": "寅", "庚": "辰", "辛": "巳", "壬": "未", "癸": "申",
}

# 禄 (临官 of the stem)
LU_SHEN = {
    "甲": "寅", "乙": "卯", "丙": "巳", "丁": "午", "戊": "巳",
    "己": "午", "庚": "申", "辛": "酉", "壬": "亥", "癸": "子",
}

YANG_REN = {
    "甲": "卯", "乙": "辰", "丙": "午", "丁": "未", "戊": "午",
    "己": "未", "庚": "酉", "辛": "戌", "壬": "子", "癸": "丑",
}

JIN_YU = {
    "甲": "辰", "乙": "巳", "丙": "未", "丁": "申", "戊": "未",
    "己": "申", "庚": "戌", "辛": "亥", "壬": "丑", "癸": "寅",
}

HONG_YAN = {
    "甲": "午", "乙": "申", "丙": "寅", "丁": "未", "戊": "辰",
    "己": "辰", "庚": "戌", "辛": "酉", "壬": "子", "癸": "申",
}

# 天厨: the 禄 of the stem's Eating God (same polarity, produced element)
TIAN_CHU = {
    stem.chinese: LU_SHEN[next(
        s.chinese for s in HEAVENLY_STEMS
        if s.element == PRODUCTION_CYCLE[stem.element] and s.polarity == stem.polarity
    )]
    for stem in HEAVENLY_STEMS
}

# ============================================================
# MONTH-BRANCH MARKERS
# ============================================================

# 天德: month branch → stem or branch character
TIAN_DE = {
    "寅": "丁", "卯": "申", "辰": "壬", "巳": "辛", "午": "亥", "未": "甲",
    "申": "癸", "酉": "寅", "戌": "丙", "亥": "乙", "子": "巳", "丑": "庚",
}

# 月德: month branch frame → stem
YUE_DE = {
    "寅": "丙", "午": "丙", "戌": "丙",
    "申": "壬", "子": "壬", "辰": "壬",
    "亥": "甲", "卯": "甲", "未": "甲",
    "巳": "庚", "酉": "庚", "丑": "庚",
}

# ============================================================
# DAY-PILLAR MARKERS
# ============================================================

KUI_GANG = ("庚辰", "庚戌", "壬辰", "戊戌")
SHI_E_DA_BAI = ("甲辰", "乙巳", "丙申", "丁亥", "戊戌", "己丑", "庚辰", "辛巳", "壬申", "癸亥")


def _frame_target(key_branch_index: int, offset_from_birth: int) -> int:
    """Branch at a fixed offset from the Birth branch of a Three Harmony frame."""
    birth = three_harmony_frame(key_branch_index)[0]
    return (birth + offset_from_birth) % 12


# Frame offsets from the Birth branch (申 for 申子辰):
#   将星 peak +4, 华盖 tomb +8, 驿马 clash of birth +6, 桃花 bath +1,
#   劫煞 extinction +9, 灾煞 conception +10, 亡神 office +3
FRAME_MARKERS = (
    ("将星", 4),
    ("华盖", 8),
    ("驿马", 6),
    ("桃花", 1),
    ("劫煞", 9),
    ("灾煞", 10),
    ("亡神", 3),
)

# 孤辰 / 寡宿 by the seasonal triad of the year branch
GU_CHEN = {0: 2, 1: 2, 11: 2, 2: 5, 3: 5, 4: 5, 5: 8, 6: 8, 7: 8, 8: 11, 9: 11, 10: 11}
GUA_SU = {0: 10, 1: 10, 11: 10, 2: 1, 3: 1, 4: 1, 5: 4, 6: 4, 7: 4, 8: 7, 9: 7, 10: 7}


# ============================================================
# RULES
# ============================================================

def _stem_branch_rule(name: str, table: dict, keys=("day", "year")):
    lookup = _by_stem(table, *keys)

    def rule(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
        if target.branch.chinese in lookup(ctx):
            yield name

    rule.__name__ = f"rule_{name}"
    return rule


def rule_tian_de(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    mark = TIAN_DE[ctx.month.branch.chinese]
    if mark in (target.stem.chinese, target.branch.chinese):
        yield "天德贵人"


def rule_yue_de(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    if target.stem.chinese == YUE_DE[ctx.month.branch.chinese]:
        yield "月德贵人"


def rule_tian_yi_doctor(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    # 天医: the branch just before the month branch
    if target.branch.index == (ctx.month.branch.index - 1) % 12:
        yield "天医"


def rule_frame_markers(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    # Keyed from both the year branch and the day branch
    for key in (ctx.year.branch.index, ctx.day.branch.index):
        for name, offset in FRAME_MARKERS:
            if target.branch.index == _frame_target(key, offset):
                yield name


def rule_lonely(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    year_branch = ctx.year.branch.index
    if target.branch.index == GU_CHEN[year_branch]:
        yield "孤辰"
    if target.branch.index == GUA_SU[year_branch]:
        yield "寡宿"


def rule_kui_gang(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    if kind is PillarKind.DAY and target.label in KUI_GANG:
        yield "魁罡"


def rule_shi_e_da_bai(ctx: ShenShaContext, target: StemBranch, kind: PillarKind):
    if kind is PillarKind.DAY and target.label in SHI_E_DA_BAI:
        yield "十恶大败"


SHENSHA_RULES = (
    _stem_branch_rule("天乙贵人", TIAN_YI),
    _stem_branch_rule("太极贵人", TAI_JI),
    _stem_branch_rule("文昌贵人", WEN_CHANG),
    _stem_branch_rule("福星贵人", FU_XING),
    _stem_branch_rule("国印贵人", GUO_YIN),
    rule_tian_de,
    rule_yue_de,
    _stem_branch_rule("禄神", LU_SHEN, keys=("day",)),
    _stem_branch_rule("羊刃", YANG_REN, keys=("day",)),
    _stem_branch_rule("金舆", JIN_YU, keys=("day",)),
    _stem_branch_rule("天厨贵人", TIAN_CHU, keys=("day",)),
    _stem_branch_rule("红艳", HONG_YAN, keys=("day",)),
    rule_tian_yi_doctor,
    rule_frame_markers,
    rule_lonely,
    rule_kui_gang,
    rule_shi_e_da_bai,
)

AUSPICIOUS = frozenset({
    "天乙贵人", "太极贵人", "文昌贵人", "福星贵人", "国印贵人", "天德贵人",
    "月德贵人", "禄神", "金舆", "天厨贵人", "天医", "将星",
})

INAUSPICIOUS = frozenset({
    "羊刃", "劫煞", "灾煞", "亡神", "孤辰", "寡宿", "十恶大败",
})


def evaluate_shensha(ctx: ShenShaContext, target: StemBranch, kind: PillarKind,
                     rules: tuple = SHENSHA_RULES) -> tuple:
    """Run every rule against one target pillar; ordered, duplicates collapsed."""
    tags = []
    for rule in rules:
        for tag in rule(ctx, target, kind):
            if tag not in tags:
                tags.append(tag)
    return tuple(tags)


def is_auspicious(tag: str) -> bool:
    return tag in AUSPICIOUS


def is_inauspicious(tag: str) -> bool:
    return tag in INAUSPICIOUS
