"""
Static Five-Element and relationship tables for BaZi computation.

Everything in this module is read-only reference data:
- Heavenly Stems and Earthly Branches
- Hidden stems (藏干) per branch, with their weight splits
- Production / control cycles
- Ten Gods (十神), Twelve Life Stages (十二长生), Na Yin (纳音)
- Stem combinations/clashes and branch combinations/clashes/harms/punishments

Tables are tuples and dicts built once at import and never mutated.
"""

from dataclasses import dataclass
from enum import Enum


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    WOOD = "木"
    FIRE = "火"
    EARTH = "土"
    METAL = "金"
    WATER = "水"

    @property
    def english(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    @property
    def is_yang(self) -> bool:
        return self.polarity is Polarity.YANG

    def __str__(self):
        return f"{self.chinese} {self.pinyin} ({self.polarity.value} {self.element.english})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element  # primary/season element
    polarity: Polarity
    index: int  # 0-11 in the cycle
    hidden_stems: tuple  # pinyin names [main_qi, middle_qi, residual_qi]

    def __str__(self):
        return f"{self.chinese} {self.pinyin} ({self.animal})"


class TenGod(Enum):
    COMPANION = "比肩"
    ROB_WEALTH = "劫财"
    EATING_GOD = "食神"
    HURTING_OFFICER = "伤官"
    INDIRECT_WEALTH = "偏财"
    DIRECT_WEALTH = "正财"
    SEVEN_KILLINGS = "七杀"
    DIRECT_OFFICER = "正官"
    INDIRECT_RESOURCE = "偏印"
    DIRECT_RESOURCE = "正印"


class LifeStage(Enum):
    BIRTH = "长生"
    BATH = "沐浴"
    CAP = "冠带"
    OFFICE = "临官"
    PROSPERITY = "帝旺"
    DECLINE = "衰"
    SICKNESS = "病"
    DEATH = "死"
    TOMB = "墓"
    EXTINCTION = "绝"
    CONCEPTION = "胎"
    NURTURE = "养"


class HiddenRole(Enum):
    PRIMARY = "本气"
    SECONDARY = "中气"
    RESIDUAL = "余气"


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0,
                  ("Gui",)),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1,
                  ("Ji", "Gui", "Xin")),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2,
                  ("Jia", "Bing", "Wu")),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3,
                  ("Yi",)),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4,
                  ("Wu", "Yi", "Gui")),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5,
                  ("Bing", "Wu", "Geng")),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6,
                  ("Ding", "Ji")),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7,
                  ("Ji", "Ding", "Yi")),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8,
                  ("Geng", "Ren", "Wu")),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9,
                  ("Xin",)),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10,
                  ("Wu", "Xin", "Ding")),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11,
                  ("Ren", "Jia")),
)

# Lookup helpers
STEM_BY_PINYIN = {s.pinyin: s for s in HEAVENLY_STEMS}
STEM_BY_CHINESE = {s.chinese: s for s in HEAVENLY_STEMS}
BRANCH_BY_CHINESE = {b.chinese: b for b in EARTHLY_BRANCHES}

# Weight split (percent) by number of hidden stems; each row sums to 100
HIDDEN_STEM_WEIGHTS = {
    1: (100,),
    2: (70, 30),
    3: (60, 30, 10),
}

HIDDEN_ROLES = (HiddenRole.PRIMARY, HiddenRole.SECONDARY, HiddenRole.RESIDUAL)


# ============================================================
# ELEMENT CYCLES
# ============================================================

# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

# Control cycle: Wood → Earth → Water → Fire → Metal → Wood
CONTROL_CYCLE = {
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
}

# Inverse of PRODUCTION_CYCLE: the element that produces the key
PRODUCED_BY = {v: k for k, v in PRODUCTION_CYCLE.items()}
# Inverse of CONTROL_CYCLE: the element that controls the key
CONTROLLED_BY = {v: k for k, v in CONTROL_CYCLE.items()}


# ============================================================
# TEN GODS (十神)
# ============================================================

TEN_GODS = {
    # (relationship, same_polarity): god
    ("same", True): TenGod.COMPANION,
    ("same", False): TenGod.ROB_WEALTH,
    ("produces_me", True): TenGod.INDIRECT_RESOURCE,
    ("produces_me", False): TenGod.DIRECT_RESOURCE,
    ("i_produce", True): TenGod.EATING_GOD,
    ("i_produce", False): TenGod.HURTING_OFFICER,
    ("i_control", True): TenGod.INDIRECT_WEALTH,
    ("i_control", False): TenGod.DIRECT_WEALTH,
    ("controls_me", True): TenGod.SEVEN_KILLINGS,
    ("controls_me", False): TenGod.DIRECT_OFFICER,
}

TEN_GOD_ENGLISH = {
    TenGod.COMPANION: "Companion",
    TenGod.ROB_WEALTH: "Rob Wealth",
    TenGod.EATING_GOD: "Eating God",
    TenGod.HURTING_OFFICER: "Hurting Officer",
    TenGod.INDIRECT_WEALTH: "Indirect Wealth",
    TenGod.DIRECT_WEALTH: "Direct Wealth",
    TenGod.SEVEN_KILLINGS: "7 Killings",
    TenGod.DIRECT_OFFICER: "Direct Officer",
    TenGod.INDIRECT_RESOURCE: "Indirect Resource",
    TenGod.DIRECT_RESOURCE: "Direct Resource",
}


# ============================================================
# TWELVE LIFE STAGES (十二长生)
# ============================================================

LIFE_STAGES = tuple(LifeStage)

# Branch index where each stem's Birth (长生) stage sits.
# Yang stems count forward from here, yin stems count backward.
LIFE_STAGE_BIRTH_BRANCH = {
    0: 11,  # 甲 → 亥
    1: 6,   # 乙 → 午
    2: 2,   # 丙 → 寅
    3: 9,   # 丁 → 酉
    4: 2,   # 戊 → 寅
    5: 9,   # 己 → 酉
    6: 5,   # 庚 → 巳
    7: 0,   # 辛 → 子
    8: 8,   # 壬 → 申
    9: 3,   # 癸 → 卯
}


# ============================================================
# NA YIN (纳音)
# ============================================================

# One label per consecutive pair of the 60-cycle (甲子乙丑 海中金, ...)
NA_YIN = (
    "海中金", "炉中火", "大林木", "路旁土", "剑锋金",
    "山头火", "涧下水", "城头土", "白蜡金", "杨柳木",
    "泉中水", "屋上土", "霹雳火", "松柏木", "长流水",
    "沙中金", "山下火", "平地木", "壁上土", "金箔金",
    "覆灯火", "天河水", "大驿土", "钗钏金", "桑柘木",
    "大溪水", "沙中土", "天上火", "石榴木", "大海水",
)


# ============================================================
# STEM INTERACTIONS
# ============================================================

# Five Combinations (天干五合): (stem1, stem2) → transformed element
STEM_COMBINATIONS = {
    (0, 5): Element.EARTH,   # 甲己合土
    (1, 6): Element.METAL,   # 乙庚合金
    (2, 7): Element.WATER,   # 丙辛合水
    (3, 8): Element.WOOD,    # 丁壬合木
    (4, 9): Element.FIRE,    # 戊癸合火
}

# Stem clashes (天干相冲); earth stems have no clash partner
STEM_CLASHES = (
    (0, 6),   # 甲庚
    (1, 7),   # 乙辛
    (2, 8),   # 丙壬
    (3, 9),   # 丁癸
)


# ============================================================
# BRANCH INTERACTIONS
# ============================================================

# Six Combinations (六合) - 1:1 pairings that can transform
SIX_COMBINATIONS = {
    (0, 1): Element.EARTH,    # 子丑 → Earth
    (2, 11): Element.WOOD,    # 寅亥 → Wood
    (3, 10): Element.FIRE,    # 卯戌 → Fire
    (4, 9): Element.METAL,    # 辰酉 → Metal
    (5, 8): Element.WATER,    # 巳申 → Water
    (6, 7): Element.FIRE,     # 午未 → Fire (or Earth, debated)
}

# Three Harmony Combinations (三合) - groups of three, middle branch is the pivot
THREE_HARMONY = {
    (2, 6, 10): Element.FIRE,     # 寅午戌 → Fire frame
    (8, 0, 4): Element.WATER,     # 申子辰 → Water frame
    (5, 9, 1): Element.METAL,     # 巳酉丑 → Metal frame
    (11, 3, 7): Element.WOOD,     # 亥卯未 → Wood frame
}

# Six Clashes (六冲)
SIX_CLASHES = (
    (0, 6),   # 子午
    (1, 7),   # 丑未
    (2, 8),   # 寅申
    (3, 9),   # 卯酉
    (4, 10),  # 辰戌
    (5, 11),  # 巳亥
)

# Six Harms (六害)
SIX_HARMS = (
    (0, 7),   # 子未
    (1, 6),   # 丑午
    (2, 5),   # 寅巳
    (3, 4),   # 卯辰
    (8, 11),  # 申亥
    (9, 10),  # 酉戌
)

# Destructions (相破)
DESTRUCTIONS = (
    (0, 9),   # 子酉
    (1, 4),   # 丑辰
    (2, 11),  # 寅亥
    (3, 6),   # 卯午
    (5, 8),   # 巳申
    (7, 10),  # 未戌
)

# Punishments (刑)
PUNISHMENTS = {
    "ungrateful": (2, 5, 8),      # 寅巳申 无恩之刑
    "uncivilized": (1, 10, 7),    # 丑戌未 恃势之刑
    "rude": (0, 3),               # 子卯 无礼之刑
    "self": (4, 6, 9, 11),        # 辰午酉亥 自刑
}


def three_harmony_frame(branch_index: int) -> tuple:
    """Return the Three Harmony triple (birth, peak, tomb) containing a branch."""
    for triple in THREE_HARMONY:
        if branch_index in triple:
            return triple
    raise ValueError(f"Branch index {branch_index} belongs to no Three Harmony frame")
