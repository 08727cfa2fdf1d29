"""
Sexagenary (GanZhi) value types and the relational lookups on them.

A StemBranch is a bare position in the 60-cycle. A GanZhi is that position
read against a Day Master: hidden stems with Ten Gods, the visible stem's
Ten God and the Twelve Life Stage. Elements and Na Yin are derived from
the stem/branch identity on access and are never stored separately.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from xuanshu.tables import (
    BRANCH_BY_CHINESE,
    CONTROL_CYCLE,
    EARTHLY_BRANCHES,
    HEAVENLY_STEMS,
    HIDDEN_ROLES,
    HIDDEN_STEM_WEIGHTS,
    LIFE_STAGE_BIRTH_BRANCH,
    LIFE_STAGES,
    NA_YIN,
    PRODUCTION_CYCLE,
    STEM_BY_CHINESE,
    STEM_BY_PINYIN,
    TEN_GODS,
    EarthlyBranch,
    Element,
    HeavenlyStem,
    HiddenRole,
    LifeStage,
    TenGod,
)


# ============================================================
# 60-CYCLE POSITION
# ============================================================

@dataclass(frozen=True)
class StemBranch:
    stem: HeavenlyStem
    branch: EarthlyBranch

    def __post_init__(self):
        if self.stem.index % 2 != self.branch.index % 2:
            raise ValueError(
                f"{self.stem.chinese}{self.branch.chinese} is not a sexagenary pair"
            )

    @classmethod
    def from_index(cls, index: int) -> "StemBranch":
        """Position in the 60-cycle, 0 = 甲子. Any integer is reduced mod 60."""
        index %= 60
        return cls(HEAVENLY_STEMS[index % 10], EARTHLY_BRANCHES[index % 12])

    @classmethod
    def from_indices(cls, stem_index: int, branch_index: int) -> "StemBranch":
        return cls(HEAVENLY_STEMS[stem_index % 10], EARTHLY_BRANCHES[branch_index % 12])

    @classmethod
    def parse(cls, label: str) -> "StemBranch":
        """Parse a two-character label such as "甲子"."""
        if len(label) != 2 or label[0] not in STEM_BY_CHINESE or label[1] not in BRANCH_BY_CHINESE:
            raise ValueError(f"Not a GanZhi label: {label!r}")
        return cls(STEM_BY_CHINESE[label[0]], BRANCH_BY_CHINESE[label[1]])

    @property
    def index(self) -> int:
        # Chinese remainder: the unique i in 0..59 with i%10 == stem, i%12 == branch
        return (6 * self.stem.index - 5 * self.branch.index) % 60

    @property
    def na_yin(self) -> str:
        return NA_YIN[self.index // 2]

    @property
    def label(self) -> str:
        return f"{self.stem.chinese}{self.branch.chinese}"

    def step(self, n: int) -> "StemBranch":
        """Move n positions along the 60-cycle (negative = backward)."""
        return StemBranch.from_index(self.index + n)

    def __str__(self):
        return self.label


# ============================================================
# DAY-MASTER-RELATIVE READING
# ============================================================

@dataclass(frozen=True)
class HiddenStem:
    stem: HeavenlyStem
    role: HiddenRole
    weight: int  # percent of the branch's influence
    ten_god: TenGod


@dataclass(frozen=True)
class GanZhi:
    stem: HeavenlyStem
    branch: EarthlyBranch
    hidden_stems: tuple
    ten_god: Optional[TenGod]  # None for the day pillar (the Day Master itself)
    life_stage: LifeStage
    self_life_stage: LifeStage

    @property
    def stem_element(self) -> Element:
        return self.stem.element

    @property
    def branch_element(self) -> Element:
        return self.branch.element

    @property
    def position(self) -> StemBranch:
        return StemBranch(self.stem, self.branch)

    @property
    def na_yin(self) -> str:
        return self.position.na_yin

    @property
    def label(self) -> str:
        return f"{self.stem.chinese}{self.branch.chinese}"

    def __str__(self):
        return self.label


# ============================================================
# RELATIONSHIP LOOKUPS
# ============================================================

def element_relationship(day_master_element: Element, other_element: Element) -> str:
    """Determine the elemental relationship from DM's perspective."""
    if day_master_element == other_element:
        return "same"
    elif PRODUCTION_CYCLE[other_element] == day_master_element:
        return "produces_me"
    elif PRODUCTION_CYCLE[day_master_element] == other_element:
        return "i_produce"
    elif CONTROL_CYCLE[day_master_element] == other_element:
        return "i_control"
    elif CONTROL_CYCLE[other_element] == day_master_element:
        return "controls_me"
    else:
        raise ValueError(f"No valid relationship between {day_master_element} and {other_element}")


def ten_god(day_master: HeavenlyStem, other: HeavenlyStem) -> TenGod:
    """
    Determine the Ten God relationship between the Day Master and another stem.

    Element relation and yin/yang match together select one of ten labels;
    every (day master, other) pair maps to exactly one.
    """
    relationship = element_relationship(day_master.element, other.element)
    same_polarity = (day_master.polarity == other.polarity)
    return TEN_GODS[(relationship, same_polarity)]


def life_stage(stem: HeavenlyStem, branch: EarthlyBranch) -> LifeStage:
    """
    Twelve Life Stage of a stem at a branch.

    Counting starts at the stem's Birth branch; forward for yang stems,
    backward for yin stems.
    """
    start = LIFE_STAGE_BIRTH_BRANCH[stem.index]
    if stem.is_yang:
        offset = (branch.index - start) % 12
    else:
        offset = (start - branch.index) % 12
    return LIFE_STAGES[offset]


def hidden_stems_of(branch: EarthlyBranch, day_master: HeavenlyStem) -> tuple:
    """Hidden stems of a branch in main/middle/residual order, with weights and Ten Gods."""
    weights = HIDDEN_STEM_WEIGHTS[len(branch.hidden_stems)]
    result = []
    for idx, pinyin in enumerate(branch.hidden_stems):
        stem = STEM_BY_PINYIN[pinyin]
        result.append(HiddenStem(
            stem=stem,
            role=HIDDEN_ROLES[idx],
            weight=weights[idx],
            ten_god=ten_god(day_master, stem),
        ))
    return tuple(result)


def read_ganzhi(position: StemBranch, day_master: HeavenlyStem,
                is_day_pillar: bool = False) -> GanZhi:
    """Read a 60-cycle position against the Day Master."""
    return GanZhi(
        stem=position.stem,
        branch=position.branch,
        hidden_stems=hidden_stems_of(position.branch, day_master),
        ten_god=None if is_day_pillar else ten_god(day_master, position.stem),
        life_stage=life_stage(day_master, position.branch),
        self_life_stage=life_stage(position.stem, position.branch),
    )


def xun_void(position: StemBranch) -> tuple:
    """
    The two void (空亡) branches of the ten-day decade containing a position.

    Each decade pairs ten stems with ten branches; the two branches left
    over are void. 甲子 decade → 戌亥.
    """
    first_branch = (position.branch.index - position.stem.index) % 12
    return (EARTHLY_BRANCHES[(first_branch + 10) % 12], EARTHLY_BRANCHES[(first_branch + 11) % 12])


def stem_combination_partner(stem: HeavenlyStem) -> HeavenlyStem:
    """The stem that five-combines with the given one (甲↔己, 乙↔庚, ...)."""
    return HEAVENLY_STEMS[(stem.index + 5) % 10]


def six_combination_partner(branch: EarthlyBranch) -> EarthlyBranch:
    """The branch that six-combines with the given one (子↔丑, 寅↔亥, ...)."""
    return EARTHLY_BRANCHES[(1 - branch.index) % 12]


def tiger_month_stem(year_stem: HeavenlyStem, branch: EarthlyBranch) -> HeavenlyStem:
    """
    Five Tigers Escape (五虎遁): stem for a month branch given the year stem.

    甲己 → 丙寅, 乙庚 → 戊寅, 丙辛 → 庚寅, 丁壬 → 壬寅, 戊癸 → 甲寅.
    """
    tiger_stem = (2 * (year_stem.index % 5) + 2) % 10
    months_from_tiger = (branch.index - 2) % 12
    return HEAVENLY_STEMS[(tiger_stem + months_from_tiger) % 10]


def rat_hour_stem(day_stem: HeavenlyStem, branch: EarthlyBranch) -> HeavenlyStem:
    """
    Five Rats Escape (五鼠遁): stem for an hour branch given the day stem.

    甲己 → 甲子, 乙庚 → 丙子, 丙辛 → 戊子, 丁壬 → 庚子, 戊癸 → 壬子.
    """
    rat_stem = (2 * (day_stem.index % 5)) % 10
    return HEAVENLY_STEMS[(rat_stem + branch.index) % 10]


# ============================================================
# PILLAR KINDS
# ============================================================

class PillarKind(Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    LUCK = "luck"
    ANNUAL = "annual"
    MINOR = "minor"

    @property
    def chinese(self) -> str:
        return PILLAR_KIND_CHINESE[self]


PILLAR_KIND_CHINESE = {
    PillarKind.YEAR: "年柱",
    PillarKind.MONTH: "月柱",
    PillarKind.DAY: "日柱",
    PillarKind.HOUR: "时柱",
    PillarKind.LUCK: "大运",
    PillarKind.ANNUAL: "流年",
    PillarKind.MINOR: "小运",
}
