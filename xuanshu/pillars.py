"""
Pillar builder.

Turns the four raw sexagenary positions into fully read pillars: hidden
stems, Ten Gods, life stages, ShenSha tags and the void (空亡) flag. The
same builder reads transient luck, annual and minor-fortune pillars
against a natal chart.
"""

from dataclasses import dataclass

from xuanshu.ganzhi import GanZhi, PillarKind, StemBranch, read_ganzhi, xun_void
from xuanshu.shensha import ShenShaContext, evaluate_shensha
from xuanshu.tables import TEN_GOD_ENGLISH, HeavenlyStem


@dataclass(frozen=True)
class Pillar:
    kind: PillarKind
    ganzhi: GanZhi
    shensha: tuple = ()
    void: bool = False

    @property
    def name(self) -> str:
        return self.kind.chinese

    @property
    def position(self) -> StemBranch:
        return self.ganzhi.position

    @property
    def label(self) -> str:
        return self.ganzhi.label

    def __str__(self):
        return f"{self.name} {self.label}"

    def to_dict(self):
        gz = self.ganzhi
        return {
            "position": self.kind.value,
            "name": self.name,
            "label": gz.label,
            "stem": {
                "chinese": gz.stem.chinese,
                "pinyin": gz.stem.pinyin,
                "element": gz.stem_element.value,
                "polarity": gz.stem.polarity.value,
            },
            "branch": {
                "chinese": gz.branch.chinese,
                "pinyin": gz.branch.pinyin,
                "animal": gz.branch.animal,
                "element": gz.branch_element.value,
                "polarity": gz.branch.polarity.value,
            },
            "ten_god": gz.ten_god.value if gz.ten_god else "日主",
            "hidden_stems": [
                {
                    "stem": h.stem.chinese,
                    "element": h.stem.element.value,
                    "role": h.role.value,
                    "weight": h.weight,
                    "ten_god": h.ten_god.value,
                }
                for h in gz.hidden_stems
            ],
            "life_stage": gz.life_stage.value,
            "self_life_stage": gz.self_life_stage.value,
            "na_yin": gz.na_yin,
            "shensha": list(self.shensha),
            "void": self.void,
        }


@dataclass(frozen=True)
class NatalPillars:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    def __iter__(self):
        return iter((self.year, self.month, self.day, self.hour))

    @property
    def day_master(self) -> HeavenlyStem:
        return self.day.ganzhi.stem

    @property
    def context(self) -> ShenShaContext:
        return ShenShaContext(
            year=self.year.position,
            month=self.month.position,
            day=self.day.position,
            hour=self.hour.position,
        )


def build_pillar(position: StemBranch, kind: PillarKind, ctx: ShenShaContext,
                 day_master: HeavenlyStem) -> Pillar:
    """Read one position against the Day Master and the natal ShenSha context."""
    void_pair = xun_void(ctx.day)
    return Pillar(
        kind=kind,
        ganzhi=read_ganzhi(position, day_master, is_day_pillar=kind is PillarKind.DAY),
        shensha=evaluate_shensha(ctx, position, kind),
        void=position.branch in void_pair,
    )


def build_pillars(year: StemBranch, month: StemBranch, day: StemBranch,
                  hour: StemBranch) -> NatalPillars:
    """Build the four natal pillars; the day stem is the Day Master."""
    ctx = ShenShaContext(year=year, month=month, day=day, hour=hour)
    day_master = day.stem
    return NatalPillars(
        year=build_pillar(year, PillarKind.YEAR, ctx, day_master),
        month=build_pillar(month, PillarKind.MONTH, ctx, day_master),
        day=build_pillar(day, PillarKind.DAY, ctx, day_master),
        hour=build_pillar(hour, PillarKind.HOUR, ctx, day_master),
    )


def map_ten_gods(pillars: NatalPillars) -> list:
    """
    Ten Gods for all visible and hidden stems in the chart.

    Returns list of dicts with position, stem, ten_god and hidden_stem_gods.
    """
    results = []
    for pillar in pillars:
        gz = pillar.ganzhi
        god = TEN_GOD_ENGLISH[gz.ten_god] if gz.ten_god else "Self (Day Master)"
        results.append({
            "position": pillar.kind.value,
            "stem": gz.stem.chinese,
            "ten_god": gz.ten_god.value if gz.ten_god else "日主",
            "ten_god_english": god,
            "branch": gz.branch.chinese,
            "branch_animal": gz.branch.animal,
            "hidden_stem_gods": [
                {
                    "stem": h.stem.chinese,
                    "element": h.stem.element.value,
                    "polarity": h.stem.polarity.value,
                    "ten_god": h.ten_god.value,
                }
                for h in gz.hidden_stems
            ],
        })
    return results
