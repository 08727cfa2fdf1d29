"""
Rule-based pillar interpretations.

Each reading is stitched together from static text tables (Ten Gods,
life stages, Na Yin elements, ShenSha, pillar roles). These are the short
per-pillar readings shown next to the chart; the long-form reading is the
LLM's job and gets its input from context.py.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from xuanshu.annual import active_luck_pillar, dynamic_shensha, ganzhi_for_year
from xuanshu.chart import BaziChart
from xuanshu.ganzhi import GanZhi, PillarKind, StemBranch, read_ganzhi
from xuanshu.pillars import Pillar
from xuanshu.tables import LifeStage, TenGod


@dataclass(frozen=True)
class PillarInterpretation:
    pillar_name: str
    core_symbolism: str
    hidden_dynamics: str
    na_yin_influence: str
    life_stage_effect: str
    shensha_effects: tuple
    role_in_destiny: str
    integrated_summary: str

    def to_dict(self):
        return {
            "pillar_name": self.pillar_name,
            "core_symbolism": self.core_symbolism,
            "hidden_dynamics": self.hidden_dynamics,
            "na_yin_influence": self.na_yin_influence,
            "life_stage_effect": self.life_stage_effect,
            "shensha_effects": list(self.shensha_effects),
            "role_in_destiny": self.role_in_destiny,
            "integrated_summary": self.integrated_summary,
        }


# ============================================================
# READING TABLES
# ============================================================

TEN_GOD_READINGS = {
    TenGod.COMPANION: "比肩代表自我、同辈与独立，主意志坚定、重情义，也易固执。",
    TenGod.ROB_WEALTH: "劫财代表竞争与冒险，主行动力强、敢拼敢闯，需防破耗。",
    TenGod.EATING_GOD: "食神代表才华与享受，主性情温和、口福与创造力。",
    TenGod.HURTING_OFFICER: "伤官代表表达与突破，主聪明外露、锋芒毕现，易与规则冲突。",
    TenGod.INDIRECT_WEALTH: "偏财代表流动之财与机遇，主慷慨豪爽、善于经营。",
    TenGod.DIRECT_WEALTH: "正财代表稳定收入与务实，主勤俭踏实、重视积累。",
    TenGod.SEVEN_KILLINGS: "七杀代表压力与魄力，主果断威严，得制则化为权柄。",
    TenGod.DIRECT_OFFICER: "正官代表规矩与名誉，主守正自律、利于仕途。",
    TenGod.INDIRECT_RESOURCE: "偏印代表独特思维与偏门学问，主敏锐深沉、直觉强。",
    TenGod.DIRECT_RESOURCE: "正印代表庇护与学识，主仁厚好学、得长辈提携。",
}

DAY_MASTER_READING = "日柱天干为日元，即命主自身，是全局取用的核心。"

LIFE_STAGE_READINGS = {
    LifeStage.BIRTH: "长生之地，生机初发，主有贵人扶持、根基渐成。",
    LifeStage.BATH: "沐浴之地，气未定而易动，主感情丰富、变化多端。",
    LifeStage.CAP: "冠带之地，渐趋成熟，主重仪表、求上进。",
    LifeStage.OFFICE: "临官之地，气势已成，主独立自主、事业有成。",
    LifeStage.PROSPERITY: "帝旺之地，气势鼎盛，主刚强有力，过盛则易折。",
    LifeStage.DECLINE: "衰地，气势渐退，主稳重保守、宜守成。",
    LifeStage.SICKNESS: "病地，力量不足，主多思多虑、需养精蓄锐。",
    LifeStage.DEATH: "死地，气机停滞，主沉静内敛、宜静不宜动。",
    LifeStage.TOMB: "墓库之地，收藏蓄积，主善于积累、内藏不露。",
    LifeStage.EXTINCTION: "绝地，旧气已尽，主变动转折、绝处逢生。",
    LifeStage.CONCEPTION: "胎地，新机孕育，主有新的开始与规划。",
    LifeStage.NURTURE: "养地，受养而待时，主得照顾、厚积薄发。",
}

NA_YIN_READINGS = {
    "金": "纳音属金，主刚毅果断、重义守信。",
    "木": "纳音属木，主仁慈向上、善于成长。",
    "水": "纳音属水，主聪慧灵动、随机应变。",
    "火": "纳音属火，主热情明朗、积极进取。",
    "土": "纳音属土，主厚重诚实、包容稳健。",
}

SHENSHA_DESCRIPTIONS = {
    "天乙贵人": "天乙贵人为最吉之神，主逢凶化吉、得贵人相助。",
    "太极贵人": "太极贵人主聪明好学，喜神秘玄学，福寿双全。",
    "文昌贵人": "文昌主聪明才智，利于学业考试与文书。",
    "福星贵人": "福星主一生福禄丰足，衣食无忧。",
    "国印贵人": "国印主掌权柄印信，为人诚实可靠。",
    "天德贵人": "天德主逢凶化吉，一生少灾难。",
    "月德贵人": "月德主性情温和，多得庇佑。",
    "禄神": "禄神主衣食丰足，事业有根基。",
    "羊刃": "羊刃主性刚气躁，得制为权，失制则易有冲动之失。",
    "金舆": "金舆主富贵荣华，出入有车马之享。",
    "天厨贵人": "天厨主口福与衣食丰盈。",
    "红艳": "红艳主风流多情，人缘与魅力出众。",
    "天医": "天医主与医药养生有缘，善于照顾他人。",
    "将星": "将星主领导才能，有统御之力。",
    "华盖": "华盖主聪慧孤高，喜艺术宗教玄学。",
    "驿马": "驿马主奔波走动，利出行、迁移与外出发展。",
    "桃花": "桃花主人缘魅力，感情丰富。",
    "劫煞": "劫煞主意外破耗，宜谨慎防范。",
    "灾煞": "灾煞主意外灾祸，需注意安全。",
    "亡神": "亡神主心机深沉，也防是非与损失。",
    "孤辰": "孤辰主性情孤独，六亲缘薄。",
    "寡宿": "寡宿主内心孤寂，宜多与人交流。",
    "魁罡": "魁罡主性格刚烈、聪明果断，掌大权。",
    "十恶大败": "十恶大败主财来财去，需节俭守成。",
}

DEFAULT_SHENSHA_DESCRIPTION = "此星入命，主命局有特定之感应。"

PILLAR_ROLES = {
    PillarKind.YEAR: "年柱为根，代表祖上、家世与童年（约1-16岁）运势。",
    PillarKind.MONTH: "月柱为苗，代表父母兄弟、成长环境与青年（约17-32岁）运势，月令为全局提纲。",
    PillarKind.DAY: "日柱为花，代表命主自身与配偶，主中年（约33-48岁）运势。",
    PillarKind.HOUR: "时柱为果，代表子女、晚辈与晚年（49岁后）运势。",
    PillarKind.LUCK: "大运主十年吉凶起伏，与原局互动决定阶段性机遇。",
    PillarKind.ANNUAL: "流年主当年吉凶，与原局及大运交互引发具体事件。",
    PillarKind.MINOR: "小运主起运前的童年各年运势。",
}


# ============================================================
# INTERPRETATION
# ============================================================

def _na_yin_reading(na_yin: str) -> str:
    return f"{na_yin}：{NA_YIN_READINGS[na_yin[-1]]}"


def _hidden_dynamics(gz: GanZhi) -> str:
    parts = [
        f"{h.stem.chinese}{h.stem.element.value}（{h.role.value}{h.weight}%，{h.ten_god.value}）"
        for h in gz.hidden_stems
    ]
    primary = gz.hidden_stems[0]
    return (
        f"{gz.branch.chinese}中藏{'、'.join(parts)}。"
        f"本气{primary.ten_god.value}为地支主导力量。"
    )


def _interpret(chart: BaziChart, kind: PillarKind, gz: GanZhi, shensha: tuple) -> PillarInterpretation:
    if gz.ten_god is None:
        core = f"{gz.label}：{DAY_MASTER_READING}"
    else:
        core = f"{gz.label}：天干{gz.stem.chinese}为{gz.ten_god.value}。{TEN_GOD_READINGS[gz.ten_god]}"

    hidden = _hidden_dynamics(gz)
    na_yin = _na_yin_reading(gz.na_yin)
    stage = (
        f"日主{chart.day_master.chinese}在{gz.branch.chinese}为{gz.life_stage.value}，"
        f"{LIFE_STAGE_READINGS[gz.life_stage]}"
        f"{gz.stem.chinese}自坐{gz.self_life_stage.value}。"
    )
    effects = tuple(
        f"{tag}：{SHENSHA_DESCRIPTIONS.get(tag, DEFAULT_SHENSHA_DESCRIPTION)}" for tag in shensha
    )
    role = PILLAR_ROLES[kind]

    element_note = ""
    element = gz.stem_element
    if element in chart.balance.favorable:
        element_note = f"天干{element.value}为喜用，此柱助益较大。"
    elif element in chart.balance.unfavorable:
        element_note = f"天干{element.value}为忌神，此柱需多加留意。"

    summary = "".join([
        f"【{kind.chinese}{gz.label}】",
        role,
        core.split("：", 1)[1],
        element_note,
        f"地支{gz.branch.chinese}{gz.branch_element.value}，{LIFE_STAGE_READINGS[gz.life_stage]}",
        f"{'带' + '、'.join(shensha) + '。' if shensha else ''}",
    ])

    return PillarInterpretation(
        pillar_name=kind.chinese,
        core_symbolism=core,
        hidden_dynamics=hidden,
        na_yin_influence=na_yin,
        life_stage_effect=stage,
        shensha_effects=effects,
        role_in_destiny=role,
        integrated_summary=summary,
    )


def _natal(chart: BaziChart, pillar: Pillar) -> PillarInterpretation:
    return _interpret(chart, pillar.kind, pillar.ganzhi, pillar.shensha)


def interpret_year_pillar(chart: BaziChart) -> PillarInterpretation:
    return _natal(chart, chart.year)


def interpret_month_pillar(chart: BaziChart) -> PillarInterpretation:
    return _natal(chart, chart.month)


def interpret_day_pillar(chart: BaziChart) -> PillarInterpretation:
    return _natal(chart, chart.day)


def interpret_hour_pillar(chart: BaziChart) -> PillarInterpretation:
    return _natal(chart, chart.hour)


def _as_ganzhi(chart: BaziChart, value: Union[GanZhi, StemBranch, str]) -> GanZhi:
    if isinstance(value, GanZhi):
        return value
    if isinstance(value, str):
        value = StemBranch.parse(value)
    return read_ganzhi(value, chart.day_master)


def interpret_luck_pillar(chart: BaziChart, ganzhi: Optional[Union[GanZhi, StemBranch, str]] = None,
                          year: Optional[int] = None) -> PillarInterpretation:
    """
    Interpret a luck pillar; defaults to the one active in ``year``
    (this year if omitted), or the first luck pillar before it starts.
    """
    if ganzhi is None:
        year = year if year is not None else date.today().year
        lp = active_luck_pillar(chart, year)
        if lp is None and chart.luck_pillars:
            lp = chart.luck_pillars[0] if year < chart.luck_pillars[0].start_year else chart.luck_pillars[-1]
        if lp is not None:
            gz = lp.ganzhi
        else:
            step = 1 if chart.luck_forward else -1
            gz = read_ganzhi(chart.month.position.step(step), chart.day_master)
    else:
        gz = _as_ganzhi(chart, ganzhi)
    return _interpret(chart, PillarKind.LUCK, gz, dynamic_shensha(chart, gz.position, PillarKind.LUCK))


def interpret_annual_pillar(chart: BaziChart, ganzhi: Optional[Union[GanZhi, StemBranch, str]] = None,
                            year: Optional[int] = None) -> PillarInterpretation:
    """Interpret an annual pillar; defaults to the pillar of ``year`` (this year if omitted)."""
    if ganzhi is None:
        year = year if year is not None else date.today().year
        gz = ganzhi_for_year(year, chart.day_master)
    else:
        gz = _as_ganzhi(chart, ganzhi)
    return _interpret(chart, PillarKind.ANNUAL, gz, dynamic_shensha(chart, gz.position, PillarKind.ANNUAL))
