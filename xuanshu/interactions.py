"""
Stem and branch interaction detection.

Given a set of labelled branches (natal, or natal plus a luck/annual
pillar), find every active combination, clash, harm, destruction, Three
Harmony frame and punishment. Results are plain dicts so they can be
dropped straight into a reading context.
"""

from xuanshu.tables import (
    DESTRUCTIONS,
    EARTHLY_BRANCHES,
    PUNISHMENTS,
    SIX_CLASHES,
    SIX_COMBINATIONS,
    SIX_HARMS,
    STEM_CLASHES,
    STEM_COMBINATIONS,
    THREE_HARMONY,
    EarthlyBranch,
    HeavenlyStem,
)


def _pair_in(a: int, b: int, pairs) -> bool:
    return (a, b) in pairs or (b, a) in pairs


def is_six_combination(a: EarthlyBranch, b: EarthlyBranch) -> bool:
    return _pair_in(a.index, b.index, SIX_COMBINATIONS)


def is_six_clash(a: EarthlyBranch, b: EarthlyBranch) -> bool:
    return _pair_in(a.index, b.index, SIX_CLASHES)


def is_stem_combination(a: HeavenlyStem, b: HeavenlyStem) -> bool:
    return _pair_in(a.index, b.index, STEM_COMBINATIONS)


def is_stem_clash(a: HeavenlyStem, b: HeavenlyStem) -> bool:
    return _pair_in(a.index, b.index, STEM_CLASHES)


def _tag(label: str, branch: EarthlyBranch) -> str:
    return f"{label}:{branch.chinese}({branch.animal})"


def find_branch_interactions(branches: list, labels: list = None) -> list:
    """
    Find all branch interactions between a set of branches.

    Args:
        branches: list of EarthlyBranch objects to check
        labels: optional labels for each branch (e.g. "year", "month", "annual")

    Returns:
        List of interaction dicts with type, branches involved and a note
    """
    if labels is None:
        labels = [f"branch_{i}" for i in range(len(branches))]

    interactions = []
    n = len(branches)

    for i in range(n):
        for j in range(i + 1, n):
            b1, b2 = branches[i], branches[j]
            involved = [_tag(labels[i], b1), _tag(labels[j], b2)]

            for pair, result_element in SIX_COMBINATIONS.items():
                if _pair_in(b1.index, b2.index, (pair,)):
                    interactions.append({
                        "type": "六合",
                        "branches": involved,
                        "result_element": result_element.value,
                        "note": f"可化{result_element.value}，需天干与月令配合",
                    })

            if _pair_in(b1.index, b2.index, SIX_CLASHES):
                interactions.append({
                    "type": "六冲",
                    "branches": involved,
                    "note": "正面冲突，主变动、分离、奔波。",
                })

            if _pair_in(b1.index, b2.index, SIX_HARMS):
                interactions.append({
                    "type": "六害",
                    "branches": involved,
                    "note": "暗中损耗，防小人与隐性伤害。",
                })

            if _pair_in(b1.index, b2.index, DESTRUCTIONS):
                interactions.append({
                    "type": "相破",
                    "branches": involved,
                    "note": "既有结构被打破，事多反复。",
                })

    # Three Harmony needs all three branches for a full frame
    first_seen = {}
    for i, b in enumerate(branches):
        first_seen.setdefault(b.index, i)

    for triple, result_element in THREE_HARMONY.items():
        present = [idx for idx in triple if idx in first_seen]
        involved = [_tag(labels[first_seen[idx]], branches[first_seen[idx]]) for idx in present]
        if len(present) == 3:
            interactions.append({
                "type": "三合局",
                "complete": True,
                "branches": involved,
                "result_element": result_element.value,
                "note": f"{result_element.value}局完整，力量集中。",
            })
        elif len(present) == 2:
            missing = EARTHLY_BRANCHES[next(idx for idx in triple if idx not in first_seen)]
            interactions.append({
                "type": "半合",
                "complete": False,
                "branches": involved,
                "result_element": result_element.value,
                "missing": missing.chinese,
                "note": f"{result_element.value}局缺{missing.chinese}，有其势而未成。",
            })

    for punishment_type, members in PUNISHMENTS.items():
        if punishment_type == "self":
            for idx in members:
                hits = [i for i in range(n) if branches[i].index == idx]
                if len(hits) >= 2:
                    interactions.append({
                        "type": "自刑",
                        "branches": [_tag(labels[i], branches[i]) for i in hits],
                        "note": "自我消耗，内心矛盾。",
                    })
        else:
            present = [idx for idx in members if idx in first_seen]
            if len(present) >= 2:
                complete = len(present) == len(members)
                interactions.append({
                    "type": "相刑",
                    "kind": punishment_type,
                    "complete": complete,
                    "branches": [_tag(labels[first_seen[idx]], branches[first_seen[idx]]) for idx in present],
                    "note": f"{'全' if complete else '半'}刑（{punishment_type}）。",
                })

    return interactions


def find_stem_interactions(stems: list, labels: list = None) -> list:
    """Five Combinations (天干五合) and stem clashes among a set of stems."""
    if labels is None:
        labels = [f"stem_{i}" for i in range(len(stems))]

    interactions = []
    for i in range(len(stems)):
        for j in range(i + 1, len(stems)):
            s1, s2 = stems[i], stems[j]
            involved = [f"{labels[i]}:{s1.chinese}", f"{labels[j]}:{s2.chinese}"]
            for pair, result_element in STEM_COMBINATIONS.items():
                if _pair_in(s1.index, s2.index, (pair,)):
                    interactions.append({
                        "type": "天干五合",
                        "stems": involved,
                        "result_element": result_element.value,
                        "note": f"合化{result_element.value}，彼此牵绊。",
                    })
            if _pair_in(s1.index, s2.index, STEM_CLASHES):
                interactions.append({
                    "type": "天干相冲",
                    "stems": involved,
                    "note": "天干对立，主意见冲突。",
                })
    return interactions


def involves(interaction: dict, label: str) -> bool:
    """Whether an interaction dict includes a member with the given label."""
    members = interaction.get("branches") or interaction.get("stems") or []
    return any(m.startswith(f"{label}:") for m in members)
