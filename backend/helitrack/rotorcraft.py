"""
rotorcraft.py
~~~~~~~~~~~~~
Heuristic "is this probably a helicopter?" decision.

Evidence tiers, strongest first, short-circuiting on the first positive:

1. ``category``  – provider reports an explicit rotorcraft category.
2. ``operator``  – operator/owner label names a police air-support or
   air-ambulance style outfit.
3. ``type``      – type code or free-text description names a known
   rotorcraft model or manufacturer.
4. ``kinematic`` – slow (< 160 kt or unknown) *and* low (< 9 000 ft or
   unknown). Only consulted when the record carries no category, operator
   or type data at all (a "no information" category such as ``A0`` does
   not count); it is a guess, not a fact.

Which tiers apply is a per-provider :class:`ClassificationPolicy`; the
classifier itself never decides strictness.
"""

from __future__ import annotations

import re
from typing import Final, FrozenSet, NamedTuple, TypedDict

CATEGORY: Final = "category"
OPERATOR: Final = "operator"
TYPE: Final = "type"
KINEMATIC: Final = "kinematic"
TIERS: Final = (CATEGORY, OPERATOR, TYPE, KINEMATIC)

MAX_ALTITUDE_FT: Final[int] = 9_000
MAX_SPEED_KT: Final[int] = 160

#: operator labels used by police air support and air-ambulance services
OPERATOR_KEYWORDS: Final[tuple[str, ...]] = (
    "police",
    "sheriff",
    "constabulary",
    "rcmp",
    "state patrol",
    "highway patrol",
    "air support",
    "air ambulance",
    "ambulance",
    "medevac",
    "air methods",
    "life flight",
    "lifeflight",
    "careflight",
    "careflite",
    "stars air",
    "ornge",
    "mercy air",
    "reach air",
    "phi air medical",
    "air rescue",
    "search and rescue",
    "helicopter",
    "heli",
)

#: manufacturer / model words seen in type descriptions
TYPE_KEYWORDS: Final[tuple[str, ...]] = (
    "helicopter",
    "rotorcraft",
    "gyrocopter",
    "robinson",
    "sikorsky",
    "eurocopter",
    "airbus helicopters",
    "agusta",
    "agustawestland",
    "leonardo aw",
    "bell 206",
    "bell 407",
    "bell 412",
    "bell 429",
    "bell 505",
    "md helicopters",
    "hughes 369",
    "enstrom",
    "schweizer",
    "kaman",
    "ecureuil",
    "dauphin",
    "black hawk",
    "chinook",
)

#: ICAO type designators of common rotorcraft
TYPE_CODES: Final[FrozenSet[str]] = frozenset(
    {
        "R22", "R44", "R66",
        "AS50", "AS55", "AS65", "AS32", "AS3B", "EC20", "EC25", "EC30",
        "EC35", "EC45", "EC55", "EC75", "H160", "H175",
        "B06", "B06T", "B212", "B222", "B230", "B407", "B412", "B427",
        "B429", "B430", "B505", "B47G", "B525",
        "A109", "A119", "A129", "A139", "A149", "A169", "A189",
        "S76", "S92", "S61", "S64", "H60", "UH1", "CH47", "H47", "NH90",
        "BK17", "MD52", "MD60", "MD90", "H500", "EN28", "EN48", "H269",
        "KMAX", "EH10", "MI8", "MI17", "G2CA",
    }
)


def _word_pattern(words: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_OPERATOR_RE: Final = _word_pattern(OPERATOR_KEYWORDS)
_TYPE_RE: Final = _word_pattern(TYPE_KEYWORDS)


class Evidence(TypedDict, total=False):
    """Whatever the provider told us that bears on the decision."""

    category: str | int | None
    operator: str | None
    type_code: str | None
    description: str | None
    altitude_ft: float | None
    speed_kt: float | None


class ClassificationPolicy(NamedTuple):
    """Tiers a provider is trusted with, and its rotorcraft category values."""

    tiers: FrozenSet[str]
    categories: FrozenSet[str | int] = frozenset()
    #: category values that only say "no information" and are not evidence
    uninformative: FrozenSet[str | int] = frozenset()

    def with_tiers(self, tiers) -> "ClassificationPolicy":
        return self._replace(tiers=frozenset(tiers))


class Classification(NamedTuple):
    likely: bool
    #: deciding tier, or ``None`` when no tier fired
    tier: str | None = None


NEGATIVE: Final = Classification(False, None)


def _has_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _category(evidence: Evidence) -> str | int | None:
    category = evidence.get("category")
    if isinstance(category, str):
        category = category.strip().upper() or None
    return category


def has_strong_evidence(evidence: Evidence, uninformative=frozenset()) -> bool:
    """True when any of the category / operator / type fields carry data."""
    category = _category(evidence)
    return (
        (category is not None and category not in uninformative)
        or _has_text(evidence.get("operator"))
        or _has_text(evidence.get("type_code"))
        or _has_text(evidence.get("description"))
    )


def matches_category(evidence: Evidence, categories) -> bool:
    return _category(evidence) in categories


def matches_operator(evidence: Evidence) -> bool:
    label = evidence.get("operator")
    return _has_text(label) and bool(_OPERATOR_RE.search(label))


def matches_type(evidence: Evidence) -> bool:
    code = evidence.get("type_code")
    if _has_text(code) and code.strip().upper() in TYPE_CODES:
        return True
    desc = evidence.get("description")
    return _has_text(desc) and bool(_TYPE_RE.search(desc))


def matches_kinematics(evidence: Evidence) -> bool:
    altitude = evidence.get("altitude_ft")
    speed = evidence.get("speed_kt")
    alt_ok = altitude is None or altitude < MAX_ALTITUDE_FT
    spd_ok = speed is None or speed < MAX_SPEED_KT
    return alt_ok and spd_ok


def classify(evidence: Evidence, policy: ClassificationPolicy) -> Classification:
    """Run the tiers enabled by *policy* in order; first positive wins."""
    if CATEGORY in policy.tiers and matches_category(evidence, policy.categories):
        return Classification(True, CATEGORY)
    if OPERATOR in policy.tiers and matches_operator(evidence):
        return Classification(True, OPERATOR)
    if TYPE in policy.tiers and matches_type(evidence):
        return Classification(True, TYPE)
    if (
        KINEMATIC in policy.tiers
        and not has_strong_evidence(evidence, policy.uninformative)
        and matches_kinematics(evidence)
    ):
        return Classification(True, KINEMATIC)
    return NEGATIVE


__all__ = [
    "TIERS",
    "CATEGORY",
    "OPERATOR",
    "TYPE",
    "KINEMATIC",
    "Evidence",
    "ClassificationPolicy",
    "Classification",
    "classify",
    "has_strong_evidence",
]
