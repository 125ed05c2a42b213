"""
CEFR levels: ordering tag for users and lessons, plus the XP thresholds used
for level progression.
"""

from enum import Enum


class CefrLevel(str, Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def rank(self) -> int:
        return LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, CefrLevel):
            return NotImplemented
        return self.rank < other.rank


LEVEL_ORDER = list(CefrLevel)

# XP needed to leave each level.
LEVEL_XP_THRESHOLDS: dict[CefrLevel, int] = {
    CefrLevel.A1: 100,
    CefrLevel.A2: 300,
    CefrLevel.B1: 600,
    CefrLevel.B2: 1000,
    CefrLevel.C1: 1500,
    CefrLevel.C2: 2000,
}


def level_for_xp(xp: int) -> CefrLevel:
    for level in LEVEL_ORDER[:-1]:
        if xp < LEVEL_XP_THRESHOLDS[level]:
            return level
    return CefrLevel.C2


def xp_for_next_level(level: str | CefrLevel) -> int:
    try:
        return LEVEL_XP_THRESHOLDS[CefrLevel(level)]
    except ValueError:
        return LEVEL_XP_THRESHOLDS[CefrLevel.C2]
