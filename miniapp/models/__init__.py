"""
Data models. Single import surface for DB entities and level helpers.

DB entities (miniapp.models.models):
- User, Lesson, Exercise, UserProgress

Levels (miniapp.models.levels):
- CefrLevel, level_for_xp, xp_for_next_level
"""

from miniapp.models.models import User, Lesson, Exercise, UserProgress
from miniapp.models.levels import CefrLevel, LEVEL_ORDER, level_for_xp, xp_for_next_level

__all__ = [
    "User",
    "Lesson",
    "Exercise",
    "UserProgress",
    "CefrLevel",
    "LEVEL_ORDER",
    "level_for_xp",
    "xp_for_next_level",
]
