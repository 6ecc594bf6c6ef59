"""
Leveling
Player level from cumulative XP, and pet experience requirements
"""
import math
from typing import Dict

XP_PER_LEVEL = 500
MAX_PET_LEVEL = 20


def level_for_xp(total_xp: int) -> int:
    """Calculate level from cumulative XP (flat 500 XP per level)"""
    return max(0, total_xp) // XP_PER_LEVEL + 1


def level_floor_xp(level: int) -> int:
    """Cumulative XP at which a level starts"""
    return (level - 1) * XP_PER_LEVEL


def level_ceiling_xp(level: int) -> int:
    """Cumulative XP at which the next level starts"""
    return level * XP_PER_LEVEL


def level_progress(total_xp: int) -> Dict[str, int]:
    """Level plus the XP bounds of that level"""
    level = level_for_xp(total_xp)
    return {
        'level': level,
        'xp': total_xp,
        'xpForCurrentLevel': level_floor_xp(level),
        'xpForNextLevel': level_ceiling_xp(level),
    }


def pet_exp_for_level(level: int) -> int:
    """Experience a pet needs to advance from `level` to `level + 1`"""
    if level >= MAX_PET_LEVEL:
        return 0
    return math.floor(50 * 1.5 ** (level - 1))
