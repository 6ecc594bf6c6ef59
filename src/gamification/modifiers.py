"""
Pet Modifiers
Rolls buff/debuff sets for new pets by rarity and rescales them as pets level up
"""
import math
from typing import Dict, Iterable, Tuple

from .models import Pet, Rarity
from .pet_library import pet_library
from .random_source import RandomSource

BUFF_TYPES = ['xpBoost', 'coinBoost']
DEBUFF_TYPES = ['xpPenalty', 'coinPenalty', 'priceIncrease', 'luckPenalty']

BUFF_SCALE_PER_LEVEL = 0.01
BUFF_SCALE_CAP = 1.19
DEBUFF_SCALE_PER_LEVEL = 0.005
DEBUFF_SCALE_FLOOR = 0.905


def buff_multiplier(level: int) -> float:
    return min(1 + (level - 1) * BUFF_SCALE_PER_LEVEL, BUFF_SCALE_CAP)


def debuff_multiplier(level: int) -> float:
    return max(1 - (level - 1) * DEBUFF_SCALE_PER_LEVEL, DEBUFF_SCALE_FLOOR)


def _scaled(raw: float, multiplier: float) -> int:
    # Rounding first keeps float noise (e.g. 106.99999999) from losing a point
    return math.floor(round(raw * multiplier, 6))


def scale_buff(raw: float, level: int) -> int:
    return _scaled(raw, buff_multiplier(level))


def scale_debuff(raw: float, level: int) -> int:
    return _scaled(raw, debuff_multiplier(level))


def scale_buffs(raw_buffs: Dict[str, int], level: int) -> Dict[str, int]:
    return {kind: scale_buff(value, level) for kind, value in raw_buffs.items()}


def scale_debuffs(raw_debuffs: Dict[str, int], level: int) -> Dict[str, int]:
    return {kind: scale_debuff(value, level) for kind, value in raw_debuffs.items()}


def recover_raw_buffs(scaled_buffs: Dict[str, int], level: int) -> Dict[str, int]:
    """Approximate raw values for pets saved before raw maps were stored"""
    return {kind: round(value / buff_multiplier(level)) for kind, value in scaled_buffs.items()}


def recover_raw_debuffs(scaled_debuffs: Dict[str, int], level: int) -> Dict[str, int]:
    return {kind: round(value / debuff_multiplier(level)) for kind, value in scaled_debuffs.items()}


def generate_modifiers(rarity: Rarity, rng: RandomSource) -> Tuple[Dict[str, int], Dict[str, int]]:
    """Roll raw buffs and debuffs for a newly acquired pet"""
    ranges = pet_library.rarities[rarity]

    buff_count = rng.randint(*ranges['buff_count'])
    debuff_count = rng.randint(*ranges['debuff_count'])

    buffs = {kind: rng.randint(*ranges['buff_range'])
             for kind in rng.sample(BUFF_TYPES, buff_count)}
    debuffs = {kind: rng.randint(*ranges['debuff_range'])
               for kind in rng.sample(DEBUFF_TYPES, debuff_count)}

    return buffs, debuffs


def rescale_pet(pet: Pet):
    """Recompute a pet's stored modifiers from its raw values at its current level"""
    pet.buffs = scale_buffs(pet.base_buffs, pet.level)
    pet.debuffs = scale_debuffs(pet.base_debuffs, pet.level)


def combined_modifiers(pets: Iterable[Pet]) -> Dict[str, int]:
    """Sum every buff and debuff kind across pets, scaled for each pet's level"""
    totals = {kind: 0 for kind in BUFF_TYPES + DEBUFF_TYPES}
    for pet in pets:
        for kind, value in scale_buffs(pet.base_buffs, pet.level).items():
            totals[kind] = totals.get(kind, 0) + value
        for kind, value in scale_debuffs(pet.base_debuffs, pet.level).items():
            totals[kind] = totals.get(kind, 0) + value
    return totals
