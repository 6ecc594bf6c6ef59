"""
Gacha System
Handles pet spins, the pity guarantee, and drop rates
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List

from .economy import economy_ledger
from .errors import InsufficientFunds, InvalidSelection
from .models import GameState, Pet
from .modifiers import generate_modifiers, rescale_pet
from .pet_library import pet_library
from .random_source import RandomSource

SPIN_COST = 150
PITY_THRESHOLD = 10
MULTI_SPIN_COUNT = 10


class GachaSystem:
    """Resolves spins into new pets"""

    def __init__(self, ledger=None, library=None):
        self.ledger = ledger or economy_ledger
        self.pet_library = library or pet_library

    def roll_species(self, pity_count: int, rng: RandomSource) -> Dict[str, Any]:
        """Pick a catalog entry; once pity reaches the threshold only Rare+ can drop"""
        if pity_count >= PITY_THRESHOLD:
            return rng.choice(self.pet_library.get_rare_or_above())

        catalog = self.pet_library.get_all_pets()
        roll = rng.uniform() * sum(entry['chance'] for entry in catalog)

        for entry in catalog:
            if roll < entry['chance']:
                return entry
            roll -= entry['chance']

        # Float rounding can leave a sliver past the last weight
        return catalog[0]

    def create_pet(self, entry: Dict[str, Any], rng: RandomSource, now: datetime) -> Pet:
        """Instantiate a level 1 pet with freshly rolled modifiers"""
        base_buffs, base_debuffs = generate_modifiers(entry['rarity'], rng)
        pet = Pet(
            id=uuid.uuid4().hex,
            name=entry['name'],
            species=entry['species'],
            rarity=entry['rarity'],
            base_buffs=base_buffs,
            base_debuffs=base_debuffs,
            obtained_at=now,
        )
        rescale_pet(pet)
        return pet

    def spin(self, game: GameState, rng: RandomSource, now: datetime) -> Pet:
        """Spend the spin cost and add one new pet to the collection"""
        if game.economy.coins < SPIN_COST:
            raise InsufficientFunds(f"You need {SPIN_COST} coins to spin (you have {game.economy.coins}).")

        # This spin counts toward pity before the roll, so the 10th dry spin is guaranteed
        pity_count = game.pity_counter + 1
        entry = self.roll_species(pity_count, rng)
        pet = self.create_pet(entry, rng, now)

        game.pity_counter = 0 if pet.rarity.is_rare_or_above() else pity_count
        self.ledger.spend(game, SPIN_COST, f"Pet spin: {pet.name}")
        game.collection.pets.append(pet)
        game.spin_count += 1

        return pet

    def spin_many(self, game: GameState, rng: RandomSource, now: datetime,
                  count: int = MULTI_SPIN_COUNT) -> List[Pet]:
        """Run several spins back to back; refuses up front unless all are affordable"""
        if count < 1:
            raise InvalidSelection("Spin at least once.")
        total_cost = SPIN_COST * count
        if game.economy.coins < total_cost:
            raise InsufficientFunds(f"You need {total_cost} coins for {count} spins (you have {game.economy.coins}).")

        return [self.spin(game, rng, now) for _ in range(count)]

    def get_drop_rates(self) -> Dict[str, float]:
        """Get the percentage chance of each rarity"""
        catalog = self.pet_library.get_all_pets()
        total = sum(entry['chance'] for entry in catalog)
        rates = {}
        for entry in catalog:
            rarity = entry['rarity'].value
            rates[rarity] = rates.get(rarity, 0) + entry['chance'] / total * 100
        return rates


# Global gacha system instance
gacha_system = GachaSystem()
