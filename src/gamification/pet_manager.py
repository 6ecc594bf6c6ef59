"""
Pet Manager
Feeding, playing, growth, mood expiry, and the equipped-pet roster
"""
import math
from datetime import datetime, timedelta
from typing import Any, Dict

from .errors import Exhausted, InvalidSelection
from .leveling import MAX_PET_LEVEL, pet_exp_for_level
from .models import GameState, Mood, Pet, SpecialBuff
from .modifiers import rescale_pet
from .pet_library import pet_library

MAX_EQUIPPED = 3
FAVORITE_MOOD_MINUTES = 30
PLAY_ENERGY_COST = 10
PLAY_HUNGER_GAIN = 5
HUNGRY_THRESHOLD = 50
TIRED_THRESHOLD = 50


def _clamp(value: float) -> int:
    return int(max(0, min(100, value)))


class PetManager:
    """Applies care actions to pets in a game state"""

    def __init__(self, library=None):
        self.pet_library = library or pet_library

    def get_pet(self, game: GameState, pet_id: str) -> Pet:
        pet = game.collection.get(pet_id)
        if not pet:
            raise InvalidSelection("That pet isn't in your collection.")
        return pet

    def expire_effects(self, pet: Pet, now: datetime):
        """Drop a mood or special buff whose time is up"""
        if pet.mood_expires_at and now >= pet.mood_expires_at:
            pet.mood = Mood.CONTENT
            pet.mood_expires_at = None
        if pet.special_buff and now >= pet.special_buff.expires_at:
            pet.special_buff = None

    def has_infinite_energy(self, pet: Pet) -> bool:
        return bool(pet.special_buff and pet.special_buff.infinite_energy)

    def has_infinite_hunger(self, pet: Pet) -> bool:
        return bool(pet.special_buff and pet.special_buff.infinite_hunger)

    def add_food(self, game: GameState, food_id: str, quantity: int = 1):
        game.food_inventory[food_id] = game.food_inventory.get(food_id, 0) + quantity

    def feed(self, game: GameState, pet_id: str, food_id: str, quantity: int, now: datetime) -> Dict[str, Any]:
        """Feed owned food to a pet, updating hunger, energy, mood, and special buffs"""
        pet = self.get_pet(game, pet_id)
        food = self.pet_library.get_food(food_id)
        if not food:
            raise InvalidSelection(f"Unknown food '{food_id}'.")
        if quantity < 1:
            raise InvalidSelection("You need to feed at least one item.")

        owned = game.food_inventory.get(food_id, 0)
        if owned < quantity:
            raise InvalidSelection(f"You only have {owned} {food['name']}.")

        self.expire_effects(pet, now)

        pet.hunger = _clamp(pet.hunger - food['hunger_reduction'] * quantity)
        pet.energy = _clamp(pet.energy + food['energy_boost'] * quantity)

        is_favorite = food.get('favorite_species') == pet.species
        if food.get('cleanses'):
            pet.mood = Mood.CONTENT
            pet.mood_expires_at = None
            pet.special_buff = None
        elif is_favorite and food.get('special_buff'):
            buff = food['special_buff']
            pet.mood = Mood.ECSTATIC
            pet.mood_expires_at = now + timedelta(minutes=FAVORITE_MOOD_MINUTES)
            pet.special_buff = SpecialBuff(
                exp_boost_percent=buff['exp_boost_percent'],
                infinite_energy=buff['infinite_energy'],
                infinite_hunger=buff['infinite_hunger'],
                expires_at=now + timedelta(minutes=buff['duration_minutes']),
            )
            if buff['infinite_energy']:
                pet.energy = 100
            if buff['infinite_hunger']:
                pet.hunger = 0
        else:
            pet.mood = Mood(food['mood'])
            minutes = food.get('mood_minutes', 0)
            pet.mood_expires_at = now + timedelta(minutes=minutes) if minutes else None

        remaining = owned - quantity
        if remaining:
            game.food_inventory[food_id] = remaining
        else:
            del game.food_inventory[food_id]
        game.feed_count += 1

        return {'pet': pet, 'food': food, 'quantity': quantity, 'favorite': is_favorite}

    def play(self, game: GameState, pet_id: str, now: datetime) -> Dict[str, Any]:
        """Play with a pet: spend energy, gain experience"""
        pet = self.get_pet(game, pet_id)
        self.expire_effects(pet, now)

        infinite_energy = self.has_infinite_energy(pet)
        infinite_hunger = self.has_infinite_hunger(pet)

        if pet.energy <= 0 and not infinite_energy:
            raise Exhausted(f"{pet.name} is too tired to play. Feed them first!")

        gain = (10 + math.floor(pet.level * 0.5)) * pet.mood.exp_multiplier
        if pet.special_buff:
            gain *= 1 + pet.special_buff.exp_boost_percent / 100
        gain = math.floor(gain)

        too_hungry = pet.hunger > HUNGRY_THRESHOLD and not infinite_hunger
        too_tired = pet.energy < TIRED_THRESHOLD and not infinite_energy
        if too_hungry or too_tired:
            gain //= 2

        pet.energy = 100 if infinite_energy else _clamp(pet.energy - PLAY_ENERGY_COST)
        pet.hunger = 0 if infinite_hunger else _clamp(pet.hunger + PLAY_HUNGER_GAIN)

        levels_gained = self.gain_exp(pet, gain)
        game.play_count += 1

        return {'pet': pet, 'exp_gained': gain, 'levels_gained': levels_gained}

    def gain_exp(self, pet: Pet, amount: int) -> int:
        """Add experience, applying as many level-ups as it covers"""
        if pet.level >= MAX_PET_LEVEL:
            pet.exp = 0
            return 0

        starting_level = pet.level
        pet.exp += amount
        while pet.level < MAX_PET_LEVEL and pet.exp >= pet_exp_for_level(pet.level):
            pet.exp -= pet_exp_for_level(pet.level)
            pet.level += 1
        if pet.level >= MAX_PET_LEVEL:
            pet.exp = 0

        if pet.level != starting_level:
            rescale_pet(pet)
        return pet.level - starting_level

    def boost_equipped_energy(self, game: GameState, amount: int):
        for pet in game.collection.equipped_pets():
            pet.energy = _clamp(pet.energy + amount)

    def equip(self, game: GameState, pet_id: str) -> Pet:
        pet = self.get_pet(game, pet_id)
        equipped = game.collection.equipped
        if pet_id in equipped:
            return pet
        if len(equipped) >= MAX_EQUIPPED:
            raise InvalidSelection(f"You can only equip {MAX_EQUIPPED} pets at a time.")
        equipped.append(pet_id)
        return pet

    def unequip(self, game: GameState, pet_id: str):
        if pet_id in game.collection.equipped:
            game.collection.equipped.remove(pet_id)

    def delete(self, game: GameState, pet_id: str) -> Pet:
        pet = self.get_pet(game, pet_id)
        if pet_id in game.collection.equipped:
            raise InvalidSelection(f"Unequip {pet.name} before releasing them.")
        game.collection.pets.remove(pet)
        return pet


# Global pet manager instance
pet_manager = PetManager()
