"""
Pet Library
Static catalogs: pet species and gacha weights, rarity modifier ranges,
food items, themes, and profile frames
"""
from typing import List, Dict, Any, Optional

from .models import Rarity


class PetLibrary:
    """Read-only catalog data for the pet sanctuary and shop"""

    def __init__(self):
        # Modifier generation ranges per rarity (counts and magnitudes are inclusive)
        self.rarities = {
            Rarity.COMMON: {'buff_count': (0, 1), 'debuff_count': (1, 2),
                            'buff_range': (2, 5), 'debuff_range': (3, 6), 'emoji': '⚪'},
            Rarity.RARE: {'buff_count': (1, 1), 'debuff_count': (1, 1),
                          'buff_range': (4, 8), 'debuff_range': (2, 5), 'emoji': '🔵'},
            Rarity.EPIC: {'buff_count': (1, 2), 'debuff_count': (0, 1),
                          'buff_range': (6, 12), 'debuff_range': (2, 4), 'emoji': '🟣'},
            Rarity.LEGENDARY: {'buff_count': (2, 2), 'debuff_count': (0, 1),
                               'buff_range': (10, 18), 'debuff_range': (1, 3), 'emoji': '🟡'},
            Rarity.MYTHICAL: {'buff_count': (2, 2), 'debuff_count': (0, 0),
                              'buff_range': (15, 25), 'debuff_range': (0, 0), 'emoji': '🔴'},
            Rarity.SECRET: {'buff_count': (2, 2), 'debuff_count': (0, 0),
                            'buff_range': (25, 35), 'debuff_range': (0, 0), 'emoji': '🌈'},
        }

        self._pet_catalog = self._create_pet_catalog()
        self._food_items = self._create_food_items()
        self._themes = self._create_themes()
        self._frames = self._create_frames()

    def get_all_pets(self) -> List[Dict[str, Any]]:
        """Get every species in gacha order"""
        return self._pet_catalog

    def get_pets_by_rarity(self, rarity: Rarity) -> List[Dict[str, Any]]:
        """Get all species of a specific rarity"""
        return [pet for pet in self._pet_catalog if pet['rarity'] == rarity]

    def get_rare_or_above(self) -> List[Dict[str, Any]]:
        """Species eligible for the pity guarantee"""
        return [pet for pet in self._pet_catalog if pet['rarity'].is_rare_or_above()]

    def get_pet_by_species(self, species: str) -> Optional[Dict[str, Any]]:
        for pet in self._pet_catalog:
            if pet['species'] == species:
                return pet
        return None

    def get_all_foods(self) -> List[Dict[str, Any]]:
        return self._food_items

    def get_food(self, food_id: str) -> Optional[Dict[str, Any]]:
        for food in self._food_items:
            if food['id'] == food_id:
                return food
        return None

    def get_all_themes(self) -> List[Dict[str, Any]]:
        return self._themes

    def get_theme(self, theme_id: str) -> Optional[Dict[str, Any]]:
        return next((theme for theme in self._themes if theme['id'] == theme_id), None)

    def get_all_frames(self) -> List[Dict[str, Any]]:
        return self._frames

    def get_frame(self, frame_id: str) -> Optional[Dict[str, Any]]:
        return next((frame for frame in self._frames if frame['id'] == frame_id), None)

    def _create_pet_catalog(self) -> List[Dict[str, Any]]:
        """Species with their gacha weights (weights sum to 100)"""
        return [
            # Common (47)
            {'species': 'cat', 'name': 'Study Cat', 'emoji': '🐱', 'rarity': Rarity.COMMON, 'chance': 12},
            {'species': 'dog', 'name': 'Homework Pup', 'emoji': '🐶', 'rarity': Rarity.COMMON, 'chance': 12},
            {'species': 'hamster', 'name': 'Note Hamster', 'emoji': '🐹', 'rarity': Rarity.COMMON, 'chance': 12},
            {'species': 'rabbit', 'name': 'Bookworm Bunny', 'emoji': '🐰', 'rarity': Rarity.COMMON, 'chance': 11},

            # Rare (30)
            {'species': 'fox', 'name': 'Focus Fox', 'emoji': '🦊', 'rarity': Rarity.RARE, 'chance': 10},
            {'species': 'owl', 'name': 'Night Owl', 'emoji': '🦉', 'rarity': Rarity.RARE, 'chance': 10},
            {'species': 'panda', 'name': 'Calm Panda', 'emoji': '🐼', 'rarity': Rarity.RARE, 'chance': 10},

            # Epic (18)
            {'species': 'wolf', 'name': 'Deadline Wolf', 'emoji': '🐺', 'rarity': Rarity.EPIC, 'chance': 6},
            {'species': 'tiger', 'name': 'Exam Tiger', 'emoji': '🐯', 'rarity': Rarity.EPIC, 'chance': 6},
            {'species': 'penguin', 'name': 'Scholar Penguin', 'emoji': '🐧', 'rarity': Rarity.EPIC, 'chance': 6},

            # Legendary (4)
            {'species': 'dragon', 'name': 'Thesis Dragon', 'emoji': '🐉', 'rarity': Rarity.LEGENDARY, 'chance': 2},
            {'species': 'phoenix', 'name': 'Rebirth Phoenix', 'emoji': '🐦‍🔥', 'rarity': Rarity.LEGENDARY, 'chance': 2},

            # Mythical (0.8)
            {'species': 'unicorn', 'name': 'Genius Unicorn', 'emoji': '🦄', 'rarity': Rarity.MYTHICAL, 'chance': 0.8},

            # Secret (0.2)
            {'species': 'axolotl', 'name': 'Cosmic Axolotl', 'emoji': '🌌', 'rarity': Rarity.SECRET, 'chance': 0.2},
        ]

    def _create_food_items(self) -> List[Dict[str, Any]]:
        """Food table; favorites carry a special buff for their species"""
        return [
            {'id': 'basic', 'name': 'Basic Meal', 'icon': '🍎', 'cost': 5,
             'hunger_reduction': 25, 'energy_boost': 12, 'mood': 'Content', 'mood_minutes': 30,
             'description': 'A simple, nutritious meal'},
            {'id': 'premium', 'name': 'Premium Feast', 'icon': '🍖', 'cost': 15,
             'hunger_reduction': 50, 'energy_boost': 25, 'mood': 'Happy', 'mood_minutes': 60,
             'description': 'A delicious feast that fills your pet'},
            {'id': 'treat', 'name': 'Special Treat', 'icon': '🍪', 'cost': 10,
             'hunger_reduction': 15, 'energy_boost': 20, 'mood': 'Excited', 'mood_minutes': 45,
             'description': 'A special treat that boosts energy'},
            {'id': 'super', 'name': 'Super Snack', 'icon': '🍒', 'cost': 20,
             'hunger_reduction': 40, 'energy_boost': 35, 'mood': 'Ecstatic', 'mood_minutes': 30,
             'description': 'The ultimate snack for your pet'},
            {'id': 'herbal_tea', 'name': 'Herbal Tea', 'icon': '🍵', 'cost': 8,
             'hunger_reduction': 5, 'energy_boost': 5, 'mood': 'Content', 'mood_minutes': 0,
             'cleanses': True, 'description': 'Calms your pet and clears every lingering effect'},
            {'id': 'tuna_sushi', 'name': 'Tuna Sushi', 'icon': '🍣', 'cost': 25,
             'hunger_reduction': 30, 'energy_boost': 15, 'mood': 'Happy', 'mood_minutes': 30,
             'favorite_species': 'cat',
             'special_buff': {'exp_boost_percent': 50, 'infinite_energy': True,
                              'infinite_hunger': False, 'duration_minutes': 30},
             'description': 'A cat favorite'},
            {'id': 'golden_carrot', 'name': 'Golden Carrot', 'icon': '🥕', 'cost': 25,
             'hunger_reduction': 30, 'energy_boost': 15, 'mood': 'Happy', 'mood_minutes': 30,
             'favorite_species': 'rabbit',
             'special_buff': {'exp_boost_percent': 25, 'infinite_energy': False,
                              'infinite_hunger': True, 'duration_minutes': 30},
             'description': 'A bunny favorite'},
            {'id': 'bamboo_shoot', 'name': 'Bamboo Shoot', 'icon': '🎋', 'cost': 30,
             'hunger_reduction': 35, 'energy_boost': 20, 'mood': 'Happy', 'mood_minutes': 45,
             'favorite_species': 'panda',
             'special_buff': {'exp_boost_percent': 50, 'infinite_energy': False,
                              'infinite_hunger': True, 'duration_minutes': 45},
             'description': 'A panda favorite'},
            {'id': 'dragon_fruit', 'name': 'Dragon Fruit', 'icon': '🐲', 'cost': 50,
             'hunger_reduction': 40, 'energy_boost': 30, 'mood': 'Excited', 'mood_minutes': 30,
             'favorite_species': 'dragon',
             'special_buff': {'exp_boost_percent': 75, 'infinite_energy': True,
                              'infinite_hunger': True, 'duration_minutes': 30},
             'description': 'A dragon favorite'},
            {'id': 'stardust_cookie', 'name': 'Stardust Cookie', 'icon': '✨', 'cost': 80,
             'hunger_reduction': 50, 'energy_boost': 50, 'mood': 'Excited', 'mood_minutes': 30,
             'favorite_species': 'axolotl',
             'special_buff': {'exp_boost_percent': 100, 'infinite_energy': True,
                              'infinite_hunger': True, 'duration_minutes': 60},
             'description': 'Rumored to be loved by something from beyond the stars'},
        ]

    def _create_themes(self) -> List[Dict[str, Any]]:
        return [
            {'id': 'default', 'name': 'Default', 'icon': '🎨', 'cost': 0},
            {'id': 'ocean', 'name': 'Ocean Breeze', 'icon': '🌊', 'cost': 500},
            {'id': 'sunset', 'name': 'Sunset Glow', 'icon': '🌅', 'cost': 500},
            {'id': 'forest', 'name': 'Forest Green', 'icon': '🌲', 'cost': 500},
            {'id': 'purple', 'name': 'Purple Dream', 'icon': '💜', 'cost': 500},
            {'id': 'gold', 'name': 'Golden Hour', 'icon': '✨', 'cost': 1000},
            {'id': 'cosmic', 'name': 'Cosmic Night', 'icon': '🌌', 'cost': 1500},
            {'id': 'aurora', 'name': 'Aurora Borealis', 'icon': '🌠', 'cost': 2000},
        ]

    def _create_frames(self) -> List[Dict[str, Any]]:
        return [
            {'id': 'frame_classic', 'name': 'Classic Frame', 'cost': 300},
            {'id': 'frame_gold', 'name': 'Golden Frame', 'cost': 500},
            {'id': 'frame_crystal', 'name': 'Crystal Frame', 'cost': 800},
            {'id': 'frame_rainbow', 'name': 'Rainbow Frame', 'cost': 1000},
            {'id': 'frame_star', 'name': 'Starry Frame', 'cost': 1200},
            {'id': 'frame_crown', 'name': 'Crown Frame', 'cost': 1500},
            {'id': 'frame_neon', 'name': 'Neon Frame', 'cost': 1800},
            {'id': 'frame_galaxy', 'name': 'Galaxy Frame', 'cost': 2000},
        ]


# Global pet library instance
pet_library = PetLibrary()
