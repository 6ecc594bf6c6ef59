# Gamification module for StudyBuddy
from .engine import ActionResult, GamificationEngine
from .errors import GameError, InsufficientFunds, InvalidSelection, Exhausted, NotFound
from .gacha_system import GachaSystem
from .pet_library import PetLibrary
from .pet_manager import PetManager
from .quest_system import QuestSystem

__all__ = ['ActionResult', 'GamificationEngine', 'GameError', 'InsufficientFunds', 'InvalidSelection',
           'Exhausted', 'NotFound', 'GachaSystem', 'PetLibrary', 'PetManager', 'QuestSystem']
