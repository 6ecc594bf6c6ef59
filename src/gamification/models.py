"""
Gamification Models
Data classes for the economy, pets, and quests, with JSON-friendly
to_dict/from_dict converters used by the storage layer
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .leveling import level_for_xp, level_floor_xp, level_ceiling_xp, pet_exp_for_level


def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _dt_from_str(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Rarity(Enum):
    """Pet rarity tiers, strictly ordered by power"""
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"
    MYTHICAL = "Mythical"
    SECRET = "Secret"

    @property
    def rank(self) -> int:
        return list(Rarity).index(self)

    def is_rare_or_above(self) -> bool:
        return self.rank >= Rarity.RARE.rank


class Mood(Enum):
    """Named pet moods, from best to worst"""
    ECSTATIC = "Ecstatic"
    EXCITED = "Excited"
    HAPPY = "Happy"
    CONTENT = "Content"
    SAD = "Sad"
    ANGRY = "Angry"
    DEPRESSED = "Depressed"

    @property
    def exp_multiplier(self) -> float:
        return MOOD_EXP_MULTIPLIERS[self]


MOOD_EXP_MULTIPLIERS = {
    Mood.ECSTATIC: 2.00,
    Mood.EXCITED: 1.50,
    Mood.HAPPY: 1.25,
    Mood.CONTENT: 1.00,
    Mood.SAD: 0.75,
    Mood.ANGRY: 0.50,
    Mood.DEPRESSED: 0.25,
}


class QuestCategory(Enum):
    """What kind of activity advances a quest"""
    TASKS = "tasks"
    STUDY = "study"
    POMODORO = "pomodoro"
    PET = "pet"
    LEVEL = "level"
    META = "meta"

    @property
    def is_additive(self) -> bool:
        """Additive categories accumulate; the rest keep a high-water mark"""
        return self in (QuestCategory.TASKS, QuestCategory.STUDY, QuestCategory.POMODORO, QuestCategory.PET)


class Periodicity(Enum):
    """How often a quest set is regenerated"""
    DAILY = "daily"
    WEEKLY = "weekly"
    ACHIEVEMENT = "achievement"


@dataclass
class EconomyState:
    """Running XP and coin totals; level fields are derived"""
    xp: int = 0
    coins: int = 0

    @property
    def level(self) -> int:
        return level_for_xp(self.xp)

    @property
    def level_floor_xp(self) -> int:
        return level_floor_xp(self.level)

    @property
    def level_ceiling_xp(self) -> int:
        return level_ceiling_xp(self.level)


@dataclass
class SpecialBuff:
    """Temporary buff granted by a pet's favorite food"""
    exp_boost_percent: int
    infinite_energy: bool
    infinite_hunger: bool
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'expBoostPercent': self.exp_boost_percent,
            'infiniteEnergy': self.infinite_energy,
            'infiniteHunger': self.infinite_hunger,
            'expiresAt': _dt_to_str(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['SpecialBuff']:
        # Buffs saved without an expiry are dropped
        if not data or not data.get('expiresAt'):
            return None
        return cls(
            exp_boost_percent=data.get('expBoostPercent', 0),
            infinite_energy=data.get('infiniteEnergy', False),
            infinite_hunger=data.get('infiniteHunger', False),
            expires_at=_dt_from_str(data.get('expiresAt')),
        )


@dataclass
class Pet:
    """An owned pet with growth stats and level-scaled modifiers"""
    id: str
    name: str
    species: str
    rarity: Rarity
    level: int = 1
    exp: int = 0
    # Raw modifier magnitudes as rolled at creation
    base_buffs: Dict[str, int] = field(default_factory=dict)
    base_debuffs: Dict[str, int] = field(default_factory=dict)
    # Magnitudes scaled for the current level
    buffs: Dict[str, int] = field(default_factory=dict)
    debuffs: Dict[str, int] = field(default_factory=dict)
    energy: int = 70
    hunger: int = 30
    mood: Mood = Mood.CONTENT
    mood_expires_at: Optional[datetime] = None
    special_buff: Optional[SpecialBuff] = None
    obtained_at: Optional[datetime] = None

    @property
    def exp_for_next_level(self) -> int:
        return pet_exp_for_level(self.level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'species': self.species,
            'rarity': self.rarity.value,
            'level': self.level,
            'exp': self.exp,
            'expForNextLevel': self.exp_for_next_level,
            'baseBuffs': dict(self.base_buffs),
            'baseDebuffs': dict(self.base_debuffs),
            'buffs': dict(self.buffs),
            'debuffs': dict(self.debuffs),
            'energy': self.energy,
            'hunger': self.hunger,
            'mood': self.mood.value,
            'moodExpiresAt': _dt_to_str(self.mood_expires_at),
            'activeSpecialBuff': self.special_buff.to_dict() if self.special_buff else None,
            'obtainedAt': _dt_to_str(self.obtained_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Pet':
        # Imported here: modifiers depends on this module
        from .modifiers import recover_raw_buffs, recover_raw_debuffs

        level = data.get('level', 1)
        buffs = dict(data.get('buffs') or {})
        debuffs = dict(data.get('debuffs') or {})
        base_buffs = data.get('baseBuffs')
        base_debuffs = data.get('baseDebuffs')
        if base_buffs is None:
            base_buffs = recover_raw_buffs(buffs, level)
        if base_debuffs is None:
            base_debuffs = recover_raw_debuffs(debuffs, level)

        return cls(
            id=data['id'],
            name=data.get('name', 'Pet'),
            species=data.get('species', 'unknown'),
            rarity=Rarity(data.get('rarity', 'Common')),
            level=level,
            exp=data.get('exp', 0),
            base_buffs=dict(base_buffs),
            base_debuffs=dict(base_debuffs),
            buffs=buffs,
            debuffs=debuffs,
            energy=data.get('energy', 70),
            hunger=data.get('hunger', 30),
            mood=Mood(data.get('mood', 'Content')),
            mood_expires_at=_dt_from_str(data.get('moodExpiresAt')),
            special_buff=SpecialBuff.from_dict(data.get('activeSpecialBuff')),
            obtained_at=_dt_from_str(data.get('obtainedAt')),
        )


@dataclass
class PetCollection:
    """Owned pets plus the ordered ids of the equipped ones"""
    pets: List[Pet] = field(default_factory=list)
    equipped: List[str] = field(default_factory=list)

    def get(self, pet_id: str) -> Optional[Pet]:
        for pet in self.pets:
            if pet.id == pet_id:
                return pet
        return None

    def equipped_pets(self) -> List[Pet]:
        return [pet for pet in (self.get(pet_id) for pet_id in self.equipped) if pet]


@dataclass
class GameState:
    """Economy, pets, inventory, and cosmetic unlocks for one user"""
    economy: EconomyState = field(default_factory=EconomyState)
    pity_counter: int = 0
    collection: PetCollection = field(default_factory=PetCollection)
    food_inventory: Dict[str, int] = field(default_factory=dict)
    feed_count: int = 0
    play_count: int = 0
    spin_count: int = 0
    current_theme: str = 'default'
    unlocked_themes: List[str] = field(default_factory=lambda: ['default'])
    current_frame: Optional[str] = None
    unlocked_frames: List[str] = field(default_factory=list)
    last_reward_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'xp': self.economy.xp,
            'level': self.economy.level,
            'xpForCurrentLevel': self.economy.level_floor_xp,
            'xpForNextLevel': self.economy.level_ceiling_xp,
            'coins': self.economy.coins,
            'pityCounter': self.pity_counter,
            'inventory': dict(self.food_inventory),
            'feedCount': self.feed_count,
            'playCount': self.play_count,
            'spinCount': self.spin_count,
            'currentTheme': self.current_theme,
            'unlockedThemes': list(self.unlocked_themes),
            'currentProfileFrame': self.current_frame,
            'unlockedProfileFrames': list(self.unlocked_frames),
            'petInventory': [pet.to_dict() for pet in self.collection.pets],
            'equippedPets': list(self.collection.equipped),
            'lastRewardReason': self.last_reward_reason,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'GameState':
        if not data:
            return cls()
        return cls(
            economy=EconomyState(xp=max(0, data.get('xp', 0)), coins=max(0, data.get('coins', 0))),
            pity_counter=data.get('pityCounter', 0),
            collection=PetCollection(
                pets=[Pet.from_dict(pet) for pet in data.get('petInventory') or []],
                equipped=list(data.get('equippedPets') or []),
            ),
            food_inventory=dict(data.get('inventory') or {}),
            feed_count=data.get('feedCount', 0),
            play_count=data.get('playCount', 0),
            spin_count=data.get('spinCount', 0),
            current_theme=data.get('currentTheme', 'default'),
            unlocked_themes=list(data.get('unlockedThemes') or ['default']),
            current_frame=data.get('currentProfileFrame'),
            unlocked_frames=list(data.get('unlockedProfileFrames') or []),
            last_reward_reason=data.get('lastRewardReason'),
        )


@dataclass
class Quest:
    """A daily, weekly, or achievement quest"""
    id: str
    title: str
    description: str
    category: QuestCategory
    periodicity: Periodicity
    target: float
    reward: Dict[str, int]
    icon: str = '🎯'
    # Lifetime counter an achievement tracks
    counter: Optional[str] = None
    guaranteed: bool = False
    completed: bool = False
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category.value,
            'periodicity': self.periodicity.value,
            'target': self.target,
            'reward': dict(self.reward),
            'icon': self.icon,
            'counter': self.counter,
            'guaranteed': self.guaranteed,
            'completed': self.completed,
            'completedAt': _dt_to_str(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Quest':
        return cls(
            id=data['id'],
            title=data.get('title', data['id']),
            description=data.get('description', ''),
            category=QuestCategory(data['category']),
            periodicity=Periodicity(data['periodicity']),
            target=data['target'],
            reward=dict(data.get('reward') or {'xp': 0, 'coins': 0}),
            icon=data.get('icon', '🎯'),
            counter=data.get('counter'),
            guaranteed=data.get('guaranteed', False),
            completed=data.get('completed', False),
            completed_at=_dt_from_str(data.get('completedAt')),
        )


@dataclass
class QuestSet:
    """The active quests of one periodicity and when they were last reset"""
    last_reset_at: Optional[datetime] = None
    quests: List[Quest] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lastReset': _dt_to_str(self.last_reset_at),
            'quests': [quest.to_dict() for quest in self.quests],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'QuestSet':
        if not data:
            return cls()
        return cls(
            last_reset_at=_dt_from_str(data.get('lastReset')),
            quests=[Quest.from_dict(quest) for quest in data.get('quests') or []],
        )


@dataclass
class QuestBook:
    """Daily and weekly quest sets, achievements, and shared progress"""
    daily: QuestSet = field(default_factory=QuestSet)
    weekly: QuestSet = field(default_factory=QuestSet)
    achievements: List[Quest] = field(default_factory=list)
    progress: Dict[str, float] = field(default_factory=dict)

    def find(self, quest_id: str) -> Optional[Quest]:
        for quest in self.daily.quests + self.weekly.quests + self.achievements:
            if quest.id == quest_id:
                return quest
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'daily': self.daily.to_dict(),
            'weekly': self.weekly.to_dict(),
            'achievements': [quest.to_dict() for quest in self.achievements],
            'progress': dict(self.progress),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'QuestBook':
        if not data:
            return cls()
        return cls(
            daily=QuestSet.from_dict(data.get('daily')),
            weekly=QuestSet.from_dict(data.get('weekly')),
            achievements=[Quest.from_dict(quest) for quest in data.get('achievements') or []],
            progress=dict(data.get('progress') or {}),
        )


@dataclass
class Snapshot:
    """Everything the engine owns for one user, replaced on every mutation"""
    game: GameState = field(default_factory=GameState)
    quests: QuestBook = field(default_factory=QuestBook)
    version: int = 0

    def copy(self) -> 'Snapshot':
        return copy.deepcopy(self)
