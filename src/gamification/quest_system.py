"""
Quest System
Generates daily/weekly quest sets, tracks progress by category, grants
rewards, and resets sets at fixed UTC+7 day and week boundaries
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .economy import economy_ledger
from .errors import NotFound
from .models import GameState, Periodicity, Quest, QuestBook, QuestCategory, QuestSet
from .quest_library import quest_library
from .random_source import RandomSource

RESET_TIMEZONE = timezone(timedelta(hours=7))
DAILY_RANDOM_QUESTS = 4
WEEKLY_RANDOM_QUESTS = 9


def daily_boundary(moment: datetime) -> datetime:
    """Most recent UTC+7 midnight at or before the given instant"""
    local = moment.astimezone(RESET_TIMEZONE)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def weekly_boundary(moment: datetime) -> datetime:
    """Most recent UTC+7 Monday midnight at or before the given instant"""
    local = moment.astimezone(RESET_TIMEZONE)
    monday = local.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=local.weekday())
    return monday.astimezone(timezone.utc)


def should_reset(last_reset_at: Optional[datetime], now: datetime,
                 boundary_fn: Callable[[datetime], datetime]) -> bool:
    if last_reset_at is None:
        return True
    return boundary_fn(last_reset_at) < boundary_fn(now)


def next_daily_reset(now: datetime) -> datetime:
    return daily_boundary(now) + timedelta(days=1)


def next_weekly_reset(now: datetime) -> datetime:
    return weekly_boundary(now) + timedelta(days=7)


BOUNDARIES = {
    Periodicity.DAILY: daily_boundary,
    Periodicity.WEEKLY: weekly_boundary,
}


class QuestSystem:
    """Quest generation, progress tracking, and boundary resets"""

    def __init__(self, ledger=None, library=None):
        self.ledger = ledger or economy_ledger
        self.quest_library = library or quest_library

    def _set_for(self, book: QuestBook, periodicity: Periodicity) -> QuestSet:
        return book.daily if periodicity == Periodicity.DAILY else book.weekly

    def generate(self, periodicity: Periodicity, rng: RandomSource) -> List[Quest]:
        """One guaranteed quest plus unique random picks from the pool"""
        count = DAILY_RANDOM_QUESTS if periodicity == Periodicity.DAILY else WEEKLY_RANDOM_QUESTS
        picks = rng.sample(self.quest_library.get_pool(periodicity), count)

        quests = [self.quest_library.build(self.quest_library.get_guaranteed(periodicity), periodicity)]
        quests.extend(self.quest_library.build(template, periodicity) for template in picks)
        return quests

    def generate_daily(self, rng: RandomSource) -> List[Quest]:
        return self.generate(Periodicity.DAILY, rng)

    def generate_weekly(self, rng: RandomSource) -> List[Quest]:
        return self.generate(Periodicity.WEEKLY, rng)

    def ensure_achievements(self, book: QuestBook):
        """Add any achievement the book doesn't track yet"""
        known = {quest.id for quest in book.achievements}
        for template in self.quest_library.get_achievements():
            if template['id'] not in known:
                book.achievements.append(self.quest_library.build(template, Periodicity.ACHIEVEMENT))

    def reset_set(self, book: QuestBook, periodicity: Periodicity, now: datetime, rng: RandomSource):
        """Replace a quest set and drop the progress of the quests it held"""
        quest_set = self._set_for(book, periodicity)
        for quest in quest_set.quests:
            book.progress.pop(quest.id, None)

        quest_set.quests = self.generate(periodicity, rng)
        quest_set.last_reset_at = BOUNDARIES[periodicity](now)
        print(f"[QUESTS] 🔄 {periodicity.value.title()} quests reset ({len(quest_set.quests)} active)")

    def check_resets(self, book: QuestBook, now: datetime, rng: RandomSource) -> List[Periodicity]:
        """Reset every set whose boundary has passed; returns which ones reset"""
        reset = []
        for periodicity, boundary_fn in BOUNDARIES.items():
            quest_set = self._set_for(book, periodicity)
            if should_reset(quest_set.last_reset_at, now, boundary_fn):
                self.reset_set(book, periodicity, now, rng)
                reset.append(periodicity)
        return reset

    def get_quest(self, book: QuestBook, quest_id: str) -> Quest:
        quest = book.find(quest_id)
        if not quest:
            raise NotFound(f"Quest '{quest_id}' is not active.")
        return quest

    def _complete(self, game: GameState, quest: Quest, now: datetime):
        quest.completed = True
        quest.completed_at = now
        self.ledger.apply_delta(game, quest.reward.get('xp', 0), quest.reward.get('coins', 0),
                                f"Quest complete: {quest.title}")
        print(f"[QUESTS] ✅ Completed {quest.id}")

    def _advance(self, book: QuestBook, game: GameState, quest: Quest, value: float, now: datetime) -> bool:
        """Apply one progress value; returns True when it completes the quest"""
        old_progress = book.progress.get(quest.id, 0)
        if quest.category.is_additive:
            new_progress = old_progress + value
        else:
            new_progress = max(old_progress, value)

        book.progress[quest.id] = new_progress
        if new_progress >= quest.target:
            self._complete(game, quest, now)
            return True
        return False

    def _check_guaranteed(self, book: QuestBook, game: GameState, now: datetime) -> List[Quest]:
        completed = []
        for quest_set in (book.daily, book.weekly):
            others = [quest for quest in quest_set.quests if not quest.guaranteed]
            if not others or not all(quest.completed for quest in others):
                continue
            for quest in quest_set.quests:
                if quest.guaranteed and not quest.completed:
                    self._advance(book, game, quest, quest.target, now)
                    completed.append(quest)
        return completed

    def report_category_event(self, book: QuestBook, game: GameState, category: QuestCategory,
                              value: float, now: datetime) -> List[Quest]:
        """Advance every incomplete daily/weekly quest of a category"""
        completed = []
        for quest in book.daily.quests + book.weekly.quests:
            # Guaranteed quests only complete through _check_guaranteed
            if quest.completed or quest.guaranteed or quest.category != category:
                continue
            if self._advance(book, game, quest, value, now):
                completed.append(quest)

        if completed:
            completed.extend(self._check_guaranteed(book, game, now))
        return completed

    def update_achievements(self, book: QuestBook, game: GameState, counters: Dict[str, float],
                            now: datetime) -> List[Quest]:
        """Feed lifetime counters into achievements as high-water marks"""
        completed = []
        for quest in book.achievements:
            if quest.completed or quest.counter not in counters:
                continue
            old_progress = book.progress.get(quest.id, 0)
            new_progress = max(old_progress, counters[quest.counter])
            book.progress[quest.id] = new_progress
            if new_progress >= quest.target:
                self._complete(game, quest, now)
                completed.append(quest)
        return completed

    def complete_quest(self, book: QuestBook, game: GameState, quest_id: str, now: datetime) -> Quest:
        """Force one active quest to completion"""
        quest = self.get_quest(book, quest_id)
        if not quest.completed:
            self._advance(book, game, quest, quest.target, now)
            self._check_guaranteed(book, game, now)
        return quest

    def complete_all_active(self, book: QuestBook, game: GameState, now: datetime) -> List[Quest]:
        completed = []
        for quest in book.daily.quests + book.weekly.quests:
            if not quest.completed:
                self._advance(book, game, quest, quest.target, now)
                completed.append(quest)
        return completed

    def quest_progress(self, book: QuestBook, quest: Quest) -> float:
        if quest.completed:
            return quest.target
        return min(book.progress.get(quest.id, 0), quest.target)


# Global quest system instance
quest_system = QuestSystem()
