"""
Gamification Engine
Per-user facade over the economy, gacha, pets, shop, and quests. Every
operation runs against a draft copy of the snapshot and only replaces the
live snapshot (and persists it) when it succeeds.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from src.database.storage import kv_store
from .clock import system_clock
from .economy import TASK_REWARD, economy_ledger, focus_session_reward
from .errors import GameError, InvalidSelection
from .gacha_system import MULTI_SPIN_COUNT, SPIN_COST, gacha_system
from .leveling import level_progress
from .models import GameState, Periodicity, QuestBook, QuestCategory, Rarity, Snapshot
from .pet_manager import pet_manager
from .quest_system import next_daily_reset, next_weekly_reset, quest_system
from .random_source import RandomSource
from .shop import shop

QUEST_POLL_SECONDS = 60


@dataclass
class ActionResult:
    """Outcome of an engine operation"""
    success: bool
    message: str = ''
    value: Any = None
    error: Optional[str] = None
    level_up: Optional[int] = None


class GamificationEngine:
    """Owns one user's snapshot and applies every game action to it"""

    def __init__(self, user_id=None, store=None, clock=None, rng: Optional[RandomSource] = None):
        self.user_id = user_id
        self.store = store or kv_store
        self.clock = clock or system_clock
        self.rng = rng or RandomSource()
        self.last_save_ok = True
        self._observers: List[Callable[[Snapshot], None]] = []
        self._poll_task = None

        self.snapshot = self._load()
        self.check_quest_resets()

    # ------------------------------------------------------------------
    # Snapshot lifecycle
    # ------------------------------------------------------------------

    @property
    def game(self) -> GameState:
        return self.snapshot.game

    @property
    def quests(self) -> QuestBook:
        return self.snapshot.quests

    def _load(self) -> Snapshot:
        try:
            game = GameState.from_dict(self.store.load('gamification', self.user_id))
            quests = QuestBook.from_dict(self.store.load('quests', self.user_id))
        except (KeyError, TypeError, ValueError) as e:
            print(f"[ENGINE] ⚠️ Stored data for {self.user_id or 'global'} is unreadable, starting fresh: {e}")
            game, quests = GameState(), QuestBook()

        quest_system.ensure_achievements(quests)
        return Snapshot(game=game, quests=quests)

    def _persist(self):
        saved_game = self.store.save('gamification', self.snapshot.game.to_dict(), self.user_id)
        saved_quests = self.store.save('quests', self.snapshot.quests.to_dict(), self.user_id)
        self.last_save_ok = bool(saved_game and saved_quests)
        if not self.last_save_ok:
            print(f"[ENGINE] ⚠️ Could not save progress for {self.user_id or 'global'}; keeping it in memory")

    def _notify(self):
        for callback in list(self._observers):
            try:
                callback(self.snapshot)
            except Exception as e:
                print(f"[ENGINE] ❌ Observer failed: {e}")

    def _commit(self, draft: Snapshot):
        draft.version = self.snapshot.version + 1
        self.snapshot = draft
        self._persist()
        self._notify()

    def _owned_counters(self, game: GameState) -> Dict[str, int]:
        """Lifetime counters the engine can derive on its own"""
        pets = game.collection.pets
        return {
            'level': game.economy.level,
            'legendary_pets': sum(1 for pet in pets if pet.rarity.rank >= Rarity.LEGENDARY.rank),
            'mythical_pets': sum(1 for pet in pets if pet.rarity.rank >= Rarity.MYTHICAL.rank),
            'secret_pets': sum(1 for pet in pets if pet.rarity == Rarity.SECRET),
            'feed_count': game.feed_count,
        }

    def _transition(self, action: str, fn: Callable[[Snapshot], Any]) -> ActionResult:
        """Run fn on a draft; commit on success, discard on GameError.

        fn returns (value, message).
        """
        draft = self.snapshot.copy()
        now = self.clock.now()
        level_before = draft.game.economy.level

        try:
            value, message = fn(draft)
        except GameError as e:
            print(f"[ENGINE] ❌ {action} refused: {e.message}")
            return ActionResult(success=False, message=e.message, error=e.kind)

        level_after = draft.game.economy.level
        if level_after > level_before:
            quest_system.report_category_event(draft.quests, draft.game, QuestCategory.LEVEL, level_after, now)
        quest_system.update_achievements(draft.quests, draft.game, self._owned_counters(draft.game), now)

        self._commit(draft)
        level_after = self.snapshot.game.economy.level
        return ActionResult(success=True, message=message, value=value,
                            level_up=level_after if level_after > level_before else None)

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Register a callback run after each committed change; returns an unsubscribe function"""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Economy
    # ------------------------------------------------------------------

    def apply_delta(self, xp_delta: int, coins_delta: int, reason: str) -> ActionResult:
        def run(draft):
            economy = economy_ledger.apply_delta(draft.game, xp_delta, coins_delta, reason)
            return economy, reason

        return self._transition('apply_delta', run)

    def complete_task(self) -> ActionResult:
        def run(draft):
            before = (draft.game.economy.xp, draft.game.economy.coins)
            economy_ledger.apply_delta(draft.game, TASK_REWARD['xp'], TASK_REWARD['coins'], 'Task completed')
            gained = {'xp': draft.game.economy.xp - before[0], 'coins': draft.game.economy.coins - before[1]}
            quest_system.report_category_event(draft.quests, draft.game, QuestCategory.TASKS, 1, self.clock.now())
            return gained, f"Task completed! +{gained['xp']} XP, +{gained['coins']} coins"

        return self._transition('complete_task', run)

    def uncomplete_task(self) -> ActionResult:
        def run(draft):
            economy = economy_ledger.apply_delta(draft.game, -TASK_REWARD['xp'], -TASK_REWARD['coins'],
                                                 'Task marked incomplete')
            return economy, 'Task marked incomplete; its reward was taken back'

        return self._transition('uncomplete_task', run)

    def complete_focus_session(self, minutes: float, pomodoro: bool = True) -> ActionResult:
        def run(draft):
            if minutes <= 0:
                raise InvalidSelection("A focus session needs a positive duration.")
            now = self.clock.now()
            reward = focus_session_reward(minutes)
            economy_ledger.apply_delta(draft.game, reward['xp'], reward['coins'],
                                       f"Focus session: {minutes:g} min")
            pet_manager.boost_equipped_energy(draft.game, reward['energyBoost'])
            quest_system.report_category_event(draft.quests, draft.game, QuestCategory.STUDY, minutes, now)
            if pomodoro:
                quest_system.report_category_event(draft.quests, draft.game, QuestCategory.POMODORO, 1, now)
            return reward, f"Focused for {minutes:g} minutes (x{reward['multiplier']:.2f} bonus)"

        return self._transition('complete_focus_session', run)

    # ------------------------------------------------------------------
    # Gacha
    # ------------------------------------------------------------------

    def spin(self) -> ActionResult:
        def run(draft):
            pet = gacha_system.spin(draft.game, self.rng, self.clock.now())
            return pet, f"You got {pet.name} ({pet.rarity.value})!"

        return self._transition('spin', run)

    def spin_many(self, count: int = MULTI_SPIN_COUNT) -> ActionResult:
        def run(draft):
            pets = gacha_system.spin_many(draft.game, self.rng, self.clock.now(), count)
            best = max(pets, key=lambda pet: pet.rarity.rank)
            return pets, f"{count} spins done! Best pull: {best.name} ({best.rarity.value})"

        return self._transition('spin_many', run)

    def get_spin_cost(self) -> int:
        return SPIN_COST

    # ------------------------------------------------------------------
    # Pets
    # ------------------------------------------------------------------

    def feed(self, pet_id: str, food_id: str, quantity: int = 1) -> ActionResult:
        def run(draft):
            now = self.clock.now()
            result = pet_manager.feed(draft.game, pet_id, food_id, quantity, now)
            quest_system.report_category_event(draft.quests, draft.game, QuestCategory.PET, 1, now)
            pet = result['pet']
            if result['favorite']:
                return result, f"{pet.name} LOVES {result['food']['name']}! Special buff active."
            return result, f"{pet.name} enjoyed {quantity}x {result['food']['name']}"

        return self._transition('feed', run)

    def play(self, pet_id: str) -> ActionResult:
        def run(draft):
            now = self.clock.now()
            result = pet_manager.play(draft.game, pet_id, now)
            quest_system.report_category_event(draft.quests, draft.game, QuestCategory.PET, 1, now)
            pet = result['pet']
            message = f"{pet.name} gained {result['exp_gained']} exp"
            if result['levels_gained']:
                message += f" and reached level {pet.level}!"
            return result, message

        return self._transition('play', run)

    def equip(self, pet_id: str) -> ActionResult:
        def run(draft):
            pet = pet_manager.equip(draft.game, pet_id)
            return pet, f"{pet.name} is now equipped"

        return self._transition('equip', run)

    def unequip(self, pet_id: str) -> ActionResult:
        def run(draft):
            pet_manager.unequip(draft.game, pet_id)
            return None, 'Pet unequipped'

        return self._transition('unequip', run)

    def delete_pet(self, pet_id: str) -> ActionResult:
        def run(draft):
            pet = pet_manager.delete(draft.game, pet_id)
            return pet, f"{pet.name} was released"

        return self._transition('delete_pet', run)

    def get_modifier_totals(self) -> Dict[str, int]:
        return economy_ledger.modifier_totals(self.game)

    # ------------------------------------------------------------------
    # Shop
    # ------------------------------------------------------------------

    def buy_food(self, food_id: str, quantity: int = 1) -> ActionResult:
        def run(draft):
            result = shop.buy_food(draft.game, food_id, quantity)
            return result, f"Bought {quantity}x {result['food']['name']} for {result['price']} coins"

        return self._transition('buy_food', run)

    def buy_theme(self, theme_id: str) -> ActionResult:
        def run(draft):
            result = shop.buy_theme(draft.game, theme_id)
            return result, f"Unlocked {result['theme']['name']} for {result['price']} coins"

        return self._transition('buy_theme', run)

    def equip_theme(self, theme_id: str) -> ActionResult:
        def run(draft):
            shop.equip_theme(draft.game, theme_id)
            return theme_id, 'Theme applied'

        return self._transition('equip_theme', run)

    def buy_frame(self, frame_id: str) -> ActionResult:
        def run(draft):
            result = shop.buy_frame(draft.game, frame_id)
            return result, f"Unlocked {result['frame']['name']} for {result['price']} coins"

        return self._transition('buy_frame', run)

    def equip_frame(self, frame_id: str) -> ActionResult:
        def run(draft):
            shop.equip_frame(draft.game, frame_id)
            return frame_id, 'Frame applied'

        return self._transition('equip_frame', run)

    def unequip_frame(self) -> ActionResult:
        def run(draft):
            shop.unequip_frame(draft.game)
            return None, 'Frame removed'

        return self._transition('unequip_frame', run)

    # ------------------------------------------------------------------
    # Quests
    # ------------------------------------------------------------------

    def report_category_event(self, category, value: float) -> ActionResult:
        def run(draft):
            try:
                quest_category = QuestCategory(category)
            except ValueError:
                raise InvalidSelection(f"Unknown quest category '{category}'.")
            completed = quest_system.report_category_event(draft.quests, draft.game, quest_category,
                                                           value, self.clock.now())
            return completed, f"{len(completed)} quest(s) completed"

        return self._transition('report_category_event', run)

    def update_achievements(self, counters: Dict[str, float]) -> ActionResult:
        def run(draft):
            completed = quest_system.update_achievements(draft.quests, draft.game, counters, self.clock.now())
            return completed, f"{len(completed)} achievement(s) unlocked"

        return self._transition('update_achievements', run)

    def check_quest_resets(self) -> List[Periodicity]:
        """Regenerate any quest set whose UTC+7 boundary has passed"""
        draft = self.snapshot.copy()
        reset = quest_system.check_resets(draft.quests, self.clock.now(), self.rng)
        if reset:
            self._commit(draft)
        return reset

    def start_quest_poll(self, interval_seconds: float = QUEST_POLL_SECONDS):
        """Check quest resets every interval; with the system clock this must be called from the bot's event loop"""
        if self._poll_task is None:
            self._poll_task = self.clock.schedule(interval_seconds, self.check_quest_resets)
        return self._poll_task

    def stop_quest_poll(self):
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    def get_reset_times(self) -> Dict[str, Any]:
        now = self.clock.now()
        return {'daily': next_daily_reset(now), 'weekly': next_weekly_reset(now)}

    # ------------------------------------------------------------------
    # Admin / dev tools
    # ------------------------------------------------------------------

    def _force_reset(self, periodicity: Periodicity) -> ActionResult:
        def run(draft):
            quest_system.reset_set(draft.quests, periodicity, self.clock.now(), self.rng)
            return None, f"{periodicity.value.title()} quests reset"

        return self._transition(f'reset_{periodicity.value}_quests', run)

    def reset_daily_quests(self) -> ActionResult:
        return self._force_reset(Periodicity.DAILY)

    def reset_weekly_quests(self) -> ActionResult:
        return self._force_reset(Periodicity.WEEKLY)

    def complete_quest(self, quest_id: str) -> ActionResult:
        def run(draft):
            quest = quest_system.complete_quest(draft.quests, draft.game, quest_id, self.clock.now())
            return quest, f"Completed {quest.title}"

        return self._transition('complete_quest', run)

    def complete_all_quests(self) -> ActionResult:
        def run(draft):
            completed = quest_system.complete_all_active(draft.quests, draft.game, self.clock.now())
            return completed, f"Completed {len(completed)} quest(s)"

        return self._transition('complete_all_quests', run)

    def reset_gamification(self) -> ActionResult:
        def run(draft):
            draft.game = GameState()
            return None, 'All gamification data has been reset'

        return self._transition('reset_gamification', run)

    def reset_quests(self) -> ActionResult:
        def run(draft):
            now = self.clock.now()
            draft.quests = QuestBook()
            quest_system.ensure_achievements(draft.quests)
            quest_system.check_resets(draft.quests, now, self.rng)
            return None, 'All quest data has been reset'

        return self._transition('reset_quests', run)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_profile(self) -> Dict[str, Any]:
        game = self.game
        return {
            'progress': level_progress(game.economy.xp),
            'coins': game.economy.coins,
            'pity_counter': game.pity_counter,
            'pets_owned': len(game.collection.pets),
            'equipped': game.collection.equipped_pets(),
            'modifiers': self.get_modifier_totals(),
            'theme': game.current_theme,
            'frame': game.current_frame,
            'spin_count': game.spin_count,
            'feed_count': game.feed_count,
            'play_count': game.play_count,
        }
