"""
Economy Ledger
Applies XP/coin deltas through equipped pets' modifiers, and computes the
fixed rewards for tasks and focus sessions
"""
import math
from typing import Dict

from .errors import InsufficientFunds
from .models import EconomyState, GameState
from .modifiers import combined_modifiers

TASK_REWARD = {'xp': 60, 'coins': 12}
FOCUS_XP_PER_MINUTE = 1
FOCUS_COINS_PER_MINUTE = 0.2
FOCUS_MULTIPLIER_CAP = 5
FOCUS_ENERGY_CAP = 10


def _floor(value: float) -> int:
    # Same float guard as modifier scaling
    return math.floor(round(value, 6))


def _effective_delta(delta: int, boost: int, penalty: int) -> int:
    """Gains grow with boosts and shrink with penalties; losses do the opposite"""
    if delta > 0:
        return _floor(delta * (1 + boost / 100) * (1 - penalty / 100))
    if delta < 0:
        return _floor(delta * (1 - boost / 100) * (1 + penalty / 100))
    return 0


def focus_session_reward(minutes: float) -> Dict[str, float]:
    """Duration-scaled reward for a finished focus session"""
    multiplier = min(1 + minutes / 60 * 2, FOCUS_MULTIPLIER_CAP)
    return {
        'multiplier': multiplier,
        'xp': _floor(minutes * FOCUS_XP_PER_MINUTE * multiplier),
        'coins': _floor(minutes * FOCUS_COINS_PER_MINUTE * multiplier),
        'energyBoost': min(math.floor(minutes / 5), FOCUS_ENERGY_CAP),
    }


class EconomyLedger:
    """Owns every change to a player's XP and coin totals"""

    def modifier_totals(self, game: GameState) -> Dict[str, int]:
        return combined_modifiers(game.collection.equipped_pets())

    def apply_delta(self, game: GameState, xp_delta: int, coins_delta: int, reason: str) -> EconomyState:
        """Apply signed deltas after equipped-pet modifiers; totals never drop below zero"""
        totals = self.modifier_totals(game)

        effective_xp = _effective_delta(xp_delta, totals['xpBoost'], totals['xpPenalty'])
        effective_coins = _effective_delta(coins_delta, totals['coinBoost'], totals['coinPenalty'])

        game.economy.xp = max(0, game.economy.xp + effective_xp)
        game.economy.coins = max(0, game.economy.coins + effective_coins)
        game.last_reward_reason = reason

        return game.economy

    def spend(self, game: GameState, amount: int, reason: str):
        """Deduct a flat coin cost, untouched by modifiers"""
        if game.economy.coins < amount:
            raise InsufficientFunds(f"You need {amount} coins but only have {game.economy.coins}.")
        game.economy.coins -= amount
        game.last_reward_reason = reason

    def shop_price(self, game: GameState, base_cost: int) -> int:
        """Shop price after equipped pets' price-increase debuffs"""
        increase = self.modifier_totals(game)['priceIncrease']
        if not increase:
            return base_cost
        return math.ceil(round(base_cost * (1 + increase / 100), 6))


# Global economy ledger instance
economy_ledger = EconomyLedger()
