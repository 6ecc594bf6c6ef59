import pytest

from src.gamification.economy import economy_ledger, focus_session_reward
from src.gamification.errors import InsufficientFunds
from src.gamification.models import GameState, Pet, Rarity


def make_game(xp=0, coins=0, buffs=None, debuffs=None):
    game = GameState()
    game.economy.xp = xp
    game.economy.coins = coins
    if buffs or debuffs:
        pet = Pet(id='helper', name='Helper', species='owl', rarity=Rarity.RARE,
                  base_buffs=buffs or {}, base_debuffs=debuffs or {})
        game.collection.pets.append(pet)
        game.collection.equipped.append(pet.id)
    return game


def test_plain_delta_without_pets():
    game = make_game()
    economy = economy_ledger.apply_delta(game, 120, 30, 'test')
    assert (economy.xp, economy.coins) == (120, 30)
    assert game.last_reward_reason == 'test'


def test_boost_grows_gains_and_shrinks_losses():
    game = make_game(xp=500, buffs={'xpBoost': 10})

    economy_ledger.apply_delta(game, 100, 0, 'gain')
    assert game.economy.xp == 610

    economy_ledger.apply_delta(game, -100, 0, 'loss')
    assert game.economy.xp == 520


def test_penalty_shrinks_gains_and_grows_losses():
    game = make_game(coins=500, debuffs={'coinPenalty': 20})

    economy_ledger.apply_delta(game, 0, 100, 'gain')
    assert game.economy.coins == 580

    economy_ledger.apply_delta(game, 0, -100, 'loss')
    assert game.economy.coins == 460


def test_unequipped_pets_do_not_count():
    game = make_game(buffs={'xpBoost': 50})
    game.collection.equipped.clear()
    economy_ledger.apply_delta(game, 100, 0, 'gain')
    assert game.economy.xp == 100


def test_totals_clamp_at_zero():
    game = make_game(xp=30, coins=10)
    economy = economy_ledger.apply_delta(game, -100, -100, 'undo')
    assert (economy.xp, economy.coins) == (0, 0)
    assert economy.level == 1


def test_spend_is_flat_and_checked():
    game = make_game(coins=100, debuffs={'coinPenalty': 20})
    economy_ledger.spend(game, 60, 'purchase')
    assert game.economy.coins == 40

    with pytest.raises(InsufficientFunds):
        economy_ledger.spend(game, 41, 'purchase')
    assert game.economy.coins == 40


def test_shop_price_rises_with_price_increase():
    assert economy_ledger.shop_price(make_game(), 100) == 100
    game = make_game(debuffs={'priceIncrease': 10})
    assert economy_ledger.shop_price(game, 100) == 110
    assert economy_ledger.shop_price(game, 5) == 6


def test_thirty_minute_focus_reward():
    reward = focus_session_reward(30)
    assert reward == {'multiplier': 2, 'xp': 60, 'coins': 12, 'energyBoost': 6}


def test_long_focus_reward_is_capped():
    reward = focus_session_reward(180)
    assert reward['multiplier'] == 5
    assert reward['xp'] == 900
    assert reward['coins'] == 180
    assert reward['energyBoost'] == 10
