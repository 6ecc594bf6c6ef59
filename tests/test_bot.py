from types import SimpleNamespace

from bot import add_achievements
from src.gamification.engine import ActionResult


def test_achievement_unlocks_are_added_to_the_reply():
    result = ActionResult(success=True, message='Task done!')
    unlocked = SimpleNamespace(title='Centurion', reward={'xp': 500, 'coins': 100})

    add_achievements(result, ActionResult(success=True, value=[unlocked], level_up=3))

    assert 'Centurion (+500 XP, +100 coins)' in result.message
    assert result.level_up == 3


def test_keeps_the_higher_level_up():
    result = ActionResult(success=True, message='Task done!', level_up=4)
    add_achievements(result, ActionResult(success=True, value=[], level_up=3))
    assert result.level_up == 4


def test_failed_achievement_update_changes_nothing():
    result = ActionResult(success=True, message='Task done!')
    add_achievements(result, ActionResult(success=False, message='nope', error='NotFound'))
    assert result.message == 'Task done!'
    assert result.level_up is None
