from src.database.storage import STORAGE_KEYS, get_storage_key
from src.gamification.engine import GamificationEngine


def test_storage_keys_are_scoped_by_user():
    assert get_storage_key('gamification') == 'taskflow_gamification'
    assert get_storage_key('quests', 42) == 'taskflow_quests_42'
    assert get_storage_key('studyLogs', 'abc') == 'taskflow_study_logs_abc'
    assert get_storage_key('custom_key') == 'custom_key'
    assert set(STORAGE_KEYS) == {'tasks', 'studyLogs', 'settings', 'gamification', 'quests'}


def test_sqlite_round_trip(sqlite_store):
    assert sqlite_store.load('settings', 7) is None
    assert sqlite_store.load('settings', 7, default={}) == {}

    assert sqlite_store.save('settings', {'theme': 'ocean', 'sound': True}, 7)
    assert sqlite_store.load('settings', 7) == {'theme': 'ocean', 'sound': True}
    assert sqlite_store.load('settings') is None

    assert sqlite_store.save('settings', {'theme': 'forest'}, 7)
    assert sqlite_store.load('settings', 7) == {'theme': 'forest'}

    assert sqlite_store.remove(get_storage_key('settings', 7))
    assert sqlite_store.load('settings', 7) is None


def test_default_config_is_populated(sqlite_store):
    assert sqlite_store.get_config('game_enabled') == 'True'
    assert sqlite_store.get_config('missing') is None

    assert sqlite_store.set_config('announce_channel', '1234')
    assert sqlite_store.list_config()['announce_channel'] == '1234'


def test_engine_persists_through_sqlite(sqlite_store, clock, rng):
    engine = GamificationEngine(user_id=99, store=sqlite_store, clock=clock, rng=rng)
    engine.apply_delta(0, 300, 'bonus')
    engine.spin()

    reloaded = GamificationEngine(user_id=99, store=sqlite_store, clock=clock, rng=rng)
    assert reloaded.game.economy.coins == 150
    assert len(reloaded.game.collection.pets) == 1
    assert reloaded.quests.daily.last_reset_at == engine.quests.daily.last_reset_at
    assert reloaded.last_save_ok
