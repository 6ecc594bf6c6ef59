from datetime import timedelta

from src.gamification.engine import GamificationEngine
from src.gamification.gacha_system import SPIN_COST
from src.gamification.models import QuestCategory


def test_load_generates_quests_and_saves(engine, store):
    assert len(engine.quests.daily.quests) == 5
    assert len(engine.quests.weekly.quests) == 10
    assert engine.quests.achievements
    assert 'taskflow_quests_tester' in store.data
    assert 'taskflow_gamification_tester' in store.data
    assert engine.snapshot.version == 1


def test_complete_task_rewards_and_reports(engine):
    result = engine.complete_task()

    assert result.success
    assert result.value == {'xp': 60, 'coins': 12}
    assert (engine.game.economy.xp, engine.game.economy.coins) == (60, 12)
    task_quests = [q for q in engine.quests.daily.quests if q.category == QuestCategory.TASKS]
    for quest in task_quests:
        assert engine.quests.progress[quest.id] == 1


def test_uncomplete_task_takes_reward_back(engine):
    engine.complete_task()
    engine.uncomplete_task()
    assert (engine.game.economy.xp, engine.game.economy.coins) == (0, 0)


def test_failed_action_leaves_snapshot_alone(engine, store):
    version = engine.snapshot.version
    saves = store.save_calls

    result = engine.spin()

    assert not result.success
    assert result.error == 'InsufficientFunds'
    assert engine.snapshot.version == version
    assert store.save_calls == saves
    assert engine.game.collection.pets == []


def test_spin_persists_and_reloads(engine, store, clock, rng):
    engine.apply_delta(0, SPIN_COST, 'seed coins')
    result = engine.spin()
    assert result.success

    reloaded = GamificationEngine(user_id='tester', store=store, clock=clock, rng=rng)
    assert reloaded.game.economy.coins == 0
    assert reloaded.game.pity_counter == 1
    pet = reloaded.game.collection.pets[0]
    assert pet.id == result.value.id
    assert pet.base_debuffs == result.value.base_debuffs
    assert [q.id for q in reloaded.quests.daily.quests] == [q.id for q in engine.quests.daily.quests]


def test_users_are_stored_separately(store, clock, rng):
    alice = GamificationEngine(user_id=1, store=store, clock=clock, rng=rng)
    alice.apply_delta(100, 100, 'bonus')
    bob = GamificationEngine(user_id=2, store=store, clock=clock, rng=rng)
    assert bob.game.economy.coins == 0


def test_save_failure_keeps_state_in_memory(engine, store):
    store.fail_saves = True
    result = engine.apply_delta(0, 50, 'bonus')

    assert result.success
    assert engine.game.economy.coins == 50
    assert not engine.last_save_ok


def test_observers_see_committed_snapshots(engine):
    seen = []
    unsubscribe = engine.subscribe(lambda snapshot: seen.append(snapshot.version))

    engine.apply_delta(10, 0, 'one')
    engine.spin()
    unsubscribe()
    engine.apply_delta(10, 0, 'two')

    assert seen == [2]


def test_focus_session_rewards_pets_and_quests(engine):
    engine.apply_delta(0, SPIN_COST, 'seed coins')
    pet_id = engine.spin().value.id
    engine.equip(pet_id)
    coins_before = engine.game.economy.coins

    result = engine.complete_focus_session(30)

    assert result.success
    assert result.value['energyBoost'] == 6
    assert engine.game.collection.get(pet_id).energy == 76
    # The Common pet only rolls a coin penalty, so XP is the session plus any quest rewards
    quest_xp = sum(q.reward['xp'] for q in engine.quests.daily.quests + engine.quests.weekly.quests if q.completed)
    assert engine.game.economy.xp == 60 + quest_xp
    assert engine.game.economy.coins > coins_before
    study = [q for q in engine.quests.daily.quests if q.category == QuestCategory.STUDY]
    for quest in study:
        assert engine.quests.progress[quest.id] == 30 or quest.completed


def test_focus_session_needs_minutes(engine):
    result = engine.complete_focus_session(0)
    assert not result.success
    assert result.error == 'InvalidSelection'


def test_feed_and_play_report_pet_care(engine):
    engine.apply_delta(0, SPIN_COST + 10, 'seed coins')
    pet_id = engine.spin().value.id
    assert engine.buy_food('basic', 2).success

    assert engine.feed(pet_id, 'basic').success
    assert engine.play(pet_id).success

    assert engine.game.feed_count == 1
    assert engine.game.play_count == 1
    assert engine.game.food_inventory == {'basic': 1}
    pet_quests = [q for q in engine.quests.daily.quests + engine.quests.weekly.quests
                  if q.category == QuestCategory.PET and not q.completed]
    for quest in pet_quests:
        assert engine.quests.progress[quest.id] == 2


def test_release_equipped_pet_is_refused(engine):
    engine.apply_delta(0, SPIN_COST, 'seed coins')
    pet_id = engine.spin().value.id
    engine.equip(pet_id)

    result = engine.delete_pet(pet_id)
    assert not result.success
    assert result.error == 'InvalidSelection'
    assert engine.game.collection.get(pet_id)


def test_level_up_is_reported(engine):
    result = engine.apply_delta(500, 0, 'big task')
    assert result.level_up == 2
    assert engine.apply_delta(10, 0, 'small task').level_up is None


def test_level_achievement_unlocks_from_engine_counters(engine):
    engine.apply_delta(2000, 0, 'grind')
    achievement = engine.quests.find('achieve_level_5')
    assert achievement.completed
    assert engine.game.economy.xp == 2000 + achievement.reward['xp']


def test_quest_poll_resets_after_boundary(engine, clock):
    engine.start_quest_poll()
    daily_reset = engine.quests.daily.last_reset_at
    weekly_reset = engine.quests.weekly.last_reset_at

    clock.fire()
    assert engine.quests.daily.last_reset_at == daily_reset

    clock.advance(days=1)
    clock.fire()
    assert engine.quests.daily.last_reset_at == daily_reset + timedelta(days=1)
    assert engine.quests.weekly.last_reset_at == weekly_reset

    engine.stop_quest_poll()
    clock.advance(days=1)
    clock.fire()
    assert engine.quests.daily.last_reset_at == daily_reset + timedelta(days=1)


def test_admin_tools(engine):
    completed = engine.complete_all_quests().value
    assert len(completed) == 15
    assert engine.game.economy.xp > 0

    assert engine.complete_quest('not-a-quest').error == 'NotFound'

    engine.reset_daily_quests()
    assert not any(q.completed for q in engine.quests.daily.quests)
    assert all(q.completed for q in engine.quests.weekly.quests)

    engine.reset_gamification()
    assert engine.game.economy.xp == 0

    engine.reset_quests()
    assert not any(q.completed for q in engine.quests.weekly.quests)
    assert engine.check_quest_resets() == []


def test_report_category_event_accepts_names(engine):
    assert engine.report_category_event('pomodoro', 1).success
    assert engine.report_category_event('naps', 1).error == 'InvalidSelection'


def test_legacy_pets_recover_raw_modifiers(store, clock, rng):
    store.save('gamification', {
        'xp': 0, 'coins': 0,
        'petInventory': [{'id': 'old', 'name': 'Owl', 'species': 'owl', 'rarity': 'Rare', 'level': 11,
                          'buffs': {'xpBoost': 11}, 'debuffs': {}}],
        'equippedPets': ['old'],
    }, 'legacy')

    engine = GamificationEngine(user_id='legacy', store=store, clock=clock, rng=rng)

    pet = engine.game.collection.get('old')
    assert pet.base_buffs == {'xpBoost': 10}
    assert engine.get_modifier_totals()['xpBoost'] == 11


def test_theme_and_frame_purchases(engine):
    engine.apply_delta(0, 900, 'savings')

    assert engine.buy_theme('ocean').success
    assert engine.equip_theme('ocean').success
    assert engine.buy_theme('ocean').error == 'InvalidSelection'
    assert engine.equip_frame('frame_classic').error == 'InvalidSelection'
    assert engine.buy_frame('frame_classic').success
    assert engine.equip_frame('frame_classic').success
    assert engine.buy_frame('frame_gold').error == 'InsufficientFunds'

    assert engine.game.current_theme == 'ocean'
    assert engine.game.current_frame == 'frame_classic'
    assert engine.game.economy.coins == 100
    assert engine.unequip_frame().success
    assert engine.game.current_frame is None


def test_meta_event_does_not_finish_the_set_early(engine):
    result = engine.report_category_event('meta', 1)

    assert result.success
    guaranteed = [q for q in engine.quests.daily.quests + engine.quests.weekly.quests if q.guaranteed]
    assert len(guaranteed) == 2
    assert not any(q.completed for q in guaranteed)
    assert engine.game.economy.xp == 0


def test_spin_many_needs_a_positive_count(engine):
    engine.apply_delta(0, 1000, 'savings')

    for count in (0, -3):
        result = engine.spin_many(count)
        assert not result.success
        assert result.error == 'InvalidSelection'

    assert engine.game.economy.coins == 1000
    assert engine.game.collection.pets == []


def test_achievement_reward_reports_level_up(engine):
    engine.apply_delta(450, 0, 'almost there')

    result = engine.update_achievements({'tasks_completed': 100})

    assert [q.id for q in result.value] == ['achieve_complete_100_tasks']
    assert result.level_up == engine.game.economy.level
    assert result.level_up >= 2
