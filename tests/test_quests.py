from datetime import datetime, timedelta, timezone

import pytest

from src.gamification.errors import NotFound
from src.gamification.models import GameState, Periodicity, Quest, QuestBook, QuestCategory
from src.gamification.quest_library import GUARANTEED_DAILY_ID, GUARANTEED_WEEKLY_ID
from src.gamification.quest_system import (
    RESET_TIMEZONE, daily_boundary, next_daily_reset, next_weekly_reset, quest_system, should_reset,
    weekly_boundary,
)
from src.gamification.random_source import RandomSource


def local(*args):
    return datetime(*args, tzinfo=RESET_TIMEZONE)


def fresh_book(now, seed=1):
    book = QuestBook()
    quest_system.ensure_achievements(book)
    quest_system.check_resets(book, now, RandomSource(seed))
    return book


@pytest.mark.parametrize('seed', [0, 1, 7, 99])
def test_generated_set_sizes(seed):
    daily = quest_system.generate_daily(RandomSource(seed))
    weekly = quest_system.generate_weekly(RandomSource(seed))

    assert len(daily) == 5
    assert len({quest.id for quest in daily}) == 5
    assert daily[0].id == GUARANTEED_DAILY_ID
    assert len(weekly) == 10
    assert len({quest.id for quest in weekly}) == 10
    assert weekly[0].id == GUARANTEED_WEEKLY_ID
    assert not any(quest.completed for quest in daily + weekly)


def test_daily_boundary_crossing_midnight():
    last = local(2024, 1, 15, 23, 59)
    assert should_reset(last, local(2024, 1, 16, 0, 1), daily_boundary)
    assert not should_reset(last, local(2024, 1, 15, 23, 58), daily_boundary)


def test_boundaries_ignore_caller_timezone():
    # 17:30 UTC is already 00:30 the next day in UTC+7
    moment = datetime(2024, 1, 15, 17, 30, tzinfo=timezone.utc)
    assert daily_boundary(moment) == datetime(2024, 1, 15, 17, 0, tzinfo=timezone.utc)
    assert next_daily_reset(moment) == datetime(2024, 1, 16, 17, 0, tzinfo=timezone.utc)


def test_weekly_boundary_is_monday():
    sunday_night = local(2024, 1, 21, 23, 59)
    monday_morning = local(2024, 1, 22, 0, 1)
    assert weekly_boundary(monday_morning) == local(2024, 1, 22)
    assert should_reset(sunday_night, monday_morning, weekly_boundary)
    assert not should_reset(local(2024, 1, 23, 9), local(2024, 1, 24, 9), weekly_boundary)
    assert next_weekly_reset(sunday_night) == local(2024, 1, 22)


def test_no_prior_reset_always_resets():
    assert should_reset(None, local(2024, 1, 15, 12), daily_boundary)


def test_reset_stamps_boundary_and_clears_progress():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    daily_ids = [quest.id for quest in book.daily.quests]
    book.progress[daily_ids[1]] = 2
    book.progress['achieve_complete_100_tasks'] = 40

    later = local(2024, 1, 16, 8)
    reset = quest_system.check_resets(book, later, RandomSource(5))

    assert reset == [Periodicity.DAILY]
    assert book.daily.last_reset_at == daily_boundary(later)
    assert daily_ids[1] not in book.progress
    assert book.progress['achieve_complete_100_tasks'] == 40


def test_check_is_idempotent_within_a_day():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    quests_before = [quest.id for quest in book.daily.quests]
    assert quest_system.check_resets(book, now + timedelta(hours=13), RandomSource(8)) == []
    assert [quest.id for quest in book.daily.quests] == quests_before


def make_quest(quest_id, category, target, periodicity=Periodicity.DAILY, guaranteed=False):
    return Quest(id=quest_id, title=quest_id, description='', category=category, periodicity=periodicity,
                 target=target, reward={'xp': 100, 'coins': 20}, guaranteed=guaranteed)


def test_additive_progress_completes_once():
    now = local(2024, 1, 15, 10)
    book = QuestBook()
    book.daily.quests = [make_quest('study', QuestCategory.STUDY, 60)]
    game = GameState()

    assert quest_system.report_category_event(book, game, QuestCategory.STUDY, 25, now) == []
    assert book.progress['study'] == 25

    completed = quest_system.report_category_event(book, game, QuestCategory.STUDY, 40, now)
    assert [quest.id for quest in completed] == ['study']
    assert book.daily.quests[0].completed_at == now
    assert (game.economy.xp, game.economy.coins) == (100, 20)

    assert quest_system.report_category_event(book, game, QuestCategory.STUDY, 40, now) == []
    assert (game.economy.xp, game.economy.coins) == (100, 20)


def test_level_progress_keeps_high_water_mark():
    now = local(2024, 1, 15, 10)
    book = QuestBook()
    book.weekly.quests = [make_quest('reach_5', QuestCategory.LEVEL, 5, Periodicity.WEEKLY)]
    game = GameState()

    quest_system.report_category_event(book, game, QuestCategory.LEVEL, 3, now)
    quest_system.report_category_event(book, game, QuestCategory.LEVEL, 2, now)
    assert book.progress['reach_5'] == 3

    quest_system.report_category_event(book, game, QuestCategory.LEVEL, 5, now)
    assert book.weekly.quests[0].completed


def test_other_categories_are_untouched():
    now = local(2024, 1, 15, 10)
    book = QuestBook()
    book.daily.quests = [make_quest('tasks', QuestCategory.TASKS, 3)]
    quest_system.report_category_event(book, GameState(), QuestCategory.PET, 5, now)
    assert book.progress == {}


def test_guaranteed_quest_follows_the_rest_of_its_set():
    now = local(2024, 1, 15, 10)
    book = QuestBook()
    book.daily.quests = [
        make_quest(GUARANTEED_DAILY_ID, QuestCategory.META, 1, guaranteed=True),
        make_quest('tasks', QuestCategory.TASKS, 2),
        make_quest('pet', QuestCategory.PET, 1),
    ]
    game = GameState()

    quest_system.report_category_event(book, game, QuestCategory.PET, 1, now)
    assert not book.daily.quests[0].completed

    completed = quest_system.report_category_event(book, game, QuestCategory.TASKS, 2, now)
    assert [quest.id for quest in completed] == ['tasks', GUARANTEED_DAILY_ID]
    assert game.economy.xp == 300


def test_meta_event_leaves_guaranteed_quests_alone():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    game = GameState()

    assert quest_system.report_category_event(book, game, QuestCategory.META, 1, now) == []
    assert not book.find(GUARANTEED_DAILY_ID).completed
    assert not book.find(GUARANTEED_WEEKLY_ID).completed
    assert game.economy.xp == 0


def test_achievements_only_move_forward():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    game = GameState()

    quest_system.update_achievements(book, game, {'tasks_completed': 60}, now)
    quest_system.update_achievements(book, game, {'tasks_completed': 10}, now)
    assert book.progress['achieve_complete_100_tasks'] == 60

    completed = quest_system.update_achievements(book, game, {'tasks_completed': 100}, now)
    assert [quest.id for quest in completed] == ['achieve_complete_100_tasks']
    assert quest_system.update_achievements(book, game, {'tasks_completed': 150}, now) == []


def test_category_events_skip_achievements():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    quest_system.report_category_event(book, GameState(), QuestCategory.TASKS, 500, now)
    assert 'achieve_complete_100_tasks' not in book.progress


def test_complete_unknown_quest():
    with pytest.raises(NotFound):
        quest_system.complete_quest(QuestBook(), GameState(), 'nope', local(2024, 1, 15))


def test_complete_all_active_grants_every_reward():
    now = local(2024, 1, 15, 10)
    book = fresh_book(now)
    game = GameState()

    completed = quest_system.complete_all_active(book, game, now)

    assert len(completed) == 15
    assert all(quest.completed for quest in book.daily.quests + book.weekly.quests)
    expected_xp = sum(quest.reward['xp'] for quest in completed)
    assert game.economy.xp == expected_xp
