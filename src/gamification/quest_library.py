"""
Quest Library
Daily and weekly quest pools, the guaranteed "finish everything" quests,
and the lifetime achievement list
"""
from typing import Any, Dict, List

from .models import Periodicity, Quest, QuestCategory

GUARANTEED_DAILY_ID = 'daily_complete_daily_quests'
GUARANTEED_WEEKLY_ID = 'weekly_complete_weekly_quests'


def _template(quest_id, title, description, category, target, xp, coins, icon='🎯', counter=None):
    return {
        'id': quest_id,
        'title': title,
        'description': description,
        'category': category,
        'target': target,
        'reward': {'xp': xp, 'coins': coins},
        'icon': icon,
        'counter': counter,
    }


class QuestLibrary:
    """Quest templates; instances are built fresh for every reset"""

    def __init__(self):
        self._daily_pool = [
            _template('daily_complete_3_tasks', 'Getting Started', 'Complete 3 tasks today',
                      QuestCategory.TASKS, 3, 50, 10, '✅'),
            _template('daily_complete_5_tasks', 'Productive Day', 'Complete 5 tasks today',
                      QuestCategory.TASKS, 5, 80, 15, '📋'),
            _template('daily_study_30_min', 'Study Session', 'Study for 30 minutes today',
                      QuestCategory.STUDY, 30, 60, 12, '📚'),
            _template('daily_study_60_min', 'Deep Focus', 'Study for 60 minutes today',
                      QuestCategory.STUDY, 60, 100, 20, '🧠'),
            _template('daily_complete_pomodoro', 'Tomato Timer', 'Complete a pomodoro session',
                      QuestCategory.POMODORO, 1, 40, 8, '🍅'),
            _template('daily_complete_3_pomodoros', 'Pomodoro Streak', 'Complete 3 pomodoro sessions',
                      QuestCategory.POMODORO, 3, 90, 18, '⏱️'),
            _template('daily_feed_pet', 'Snack Time', 'Feed or play with your pets once',
                      QuestCategory.PET, 1, 30, 6, '🍎'),
            _template('daily_play_pet_3', 'Playtime', 'Care for your pets 3 times',
                      QuestCategory.PET, 3, 45, 9, '🎾'),
        ]

        self._weekly_pool = [
            _template('weekly_complete_20_tasks', 'Task Tackler', 'Complete 20 tasks this week',
                      QuestCategory.TASKS, 20, 200, 40, '✅'),
            _template('weekly_complete_35_tasks', 'Task Crusher', 'Complete 35 tasks this week',
                      QuestCategory.TASKS, 35, 320, 65, '💪'),
            _template('weekly_complete_50_tasks', 'Task Master', 'Complete 50 tasks this week',
                      QuestCategory.TASKS, 50, 450, 90, '🏅'),
            _template('weekly_study_3_hours', 'Study Habit', 'Study for 3 hours this week',
                      QuestCategory.STUDY, 180, 250, 50, '📚'),
            _template('weekly_study_5_hours', 'Bookworm', 'Study for 5 hours this week',
                      QuestCategory.STUDY, 300, 380, 75, '📖'),
            _template('weekly_study_10_hours', 'Scholar', 'Study for 10 hours this week',
                      QuestCategory.STUDY, 600, 600, 120, '🎓'),
            _template('weekly_complete_5_pomodoros', 'Steady Rhythm', 'Complete 5 pomodoros this week',
                      QuestCategory.POMODORO, 5, 150, 30, '🍅'),
            _template('weekly_complete_10_pomodoros', 'In The Zone', 'Complete 10 pomodoros this week',
                      QuestCategory.POMODORO, 10, 260, 52, '⏱️'),
            _template('weekly_complete_25_pomodoros', 'Time Lord', 'Complete 25 pomodoros this week',
                      QuestCategory.POMODORO, 25, 520, 105, '⌛'),
            _template('weekly_feed_pet_10', 'Pet Chef', 'Care for your pets 10 times this week',
                      QuestCategory.PET, 10, 150, 30, '🍖'),
            _template('weekly_play_pet_15', 'Best Friends', 'Care for your pets 15 times this week',
                      QuestCategory.PET, 15, 200, 40, '🎾'),
            _template('weekly_pet_care_25', 'Pet Whisperer', 'Care for your pets 25 times this week',
                      QuestCategory.PET, 25, 320, 64, '🐾'),
        ]

        self._guaranteed = {
            Periodicity.DAILY: _template(GUARANTEED_DAILY_ID, 'Daily Champion',
                                         'Complete all other daily quests today',
                                         QuestCategory.META, 1, 150, 30, '🌟'),
            Periodicity.WEEKLY: _template(GUARANTEED_WEEKLY_ID, 'Weekly Legend',
                                          'Complete all other weekly quests this week',
                                          QuestCategory.META, 1, 500, 100, '👑'),
        }

        self._achievements = [
            _template('achieve_level_5', 'Rising Star', 'Reach level 5',
                      QuestCategory.LEVEL, 5, 200, 50, '⭐', counter='level'),
            _template('achieve_level_10', 'Seasoned Student', 'Reach level 10',
                      QuestCategory.LEVEL, 10, 500, 100, '🌠', counter='level'),
            _template('achieve_complete_100_tasks', 'Centurion', 'Complete 100 tasks in total',
                      QuestCategory.TASKS, 100, 500, 100, '💯', counter='tasks_completed'),
            _template('achieve_study_50_hours', 'Marathon Mind', 'Study for 50 hours in total',
                      QuestCategory.STUDY, 3000, 800, 160, '🏃', counter='study_minutes'),
            _template('achieve_complete_100_pomodoros', 'Tomato Farmer', 'Complete 100 pomodoros in total',
                      QuestCategory.POMODORO, 100, 600, 120, '🍅', counter='pomodoros_completed'),
            _template('achieve_get_legendary_pet', 'Legend Keeper', 'Own a Legendary pet or better',
                      QuestCategory.PET, 1, 300, 60, '🐉', counter='legendary_pets'),
            _template('achieve_get_mythical_pet', 'Myth Maker', 'Own a Mythical pet or better',
                      QuestCategory.PET, 1, 600, 120, '🦄', counter='mythical_pets'),
            _template('achieve_get_secret_pet', 'Beyond The Stars', 'Own a Secret pet',
                      QuestCategory.PET, 1, 1000, 200, '🌌', counter='secret_pets'),
            _template('achieve_feed_50', 'Master Chef', 'Feed your pets 50 times',
                      QuestCategory.PET, 50, 300, 60, '👨‍🍳', counter='feed_count'),
        ]

    def get_pool(self, periodicity: Periodicity) -> List[Dict[str, Any]]:
        if periodicity == Periodicity.DAILY:
            return self._daily_pool
        if periodicity == Periodicity.WEEKLY:
            return self._weekly_pool
        return []

    def get_guaranteed(self, periodicity: Periodicity) -> Dict[str, Any]:
        return self._guaranteed[periodicity]

    def get_achievements(self) -> List[Dict[str, Any]]:
        return self._achievements

    def build(self, template: Dict[str, Any], periodicity: Periodicity) -> Quest:
        """Create a fresh, incomplete quest from a template"""
        return Quest(
            id=template['id'],
            title=template['title'],
            description=template['description'],
            category=template['category'],
            periodicity=periodicity,
            target=template['target'],
            reward=dict(template['reward']),
            icon=template['icon'],
            counter=template['counter'],
            guaranteed=template['id'] in (GUARANTEED_DAILY_ID, GUARANTEED_WEEKLY_ID),
        )


# Global quest library instance
quest_library = QuestLibrary()
