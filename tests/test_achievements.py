import pytest

from devhelper.core.achievements import (
    Achievement, AchievementCatalog, CounterChecker, LEVEL_UP_REWARDS,
    get_level_up_reward, level_title, next_level_reward
)
from devhelper.models.progression import UserProgression

CATALOG_IDS = [
    "first_task", "task_warrior", "task_master", "priority_king",
    "focus_master", "focus_legend", "early_bird", "night_owl",
    "streak_3", "streak_7", "streak_30", "subtask_master",
    "time_1h", "time_10h", "time_100h",
]


@pytest.fixture
def catalog():
    return AchievementCatalog()


def test_catalog_contents(catalog):
    assert [a.achievement_id for a in catalog.all()] == CATALOG_IDS
    assert "first_task" in catalog
    assert "unknown" not in catalog
    assert catalog.get("first_task").xp_reward == 100
    assert catalog.get("streak_30").xp_reward == 5000
    assert catalog.get("time_100h").icon == "$(clock)"
    assert catalog.get("missing") is None


def test_nothing_unlocks_on_fresh_record(catalog):
    assert catalog.evaluate(UserProgression.default()) == []


def test_first_task_unlocks(catalog):
    progression = UserProgression(total_tasks=1)
    assert [a.achievement_id for a in catalog.evaluate(progression)] == ["first_task"]


def test_unlocked_achievements_are_not_reported_again(catalog):
    progression = UserProgression(total_tasks=1, achievements=["first_task"])
    assert catalog.evaluate(progression) == []


def test_fifty_tasks_in_catalog_order(catalog):
    progression = UserProgression(total_tasks=50)
    assert [a.achievement_id for a in catalog.evaluate(progression)] == [
        "first_task", "task_warrior", "priority_king",
    ]


def test_counter_predicates(catalog):
    progression = UserProgression(
        total_focus_sessions=10,
        total_focus_time_minutes=600,
        streak_days=7,
        total_subtasks=100,
        early_completions=1,
        late_completions=1,
    )
    assert {a.achievement_id for a in catalog.evaluate(progression)} == {
        "focus_master", "early_bird", "night_owl", "streak_3", "streak_7",
        "subtask_master", "time_1h", "time_10h",
    }


def test_progress_is_capped_at_target(catalog):
    progress = catalog.get_progress(UserProgression(total_focus_time_minutes=90))
    assert progress["time_1h"] == (60, 60)
    assert progress["time_10h"] == (90, 600)


def test_duplicate_ids_rejected():
    achievement = Achievement("dup", "Dup", "Dup", "$(star)", 10, CounterChecker(1, lambda p: p.total_tasks))
    with pytest.raises(ValueError):
        AchievementCatalog([achievement, achievement])


@pytest.mark.parametrize("level,title", [
    (1, "Iniciante"), (4, "Iniciante"), (5, "Aprendiz"), (9, "Aprendiz"),
    (10, "Iniciado"), (19, "Iniciado"), (20, "Adepto"), (30, "Mestre"), (50, "Mestre"),
])
def test_level_titles(level, title):
    assert level_title(level) == title


def test_level_up_rewards():
    assert sorted(LEVEL_UP_REWARDS) == [5, 10, 20, 30, 50]
    assert get_level_up_reward(5).title == "Aprendiz"
    assert len(get_level_up_reward(10).rewards) == 4
    assert get_level_up_reward(6) is None

    assert next_level_reward(1).level == 5
    assert next_level_reward(5).level == 10
    assert next_level_reward(49).level == 50
    assert next_level_reward(50) is None


def test_reward_bundle_dump_uses_camel_case():
    bundle = get_level_up_reward(50).to_bundle()
    assert bundle.to_dict() == {
        "level": 50,
        "title": "Lenda",
        "description": "Você transcendeu os limites da produtividade!",
        "rewards": list(LEVEL_UP_REWARDS[50].rewards),
    }
