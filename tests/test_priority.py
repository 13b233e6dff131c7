from datetime import timedelta

import pytest

from devhelper.core.exceptions import ValidationError
from devhelper.core.priority import (
    PriorityScorer, calculate_task_xp, deadline_bonus, priority_for_score
)
from devhelper.models.enums import TaskPriority
from devhelper.models.task import PriorityCriteria

from .conftest import FIXED_NOW, make_criteria, make_task


@pytest.fixture
def scorer(clock):
    return PriorityScorer(clock)


def test_reference_scores(scorer):
    assert scorer.calculate_score(make_criteria(5, 5, 30)) == 14.5
    assert scorer.calculate(make_criteria(5, 5, 30)) == TaskPriority.URGENT

    assert scorer.calculate_score(make_criteria(1, 1, 30)) == 4.5
    assert scorer.calculate(make_criteria(1, 1, 30)) == TaskPriority.LOW

    assert scorer.calculate(make_criteria(3, 5, 30)) == TaskPriority.HIGH
    assert scorer.calculate(make_criteria(3, 3, 30)) == TaskPriority.MEDIUM


def test_calculate_is_deterministic(scorer):
    criteria = make_criteria(4, 2, 90, ["a", "b"], FIXED_NOW + timedelta(days=5))
    assert scorer.calculate(criteria) == scorer.calculate(criteria)
    assert scorer.calculate_score(criteria) == scorer.calculate_score(criteria)


@pytest.mark.parametrize("minutes,expected", [
    (0, 2), (119, 2), (120, 1), (239, 1), (240, 0), (600, 0),
])
def test_time_score_steps(scorer, minutes, expected):
    base = 1 + 1.5
    assert scorer.calculate_score(make_criteria(1, 1, minutes)) == base + expected


def test_dependencies_capped_at_three(scorer):
    criteria = make_criteria(2, 2, 30, ["d1", "d2", "d3", "d4", "d5"])
    assert scorer.calculate_score(criteria) == 2 + 3 + 2 + 3
    assert scorer.calculate(criteria) == TaskPriority.HIGH


@pytest.mark.parametrize("offset,bonus", [
    (timedelta(days=-3), 10.0),
    (timedelta(0), 10.0),
    (timedelta(hours=12), 5.0),
    (timedelta(days=1), 5.0),
    (timedelta(days=2, hours=12), 3.0),
    (timedelta(days=6), 1.0),
    (timedelta(days=10), 0.5),
    (timedelta(days=20), 0.0),
])
def test_deadline_bonus_by_distance(scorer, offset, bonus):
    criteria = make_criteria(1, 1, 30, deadline=FIXED_NOW + offset)
    assert scorer.calculate_score(criteria) == 4.5 + bonus


def test_deadline_tomorrow_raises_priority(scorer):
    criteria = make_criteria(2, 2, 30, deadline=FIXED_NOW + timedelta(days=1))
    assert scorer.calculate(criteria) == TaskPriority.HIGH


def test_overdue_task_is_urgent(scorer):
    criteria = make_criteria(1, 1, 30, deadline=FIXED_NOW - timedelta(days=1))
    assert scorer.calculate(criteria) == TaskPriority.URGENT


def test_explicit_now_overrides_clock(scorer):
    deadline = FIXED_NOW + timedelta(days=20)
    criteria = make_criteria(1, 1, 30, deadline=deadline)
    assert scorer.calculate_score(criteria, now=deadline - timedelta(hours=1)) == 4.5 + 5.0


def test_step_helpers():
    assert deadline_bonus(-5) == 10.0
    assert deadline_bonus(1) == 5.0
    assert deadline_bonus(3) == 3.0
    assert deadline_bonus(7) == 1.0
    assert deadline_bonus(14) == 0.5
    assert deadline_bonus(15) == 0.0

    assert priority_for_score(13) == TaskPriority.URGENT
    assert priority_for_score(12.99) == TaskPriority.HIGH
    assert priority_for_score(10) == TaskPriority.HIGH
    assert priority_for_score(7) == TaskPriority.MEDIUM
    assert priority_for_score(6.5) == TaskPriority.LOW


def test_update_task_priority_keeps_updated_at_when_unchanged(scorer, frozen_time):
    task = make_task(priority=TaskPriority.MEDIUM, complexity=3, impact=3)
    before = task.updated_at
    frozen_time.advance(hours=2)

    scorer.update_task_priority(task)

    assert task.priority == TaskPriority.MEDIUM
    assert task.updated_at == before


def test_update_task_priority_touches_updated_at_on_change(scorer, frozen_time):
    task = make_task(priority=TaskPriority.LOW, complexity=5, impact=5)
    frozen_time.advance(hours=2)

    scorer.update_task_priority(task)

    assert task.priority == TaskPriority.URGENT
    assert task.updated_at == FIXED_NOW + timedelta(hours=2)


def test_sort_is_stable_for_equal_tasks(scorer):
    b = make_task("Task B")
    a = make_task("Task A")
    c = make_task("Task C")
    assert scorer.sort_tasks_by_priority([b, a, c]) == [b, a, c]


def test_sort_orders_priority_deadline_and_impact(scorer):
    low = make_task("Low one", priority=TaskPriority.LOW)
    urgent = make_task("Urgent one", priority=TaskPriority.URGENT)
    high_no_deadline = make_task("High no deadline", priority=TaskPriority.HIGH, impact=5)
    high_late = make_task("High late", priority=TaskPriority.HIGH,
                          deadline=FIXED_NOW + timedelta(days=9))
    high_soon = make_task("High soon", priority=TaskPriority.HIGH,
                          deadline=FIXED_NOW + timedelta(days=2))
    medium_low_impact = make_task("Medium low impact", impact=1)
    medium_high_impact = make_task("Medium high impact", impact=4)

    ordered = scorer.sort_tasks_by_priority([
        low, medium_low_impact, high_no_deadline, high_late,
        medium_high_impact, urgent, high_soon,
    ])

    assert ordered == [
        urgent, high_soon, high_late, high_no_deadline,
        medium_high_impact, medium_low_impact, low,
    ]


def test_suggest_priority_criteria_clamps(scorer):
    deadline = FIXED_NOW + timedelta(days=3)
    criteria = scorer.suggest_priority_criteria(-10, complexity=9, impact=0, deadline=deadline)

    assert criteria.complexity == 5
    assert criteria.impact == 1
    assert criteria.estimated_time_minutes == 0
    assert criteria.dependencies == []
    assert criteria.deadline == deadline


def test_suggest_priority_criteria_defaults(scorer):
    criteria = scorer.suggest_priority_criteria(45)
    assert (criteria.complexity, criteria.impact, criteria.estimated_time_minutes) == (3, 3, 45)
    assert criteria.deadline is None


@pytest.mark.parametrize("complexity,priority,xp", [
    (3, TaskPriority.MEDIUM, 180),
    (5, TaskPriority.URGENT, 500),
    (2, TaskPriority.HIGH, 150),
    (1, TaskPriority.LOW, 50),
])
def test_task_xp(complexity, priority, xp):
    assert calculate_task_xp(make_task(priority=priority, complexity=complexity)) == xp


def test_criteria_factory_normalizes_dependencies():
    criteria = PriorityCriteria.create(2, 2, 10, None)
    assert criteria.dependencies == []


@pytest.mark.parametrize("complexity,impact,minutes", [(0, 3, 10), (3, 6, 10), (3, 3, -1)])
def test_criteria_rejects_out_of_range(complexity, impact, minutes):
    with pytest.raises(ValidationError):
        PriorityCriteria.create(complexity, impact, minutes)


def test_sort_breaks_equal_deadlines_by_impact(scorer):
    due = FIXED_NOW + timedelta(days=9)
    low_impact = make_task("Low impact", priority=TaskPriority.HIGH, impact=1, deadline=due)
    high_impact = make_task("High impact", priority=TaskPriority.HIGH, impact=5, deadline=due)

    assert scorer.sort_tasks_by_priority([low_impact, high_impact]) == [high_impact, low_impact]
