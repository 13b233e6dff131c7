#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Priority Scorer
Weighted multi-criteria scoring of tasks into priority labels

Version: 1.0.0
Date: 2026-10-19
"""

import logging
import math
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from devhelper.models.enums import TaskPriority
from devhelper.models.task import MAX_SCALE, MIN_SCALE, PriorityCriteria, Task
from devhelper.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

# ===== CONSTANTS =====

COMPLEXITY_WEIGHT = 1.0
IMPACT_WEIGHT = 1.5
MAX_TIME_SCORE = 2
TIME_BLOCK_MINUTES = 120
MAX_DEPENDENCY_SCORE = 3

# (max days until deadline, bonus); first match wins
DEADLINE_BONUS_STEPS: Tuple[Tuple[int, float], ...] = (
    (0, 10.0),
    (1, 5.0),
    (3, 3.0),
    (7, 1.0),
    (14, 0.5),
)

# (min score, priority); first match wins
PRIORITY_THRESHOLDS: Tuple[Tuple[float, TaskPriority], ...] = (
    (13.0, TaskPriority.URGENT),
    (10.0, TaskPriority.HIGH),
    (7.0, TaskPriority.MEDIUM),
)

BASE_TASK_XP = 50

# ===== HELPERS =====

def deadline_bonus(days_until_deadline: int) -> float:
    for max_days, bonus in DEADLINE_BONUS_STEPS:
        if days_until_deadline <= max_days:
            return bonus
    return 0.0


def priority_for_score(score: float) -> TaskPriority:
    for min_score, priority in PRIORITY_THRESHOLDS:
        if score >= min_score:
            return priority
    return TaskPriority.LOW


def calculate_task_xp(task: Task) -> int:
    """XP granted for completing a task: 50 × complexity × priority multiplier"""
    return int(round(BASE_TASK_XP * task.priority_criteria.complexity * task.priority.xp_multiplier))

# ===== SCORER =====

class PriorityScorer:
    """Deterministic criteria → priority mapping"""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or Clock()

    def _days_until(self, deadline: datetime, now: Optional[datetime]) -> int:
        # Whole days, rounded up; anything already past is <= 0
        return math.ceil(self.clock.days_until(deadline, now))

    def calculate_score(self, criteria: PriorityCriteria, now: Optional[datetime] = None) -> float:
        score = criteria.complexity * COMPLEXITY_WEIGHT
        score += criteria.impact * IMPACT_WEIGHT
        score += max(0, MAX_TIME_SCORE - math.floor(criteria.estimated_time_minutes / TIME_BLOCK_MINUTES))
        score += min(len(criteria.dependencies), MAX_DEPENDENCY_SCORE)

        if criteria.deadline is not None:
            score += deadline_bonus(self._days_until(criteria.deadline, now))

        return score

    def calculate(self, criteria: PriorityCriteria, now: Optional[datetime] = None) -> TaskPriority:
        score = self.calculate_score(criteria, now)
        priority = priority_for_score(score)
        logger.debug(f"Priority score {score:.1f} -> {priority.value}")
        return priority

    def update_task_priority(self, task: Task, now: Optional[datetime] = None) -> Task:
        """Recompute the priority; ``updated_at`` moves only when it changed"""
        moment = self.clock.localize(now) if now is not None else self.clock.now()
        new_priority = self.calculate(task.priority_criteria, moment)
        if new_priority != task.priority:
            logger.info(f"🔄 Task {task.task_id} priority {task.priority.value} -> {new_priority.value}")
            task.priority = new_priority
            task.updated_at = moment
        return task

    def _sort_key(self, task: Task) -> Tuple[int, int, float, int]:
        deadline = task.priority_criteria.deadline
        if deadline is not None:
            return (task.priority.rank, 0, self.clock.localize(deadline).timestamp(),
                    -task.priority_criteria.impact)
        return (task.priority.rank, 1, 0.0, -task.priority_criteria.impact)

    def sort_tasks_by_priority(self, tasks: Iterable[Task]) -> List[Task]:
        """Stable sort: priority, then earliest deadline, then higher impact"""
        return sorted(tasks, key=self._sort_key)

    @staticmethod
    def suggest_priority_criteria(estimated_time: float, complexity: int = 3, impact: int = 3,
                                  deadline: Optional[datetime] = None) -> PriorityCriteria:
        """Criteria for a new task with out-of-range values clamped"""
        return PriorityCriteria.create(
            complexity=min(max(int(complexity), MIN_SCALE), MAX_SCALE),
            impact=min(max(int(impact), MIN_SCALE), MAX_SCALE),
            estimated_time_minutes=max(estimated_time, 0),
            dependencies=[],
            deadline=deadline,
        )


__all__ = [
    'PriorityScorer',
    'calculate_task_xp',
    'deadline_bonus',
    'priority_for_score',
]
