#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Priority Suggestions
Bounded completion history and the pattern-based priority suggester

Version: 1.0.0
Date: 2026-10-19
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional

from devhelper.core.exceptions import ValidationError
from devhelper.core.storage import KeyValueStore
from devhelper.models.enums import TaskPriority, TaskStatus
from devhelper.models.task import MAX_SCALE, PriorityCriteria, Task, TaskHistoryEntry
from devhelper.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

HISTORY_STORE_KEY = "dev-helper-task-history"
DEFAULT_HISTORY_CAPACITY = 100

# Similarity window
MAX_COMPLEXITY_DIFF = 1
MAX_IMPACT_DIFF = 1
MAX_TIME_DIFF_MINUTES = 30

CONFIDENCE_THRESHOLD = 0.7
URGENT_DEADLINE_DAYS = 2
HIGH_CRITERIA_VALUE = 4

INSUFFICIENT_HISTORY_REASON = "Insufficient history for a precise suggestion"
FALLBACK_REASON = "Suggestion based on historical patterns"

# ===== HISTORY =====

class TaskHistoryStore:
    """Fixed-capacity log of completed tasks, newest first"""

    def __init__(self, store: Optional[KeyValueStore] = None, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.store = store
        self.capacity = capacity
        self._entries: Deque[TaskHistoryEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TaskHistoryEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> List[TaskHistoryEntry]:
        return list(self._entries)

    def add(self, task: Task, actual_time_spent: float) -> bool:
        """Record a completed task; anything else is ignored"""
        if task.status != TaskStatus.COMPLETED or task.completed_at is None:
            logger.debug(f"Task {task.task_id} is not completed, not added to history")
            return False

        # appendleft on a bounded deque drops the oldest entry from the right
        self._entries.appendleft(TaskHistoryEntry.from_task(task, actual_time_spent))
        return True

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def load_entries(self, raw_entries: Iterable[Dict[str, Any]]) -> int:
        """Replace the contents; entries past capacity are dropped"""
        self._entries.clear()
        loaded = 0
        for raw in raw_entries:
            if loaded >= self.capacity:
                break
            self._entries.append(TaskHistoryEntry.from_dict(raw))
            loaded += 1
        return loaded

    async def load(self) -> int:
        """Load from the store; unreadable or malformed history starts empty"""
        if self.store is None:
            return 0
        try:
            raw = await self.store.get(HISTORY_STORE_KEY)
        except Exception as e:
            logger.warning(f"⚠️ Task history unreadable, starting empty: {e}")
            self._entries.clear()
            return 0

        if raw is None:
            return 0

        try:
            if not isinstance(raw, list):
                raise ValidationError("history must be a list")
            count = self.load_entries(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Task history malformed, starting empty: {e}")
            self._entries.clear()
            return 0

        logger.info(f"📚 Loaded {count} task history entries")
        return count

    async def save(self) -> None:
        if self.store is None:
            return
        await self.store.update(HISTORY_STORE_KEY, self.to_list())

# ===== SUGGESTER =====

@dataclass
class PrioritySuggestion:
    suggested_priority: TaskPriority
    confidence: float
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'suggested_priority': self.suggested_priority.value,
            'confidence': self.confidence,
            'reasons': list(self.reasons),
        }


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def _clamp_ratio(value: float) -> float:
    return min(1.0, max(0.0, value))


class PrioritySuggester:
    """Suggests a priority for a draft task from similar completed tasks"""

    def __init__(self, history: Optional[TaskHistoryStore] = None, clock: Optional[Clock] = None):
        self.history = history if history is not None else TaskHistoryStore()
        self.clock = clock or Clock()

    def add_to_history(self, task: Task, actual_time_spent: float) -> bool:
        return self.history.add(task, actual_time_spent)

    @staticmethod
    def is_similar(entry: TaskHistoryEntry, criteria: PriorityCriteria) -> bool:
        return (
            abs(entry.criteria.complexity - criteria.complexity) <= MAX_COMPLEXITY_DIFF
            and abs(entry.criteria.impact - criteria.impact) <= MAX_IMPACT_DIFF
            and abs(entry.criteria.estimated_time_minutes - criteria.estimated_time_minutes) <= MAX_TIME_DIFF_MINUTES
        )

    def find_similar(self, criteria: PriorityCriteria) -> List[TaskHistoryEntry]:
        return [entry for entry in self.history if self.is_similar(entry, criteria)]

    def is_deadline_urgent(self, deadline: datetime, now: Optional[datetime] = None) -> bool:
        return self.clock.days_until(deadline, now) <= URGENT_DEADLINE_DAYS

    @staticmethod
    def _time_match(avg_time: float, estimated_time: float) -> float:
        if estimated_time == 0:
            return 1.0 if avg_time == 0 else 0.0
        return _clamp_ratio(1 - abs(avg_time - estimated_time) / (estimated_time * 2))

    def group_confidence(self, entries: List[TaskHistoryEntry], criteria: PriorityCriteria) -> float:
        avg_complexity = _mean([e.criteria.complexity for e in entries])
        avg_impact = _mean([e.criteria.impact for e in entries])
        avg_time = _mean([e.criteria.estimated_time_minutes for e in entries])

        complexity_match = _clamp_ratio(1 - abs(avg_complexity - criteria.complexity) / MAX_SCALE)
        impact_match = _clamp_ratio(1 - abs(avg_impact - criteria.impact) / MAX_SCALE)
        time_match = self._time_match(avg_time, criteria.estimated_time_minutes)

        return (complexity_match + impact_match + time_match) / 3

    def suggest(self, criteria: PriorityCriteria, now: Optional[datetime] = None) -> PrioritySuggestion:
        similar = self.find_similar(criteria)
        if not similar:
            return PrioritySuggestion(TaskPriority.MEDIUM, 0.5, [INSUFFICIENT_HISTORY_REASON])

        # dict keeps first-appearance order of the groups
        groups: Dict[TaskPriority, List[TaskHistoryEntry]] = {}
        for entry in similar:
            groups.setdefault(entry.priority, []).append(entry)

        most_common = TaskPriority.MEDIUM
        max_count = 0
        confidences: List[float] = []
        reasons: List[str] = []

        for priority, entries in groups.items():
            if len(entries) > max_count:
                max_count = len(entries)
                most_common = priority

            confidence = self.group_confidence(entries, criteria)
            confidences.append(confidence)

            if confidence > CONFIDENCE_THRESHOLD:
                avg_complexity = _mean([e.criteria.complexity for e in entries])
                avg_impact = _mean([e.criteria.impact for e in entries])
                reasons.append(
                    f"Similar tasks with complexity {avg_complexity:.1f}/5 "
                    f"and impact {avg_impact:.1f}/5 were marked as {priority.value}"
                )

        if criteria.complexity >= HIGH_CRITERIA_VALUE:
            reasons.append("High complexity suggests elevated priority")
        if criteria.impact >= HIGH_CRITERIA_VALUE:
            reasons.append("High impact suggests elevated priority")
        if criteria.deadline is not None and self.is_deadline_urgent(criteria.deadline, now):
            reasons.append("Deadline is close, suggesting urgent priority")

        suggestion = PrioritySuggestion(
            suggested_priority=most_common,
            confidence=_mean(confidences),
            reasons=reasons or [FALLBACK_REASON],
        )
        logger.debug(
            f"Suggested {suggestion.suggested_priority.value} "
            f"(confidence {suggestion.confidence:.2f}) from {len(similar)} similar tasks"
        )
        return suggestion

    def get_urgent_tasks(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> List[Task]:
        """URGENT tasks plus high-impact tasks whose deadline is at most two days away"""
        urgent = []
        for task in tasks:
            if task.priority == TaskPriority.URGENT:
                urgent.append(task)
                continue
            deadline = task.priority_criteria.deadline
            if (deadline is not None
                    and self.is_deadline_urgent(deadline, now)
                    and task.priority_criteria.impact >= HIGH_CRITERIA_VALUE):
                urgent.append(task)
        return urgent


__all__ = [
    'TaskHistoryStore',
    'PrioritySuggester',
    'PrioritySuggestion',
    'HISTORY_STORE_KEY',
    'INSUFFICIENT_HISTORY_REASON',
    'FALLBACK_REASON',
]
