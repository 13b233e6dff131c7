#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Progression Record
The single gamification record owned by the progression tracker

Version: 1.0.0
Date: 2026-10-19
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from devhelper.core.exceptions import ValidationError
from devhelper.utils.datetime_utils import CalendarDate

BASE_LEVEL_XP = 100
DEFAULT_TITLE = "Iniciante"

# ===== LEVEL MATH =====

def level_for_xp(xp_points: int) -> int:
    """floor(sqrt(xp / 100)) + 1"""
    return int(math.floor(math.sqrt(max(0, xp_points) / BASE_LEVEL_XP))) + 1


def xp_for_next_level(level: int) -> int:
    return level * level * BASE_LEVEL_XP


def _non_negative_int(data: Dict[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{key} must be non-negative")
    return int(value)

# ===== RECORD =====

@dataclass
class UserProgression:
    """Level, XP, achievements, counters and streak of the user"""
    level: int = 1
    xp_points: int = 0
    xp_for_next_level: int = BASE_LEVEL_XP
    title: str = DEFAULT_TITLE
    achievements: List[str] = field(default_factory=list)
    total_tasks: int = 0
    total_subtasks: int = 0
    total_focus_time_minutes: int = 0
    total_focus_sessions: int = 0
    streak_days: int = 0
    last_task_completion_date: Optional[CalendarDate] = None
    early_completions: int = 0
    late_completions: int = 0

    def __post_init__(self):
        if self.level < 1:
            raise ValidationError("level must be at least 1")
        if self.xp_points < 0:
            raise ValidationError("xp_points must be non-negative")
        if self.streak_days < 0:
            raise ValidationError("streak_days must be non-negative")

    @classmethod
    def default(cls) -> "UserProgression":
        return cls()

    # ===== QUERIES =====

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self.achievements

    def unlock(self, achievement_id: str) -> bool:
        """Append-only; False when already unlocked"""
        if achievement_id in self.achievements:
            return False
        self.achievements.append(achievement_id)
        return True

    @property
    def level_progress_percentage(self) -> float:
        if self.xp_for_next_level <= 0:
            return 100.0
        return min(100.0, (self.xp_points / self.xp_for_next_level) * 100)

    def current_streak(self, today: CalendarDate) -> int:
        """Streak as of ``today``: broken once the last completion is older than yesterday"""
        if self.last_task_completion_date is None:
            return 0
        if today.days_since(self.last_task_completion_date) > 1:
            return 0
        return self.streak_days

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'xp_points': self.xp_points,
            'xp_for_next_level': self.xp_for_next_level,
            'title': self.title,
            'achievements': list(self.achievements),
            'total_tasks': self.total_tasks,
            'total_subtasks': self.total_subtasks,
            'total_focus_time_minutes': self.total_focus_time_minutes,
            'total_focus_sessions': self.total_focus_sessions,
            'streak_days': self.streak_days,
            'last_task_completion_date': (
                self.last_task_completion_date.isoformat()
                if self.last_task_completion_date else None
            ),
            'early_completions': self.early_completions,
            'late_completions': self.late_completions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProgression":
        """Load a persisted record.

        Primary fields are validated; ``xp_for_next_level`` is always
        recomputed from the level so the stored copy can never drift.
        The title is left to the caller, which owns the title table.
        """
        if not isinstance(data, dict):
            raise ValidationError("progression record must be a mapping")

        level = _non_negative_int(data, 'level', 1)
        if level < 1:
            raise ValidationError("level must be at least 1")

        achievements = data.get('achievements', [])
        if not isinstance(achievements, list) or not all(isinstance(a, str) for a in achievements):
            raise ValidationError("achievements must be a list of ids")

        raw_date = data.get('last_task_completion_date')
        last_date = None
        if raw_date is not None:
            try:
                # Older records stored full timestamps
                last_date = CalendarDate.parse(str(raw_date)[:10])
            except ValueError:
                raise ValidationError(f"Invalid last_task_completion_date: {raw_date!r}")

        title = data.get('title', DEFAULT_TITLE)
        if not isinstance(title, str):
            raise ValidationError("title must be a string")

        return cls(
            level=level,
            xp_points=_non_negative_int(data, 'xp_points'),
            xp_for_next_level=xp_for_next_level(level),
            title=title,
            achievements=list(dict.fromkeys(achievements)),
            total_tasks=_non_negative_int(data, 'total_tasks'),
            total_subtasks=_non_negative_int(data, 'total_subtasks'),
            total_focus_time_minutes=_non_negative_int(data, 'total_focus_time_minutes'),
            total_focus_sessions=_non_negative_int(data, 'total_focus_sessions'),
            streak_days=_non_negative_int(data, 'streak_days'),
            last_task_completion_date=last_date,
            early_completions=_non_negative_int(data, 'early_completions'),
            late_completions=_non_negative_int(data, 'late_completions'),
        )


__all__ = [
    'UserProgression',
    'level_for_xp',
    'xp_for_next_level',
    'BASE_LEVEL_XP',
    'DEFAULT_TITLE',
]
