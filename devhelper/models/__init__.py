#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Models Package
Data models and enums of the priority and progression engine

Version: 1.0.0
Date: 2026-10-19
"""

from .enums import (
    TaskStatus,
    TaskPriority
)

from .task import (
    PriorityCriteria,
    Subtask,
    Task,
    TaskHistoryEntry
)

from .progression import (
    UserProgression,
    level_for_xp,
    xp_for_next_level
)

from .events import (
    RewardBundle,
    LevelUpEvent,
    AchievementUnlockedEvent,
    ProgressionEvent
)

__all__ = [
    # Enums
    'TaskStatus',
    'TaskPriority',

    # Tasks
    'PriorityCriteria',
    'Subtask',
    'Task',
    'TaskHistoryEntry',

    # Progression
    'UserProgression',
    'level_for_xp',
    'xp_for_next_level',

    # Events
    'RewardBundle',
    'LevelUpEvent',
    'AchievementUnlockedEvent',
    'ProgressionEvent',
]
