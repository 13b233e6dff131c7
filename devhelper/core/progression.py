#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Progression Tracker
XP, levels, achievements and streaks driven by task completions

Version: 1.0.0
Date: 2026-10-19
"""

import asyncio
import copy
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from devhelper.core.achievements import (
    AchievementCatalog, get_level_up_reward, level_title, next_level_reward
)
from devhelper.core.exceptions import ConfigurationError, ValidationError
from devhelper.core.priority import calculate_task_xp
from devhelper.core.storage import KeyValueStore
from devhelper.core.suggestions import TaskHistoryStore
from devhelper.models.events import AchievementUnlockedEvent, LevelUpEvent, ProgressionEvent
from devhelper.models.progression import UserProgression, level_for_xp, xp_for_next_level
from devhelper.models.task import Task
from devhelper.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

PROGRESSION_STORE_KEY = "dev-helper-gamification-data"
DEFAULT_WRITE_TIMEOUT = 5.0

# Completion hours counted by the time-of-day achievements
EARLY_HOURS = range(5, 9)
LATE_START_HOUR = 22
LATE_END_HOUR = 5

EventListener = Callable[[ProgressionEvent], Any]

# ===== RESULT =====

@dataclass
class ProgressionUpdate:
    """Outcome of one tracker mutation"""
    xp_gained: int = 0
    level_ups: List[LevelUpEvent] = field(default_factory=list)
    unlocked: List[AchievementUnlockedEvent] = field(default_factory=list)
    events: List[ProgressionEvent] = field(default_factory=list)
    persisted: bool = True
    error: Optional[str] = None
    progression: Optional[UserProgression] = None

    @property
    def leveled_up(self) -> bool:
        return bool(self.level_ups)

    @property
    def unlocked_ids(self) -> List[str]:
        return [event.id for event in self.unlocked]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'xp_gained': self.xp_gained,
            'level_ups': [e.to_dict() for e in self.level_ups],
            'unlocked': [e.to_dict() for e in self.unlocked],
            'persisted': self.persisted,
            'error': self.error,
        }

# ===== TRACKER =====

class ProgressionTracker:
    """Owner of the single UserProgression record.

    Every read-modify-write of the record runs under one asyncio.Lock and
    ends with a persist through the key-value store. The in-memory record
    is authoritative: when a write fails or times out the mutation stays,
    the record is marked dirty and the next persist or ``flush()`` rewrites
    it in full.
    """

    def __init__(self, store: Optional[KeyValueStore], clock: Optional[Clock] = None,
                 catalog: Optional[AchievementCatalog] = None,
                 history: Optional[TaskHistoryStore] = None,
                 write_timeout: float = DEFAULT_WRITE_TIMEOUT):
        if store is None:
            raise ConfigurationError("ProgressionTracker requires a key-value store")

        self.store = store
        self.clock = clock or Clock()
        self.catalog = catalog or AchievementCatalog()
        self.history = history
        self.write_timeout = write_timeout

        self._progression: Optional[UserProgression] = None
        self._lock = asyncio.Lock()
        self._dirty = False
        self._listeners: List[EventListener] = []

        logger.info("Progression tracker initialized")

    # ===== STATE =====

    @property
    def is_loaded(self) -> bool:
        return self._progression is not None

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def progression(self) -> UserProgression:
        """Snapshot of the current record"""
        if self._progression is None:
            raise ConfigurationError("Progression not loaded, call load() first")
        return copy.deepcopy(self._progression)

    # ===== LISTENERS =====

    def add_event_listener(self, callback: EventListener) -> None:
        """Register a sync or async callback for level-up and unlock events"""
        self._listeners.append(callback)

    def remove_event_listener(self, callback: EventListener) -> bool:
        if callback in self._listeners:
            self._listeners.remove(callback)
            return True
        return False

    async def _dispatch(self, events: List[ProgressionEvent]) -> None:
        for event in events:
            for callback in list(self._listeners):
                try:
                    result = callback(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    logger.error(f"Progression event listener failed for {event.kind}: {e}")

    # ===== LOADING =====

    async def load(self) -> UserProgression:
        async with self._lock:
            await self._load_locked()
            return copy.deepcopy(self._progression)

    async def _load_locked(self) -> None:
        save_defaults = False
        try:
            raw = await self.store.get(PROGRESSION_STORE_KEY)
        except Exception as e:
            logger.error(f"❌ Could not read progression, using defaults: {e}")
            raw = None
        else:
            save_defaults = raw is None

        progression = None
        if raw is not None:
            try:
                progression = UserProgression.from_dict(raw)
                progression.title = level_title(progression.level)
            except ValidationError as e:
                logger.warning(f"⚠️ Stored progression is malformed, using defaults: {e}")
                save_defaults = True

        if progression is None:
            progression = UserProgression.default()
            logger.info("Starting with default progression")

        self._progression = progression

        if self.history is not None:
            await self.history.load()

        if save_defaults:
            persisted, error = await self._persist()
            if not persisted:
                logger.warning(f"⚠️ Default progression not saved: {error}")

        logger.info(
            f"📊 Progression loaded: level {progression.level}, "
            f"{progression.xp_points} XP, {len(progression.achievements)} achievements"
        )

    async def _ensure_loaded(self) -> UserProgression:
        if self._progression is None:
            await self._load_locked()
        return self._progression

    # ===== PERSISTENCE =====

    async def _persist(self) -> Tuple[bool, Optional[str]]:
        """Write the whole record (and history); failures leave it dirty"""
        try:
            await asyncio.wait_for(
                self.store.update(PROGRESSION_STORE_KEY, self._progression.to_dict()),
                timeout=self.write_timeout
            )
            if self.history is not None:
                await asyncio.wait_for(self.history.save(), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            self._dirty = True
            error = f"Store write timed out after {self.write_timeout}s"
            logger.error(f"❌ {error}")
            return False, error
        except Exception as e:
            self._dirty = True
            logger.error(f"❌ Progression write failed: {e}")
            return False, str(e)

        self._dirty = False
        return True, None

    async def flush(self) -> bool:
        """Rewrite the record when an earlier write failed"""
        async with self._lock:
            if self._progression is None or not self._dirty:
                return True
            persisted, _ = await self._persist()
            if persisted:
                logger.info("💾 Pending progression changes flushed")
            return persisted

    async def _finish(self, update: ProgressionUpdate) -> ProgressionUpdate:
        update.persisted, update.error = await self._persist()
        update.progression = copy.deepcopy(self._progression)
        return update

    # ===== XP =====

    def _apply_xp(self, amount: int, update: ProgressionUpdate, reason: str) -> None:
        if amount <= 0:
            return

        progression = self._progression
        progression.xp_points += amount
        update.xp_gained += amount
        logger.info(f"⭐ +{amount} XP ({reason}), total {progression.xp_points}")

        new_level = level_for_xp(progression.xp_points)
        if new_level <= progression.level:
            return

        old_level = progression.level
        progression.level = new_level
        progression.title = level_title(new_level)
        progression.xp_for_next_level = xp_for_next_level(new_level)

        reward = get_level_up_reward(new_level)
        event = LevelUpEvent(
            old_level=old_level,
            new_level=new_level,
            title=progression.title,
            reward=reward.to_bundle() if reward else None,
        )
        update.level_ups.append(event)
        update.events.append(event)
        logger.info(f"🎉 Level up: {old_level} -> {new_level} ({progression.title})")

    def _unlock_achievements(self, update: ProgressionUpdate) -> None:
        progression = self._progression
        for achievement in self.catalog.evaluate(progression):
            if not progression.unlock(achievement.achievement_id):
                continue
            event = AchievementUnlockedEvent(
                id=achievement.achievement_id,
                title=achievement.title,
                xp_granted=achievement.xp_reward,
            )
            update.unlocked.append(event)
            update.events.append(event)
            logger.info(f"🏆 Achievement unlocked: {achievement.achievement_id} (+{achievement.xp_reward} XP)")
            self._apply_xp(achievement.xp_reward, update, f"achievement {achievement.achievement_id}")

    async def add_xp(self, amount: int) -> ProgressionUpdate:
        """Add XP; non-positive amounts are ignored"""
        async with self._lock:
            await self._ensure_loaded()
            update = ProgressionUpdate()
            if amount <= 0:
                logger.debug(f"Ignoring non-positive XP amount {amount}")
                update.progression = copy.deepcopy(self._progression)
                return update

            self._apply_xp(amount, update, "manual")
            await self._finish(update)

        await self._dispatch(update.events)
        return update

    # ===== EVENTS =====

    def _update_streak(self) -> None:
        progression = self._progression
        today = self.clock.today()
        last = progression.last_task_completion_date

        if last is not None and last == today:
            progression.streak_days = max(progression.streak_days, 1)
        elif last is not None and last == today.previous():
            progression.streak_days += 1
        else:
            progression.streak_days = 1

        progression.last_task_completion_date = today

    def _count_time_of_day(self, task: Task) -> None:
        moment = self.clock.localize(task.completed_at) if task.completed_at else self.clock.now()
        if moment.hour in EARLY_HOURS:
            self._progression.early_completions += 1
        elif moment.hour >= LATE_START_HOUR or moment.hour < LATE_END_HOUR:
            self._progression.late_completions += 1

    async def on_task_completed(self, task: Task, actual_time_spent: Optional[float] = None) -> ProgressionUpdate:
        async with self._lock:
            progression = await self._ensure_loaded()
            update = ProgressionUpdate()

            progression.total_tasks += 1
            progression.total_subtasks += len(task.subtasks)

            self._update_streak()
            self._count_time_of_day(task)

            self._apply_xp(calculate_task_xp(task), update, f"task {task.task_id}")
            self._unlock_achievements(update)

            if self.history is not None:
                spent = actual_time_spent
                if spent is None:
                    spent = task.actual_time_minutes
                if spent is None:
                    spent = task.priority_criteria.estimated_time_minutes
                self.history.add(task, spent)

            await self._finish(update)
            logger.info(
                f"✅ Task {task.task_id} completed: +{update.xp_gained} XP, "
                f"streak {progression.streak_days}, level {progression.level}"
            )

        await self._dispatch(update.events)
        return update

    async def check_achievements(self) -> ProgressionUpdate:
        """Re-evaluate the catalog against the current counters"""
        async with self._lock:
            await self._ensure_loaded()
            update = ProgressionUpdate()
            self._unlock_achievements(update)

            if update.unlocked or self._dirty:
                await self._finish(update)
            else:
                update.progression = copy.deepcopy(self._progression)

        await self._dispatch(update.events)
        return update

    async def sync_focus_stats(self, total_focus_time_minutes: int, total_focus_sessions: int) -> ProgressionUpdate:
        """Merge hyperfocus totals kept by the focus-session owner; totals never decrease"""
        async with self._lock:
            progression = await self._ensure_loaded()
            progression.total_focus_time_minutes = max(
                progression.total_focus_time_minutes, int(total_focus_time_minutes)
            )
            progression.total_focus_sessions = max(
                progression.total_focus_sessions, int(total_focus_sessions)
            )

            update = ProgressionUpdate()
            self._unlock_achievements(update)
            await self._finish(update)

        await self._dispatch(update.events)
        return update

    # ===== QUERIES =====

    def current_streak(self) -> int:
        if self._progression is None:
            return 0
        return self._progression.current_streak(self.clock.today())

    def get_profile_summary(self) -> Dict[str, Any]:
        progression = self.progression
        unlocked = []
        locked = []
        for achievement in self.catalog:
            current, target = achievement.get_progress(progression)
            entry = {**achievement.to_dict(), 'progress': current, 'target': target}
            if progression.has_achievement(achievement.achievement_id):
                unlocked.append(entry)
            else:
                locked.append(entry)

        reward = next_level_reward(progression.level)
        return {
            'level': progression.level,
            'title': progression.title,
            'xp_points': progression.xp_points,
            'xp_for_next_level': progression.xp_for_next_level,
            'level_progress_percentage': round(progression.level_progress_percentage),
            'streak_days': self.current_streak(),
            'total_tasks': progression.total_tasks,
            'total_subtasks': progression.total_subtasks,
            'total_focus_time_minutes': progression.total_focus_time_minutes,
            'total_focus_sessions': progression.total_focus_sessions,
            'unlocked_achievements': unlocked,
            'locked_achievements': locked,
            'next_reward': reward.to_bundle().to_dict() if reward else None,
        }


__all__ = [
    'ProgressionTracker',
    'ProgressionUpdate',
    'PROGRESSION_STORE_KEY',
]
