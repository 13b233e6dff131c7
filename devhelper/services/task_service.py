# services/task_service.py

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from devhelper.core.priority import PriorityScorer, calculate_task_xp
from devhelper.core.progression import ProgressionTracker, ProgressionUpdate
from devhelper.core.suggestions import PrioritySuggester, PrioritySuggestion
from devhelper.models.enums import TaskStatus
from devhelper.models.task import PriorityCriteria, Task
from devhelper.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)


class TaskService:
    """In-memory task registry that keeps priorities scored and reports completions"""

    def __init__(self, scorer: PriorityScorer, suggester: PrioritySuggester,
                 tracker: ProgressionTracker, clock: Optional[Clock] = None):
        self.scorer = scorer
        self.suggester = suggester
        self.tracker = tracker
        self.clock = clock or scorer.clock
        self._tasks: Dict[str, Task] = {}

    # ===== CRUD =====

    def create_task(self, title: str, criteria: PriorityCriteria,
                    description: Optional[str] = None,
                    tags: Optional[List[str]] = None,
                    subtasks: Optional[Iterable[str]] = None) -> Task:
        now = self.clock.now()
        task = Task.create(
            title=title,
            priority_criteria=criteria,
            priority=self.scorer.calculate(criteria, now),
            description=description,
            tags=tags,
            created_at=now,
        )
        for subtask_title in subtasks or []:
            task.add_subtask(subtask_title)
        task.xp_reward = calculate_task_xp(task)

        self._tasks[task.task_id] = task
        logger.info(f"📝 Task created: {task.task_id} '{task.title}' ({task.priority.value})")
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def list_tasks(self, sort: bool = True, status: Optional[TaskStatus] = None) -> List[Task]:
        tasks = list(self._tasks.values())
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        if sort:
            return self.scorer.sort_tasks_by_priority(tasks)
        return tasks

    def delete_task(self, task_id: str) -> bool:
        if self._tasks.pop(task_id, None) is None:
            return False
        logger.info(f"🗑️ Task deleted: {task_id}")
        return True

    def update_criteria(self, task_id: str, criteria: PriorityCriteria) -> Optional[Task]:
        """Replace the criteria and rescore; ``updated_at`` moves only if the priority changed"""
        task = self._tasks.get(task_id)
        if task is None:
            return None
        task.priority_criteria = criteria
        self.scorer.update_task_priority(task)
        task.xp_reward = calculate_task_xp(task)
        return task

    def set_status(self, task_id: str, status: TaskStatus) -> Optional[Task]:
        """Non-completion transitions; completion goes through ``complete_task``"""
        task = self._tasks.get(task_id)
        if task is None:
            return None
        if status == TaskStatus.COMPLETED:
            raise ValueError("Use complete_task() to complete a task")
        task.status = status
        return task

    def refresh_priorities(self, now: Optional[datetime] = None) -> int:
        """Rescore open tasks as deadlines approach"""
        changed = 0
        for task in self._tasks.values():
            if task.is_completed:
                continue
            before = task.priority
            self.scorer.update_task_priority(task, now)
            if task.priority != before:
                task.xp_reward = calculate_task_xp(task)
                changed += 1
        return changed

    # ===== SUGGESTIONS =====

    def suggest_for_draft(self, criteria: PriorityCriteria) -> PrioritySuggestion:
        return self.suggester.suggest(criteria, self.clock.now())

    def get_urgent_tasks(self) -> List[Task]:
        open_tasks = [t for t in self._tasks.values() if not t.is_completed]
        return self.suggester.get_urgent_tasks(open_tasks, self.clock.now())

    # ===== COMPLETION =====

    async def complete_task(self, task_id: str, actual_time_spent: Optional[float] = None) -> Optional[ProgressionUpdate]:
        """Complete a task and feed it to the progression tracker"""
        task = self._tasks.get(task_id)
        if task is None:
            logger.warning(f"⚠️ Unknown task {task_id}")
            return None

        if not task.mark_completed(self.clock.now(), actual_time_spent):
            logger.debug(f"Task {task_id} already completed")
            return None

        update = await self.tracker.on_task_completed(task, actual_time_spent)
        if not update.persisted:
            logger.warning(f"⚠️ Completion of {task_id} kept in memory only: {update.error}")
        return update

    def get_stats(self) -> Dict[str, int]:
        stats = {status.value: 0 for status in TaskStatus}
        for task in self._tasks.values():
            stats[task.status.value] += 1
        stats['total'] = len(self._tasks)
        return stats
