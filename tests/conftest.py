import asyncio
from datetime import datetime, timedelta
from typing import Any, Optional

import pytest
import pytz

from devhelper.core.exceptions import StoreReadError, StoreWriteError
from devhelper.core.storage import MemoryStore
from devhelper.models.enums import TaskPriority, TaskStatus
from devhelper.models.task import PriorityCriteria, Task
from devhelper.utils.datetime_utils import Clock

FIXED_NOW = pytz.utc.localize(datetime(2025, 6, 15, 10, 0, 0))


class FrozenTime:
    """Settable "now" for the Clock"""

    def __init__(self, value: datetime = FIXED_NOW):
        self.value = value

    def __call__(self) -> datetime:
        return self.value

    def advance(self, **kwargs) -> None:
        self.value = self.value + timedelta(**kwargs)


class FailingWriteStore(MemoryStore):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail = True

    async def update(self, key: str, value: Any) -> None:
        if self.fail:
            raise StoreWriteError(key, "disk full")
        await super().update(key, value)


class FailingReadStore(MemoryStore):
    async def get(self, key: str) -> Optional[Any]:
        raise StoreReadError(key, "backend unavailable")


class BrokenBackendStore(MemoryStore):
    """Third-party style store that leaks raw backend exceptions"""

    async def get(self, key: str) -> Optional[Any]:
        raise OSError("connection reset")

    async def update(self, key: str, value: Any) -> None:
        raise RuntimeError("backend went away")


class SlowStore(MemoryStore):
    def __init__(self, delay: float, initial=None):
        super().__init__(initial)
        self.delay = delay

    async def update(self, key: str, value: Any) -> None:
        await asyncio.sleep(self.delay)
        await super().update(key, value)


@pytest.fixture
def frozen_time():
    return FrozenTime()


@pytest.fixture
def clock(frozen_time):
    return Clock("UTC", now_func=frozen_time)


@pytest.fixture
def memory_store():
    return MemoryStore()


def make_criteria(complexity: int = 3, impact: int = 3, estimated_time: float = 30,
                  dependencies=None, deadline: Optional[datetime] = None) -> PriorityCriteria:
    return PriorityCriteria.create(complexity, impact, estimated_time, dependencies, deadline)


def make_task(title: str = "Write report", priority: TaskPriority = TaskPriority.MEDIUM,
              status: TaskStatus = TaskStatus.PENDING, completed_at: Optional[datetime] = None,
              subtasks: int = 0, **criteria_kwargs) -> Task:
    task = Task.create(title=title, priority_criteria=make_criteria(**criteria_kwargs),
                       priority=priority, created_at=FIXED_NOW)
    for i in range(subtasks):
        task.add_subtask(f"Step {i + 1}")
    if status == TaskStatus.COMPLETED:
        task.mark_completed(completed_at or FIXED_NOW)
    else:
        task.status = status
    return task


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def completed_task_factory():
    def factory(**kwargs) -> Task:
        kwargs.setdefault("status", TaskStatus.COMPLETED)
        return make_task(**kwargs)
    return factory
