#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Task Models
Priority criteria, tasks, subtasks and completed-task history entries

Version: 1.0.0
Date: 2026-10-19
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import pytz

from devhelper.core.exceptions import ValidationError
from devhelper.models.enums import TaskPriority, TaskStatus
from devhelper.utils.datetime_utils import format_datetime, parse_datetime

logger = logging.getLogger(__name__)

E = TypeVar("E")

MIN_SCALE = 1
MAX_SCALE = 5

# ===== VALIDATION HELPERS =====

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Validate text fields"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must have at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must have at most {max_length} characters")

    return text


def validate_scale(value: Any, field_name: str) -> int:
    """Validate a 1..5 rating"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if not MIN_SCALE <= value <= MAX_SCALE:
        raise ValidationError(f"{field_name} must be between {MIN_SCALE} and {MAX_SCALE}")
    return value


def validate_enum(value: Any, enum_class: Type[E], field_name: str = "value") -> E:
    """Accept an enum member or its value"""
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


def _parse_instant(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not an ISO-8601 datetime: {value!r}")

# ===== CORE MODELS =====

@dataclass
class PriorityCriteria:
    """Inputs of the priority score; always fully populated"""
    complexity: int
    impact: int
    estimated_time_minutes: float
    dependencies: List[str] = field(default_factory=list)
    deadline: Optional[datetime] = None

    def __post_init__(self):
        self.complexity = validate_scale(self.complexity, "complexity")
        self.impact = validate_scale(self.impact, "impact")

        if isinstance(self.estimated_time_minutes, bool) or not isinstance(self.estimated_time_minutes, (int, float)):
            raise ValidationError("estimated_time_minutes must be a number")
        if self.estimated_time_minutes < 0:
            raise ValidationError("estimated_time_minutes must be non-negative")

        if self.dependencies is None:
            self.dependencies = []
        self.dependencies = [str(dep) for dep in self.dependencies]

        if self.deadline is not None and not isinstance(self.deadline, datetime):
            raise ValidationError("deadline must be a datetime")

    @classmethod
    def create(cls, complexity: int, impact: int, estimated_time_minutes: float,
               dependencies: Optional[Sequence[str]] = None,
               deadline: Optional[datetime] = None) -> "PriorityCriteria":
        """Single construction path: every field present, dependencies never None"""
        return cls(
            complexity=complexity,
            impact=impact,
            estimated_time_minutes=estimated_time_minutes,
            dependencies=list(dependencies or []),
            deadline=deadline,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity": self.complexity,
            "impact": self.impact,
            "estimated_time_minutes": self.estimated_time_minutes,
            "dependencies": list(self.dependencies),
            "deadline": format_datetime(self.deadline),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriorityCriteria":
        if not isinstance(data, dict):
            raise ValidationError("criteria must be a mapping")
        try:
            return cls.create(
                complexity=data["complexity"],
                impact=data["impact"],
                estimated_time_minutes=data["estimated_time_minutes"],
                dependencies=data.get("dependencies") or [],
                deadline=_parse_instant(data.get("deadline"), "deadline"),
            )
        except KeyError as e:
            raise ValidationError(f"criteria is missing field {e}")


@dataclass
class Subtask:
    """A step of a task"""
    subtask_id: str
    title: str
    estimated_minutes: int = 15
    completed: bool = False

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="subtask title")
        if self.estimated_minutes < 0:
            raise ValidationError("estimated_minutes must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtask_id": self.subtask_id,
            "title": self.title,
            "estimated_minutes": self.estimated_minutes,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subtask":
        try:
            return cls(
                subtask_id=str(data["subtask_id"]),
                title=data["title"],
                estimated_minutes=data.get("estimated_minutes", 15),
                completed=bool(data.get("completed", False)),
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Could not load subtask: {e}")

    @classmethod
    def create(cls, title: str, estimated_minutes: int = 15) -> "Subtask":
        return cls(subtask_id=str(uuid.uuid4()), title=title, estimated_minutes=estimated_minutes)


@dataclass
class Task:
    """Task with the criteria its priority is derived from"""
    task_id: str
    title: str
    priority_criteria: PriorityCriteria
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    description: Optional[str] = None
    xp_reward: int = 0
    subtasks: List[Subtask] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    actual_time_minutes: Optional[float] = None

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=3, max_length=200, field_name="title")

        if self.description is not None:
            self.description = validate_text(self.description, min_length=0, max_length=1000, field_name="description")

        if not isinstance(self.priority_criteria, PriorityCriteria):
            raise ValidationError("priority_criteria must be a PriorityCriteria")

        self.priority = validate_enum(self.priority, TaskPriority, "priority")
        self.status = validate_enum(self.status, TaskStatus, "status")

        # Tags: trimmed, non-empty, unique in order
        validated_tags: List[str] = []
        for tag in self.tags:
            if isinstance(tag, str):
                tag = tag.strip()
                if 0 < len(tag) <= 30 and tag not in validated_tags:
                    validated_tags.append(tag)
        self.tags = validated_tags

    # ===== PROPERTIES =====

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    # ===== ACTIONS =====

    def add_subtask(self, title: str, estimated_minutes: int = 15) -> str:
        subtask = Subtask.create(title, estimated_minutes)
        self.subtasks.append(subtask)
        return subtask.subtask_id

    def mark_completed(self, completed_at: datetime, actual_time_minutes: Optional[float] = None) -> bool:
        """Transition to COMPLETED; False when already completed"""
        if self.is_completed:
            return False
        self.status = TaskStatus.COMPLETED
        self.completed_at = completed_at
        if actual_time_minutes is not None:
            self.actual_time_minutes = actual_time_minutes
        return True

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "priority_criteria": self.priority_criteria.to_dict(),
            "xp_reward": self.xp_reward,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "tags": list(self.tags),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
            "completed_at": format_datetime(self.completed_at),
            "actual_time_minutes": self.actual_time_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        try:
            return cls(
                task_id=str(data["task_id"]),
                title=data["title"],
                description=data.get("description"),
                status=data.get("status", TaskStatus.PENDING.value),
                priority=data.get("priority", TaskPriority.MEDIUM.value),
                priority_criteria=PriorityCriteria.from_dict(data["priority_criteria"]),
                xp_reward=int(data.get("xp_reward", 0)),
                subtasks=[Subtask.from_dict(s) for s in data.get("subtasks", [])],
                tags=data.get("tags", []),
                created_at=_parse_instant(data.get("created_at"), "created_at") or _utcnow(),
                updated_at=_parse_instant(data.get("updated_at"), "updated_at") or _utcnow(),
                completed_at=_parse_instant(data.get("completed_at"), "completed_at"),
                actual_time_minutes=data.get("actual_time_minutes"),
            )
        except ValidationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Task deserialization failed: {e}")
            raise ValidationError(f"Could not load task: {e}")

    @classmethod
    def create(cls, title: str, priority_criteria: PriorityCriteria,
               priority: TaskPriority = TaskPriority.MEDIUM,
               description: Optional[str] = None,
               tags: Optional[List[str]] = None,
               created_at: Optional[datetime] = None) -> "Task":
        """New task with a generated id"""
        moment = created_at or _utcnow()
        return cls(
            task_id=str(uuid.uuid4()),
            title=title,
            description=description,
            priority_criteria=priority_criteria,
            priority=priority,
            tags=tags or [],
            created_at=moment,
            updated_at=moment,
        )


@dataclass(frozen=True)
class TaskHistoryEntry:
    """Snapshot of a completed task, kept for priority suggestions"""
    task_id: str
    title: str
    priority: TaskPriority
    criteria: PriorityCriteria
    completed_at: datetime
    actual_time_spent_minutes: float

    @classmethod
    def from_task(cls, task: Task, actual_time_spent: float) -> "TaskHistoryEntry":
        if task.completed_at is None:
            raise ValidationError("Completed task has no completion timestamp")
        return cls(
            task_id=task.task_id,
            title=task.title,
            priority=task.priority,
            criteria=PriorityCriteria.from_dict(task.priority_criteria.to_dict()),
            completed_at=task.completed_at,
            actual_time_spent_minutes=actual_time_spent,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "title": self.title,
            "priority": self.priority.value,
            "criteria": self.criteria.to_dict(),
            "completed_at": format_datetime(self.completed_at),
            "actual_time_spent_minutes": self.actual_time_spent_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskHistoryEntry":
        try:
            completed_at = _parse_instant(data["completed_at"], "completed_at")
            if completed_at is None:
                raise ValidationError("completed_at is required")
            return cls(
                task_id=str(data["task_id"]),
                title=str(data["title"]),
                priority=validate_enum(data["priority"], TaskPriority, "priority"),
                criteria=PriorityCriteria.from_dict(data["criteria"]),
                completed_at=completed_at,
                actual_time_spent_minutes=float(data["actual_time_spent_minutes"]),
            )
        except ValidationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Could not load history entry: {e}")


# ===== EXPORT =====

__all__ = [
    'PriorityCriteria',
    'Subtask',
    'Task',
    'TaskHistoryEntry',
    'validate_text',
    'validate_scale',
    'validate_enum',
]
