# models/enums.py

from enum import Enum


class TaskStatus(Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"
    INTERRUPTED = "INTERRUPTED"
    NOT_STARTED = "NOT_STARTED"


class TaskPriority(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        """Sort position, most severe first"""
        return _PRIORITY_RANK[self]

    @property
    def xp_multiplier(self) -> float:
        return _PRIORITY_XP_MULTIPLIER[self]


_PRIORITY_RANK = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}

_PRIORITY_XP_MULTIPLIER = {
    TaskPriority.URGENT: 2.0,
    TaskPriority.HIGH: 1.5,
    TaskPriority.MEDIUM: 1.2,
    TaskPriority.LOW: 1.0,
}
