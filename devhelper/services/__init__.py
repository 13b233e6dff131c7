# services/__init__.py

"""
Service layer of the Dev Helper Engine.

Wires the clock, store, scorer, suggester, progression tracker, task
service and the achievement re-check job together.
"""

import logging
from typing import Any, Dict, Optional

from devhelper.config import EngineSettings, get_settings
from devhelper.core.exceptions import ConfigurationError
from devhelper.core.priority import PriorityScorer
from devhelper.core.progression import ProgressionTracker
from devhelper.core.storage import JsonFileStore, KeyValueStore
from devhelper.core.suggestions import PrioritySuggester, TaskHistoryStore
from devhelper.utils.datetime_utils import Clock

from .scheduler import AchievementRecheckScheduler
from .task_service import TaskService

logger = logging.getLogger(__name__)


class EngineServices:
    """
    Composition root of the engine

    Provides:
    - Construction of every component in dependency order
    - Explicit access to the single ProgressionTracker
    - Flushing and closing everything on shutdown
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()
        self.initialized = False

        self._clock: Optional[Clock] = None
        self._store: Optional[KeyValueStore] = None
        self._history: Optional[TaskHistoryStore] = None
        self._scorer: Optional[PriorityScorer] = None
        self._suggester: Optional[PrioritySuggester] = None
        self._tracker: Optional[ProgressionTracker] = None
        self._task_service: Optional[TaskService] = None
        self._scheduler: Optional[AchievementRecheckScheduler] = None

    async def initialize(self, store: Optional[KeyValueStore] = None,
                         start_scheduler: Optional[bool] = None,
                         clock: Optional[Clock] = None) -> "EngineServices":
        if self.initialized:
            return self

        logger.info("🔧 Initializing Dev Helper Engine services...")

        self._clock = clock or Clock(self.settings.TIMEZONE)
        self._store = store or JsonFileStore(self.settings.store_path)
        self._history = TaskHistoryStore(self._store, capacity=self.settings.HISTORY_CAPACITY)
        self._scorer = PriorityScorer(self._clock)
        self._suggester = PrioritySuggester(self._history, self._clock)
        self._tracker = ProgressionTracker(
            self._store,
            clock=self._clock,
            history=self._history,
            write_timeout=self.settings.STORE_WRITE_TIMEOUT_SECONDS,
        )
        await self._tracker.load()

        self._task_service = TaskService(self._scorer, self._suggester, self._tracker, self._clock)

        if start_scheduler is None:
            start_scheduler = self.settings.ACHIEVEMENT_RECHECK_ENABLED
        if start_scheduler:
            self._scheduler = AchievementRecheckScheduler(
                self._tracker, interval_minutes=self.settings.ACHIEVEMENT_RECHECK_MINUTES
            )
            self._scheduler.start()

        self.initialized = True
        logger.info("✅ Engine services initialized")
        return self

    def _require(self, component: Optional[Any], name: str) -> Any:
        if component is None:
            raise ConfigurationError(f"{name} is not available before EngineServices.initialize()")
        return component

    @property
    def clock(self) -> Clock:
        return self._require(self._clock, "Clock")

    @property
    def store(self) -> KeyValueStore:
        return self._require(self._store, "Store")

    @property
    def history(self) -> TaskHistoryStore:
        return self._require(self._history, "TaskHistoryStore")

    @property
    def scorer(self) -> PriorityScorer:
        return self._require(self._scorer, "PriorityScorer")

    @property
    def suggester(self) -> PrioritySuggester:
        return self._require(self._suggester, "PrioritySuggester")

    @property
    def tracker(self) -> ProgressionTracker:
        return self._require(self._tracker, "ProgressionTracker")

    @property
    def task_service(self) -> TaskService:
        return self._require(self._task_service, "TaskService")

    @property
    def scheduler(self) -> Optional[AchievementRecheckScheduler]:
        return self._scheduler

    def health_check(self) -> Dict[str, Any]:
        health: Dict[str, Any] = {
            "status": "healthy" if self.initialized else "error",
            "services": {}
        }
        if not self.initialized:
            return health

        health["services"]["tracker"] = {
            "status": "warning" if self._tracker.is_dirty else "healthy",
            "loaded": self._tracker.is_loaded,
            "pending_write": self._tracker.is_dirty,
        }
        health["services"]["history"] = {"status": "healthy", "entries": len(self._history)}
        health["services"]["scheduler"] = {
            "status": "healthy",
            "running": bool(self._scheduler and self._scheduler.running),
        }
        if isinstance(self._store, JsonFileStore):
            store_health = self._store.get_health_status()
            health["services"]["store"] = {
                "status": "healthy" if store_health["healthy"] else "error",
                **store_health,
            }

        service_statuses = [s.get("status", "unknown") for s in health["services"].values()]
        if "error" in service_statuses:
            health["status"] = "error"
        elif "warning" in service_statuses:
            health["status"] = "warning"

        return health

    async def shutdown(self) -> None:
        if not self.initialized:
            return

        logger.info("🛑 Shutting down engine services...")

        if self._scheduler:
            self._scheduler.shutdown()
            self._scheduler = None

        if not await self._tracker.flush():
            logger.error("❌ Progression still has unsaved changes at shutdown")

        await self._store.close()
        self.initialized = False
        logger.info("✅ Engine services stopped")

    async def __aenter__(self) -> "EngineServices":
        return await self.initialize()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()


__all__ = [
    'EngineServices',
    'TaskService',
    'AchievementRecheckScheduler',
]
