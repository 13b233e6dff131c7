import logging
import logging.config
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from devhelper.config import EngineSettings


def setup_logging(settings: Optional["EngineSettings"] = None) -> None:
    """Apply the dictConfig produced by the engine settings"""
    if settings is None:
        from devhelper.config import get_settings
        settings = get_settings()

    if settings.LOG_TO_FILE:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(settings.get_logging_config())
    logging.getLogger(__name__).debug(
        f"Logging configured (level={settings.LOG_LEVEL}, file={settings.LOG_TO_FILE})"
    )
