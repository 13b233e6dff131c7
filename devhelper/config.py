#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Configuration
Centralized settings for the priority and progression engine

Version: 1.0.0
Date: 2026-10-19
"""

import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EngineSettings(BaseSettings):
    """Engine settings, read from ``DEVHELPER_*`` environment variables or ``.env``"""

    model_config = SettingsConfigDict(
        env_prefix="DEVHELPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== GENERAL =====

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment"
    )

    TIMEZONE: str = Field(
        default="UTC",
        description="Zone used for every calendar-date decision (streaks, deadlines)"
    )

    # ===== STORAGE =====

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON state file"
    )

    STORE_FILE: str = Field(
        default="devhelper_state.json",
        description="Name of the JSON state file inside DATA_DIR"
    )

    STORE_WRITE_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single persistence write"
    )

    HISTORY_CAPACITY: int = Field(
        default=100,
        ge=1,
        description="Number of completed tasks kept for priority suggestions"
    )

    # ===== GAMIFICATION =====

    ACHIEVEMENT_RECHECK_ENABLED: bool = Field(
        default=True,
        description="Run the periodic achievement re-check job"
    )

    ACHIEVEMENT_RECHECK_MINUTES: int = Field(
        default=5,
        ge=1,
        description="Interval of the periodic achievement re-check"
    )

    # ===== LOGGING =====

    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_DIR: Path = Field(default=Path("logs"))
    LOG_FORMAT: str = Field(default='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def store_path(self) -> Path:
        return self.DATA_DIR / self.STORE_FILE

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def get_logging_config(self) -> Dict[str, Any]:
        """Configuration mapping for ``logging.config.dictConfig``"""
        handlers = ['console']
        if self.LOG_TO_FILE:
            handlers.append('file')

        config: Dict[str, Any] = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.LOG_FORMAT,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.LOG_LEVEL.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.LOG_LEVEL.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.LOG_TO_FILE:
            config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.LOG_LEVEL.value,
                'formatter': 'default',
                'filename': str(self.LOG_DIR / f"devhelper_{self.ENVIRONMENT.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            'environment': self.ENVIRONMENT.value,
            'timezone': self.TIMEZONE,
            'store_path': str(self.store_path),
            'store_write_timeout_seconds': self.STORE_WRITE_TIMEOUT_SECONDS,
            'history_capacity': self.HISTORY_CAPACITY,
            'achievement_recheck_enabled': self.ACHIEVEMENT_RECHECK_ENABLED,
            'achievement_recheck_minutes': self.ACHIEVEMENT_RECHECK_MINUTES,
            'log_level': self.LOG_LEVEL.value,
        }


@lru_cache()
def get_settings() -> EngineSettings:
    """Settings read once per process"""
    return EngineSettings()


__all__ = [
    'EngineSettings',
    'Environment',
    'LogLevel',
    'get_settings',
]
