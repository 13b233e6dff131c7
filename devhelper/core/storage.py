#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Key-Value Storage
Abstract persistence boundary plus in-memory and JSON-file implementations

Version: 1.0.0
Date: 2026-10-19
"""

import asyncio
import copy
import json
import logging
import shutil
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from devhelper.core.exceptions import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

# ===== STATS =====

@dataclass
class StoreStats:
    """Store operation counters"""
    read_count: int = 0
    write_count: int = 0
    error_count: int = 0
    last_write: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'read_count': self.read_count,
            'write_count': self.write_count,
            'error_count': self.error_count,
            'last_write': self.last_write,
        }

# ===== ABSTRACT STORE =====

class KeyValueStore(ABC):
    """Asynchronous key-value persistence used by the engine"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Stored value or None.

        Backend failures should surface as StoreReadError; the engine treats
        any exception raised here as an absent value.
        """
        pass

    @abstractmethod
    async def update(self, key: str, value: Any) -> None:
        """Replace the value under ``key``; raises StoreWriteError on failure.

        Any other exception is reported by the engine the same way.
        """
        pass

    async def close(self) -> None:
        pass

# ===== MEMORY STORE =====

class MemoryStore(KeyValueStore):
    """Process-local store; values are deep-copied on the way in and out"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.stats = StoreStats()

    async def get(self, key: str) -> Optional[Any]:
        self.stats.read_count += 1
        return copy.deepcopy(self._data.get(key))

    async def update(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self.stats.write_count += 1
        self.stats.last_write = datetime.now().isoformat()

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

# ===== JSON FILE STORE =====

class JsonFileStore(KeyValueStore):
    """All keys kept in one JSON document on disk.

    Blocking file I/O runs in a thread pool; the file is guarded by an
    RLock and every write goes through a temp file that replaces the
    data file only after it parsed back successfully.
    """

    def __init__(self, data_file: Path, max_workers: int = 2):
        self.data_file = Path(data_file)
        self.file_lock = threading.RLock()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="devhelper-store")
        self.stats = StoreStats()
        self._closed = False

    # ===== SYNC HELPERS =====

    def _read_document_sync(self) -> Dict[str, Any]:
        with self.file_lock:
            if not self.data_file.exists():
                return {}
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("store document is not a JSON object")
        return data

    def _write_document_sync(self, data: Dict[str, Any]) -> None:
        with self.file_lock:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self.data_file.with_suffix('.tmp')

            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)

                with open(temp_file, 'r', encoding='utf-8') as f:
                    json.load(f)

                shutil.move(str(temp_file), str(self.data_file))
            except Exception:
                if temp_file.exists():
                    temp_file.unlink()
                raise

    def _get_sync(self, key: str) -> Optional[Any]:
        return self._read_document_sync().get(key)

    def _update_sync(self, key: str, value: Any) -> None:
        with self.file_lock:
            try:
                data = self._read_document_sync()
            except (json.JSONDecodeError, ValueError) as e:
                logger.warning(f"⚠️ Store file {self.data_file} unreadable ({e}), rewriting it")
                data = {}
            data[key] = value
            self._write_document_sync(data)

    # ===== ASYNC API =====

    async def get(self, key: str) -> Optional[Any]:
        loop = asyncio.get_running_loop()
        if self._closed:
            raise StoreReadError(key, "Store is closed")
        try:
            value = await loop.run_in_executor(self.executor, self._get_sync, key)
        except (OSError, RuntimeError, ValueError) as e:
            self.stats.error_count += 1
            logger.error(f"❌ Failed to read '{key}' from {self.data_file}: {e}")
            raise StoreReadError(key, f"Failed to read store: {e}") from e

        self.stats.read_count += 1
        return value

    async def update(self, key: str, value: Any) -> None:
        loop = asyncio.get_running_loop()
        if self._closed:
            raise StoreWriteError(key, "Store is closed")
        try:
            await loop.run_in_executor(self.executor, self._update_sync, key, value)
        except (OSError, RuntimeError, TypeError, ValueError) as e:
            self.stats.error_count += 1
            logger.error(f"❌ Failed to write '{key}' to {self.data_file}: {e}")
            raise StoreWriteError(key, f"Failed to write store: {e}") from e

        self.stats.write_count += 1
        self.stats.last_write = datetime.now().isoformat()
        logger.debug(f"💾 Saved '{key}' to {self.data_file}")

    def get_health_status(self) -> Dict[str, Any]:
        return {
            'healthy': not self._closed,
            'data_file': str(self.data_file),
            'file_exists': self.data_file.exists(),
            'stats': self.stats.to_dict(),
        }

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.executor.shutdown(wait=True)
        logger.info("JSON store closed")


__all__ = [
    'KeyValueStore',
    'MemoryStore',
    'JsonFileStore',
    'StoreStats',
]
