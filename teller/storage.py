"""
Storage Backend Module

Provides the abstract text-resource interface used for account info records,
transaction logs, history exports and the summary, with implementations for
in-memory (testing) and plain files in a data directory (persistence).

Resources are opened per call and never held across operations.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import threading
from pathlib import Path


class LogStorageInterface(ABC):
    """Abstract interface for text resource backends"""

    @abstractmethod
    def append_line(self, name: str, line: str) -> None:
        """Append one line to a resource, creating it if needed"""
        pass

    @abstractmethod
    def write_lines(self, name: str, lines: List[str]) -> None:
        """Replace a resource with the given lines"""
        pass

    @abstractmethod
    def read_lines(self, name: str) -> Optional[List[str]]:
        """Read all lines of a resource, None if it does not exist"""
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if a resource exists"""
        pass

    def describe(self, name: str) -> str:
        """Human-readable location of a resource"""
        return name


class InMemoryStorage(LogStorageInterface):
    """In-memory storage implementation for testing"""

    def __init__(self):
        self._data: Dict[str, List[str]] = {}
        self._lock = threading.RLock()

    def append_line(self, name: str, line: str) -> None:
        """Append a line in memory"""
        with self._lock:
            self._data.setdefault(name, []).append(line)

    def write_lines(self, name: str, lines: List[str]) -> None:
        """Replace a resource in memory"""
        with self._lock:
            self._data[name] = list(lines)

    def read_lines(self, name: str) -> Optional[List[str]]:
        """Read a copy of a resource"""
        with self._lock:
            lines = self._data.get(name)
            if lines is None:
                return None
            return list(lines)

    def exists(self, name: str) -> bool:
        """Check if a resource exists"""
        with self._lock:
            return name in self._data

    def create(self, name: str) -> None:
        """Create an empty resource if missing"""
        with self._lock:
            self._data.setdefault(name, [])


class FileStorage(LogStorageInterface):
    """
    Plain text files in a data directory

    Each call opens, writes and closes its file. Writers to the same file are
    serialized so lines never tear into each other; callers get no ordering
    guarantee beyond completion order.
    """

    def __init__(self, data_dir: str = "."):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
            return lock

    def append_line(self, name: str, line: str) -> None:
        """Append one line to a file"""
        with self._lock_for(name):
            with open(self._path(name), "a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def write_lines(self, name: str, lines: List[str]) -> None:
        """Overwrite a file with the given lines"""
        with self._lock_for(name):
            with open(self._path(name), "w", encoding="utf-8") as handle:
                for line in lines:
                    handle.write(line + "\n")

    def read_lines(self, name: str) -> Optional[List[str]]:
        """Read all lines of a file, None if it does not exist"""
        path = self._path(name)
        if not path.exists():
            return None
        with self._lock_for(name):
            with open(path, "r", encoding="utf-8") as handle:
                return handle.read().splitlines()

    def exists(self, name: str) -> bool:
        """Check if a file exists"""
        return self._path(name).exists()

    def describe(self, name: str) -> str:
        """Full path of a file"""
        return str(self._path(name))
