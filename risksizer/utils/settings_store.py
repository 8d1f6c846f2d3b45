"""
Settings persistence for the calculator form.

Stores remember the last-entered field values as a flat string-to-string
mapping. The calculator receives a store explicitly; the sizing engine never
sees one.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from risksizer.utils.utils import load_json, save_json


class SettingsStore(ABC):
    """Load/save interface for persisted form values."""

    @abstractmethod
    def load(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def save(self, values: Dict[str, str]) -> None:
        pass


class MemorySettingsStore(SettingsStore):
    """In-process store; used when persistence is disabled and in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def load(self) -> Dict[str, str]:
        return dict(self._values)

    def save(self, values: Dict[str, str]) -> None:
        self._values = dict(values)


class JsonSettingsStore(SettingsStore):
    """
    Store backed by a JSON file.

    A missing or unreadable file loads as empty; every value is kept as a
    string so what was typed comes back unchanged.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Dict[str, str]:
        data = load_json(self.path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.path}: expected an object")
            return {}
        return {str(k): "" if v is None else str(v) for k, v in data.items()}

    def save(self, values: Dict[str, str]) -> None:
        if not save_json({k: str(v) for k, v in values.items()}, self.path):
            logger.warning(f"Settings not persisted to {self.path}")

    def __repr__(self) -> str:
        return f"JsonSettingsStore({str(self.path)!r})"
