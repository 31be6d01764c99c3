#!/usr/bin/env python3
"""
Plan persistence.

PlanStore is a small key/value port: save(key, payload) / load(key) with
JSON-serializable payloads. Writes are last-write-wins; there is no locking.

Adapters:
- JsonFilePlanStore: one JSON file per key, written atomically
- MemoryPlanStore: dict-backed, for tests and the web app's default
"""

import copy
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from plan_engine.atomic_write import safe_write_json
from plan_engine.constants import EVENTS_STORE_KEY, PLAN_STORE_KEY, STORE_KEY_PATTERN
from plan_engine.logger import get_logger
from plan_engine.models import CalendarEvent, TrainingPlan, events_to_dicts


class PlanStoreError(Exception):
    """Raised when a payload cannot be stored or read back."""
    pass


def validate_key(key: str) -> str:
    if not isinstance(key, str) or not re.match(STORE_KEY_PATTERN, key):
        raise PlanStoreError(f"Invalid store key: {key!r} (use lowercase, numbers, '-' and '_')")
    return key


class PlanStore(ABC):
    @abstractmethod
    def save(self, key: str, payload: Any) -> None:
        ...

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Stored payload, or None when the key has never been saved."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...


class MemoryPlanStore(PlanStore):
    """Keeps deep copies so callers never share state with the store."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def save(self, key: str, payload: Any) -> None:
        self._data[validate_key(key)] = copy.deepcopy(payload)

    def load(self, key: str) -> Optional[Any]:
        validate_key(key)
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def delete(self, key: str) -> bool:
        return self._data.pop(validate_key(key), None) is not None

    def keys(self) -> List[str]:
        return sorted(self._data)


class JsonFilePlanStore(PlanStore):
    """Stores each key as <directory>/<key>.json."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{validate_key(key)}.json"

    def save(self, key: str, payload: Any) -> None:
        path = self._path(key)
        try:
            safe_write_json(path, payload)
        except (OSError, TypeError, ValueError) as e:
            raise PlanStoreError(f"Could not write {path}: {e}") from e
        get_logger().debug(f"Stored {key}", path=str(path))

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PlanStoreError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise PlanStoreError(f"Could not read {path}: {e}") from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise PlanStoreError(f"Could not delete {path}: {e}") from e
        return True

    def keys(self) -> List[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob('*.json'))


# =============================================================================
# TYPED HELPERS
# =============================================================================

def save_plan(store: PlanStore, plan: TrainingPlan, key: str = PLAN_STORE_KEY) -> None:
    store.save(key, plan.to_dict())


def load_plan(store: PlanStore, key: str = PLAN_STORE_KEY) -> Optional[TrainingPlan]:
    data = store.load(key)
    if data is None:
        return None
    try:
        return TrainingPlan.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise PlanStoreError(f"Stored plan '{key}' is malformed: {e}") from e


def save_events(store: PlanStore, events: List[CalendarEvent], key: str = EVENTS_STORE_KEY) -> None:
    store.save(key, events_to_dicts(events))


def load_events(store: PlanStore, key: str = EVENTS_STORE_KEY) -> List[CalendarEvent]:
    data = store.load(key)
    if data is None:
        return []
    try:
        return [CalendarEvent.from_dict(e) for e in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise PlanStoreError(f"Stored events '{key}' are malformed: {e}") from e
