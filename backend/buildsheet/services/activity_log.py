"""Bounded, most-recent-first log of user actions."""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

from buildsheet import config
from buildsheet.models.drafting_schema import short_id, utcnow

logger = logging.getLogger("buildsheet-activity")

SESSION_INITIALIZED = "SESSION_INITIALIZED"
PART_ADDED = "PART_ADDED"
PART_REMOVED = "PART_REMOVED"
QUANTITY_UPDATED = "QUANTITY_UPDATED"
IMAGE_GENERATED = "IMAGE_GENERATED"
PROJECT_CREATED = "PROJECT_CREATED"
PROJECT_DELETED = "PROJECT_DELETED"
PROJECT_IMPORTED = "PROJECT_IMPORTED"


@dataclass
class ActivityRecord:
    action: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=short_id)
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "metadata": self.metadata,
        }


class ActivityLog:
    def __init__(self, limit: int = config.ACTIVITY_LOG_LIMIT):
        self._lock = threading.Lock()
        self._records: Deque[ActivityRecord] = deque(maxlen=limit)

    def log(self, action: str, metadata: Optional[Dict[str, Any]] = None) -> ActivityRecord:
        record = ActivityRecord(action=action, metadata=dict(metadata or {}))
        with self._lock:
            self._records.appendleft(record)
        logger.debug(f"[ACTIVITY] {action} {record.metadata}")
        return record

    def entries(self, action: Optional[str] = None) -> List[ActivityRecord]:
        with self._lock:
            records = list(self._records)
        if action:
            records = [r for r in records if r.action == action]
        return records

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
