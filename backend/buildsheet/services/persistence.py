"""
Best-effort persistence with a degrading payload.

``DegradingWriter.write`` tries to store the full document. When the backend
reports the quota is exhausted it asks each reducer in turn for a smaller
copy of the payload and retries, until a write lands or no reducer can shrink
the payload any further. Reducers only ever see the writer's private deep
copy, so the caller's live document is never touched.

Any other storage failure is logged and reported in the ``WriteOutcome``;
nothing here raises to the caller.
"""
import copy
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from buildsheet.services.perf_monitor import tracker
from buildsheet.services.storage import StorageBackend, StorageQuotaExceeded

logger = logging.getLogger("buildsheet-store")

Reducer = Callable[[dict], Optional[dict]]


@dataclass
class WriteOutcome:
    written: bool
    attempts: int = 0
    dropped_images: int = 0
    error: Optional[str] = None


def drop_oldest_generated_image(document: dict) -> Optional[dict]:
    """Remove the oldest generated image; None when there is nothing left to drop."""
    images = document.get("generatedImages") or []
    if not images:
        return None
    oldest = min(range(len(images)), key=lambda i: str(images[i].get("timestamp", "")))
    reduced = dict(document)
    reduced["generatedImages"] = images[:oldest] + images[oldest + 1:]
    return reduced


DEFAULT_REDUCERS: Sequence[Reducer] = (drop_oldest_generated_image,)


def _image_count(document: Any) -> int:
    if isinstance(document, dict):
        return len(document.get("generatedImages") or [])
    return 0


class DegradingWriter:
    def __init__(self, storage: StorageBackend, reducers: Sequence[Reducer] = DEFAULT_REDUCERS):
        self.storage = storage
        self.reducers = list(reducers)

    def _reduce(self, payload: dict) -> Optional[dict]:
        for reducer in self.reducers:
            reduced = reducer(payload)
            if reduced is not None:
                return reduced
        return None

    def write(self, key: str, document: Any) -> WriteOutcome:
        payload = copy.deepcopy(document)
        original_images = _image_count(payload)
        attempts = 0
        start = time.perf_counter()

        while True:
            attempts += 1
            try:
                self.storage.set(key, json.dumps(payload))
            except StorageQuotaExceeded as e:
                reduced = self._reduce(payload) if isinstance(payload, dict) else None
                if reduced is None:
                    logger.error(
                        f"Storage quota exhausted for {key!r} after {attempts} attempt(s); "
                        f"nothing left to trim — in-memory session kept",
                    )
                    tracker.record_failure(str(e))
                    return WriteOutcome(False, attempts, original_images - _image_count(payload), str(e))
                logger.warning(f"Quota exceeded writing {key!r} ({e}) — retrying with reduced payload")
                payload = reduced
                continue
            except Exception as e:
                logger.error(f"Storage write failed for {key!r}: {type(e).__name__}: {e}")
                tracker.record_failure(str(e))
                return WriteOutcome(False, attempts, 0, str(e))

            dropped = original_images - _image_count(payload)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            tracker.record_write(duration_ms, dropped)
            if dropped:
                logger.warning(f"Persisted {key!r} without its {dropped} oldest generated image(s)")
            return WriteOutcome(True, attempts, dropped, None)
