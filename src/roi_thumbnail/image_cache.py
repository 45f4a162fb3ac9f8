"""Per-ROI thumbnail image cache with hit/miss telemetry.

Entries are keyed by ROI identity (``Roi.uid``) and survive until they are
explicitly invalidated; there is no size-based eviction. Stored arrays are
private read-only copies, so callers can never mutate a cached image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from roi_thumbnail.logger import get_logger, roi_extra

LOGGER = get_logger(__name__)


@dataclass
class CacheTelemetry:
    """Telemetry tracking for cache usage."""

    hits: int = 0
    misses: int = 0
    invalidations: int = 0

    def hit_ratio(self) -> float:
        """Return cache hit ratio (0.0 to 1.0)."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset telemetry counters."""
        self.hits = 0
        self.misses = 0
        self.invalidations = 0


class RoiImageCache:
    """Single-entry-per-id map of resolved display images."""

    def __init__(self) -> None:
        self._items: Dict[str, np.ndarray] = {}
        self._telemetry = CacheTelemetry()

    def __contains__(self, roi_id: str) -> bool:
        return roi_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, roi_id: str) -> Optional[np.ndarray]:
        """Return the cached (read-only) image for ``roi_id`` or None."""
        data = self._items.get(roi_id)
        if data is None:
            self._telemetry.misses += 1
            return None
        self._telemetry.hits += 1
        return data

    def put(self, roi_id: str, image: np.ndarray) -> np.ndarray:
        """Store a read-only copy of ``image`` and return it."""
        data = np.array(image, copy=True)
        data.setflags(write=False)
        self._items[roi_id] = data
        LOGGER.debug("Cached thumbnail %s", data.shape, extra=roi_extra(roi_id))
        return data

    def invalidate(self, roi_id: str) -> bool:
        """Drop the entry for ``roi_id``; return True if one existed."""
        self._telemetry.invalidations += 1
        return self._items.pop(roi_id, None) is not None

    def clear(self) -> None:
        """Drop every cached image."""
        self._items.clear()

    def telemetry(self) -> CacheTelemetry:
        """Return telemetry data for diagnostics."""
        return self._telemetry
