"""Image stacks that provide raw frames for thumbnail generation.

Conventions
-----------
- Frames are returned in (T, Y, X) order.
- ``get_frame_set("cache")`` only returns frames already in memory and never
  reads from disk; ``"all"`` returns the full recording.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import tifffile as tif

from roi_thumbnail.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ArrayImageStack", "TiffImageStack", "as_frame_volume"]

_MODES = ("cache", "all")


def as_frame_volume(arr: np.ndarray) -> np.ndarray:
    """Return ``arr`` as a (T, Y, X) volume; a single 2D frame gets T=1."""
    arr = np.asarray(arr)
    if arr.ndim == 2:
        return arr[np.newaxis, :, :]
    if arr.ndim == 3:
        return arr
    if arr.ndim == 4 and 1 in arr.shape[:2]:
        return arr.reshape((-1,) + arr.shape[2:])
    raise ValueError(f"Expected a 2D frame or (T, Y, X) stack, got shape {arr.shape}")


def _check_mode(mode: str) -> str:
    if mode not in _MODES:
        raise ValueError(f"Unknown frame set mode {mode!r}; expected one of {_MODES}")
    return mode


class ArrayImageStack:
    """Image stack backed by an array that is entirely in memory."""

    def __init__(self, frames: np.ndarray) -> None:
        self._frames = as_frame_volume(frames)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(self._frames.shape)

    @property
    def n_frames(self) -> int:
        return int(self._frames.shape[0])

    def get_frame_set(self, mode: str = "cache") -> np.ndarray:
        _check_mode(mode)
        return self._frames


class TiffImageStack:
    """TIFF-backed image stack with an explicit in-memory frame cache.

    Frames enter the cache only through :meth:`load`, so the display never
    triggers disk reads by asking for the cached frame set.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._cache: Optional[np.ndarray] = None
        self._cache_start = 0
        with tif.TiffFile(str(self.path)) as tf:
            series = tf.series[0]
            self._shape = tuple(series.shape)
            self._dtype = series.dtype

    @property
    def n_frames(self) -> int:
        return int(self._shape[0]) if len(self._shape) >= 3 else 1

    @property
    def cached_range(self) -> Tuple[int, int]:
        """Half-open (start, stop) frame range currently in memory."""
        if self._cache is None:
            return 0, 0
        return self._cache_start, self._cache_start + int(self._cache.shape[0])

    def load(self, first: int = 0, count: Optional[int] = None) -> np.ndarray:
        """Read ``count`` frames starting at ``first`` into the cache."""
        stop = self.n_frames if count is None else min(self.n_frames, first + int(count))
        first = max(0, int(first))
        if first >= stop:
            self._cache = np.empty((0,) + tuple(self._shape[-2:]), dtype=self._dtype)
            self._cache_start = first
            return self._cache
        if self.n_frames == 1:
            arr = tif.imread(str(self.path))
        else:
            try:
                arr = tif.imread(str(self.path), key=slice(first, stop))
            except Exception:
                frames = []
                with tif.TiffFile(str(self.path)) as tf:
                    series = tf.series[0]
                    for idx in range(first, stop):
                        frames.append(series.asarray(key=idx))
                arr = np.stack(frames, axis=0)
        self._cache = as_frame_volume(arr)
        self._cache_start = first
        LOGGER.info("Cached %d frames from %s", self._cache.shape[0], self.path.name)
        return self._cache

    def release(self) -> None:
        """Drop the in-memory frames."""
        self._cache = None
        self._cache_start = 0

    def get_frame_set(self, mode: str = "cache") -> Optional[np.ndarray]:
        if _check_mode(mode) == "cache":
            return self._cache
        return as_frame_volume(tif.imread(str(self.path)))
