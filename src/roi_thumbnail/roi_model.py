"""ROI record and an in-memory ROI collection with change notifications."""

from __future__ import annotations

import uuid
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from roi_thumbnail.events import (
    RoiClassificationChangedEvent,
    RoiEventType,
    RoiGroupChangedEvent,
    RoiSelectionChangedEvent,
)
from roi_thumbnail.interfaces import RoiDisplay

DEFAULT_IMAGE_SIZE: Tuple[int, int] = (25, 25)


def _as_boundary(points) -> np.ndarray:
    arr = np.asarray(points, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"ROI boundary must have shape (N, 2), got {arr.shape}")
    return arr


@dataclass
class Roi:
    """Polygonal ROI in source pixel coordinates.

    Parameters
    ----------
    boundary : numpy.ndarray
        Closed polygon as (row, col) pairs, shape (N, 2).
    enhanced_image : numpy.ndarray
        Stored thumbnail image; empty or all-zero when not yet computed.
    classification : int
        User classification (0 = unclassified).
    image_size : tuple[int, int]
        Thumbnail size as (height, width).
    uid : str
        Stable identity, used as the cache key.
    """

    boundary: np.ndarray
    enhanced_image: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=np.float32))
    classification: int = 0
    image_size: Tuple[int, int] = DEFAULT_IMAGE_SIZE
    uid: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        self.boundary = _as_boundary(self.boundary)
        if self.enhanced_image is None:
            self.enhanced_image = np.zeros((0, 0), dtype=np.float32)
        self.image_size = (int(self.image_size[0]), int(self.image_size[1]))

    @property
    def center(self) -> Tuple[float, float]:
        """Boundary centroid as (x, y)."""
        rows, cols = self.boundary[:, 0], self.boundary[:, 1]
        return float(cols.mean()), float(rows.mean())

    def has_image(self) -> bool:
        im = self.enhanced_image
        return im is not None and im.size > 0 and bool(np.any(im != 0))

    def upper_left_corner(self, size: Optional[Tuple[int, int]] = None) -> Tuple[float, float]:
        """Upper-left corner (x, y) of a box of ``size`` (h, w) centred on the ROI."""
        h, w = size if size is not None else self.image_size
        cx, cy = self.center
        return float(np.round(cx - w / 2.0)), float(np.round(cy - h / 2.0))

    def reshaped(self, boundary) -> "Roi":
        """Return a copy with a new boundary and the stored image dropped."""
        return Roi(
            boundary=boundary,
            classification=self.classification,
            image_size=self.image_size,
            uid=self.uid,
        )

    @classmethod
    def circle(
        cls,
        center_xy: Tuple[float, float],
        radius: float,
        n_points: int = 32,
        **kwargs,
    ) -> "Roi":
        """Build a circular ROI centred at ``center_xy``."""
        theta = np.linspace(0.0, 2.0 * np.pi, n_points, endpoint=False)
        cx, cy = center_xy
        rows = cy + radius * np.sin(theta)
        cols = cx + radius * np.cos(theta)
        return cls(boundary=np.column_stack([rows, cols]), **kwargs)


Listener = Callable[[object], None]


class RoiGroup:
    """Ordered ROI collection that notifies listeners about every change.

    Notes
    -----
    Delivery is synchronous and in registration order. Exceptions raised by a
    listener propagate to the caller of the mutating method.
    """

    def __init__(self, rois: Optional[Iterable[Roi]] = None) -> None:
        self._rois: List[Roi] = list(rois or [])
        self._selected: Tuple[int, ...] = ()
        self._changed: List[Listener] = []
        self._selection: List[Listener] = []
        self._classification: List[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._rois)

    def __iter__(self) -> Iterator[Roi]:
        return iter(list(self._rois))

    def __getitem__(self, index: int) -> Roi:
        index = int(index)
        if index < 0 or index >= len(self._rois):
            raise IndexError(f"ROI index {index} out of range for group of {len(self._rois)}")
        return self._rois[index]

    @property
    def selected_indices(self) -> Tuple[int, ...]:
        return self._selected

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(
        self,
        on_changed: Optional[Listener] = None,
        on_selection: Optional[Listener] = None,
        on_classification: Optional[Listener] = None,
    ) -> None:
        if on_changed is not None:
            self._changed.append(on_changed)
        if on_selection is not None:
            self._selection.append(on_selection)
        if on_classification is not None:
            self._classification.append(on_classification)

    def unsubscribe(
        self,
        on_changed: Optional[Listener] = None,
        on_selection: Optional[Listener] = None,
        on_classification: Optional[Listener] = None,
    ) -> None:
        for listeners, cb in (
            (self._changed, on_changed),
            (self._selection, on_selection),
            (self._classification, on_classification),
        ):
            if cb is not None and cb in listeners:
                listeners.remove(cb)

    def add_display(self, display: RoiDisplay) -> None:
        """Route all notifications to a display."""
        self.subscribe(
            display.on_collection_changed,
            display.on_selection_changed,
            display.on_classification_changed,
        )

    def remove_display(self, display: RoiDisplay) -> None:
        self.unsubscribe(
            display.on_collection_changed,
            display.on_selection_changed,
            display.on_classification_changed,
        )

    def _check(self, indices: Iterable[int]) -> None:
        for index in indices:
            self.__getitem__(index)

    def _emit(self, listeners: List[Listener], event: object) -> None:
        for listener in list(listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_rois(self, rois: Iterable[Roi]) -> Tuple[int, ...]:
        start = len(self._rois)
        self._rois.extend(rois)
        indices = tuple(range(start, len(self._rois)))
        if indices:
            self._emit(self._changed, RoiGroupChangedEvent(RoiEventType.ADD, indices))
        return indices

    def remove_rois(self, indices: Sequence[int]) -> None:
        """Remove ROIs and keep the selection pointing at the same ROIs.

        Removing a selected ROI clears the selection. Otherwise selected
        indices above a removed one shift down, and listeners get a
        selection notification with the new indices.
        """
        indices = sorted({int(i) for i in indices})
        self._check(indices)
        removed = set(indices)
        self._rois = [roi for i, roi in enumerate(self._rois) if i not in removed]
        if self._selected and removed.intersection(self._selected):
            self.select([])
        elif self._selected:
            shifted = tuple(i - bisect_left(indices, i) for i in self._selected)
            if shifted != self._selected:
                old, self._selected = self._selected, shifted
                self._emit(self._selection, RoiSelectionChangedEvent(old, shifted))
        self._emit(self._changed, RoiGroupChangedEvent(RoiEventType.REMOVE, tuple(indices)))

    def modify_roi(self, index: int, roi: Roi) -> None:
        """Replace the ROI at ``index`` (content change)."""
        self._check([index])
        self._rois[int(index)] = roi
        self._emit(self._changed, RoiGroupChangedEvent(RoiEventType.MODIFY, (index,)))

    def reshape_roi(self, index: int, boundary) -> None:
        """Give the ROI at ``index`` a new boundary; its stored image is dropped."""
        self._rois[int(index)] = self[index].reshaped(boundary)
        self._emit(self._changed, RoiGroupChangedEvent(RoiEventType.RESHAPE, (index,)))

    def select(self, indices: Sequence[int]) -> None:
        new = tuple(int(i) for i in indices)
        self._check(new)
        old, self._selected = self._selected, new
        self._emit(self._selection, RoiSelectionChangedEvent(old, new))

    def set_classification(self, indices: Sequence[int], classification: int) -> None:
        indices = tuple(int(i) for i in indices)
        for index in indices:
            self[index].classification = int(classification)
        self._emit(
            self._classification,
            RoiClassificationChangedEvent(indices, int(classification)),
        )
