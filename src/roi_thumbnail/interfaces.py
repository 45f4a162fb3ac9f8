"""Capability protocols shared by the display and its collaborators.

Conventions
-----------
- Image stacks return frames in (T, Y, X) order.
- Boundary points handed to a renderer are (x, y) display coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from roi_thumbnail.events import (
        RoiClassificationChangedEvent,
        RoiGroupChangedEvent,
        RoiSelectionChangedEvent,
    )
    from roi_thumbnail.roi_model import Roi

__all__ = [
    "MutationResult",
    "UNSUPPORTED_BY_DISPLAY",
    "RoiDisplay",
    "ThumbnailRenderer",
    "Dashboard",
    "ImageStack",
    "ThumbnailGenerator",
]

UNSUPPORTED_BY_DISPLAY = "not supported by this display"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a collection mutation requested through a display."""

    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def unsupported(cls) -> "MutationResult":
        return cls(accepted=False, reason=UNSUPPORTED_BY_DISPLAY)


@runtime_checkable
class RoiDisplay(Protocol):
    """Any view that reacts to the notification stream of a ROI collection."""

    def on_collection_changed(self, event: "RoiGroupChangedEvent") -> None: ...

    def on_selection_changed(self, event: "RoiSelectionChangedEvent") -> None: ...

    def on_classification_changed(self, event: "RoiClassificationChangedEvent") -> None: ...

    def add_rois(self, *args, **kwargs) -> MutationResult: ...

    def remove_rois(self, *args, **kwargs) -> MutationResult: ...


@runtime_checkable
class ThumbnailRenderer(Protocol):
    """Drawing surface for a single thumbnail with outline and message."""

    def show_image(self, pixels: np.ndarray, display_range: Tuple[float, float]) -> None: ...

    def show_outline(self, points: np.ndarray) -> None: ...

    def show_message(self, text: str) -> None: ...

    def set_view_bounds(
        self, width: int, height: int, color_range: Tuple[float, float]
    ) -> None: ...

    def clear(self) -> None: ...


@runtime_checkable
class Dashboard(Protocol):
    """Host application channel for user-facing notices."""

    def display_message(self, text: str) -> None: ...


@runtime_checkable
class ImageStack(Protocol):
    """Raw imaging data source."""

    def get_frame_set(self, mode: str = "cache") -> Optional[np.ndarray]: ...


class ThumbnailGenerator(Protocol):
    """Callable producing a thumbnail image for a ROI from a frame volume."""

    def __call__(self, frames: np.ndarray, roi: "Roi") -> Optional[np.ndarray]: ...
