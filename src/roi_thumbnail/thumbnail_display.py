"""Thumbnail display that follows the selection of a ROI collection.

The display listens to a :class:`~roi_thumbnail.roi_model.RoiGroup`. When a
ROI is selected it shows an upsampled thumbnail of that ROI with its outline;
when the displayed ROI is modified or reshaped the thumbnail is rebuilt.
Only one ROI is shown at a time.

Notes
-----
- Handlers run synchronously to completion; a later event simply overwrites
  the result of an earlier one.
- Batched events collapse to their last index.
- Thumbnail failures are rendered as message text and never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from roi_thumbnail.config import DEFAULT_CONFIG, ThumbnailConfig
from roi_thumbnail.coordinate_transforms import (
    boundary_to_display,
    color_limits,
    nan_outline,
    upsample_image,
)
from roi_thumbnail.events import (
    GEOMETRY_EVENTS,
    RoiClassificationChangedEvent,
    RoiGroupChangedEvent,
    RoiSelectionChangedEvent,
)
from roi_thumbnail.image_cache import RoiImageCache
from roi_thumbnail.image_resolver import ImageResolver, ResolvedImage, UnavailableReason
from roi_thumbnail.interfaces import (
    Dashboard,
    ImageStack,
    MutationResult,
    ThumbnailGenerator,
    ThumbnailRenderer,
)
from roi_thumbnail.logger import get_logger
from roi_thumbnail.roi_model import RoiGroup
from roi_thumbnail.roi_signals import compute_roi_thumbnail

LOGGER = get_logger(__name__)


class DisplayKind(str, Enum):
    EMPTY = "empty"
    SHOWING_IMAGE = "showing_image"
    SHOWING_UNAVAILABLE = "showing_unavailable"


@dataclass(frozen=True)
class DisplayState:
    """What the display currently shows.

    Parameters
    ----------
    kind : DisplayKind
        Empty, showing an image, or showing an unavailable message.
    roi_index : int or None
        Collection index of the shown ROI.
    roi_uid : str or None
        Identity of the shown ROI.
    reason : UnavailableReason or None
        Set only for ``SHOWING_UNAVAILABLE``.
    """

    kind: DisplayKind = DisplayKind.EMPTY
    roi_index: Optional[int] = None
    roi_uid: Optional[str] = None
    reason: Optional[UnavailableReason] = None

    @property
    def is_empty(self) -> bool:
        return self.kind is DisplayKind.EMPTY


EMPTY_STATE = DisplayState()


class RoiThumbnailDisplay:
    """Show a thumbnail of the last selected ROI of a ROI group.

    Parameters
    ----------
    roi_group : RoiGroup
        Collection to follow. The display subscribes on construction.
    renderer : ThumbnailRenderer
        Drawing surface.
    image_stack : ImageStack, optional
        Raw frames used to build thumbnails for ROIs without a stored image.
    dashboard : Dashboard, optional
        Receives the one-shot insufficient-frames notice.
    generator : callable, optional
        ``generator(frames, roi) -> image or None``; defaults to
        :func:`~roi_thumbnail.roi_signals.compute_roi_thumbnail`.
    config : ThumbnailConfig
        Upsampling, frame threshold and message text.
    """

    def __init__(
        self,
        roi_group: RoiGroup,
        renderer: ThumbnailRenderer,
        image_stack: Optional[ImageStack] = None,
        dashboard: Optional[Dashboard] = None,
        generator: Optional[ThumbnailGenerator] = None,
        config: ThumbnailConfig = DEFAULT_CONFIG,
    ) -> None:
        self.roi_group = roi_group
        self.renderer = renderer
        self.dashboard = dashboard
        self.config = config
        self.cache = RoiImageCache()
        self.resolver = ImageResolver(
            generator if generator is not None else compute_roi_thumbnail,
            cache=self.cache,
            image_stack=image_stack,
            config=config,
        )
        self.resolver.set_warning_callback(self._notify_dashboard)
        self._state = EMPTY_STATE
        self._attached = False
        self.attach()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def visible_rois(self) -> Optional[int]:
        """Index of the ROI currently shown, or None."""
        return self._state.roi_index

    @property
    def image_stack(self) -> Optional[ImageStack]:
        return self.resolver.image_stack

    @image_stack.setter
    def image_stack(self, stack: Optional[ImageStack]) -> None:
        self.resolver.image_stack = stack

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def attach(self) -> None:
        if not self._attached:
            self.roi_group.add_display(self)
            self._attached = True

    def close(self) -> None:
        """Stop listening to the ROI group."""
        if self._attached:
            self.roi_group.remove_display(self)
            self._attached = False

    # ------------------------------------------------------------------
    # Notification handlers
    # ------------------------------------------------------------------
    def on_collection_changed(self, event: RoiGroupChangedEvent) -> None:
        """Rebuild the thumbnail if the displayed ROI was modified."""
        if event.kind not in GEOMETRY_EVENTS or not event.roi_indices:
            LOGGER.debug("Ignoring %s event", event.event_type)
            return
        roi_index = event.roi_indices[-1]
        if self._state.is_empty or roi_index != self._state.roi_index:
            return
        self.cache.invalidate(self._state.roi_uid)
        self._show_roi(roi_index)

    def on_selection_changed(self, event: RoiSelectionChangedEvent) -> None:
        """Show the last selected ROI, or reset when nothing is selected."""
        if not event.new_indices:
            self._reset()
            return
        self._show_roi(event.new_indices[-1])

    def on_classification_changed(self, event: RoiClassificationChangedEvent) -> None:
        # Classification does not change the thumbnail.
        pass

    def add_rois(self, *args, **kwargs) -> MutationResult:
        LOGGER.debug("Rejected add_rois: this display can not add rois")
        return MutationResult.unsupported()

    def remove_rois(self, *args, **kwargs) -> MutationResult:
        LOGGER.debug("Rejected remove_rois: this display can not remove rois")
        return MutationResult.unsupported()

    def refresh(self) -> None:
        """Redraw the current ROI without invalidating its cached image."""
        if self._state.is_empty:
            self._reset()
        else:
            self._show_roi(self._state.roi_index)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _show_roi(self, roi_index: int) -> None:
        roi = self.roi_group[roi_index]
        result = self.resolver.resolve(roi)
        if isinstance(result, ResolvedImage):
            factor = self.config.upsample_factor
            pixels = upsample_image(result.image, factor)
            pixels.setflags(write=False)
            clims = color_limits(pixels)
            outline = boundary_to_display(
                roi.boundary, roi.upper_left_corner(result.image.shape), factor
            )
            self.renderer.show_image(pixels, clims)
            self.renderer.show_outline(outline)
            self.renderer.set_view_bounds(pixels.shape[1], pixels.shape[0], clims)
            self.renderer.show_message("")
            self._state = DisplayState(DisplayKind.SHOWING_IMAGE, int(roi_index), roi.uid)
        else:
            self.renderer.clear()
            self.renderer.show_outline(nan_outline())
            self.renderer.show_message(f"{self.config.unavailable_text}: {result.message}")
            self._state = DisplayState(
                DisplayKind.SHOWING_UNAVAILABLE, int(roi_index), roi.uid, result.reason
            )

    def _reset(self) -> None:
        self.renderer.clear()
        self.renderer.show_outline(nan_outline())
        self.renderer.show_message(self.config.no_selection_text)
        self._state = EMPTY_STATE

    def _notify_dashboard(self, message: str) -> None:
        if self.dashboard is not None:
            self.dashboard.display_message(message)
