"""Resolve a displayable thumbnail image for a ROI.

Resolution order
----------------
1. The resolver's cache (keyed by ``Roi.uid``).
2. The ROI's own stored ``enhanced_image`` when it is a non-empty 2D image.
3. On-demand generation from the frames resident in an image stack.

Failures never raise: they are returned as :class:`Unavailable` values that
the display renders as message text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

import numpy as np

from roi_thumbnail.config import DEFAULT_CONFIG, ThumbnailConfig
from roi_thumbnail.image_cache import RoiImageCache
from roi_thumbnail.interfaces import ImageStack, ThumbnailGenerator
from roi_thumbnail.logger import get_logger, roi_extra
from roi_thumbnail.roi_model import Roi

LOGGER = get_logger(__name__)


class UnavailableReason(str, Enum):
    """Why a thumbnail could not be resolved."""

    NO_SOURCE = "no image stack configured"
    INSUFFICIENT_FRAMES = "not enough frames in memory"
    GENERATION_FAILED = "generation failed"


@dataclass(frozen=True)
class ResolvedImage:
    """A thumbnail ready for display.

    Parameters
    ----------
    image : numpy.ndarray
        Read-only 2D image owned by the cache.
    source : str
        Where it came from: ``"cache"``, ``"stored"`` or ``"generated"``.
    """

    image: np.ndarray
    source: str

    @property
    def available(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    """No thumbnail could be produced for the ROI."""

    reason: UnavailableReason

    @property
    def available(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.reason.value


ResolveResult = Union[ResolvedImage, Unavailable]


def _is_empty(image: Optional[np.ndarray]) -> bool:
    if image is None:
        return True
    arr = np.asarray(image)
    return arr.size == 0 or not np.any(arr)


def _is_displayable(image: Optional[np.ndarray]) -> bool:
    return not _is_empty(image) and np.ndim(image) == 2


class ImageResolver:
    """Look up or generate ROI thumbnails.

    Parameters
    ----------
    generator : callable
        ``generator(frames, roi) -> image or None``.
    cache : RoiImageCache, optional
        Cache to read and populate; a private one is created if omitted.
    image_stack : ImageStack, optional
        Raw data source for generation.
    config : ThumbnailConfig
        Supplies ``min_frames`` and ``frame_set_mode``.
    """

    def __init__(
        self,
        generator: ThumbnailGenerator,
        cache: Optional[RoiImageCache] = None,
        image_stack: Optional[ImageStack] = None,
        config: ThumbnailConfig = DEFAULT_CONFIG,
    ) -> None:
        self.generator = generator
        self.cache = cache if cache is not None else RoiImageCache()
        self.image_stack = image_stack
        self.config = config
        self._warning_callback: Optional[Callable[[str], None]] = None
        self._insufficient_frames_warned = False

    def set_warning_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Set callback for the one-shot insufficient-frames warning."""
        self._warning_callback = callback

    def resolve(self, roi: Roi) -> ResolveResult:
        cached = self.cache.get(roi.uid)
        if cached is not None:
            return ResolvedImage(cached, "cache")

        stored = roi.enhanced_image
        if _is_displayable(stored):
            return ResolvedImage(self.cache.put(roi.uid, stored), "stored")
        if not _is_empty(stored):
            LOGGER.warning(
                "Ignoring stored image with shape %s", np.shape(stored), extra=roi_extra(roi)
            )

        return self._generate(roi)

    def _generate(self, roi: Roi) -> ResolveResult:
        extra = roi_extra(roi)
        if self.image_stack is None:
            LOGGER.debug("No image stack configured", extra=extra)
            return Unavailable(UnavailableReason.NO_SOURCE)

        try:
            frames = self.image_stack.get_frame_set(self.config.frame_set_mode)
        except Exception:
            LOGGER.exception("Reading frames from the image stack failed", extra=extra)
            return Unavailable(UnavailableReason.GENERATION_FAILED)
        n_frames = 0 if frames is None or np.ndim(frames) < 3 else int(np.shape(frames)[0])
        if n_frames < self.config.min_frames:
            self._warn_insufficient_frames(n_frames)
            return Unavailable(UnavailableReason.INSUFFICIENT_FRAMES)

        try:
            image = self.generator(frames, roi)
        except Exception:
            LOGGER.exception("Thumbnail generation raised", extra=extra)
            return Unavailable(UnavailableReason.GENERATION_FAILED)
        if _is_empty(image):
            LOGGER.debug("Thumbnail generation returned no image", extra=extra)
            return Unavailable(UnavailableReason.GENERATION_FAILED)
        if np.ndim(image) != 2:
            LOGGER.warning(
                "Thumbnail generation returned shape %s, expected 2D", np.shape(image), extra=extra
            )
            return Unavailable(UnavailableReason.GENERATION_FAILED)

        image = np.asarray(image)
        roi.enhanced_image = image
        LOGGER.info("Generated thumbnail %s from %d frames", image.shape, n_frames, extra=extra)
        return ResolvedImage(self.cache.put(roi.uid, image), "generated")

    def _warn_insufficient_frames(self, n_frames: int) -> None:
        if self._insufficient_frames_warned:
            return
        self._insufficient_frames_warned = True
        msg = self.config.insufficient_frames_warning
        LOGGER.warning("%s (%d < %d)", msg, n_frames, self.config.min_frames)
        if self._warning_callback is not None:
            try:
                self._warning_callback(msg)
            except Exception as e:
                LOGGER.debug(f"Warning callback error: {e}")
