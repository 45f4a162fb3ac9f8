"""ROI thumbnail display package."""

from roi_thumbnail.config import DEFAULT_CONFIG, ThumbnailConfig
from roi_thumbnail.events import (
    RoiClassificationChangedEvent,
    RoiEventType,
    RoiGroupChangedEvent,
    RoiSelectionChangedEvent,
)
from roi_thumbnail.image_cache import RoiImageCache
from roi_thumbnail.image_resolver import (
    ImageResolver,
    ResolvedImage,
    Unavailable,
    UnavailableReason,
)
from roi_thumbnail.interfaces import MutationResult
from roi_thumbnail.roi_model import Roi, RoiGroup
from roi_thumbnail.thumbnail_display import DisplayKind, DisplayState, RoiThumbnailDisplay

__all__ = [
    "__version__",
    "DEFAULT_CONFIG",
    "ThumbnailConfig",
    "RoiClassificationChangedEvent",
    "RoiEventType",
    "RoiGroupChangedEvent",
    "RoiSelectionChangedEvent",
    "RoiImageCache",
    "ImageResolver",
    "ResolvedImage",
    "Unavailable",
    "UnavailableReason",
    "MutationResult",
    "Roi",
    "RoiGroup",
    "DisplayKind",
    "DisplayState",
    "RoiThumbnailDisplay",
]

__version__ = "1.0.0"
