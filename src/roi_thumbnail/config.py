"""Configuration dataclass for the ROI thumbnail display."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ThumbnailConfig:
    """Rendering and resolution settings.

    Parameters
    ----------
    upsample_factor : int
        Integer scale applied to the thumbnail before display.
    min_frames : int
        Minimum number of resident frames required to generate a thumbnail.
    frame_set_mode : str
        Mode passed to ``ImageStack.get_frame_set``; ``"cache"`` only returns
        frames that are already in memory.
    no_selection_text, unavailable_text : str
        Message text for the empty and unavailable display states.
    insufficient_frames_warning : str
        One-shot dashboard message when too few frames are in memory.
    line_width, line_color : float, str
        Outline style.
    cmap : str
        Matplotlib colormap name for the thumbnail.
    text_color : tuple[float, float, float]
        RGB color of the message text.
    font_size : int
        Message font size in points.
    """

    upsample_factor: int = 4
    min_frames: int = 100
    frame_set_mode: str = "cache"
    no_selection_text: str = "No roi selected"
    unavailable_text: str = "Image not available"
    insufficient_frames_warning: str = (
        "Can not update roi image because there are not enough image frames in memory"
    )
    line_width: float = 2.0
    line_color: str = "#ffcc00"
    cmap: str = "gray"
    text_color: Tuple[float, float, float] = (0.4, 0.4, 0.4)
    font_size: int = 12

    def __post_init__(self) -> None:
        if int(self.upsample_factor) != self.upsample_factor or self.upsample_factor < 1:
            raise ValueError(f"upsample_factor must be a positive integer, got {self.upsample_factor!r}")
        if self.min_frames < 0:
            raise ValueError(f"min_frames must be >= 0, got {self.min_frames!r}")

    def replace(self, **changes) -> "ThumbnailConfig":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)


DEFAULT_CONFIG = ThumbnailConfig()
