"""Matplotlib renderer for the ROI thumbnail display."""

from __future__ import annotations

from typing import Optional, Tuple

import matplotlib
import numpy as np

from roi_thumbnail.config import DEFAULT_CONFIG, ThumbnailConfig
from roi_thumbnail.coordinate_transforms import nan_outline, thumbnail_extent


def prepare_axes(ax: matplotlib.axes.Axes, background=None) -> None:
    """Hide ticks and frame so the axes only shows the thumbnail."""
    ax.set_xticks([])
    ax.set_yticks([])
    if background is not None:
        ax.set_facecolor(background)
    ax.set_axis_off()


class MplThumbnailRenderer:
    """Draws one thumbnail, its outline and a status message on an Axes.

    Artists are created lazily on first use and updated in place afterwards.
    """

    def __init__(self, ax: matplotlib.axes.Axes, config: ThumbnailConfig = DEFAULT_CONFIG) -> None:
        self.ax = ax
        self.config = config
        self.image_artist: Optional[matplotlib.image.AxesImage] = None
        self.outline_artist: Optional[matplotlib.lines.Line2D] = None
        self.message_artist: Optional[matplotlib.text.Text] = None
        prepare_axes(ax)

    @property
    def message(self) -> str:
        return "" if self.message_artist is None else self.message_artist.get_text()

    def show_image(self, pixels: np.ndarray, display_range: Tuple[float, float]) -> None:
        vmin, vmax = display_range
        extent = thumbnail_extent(pixels.shape)
        if self.image_artist is None:
            self.image_artist = self.ax.imshow(
                pixels,
                cmap=self.config.cmap,
                vmin=vmin,
                vmax=vmax,
                extent=extent,
                interpolation="nearest",
                zorder=1,
            )
        else:
            self.image_artist.set_data(pixels)
            self.image_artist.set_extent(extent)
            self.image_artist.set_clim(vmin, vmax)
            self.image_artist.set_visible(True)
        self._draw()

    def show_outline(self, points: np.ndarray) -> None:
        pts = np.asarray(points, dtype=float)
        if self.outline_artist is None:
            (self.outline_artist,) = self.ax.plot(
                pts[:, 0],
                pts[:, 1],
                linestyle="-",
                marker="None",
                linewidth=self.config.line_width,
                color=self.config.line_color,
                zorder=2,
            )
        else:
            self.outline_artist.set_data(pts[:, 0], pts[:, 1])
        self._draw()

    def show_message(self, text: str) -> None:
        if self.message_artist is None:
            self.message_artist = self.ax.text(
                0.5,
                0.5,
                "",
                transform=self.ax.transAxes,
                ha="center",
                va="center",
                color=self.config.text_color,
                fontsize=self.config.font_size,
                zorder=3,
            )
        self.message_artist.set_text(text)
        self._draw()

    def set_view_bounds(self, width: int, height: int, color_range: Tuple[float, float]) -> None:
        self.ax.set_xlim(0.5, width + 0.5)
        self.ax.set_ylim(height + 0.5, 0.5)
        if self.image_artist is not None:
            self.image_artist.set_clim(*color_range)
        self._draw()

    def clear(self) -> None:
        if self.image_artist is not None:
            self.image_artist.set_data(np.zeros((1, 1), dtype=np.float32))
            self.image_artist.set_visible(False)
        if self.outline_artist is not None:
            pts = nan_outline()
            self.outline_artist.set_data(pts[:, 0], pts[:, 1])
        self._draw()

    def _draw(self) -> None:
        canvas = self.ax.figure.canvas
        if canvas is not None:
            canvas.draw_idle()
