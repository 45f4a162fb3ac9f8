"""Qt host widget for the ROI thumbnail display.

The widget only owns the figure canvas; all synchronization logic lives in
:class:`~roi_thumbnail.thumbnail_display.RoiThumbnailDisplay`.
"""

from __future__ import annotations

from typing import Optional

from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg
from matplotlib.backends.qt_compat import QtWidgets
from matplotlib.figure import Figure

from roi_thumbnail.config import DEFAULT_CONFIG, ThumbnailConfig
from roi_thumbnail.interfaces import Dashboard, ImageStack, ThumbnailGenerator
from roi_thumbnail.render_mpl import MplThumbnailRenderer, prepare_axes
from roi_thumbnail.roi_model import RoiGroup
from roi_thumbnail.thumbnail_display import RoiThumbnailDisplay


class StatusBarDashboard:
    """Dashboard adapter that shows messages in a Qt status bar."""

    def __init__(self, status_bar: QtWidgets.QStatusBar, timeout_ms: int = 4000) -> None:
        self.status_bar = status_bar
        self.timeout_ms = int(timeout_ms)

    def display_message(self, text: str) -> None:
        self.status_bar.showMessage(text, self.timeout_ms)


class RoiThumbnailWidget(QtWidgets.QWidget):
    """Figure canvas showing the thumbnail of the selected ROI."""

    def __init__(
        self,
        roi_group: RoiGroup,
        parent: Optional[QtWidgets.QWidget] = None,
        image_stack: Optional[ImageStack] = None,
        dashboard: Optional[Dashboard] = None,
        generator: Optional[ThumbnailGenerator] = None,
        config: ThumbnailConfig = DEFAULT_CONFIG,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("roiThumbnailDisplay")

        self.fig = Figure(figsize=(2.5, 2.5))
        self.canvas = FigureCanvasQTAgg(self.fig)
        self.ax = self.fig.add_axes([0.05, 0.05, 0.9, 0.9])
        background = self.palette().color(self.backgroundRole())
        self.fig.set_facecolor(background.name())
        prepare_axes(self.ax, background=background.name())

        self.renderer = MplThumbnailRenderer(self.ax, config)
        self.display = RoiThumbnailDisplay(
            roi_group,
            self.renderer,
            image_stack=image_stack,
            dashboard=dashboard,
            generator=generator,
            config=config,
        )

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.addWidget(self.canvas)

    def closeEvent(self, event) -> None:
        self.display.close()
        super().closeEvent(event)
