"""Synthetic data and a small Qt window for trying out the thumbnail display."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from roi_thumbnail.image_stack import ArrayImageStack
from roi_thumbnail.roi_model import Roi, RoiGroup

DEMO_CENTERS: List[Tuple[float, float]] = [(20.0, 20.0), (44.0, 24.0), (30.0, 46.0)]


def generate_dummy_stack(
    n_frames: int = 200,
    shape: Tuple[int, int] = (64, 64),
    centers: Optional[List[Tuple[float, float]]] = None,
    radius: float = 4.0,
    seed: int = 0,
) -> np.ndarray:
    """Return a (T, Y, X) float32 recording with blinking disc-shaped cells.

    Each cell at ``centers`` (x, y) is bright in a random ~10% of frames.
    """
    rng = np.random.default_rng(seed)
    centers = DEMO_CENTERS if centers is None else centers
    h, w = shape
    yy, xx = np.mgrid[0:h, 0:w]
    frames = rng.normal(100.0, 5.0, size=(n_frames, h, w)).astype(np.float32)
    for cx, cy in centers:
        disc = ((xx - cx) ** 2 + (yy - cy) ** 2) <= radius**2
        active = rng.random(n_frames) < 0.1
        frames[active] += 60.0 * disc[np.newaxis, :, :]
    return frames


def make_demo_group(
    centers: Optional[List[Tuple[float, float]]] = None, radius: float = 4.0
) -> RoiGroup:
    """ROI group with one circular ROI per demo cell."""
    centers = DEMO_CENTERS if centers is None else centers
    return RoiGroup([Roi.circle(c, radius) for c in centers])


def create_app(n_frames: int = 200):
    """Create the Qt application and a demo window without starting the event loop."""
    from matplotlib.backends.qt_compat import QtWidgets

    from roi_thumbnail.thumbnail_widget import RoiThumbnailWidget, StatusBarDashboard

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])

    group = make_demo_group()
    window = QtWidgets.QMainWindow()
    window.setWindowTitle("ROI thumbnail")
    widget = RoiThumbnailWidget(
        group,
        parent=window,
        image_stack=ArrayImageStack(generate_dummy_stack(n_frames)),
        dashboard=StatusBarDashboard(window.statusBar()),
    )
    combo = QtWidgets.QComboBox()
    combo.addItem("(none)")
    combo.addItems([f"ROI {i}" for i in range(len(group))])
    combo.currentIndexChanged.connect(lambda i: group.select([] if i <= 0 else [i - 1]))

    central = QtWidgets.QWidget()
    layout = QtWidgets.QVBoxLayout(central)
    layout.addWidget(combo)
    layout.addWidget(widget)
    window.setCentralWidget(central)
    window.roi_group = group
    window.thumbnail = widget
    window.app = app
    group.select([])
    return window


def run_demo() -> None:
    from matplotlib.backends.qt_compat import QtWidgets

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    window = create_app()
    window.show()
    app.exec()


if __name__ == "__main__":
    run_demo()
