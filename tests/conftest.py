import os

import matplotlib
import numpy as np
import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-gui",
        action="store_true",
        default=False,
        help="Run GUI tests (requires Qt backend / Xvfb).",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "gui: GUI tests that require a Qt backend/Xvfb")


def pytest_collection_modifyitems(config, items):
    run_gui = config.getoption("--run-gui")
    selected_marker = config.getoption("-m")
    marker_includes_gui = selected_marker and "gui" in selected_marker

    if run_gui or marker_includes_gui:
        return

    skip_gui = pytest.mark.skip(reason="Use --run-gui or -m gui to run GUI tests.")
    for item in items:
        if "gui" in item.keywords:
            item.add_marker(skip_gui)


class RecordingRenderer:
    """Renderer double that records every call."""

    def __init__(self):
        self.calls = []
        self.image = None
        self.display_range = None
        self.outline = None
        self.message = None
        self.bounds = None

    def show_image(self, pixels, display_range):
        self.calls.append("show_image")
        self.image = pixels
        self.display_range = display_range

    def show_outline(self, points):
        self.calls.append("show_outline")
        self.outline = np.asarray(points, dtype=float)

    def show_message(self, text):
        self.calls.append("show_message")
        self.message = text

    def set_view_bounds(self, width, height, color_range):
        self.calls.append("set_view_bounds")
        self.bounds = (width, height, color_range)

    def clear(self):
        self.calls.append("clear")
        self.image = None


class RecordingDashboard:
    def __init__(self):
        self.messages = []

    def display_message(self, text):
        self.messages.append(text)


class CountingGenerator:
    """Thumbnail generator double returning a fixed image (or None)."""

    def __init__(self, image=None):
        self.image = image
        self.calls = 0

    def __call__(self, frames, roi):
        self.calls += 1
        return None if self.image is None else np.array(self.image, copy=True)


class FrameStack:
    def __init__(self, n_frames, shape=(32, 32)):
        self.frames = np.ones((n_frames,) + tuple(shape), dtype=np.float32)
        self.requests = []

    def get_frame_set(self, mode="cache"):
        self.requests.append(mode)
        return self.frames


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def dashboard():
    return RecordingDashboard()


@pytest.fixture
def generator_cls():
    return CountingGenerator


@pytest.fixture
def stack_cls():
    return FrameStack


# Ensure a safe backend/environment for GUI tests under CI/headless
if "CI" in os.environ:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    os.environ.setdefault("QT_XCB_GL_INTEGRATION", "none")
    os.environ.setdefault("QT_OPENGL", "software")
    os.environ.setdefault("MPLBACKEND", "Agg")
matplotlib.use(os.environ.get("MPLBACKEND", "Agg"), force=True)
