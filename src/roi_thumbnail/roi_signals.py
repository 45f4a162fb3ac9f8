"""Reference thumbnail pipeline: ROI traces, dF/F and an activity image.

Functions in this module are pure numpy/scipy helpers with no GUI state.
They are injected into the display as its thumbnail generator; the display
itself never calls them directly.

Conventions
-----------
- Frame volumes are (T, Y, X).
- ROI boundaries are (row, col); polygon masks are built in (x, y).
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np
from scipy.ndimage import binary_dilation

from roi_thumbnail.roi_model import Roi

__all__ = [
    "roi_mask_for_polygon",
    "neuropil_mask",
    "extract_fluorescence",
    "compute_dff",
    "extract_roi_image",
    "compute_roi_thumbnail",
]


def roi_mask_for_polygon(
    shape: Tuple[int, int], points: Iterable[Tuple[float, float]]
) -> np.ndarray:
    """Return a polygon mask using matplotlib Path; ``points`` are (x, y)."""
    from matplotlib.path import Path

    h, w = shape
    yy, xx = np.mgrid[0:h, 0:w]
    coords = np.vstack((xx.ravel(), yy.ravel())).T
    poly = Path(list(points))
    mask = poly.contains_points(coords).reshape(h, w)
    return mask


def neuropil_mask(roi_mask: np.ndarray, inner: int = 1, outer: int = 4) -> np.ndarray:
    """Annulus around ``roi_mask`` between ``inner`` and ``outer`` pixels."""
    if not roi_mask.any():
        return np.zeros_like(roi_mask, dtype=bool)
    grown_outer = binary_dilation(roi_mask, iterations=max(outer, 1))
    grown_inner = binary_dilation(roi_mask, iterations=inner) if inner > 0 else roi_mask
    return grown_outer & ~grown_inner


def extract_fluorescence(frames: np.ndarray, roi: Roi) -> Tuple[np.ndarray, np.ndarray]:
    """Mean ROI and neuropil signal per frame.

    Returns
    -------
    f_roi, f_npil : numpy.ndarray
        Traces of length T. ``f_npil`` is all-NaN when the ROI has no
        neuropil pixels inside the frame.
    """
    _, h, w = frames.shape
    mask = roi_mask_for_polygon((h, w), roi.boundary[:, ::-1])
    if not mask.any():
        nan = np.full(frames.shape[0], np.nan)
        return nan, nan.copy()
    npil = neuropil_mask(mask)
    f_roi = frames[:, mask].mean(axis=1, dtype=np.float64)
    if npil.any():
        f_npil = frames[:, npil].mean(axis=1, dtype=np.float64)
    else:
        f_npil = np.full(frames.shape[0], np.nan)
    return f_roi, f_npil


def compute_dff(trace: np.ndarray, percentile: float = 20.0) -> np.ndarray:
    """dF/F against a low-percentile baseline."""
    trace = np.asarray(trace, dtype=np.float64)
    f0 = float(np.nanpercentile(trace, percentile))
    if f0 == 0 or not np.isfinite(f0):
        f0 = float(np.finfo(np.float64).eps)
    return (trace - f0) / abs(f0)


def _box_slices(
    upper_left_xy: Tuple[float, float], size: Tuple[int, int], frame_shape: Tuple[int, int]
) -> Optional[Tuple[slice, slice, slice, slice]]:
    """Source and destination slices for a (possibly clipped) crop box."""
    h, w = size
    x0, y0 = int(upper_left_xy[0]), int(upper_left_xy[1])
    fh, fw = frame_shape
    ya, yb = max(y0, 0), min(y0 + h, fh)
    xa, xb = max(x0, 0), min(x0 + w, fw)
    if ya >= yb or xa >= xb:
        return None
    return (
        slice(ya, yb),
        slice(xa, xb),
        slice(ya - y0, yb - y0),
        slice(xa - x0, xb - x0),
    )


def extract_roi_image(
    frames: np.ndarray,
    roi: Roi,
    dff: np.ndarray,
    size: Optional[Tuple[int, int]] = None,
    top_percentile: float = 90.0,
) -> Optional[np.ndarray]:
    """Activity-weighted image of the ROI box, scaled to uint8.

    The image is the mean of the most active frames (``dff`` at or above
    ``top_percentile``) minus the mean of all frames.
    """
    size = tuple(size) if size is not None else roi.image_size
    slices = _box_slices(roi.upper_left_corner(size), size, frames.shape[1:])
    if slices is None:
        return None
    src_y, src_x, dst_y, dst_x = slices
    crop = frames[:, src_y, src_x].astype(np.float32)

    dff = np.asarray(dff, dtype=np.float64)
    valid = np.isfinite(dff)
    if not valid.any():
        return None
    active = valid & (dff >= np.percentile(dff[valid], top_percentile))

    activity = crop[active].mean(axis=0) - crop.mean(axis=0)
    lo, hi = float(activity.min()), float(activity.max())
    if hi <= lo:
        return None
    scaled = np.round((activity - lo) / (hi - lo) * 255.0).astype(np.uint8)

    out = np.zeros(size, dtype=np.uint8)
    out[dst_y, dst_x] = scaled
    return out


def compute_roi_thumbnail(
    frames: np.ndarray, roi: Roi, size: Optional[Tuple[int, int]] = None
) -> Optional[np.ndarray]:
    """Enhanced thumbnail for ``roi`` or None when it cannot be computed."""
    frames = np.asarray(frames)
    if frames.ndim != 3 or frames.shape[0] < 2:
        return None
    f_roi, f_npil = extract_fluorescence(frames, roi)
    if not np.isfinite(f_roi).any():
        return None
    dff = compute_dff(f_roi)
    if np.isfinite(f_npil).any():
        dff = dff - compute_dff(f_npil)
    return extract_roi_image(frames, roi, dff, size=size)
