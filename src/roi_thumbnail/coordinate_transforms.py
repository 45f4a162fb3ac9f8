"""Coordinate and intensity transforms between source and thumbnail space.

All functions are Qt-free and fully testable.

Conventions
-----------
- ROI boundaries are stored as (row, col) in source pixel coordinates.
- Upper-left corners are (x, y) in source pixel coordinates.
- Display coordinates are (x, y) in the upsampled thumbnail; pixel centres
  sit at 1..w and 1..h, so a point on the corner pixel maps to
  ``upsample_factor`` rather than 0.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.ndimage import zoom

__all__ = [
    "boundary_to_display",
    "display_to_boundary",
    "upsample_image",
    "color_limits",
    "nan_outline",
    "thumbnail_extent",
]


def _check_factor(upsample_factor: float) -> float:
    factor = float(upsample_factor)
    if not factor > 0:
        raise ValueError(f"upsample_factor must be positive, got {upsample_factor!r}")
    return factor


def boundary_to_display(
    boundary_rc: np.ndarray,
    upper_left_xy: Tuple[float, float],
    upsample_factor: float,
) -> np.ndarray:
    """Map a ROI boundary into upsampled thumbnail coordinates.

    Parameters
    ----------
    boundary_rc : numpy.ndarray
        Polygon as (row, col) pairs, shape (N, 2).
    upper_left_xy : tuple[float, float]
        Upper-left corner (x, y) of the thumbnail box in source pixels.
    upsample_factor : float
        Scale applied to the thumbnail.

    Returns
    -------
    numpy.ndarray
        Polygon as (x, y) pairs, shape (N, 2):
        ``(source_xy - upper_left_xy + 1) * upsample_factor``.
    """
    factor = _check_factor(upsample_factor)
    pts = np.asarray(boundary_rc, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"boundary must have shape (N, 2), got {pts.shape}")
    xy = pts[:, ::-1]
    return (xy - np.asarray(upper_left_xy, dtype=float) + 1.0) * factor


def display_to_boundary(
    points_xy: np.ndarray,
    upper_left_xy: Tuple[float, float],
    upsample_factor: float,
) -> np.ndarray:
    """Inverse of :func:`boundary_to_display`; returns (row, col) pairs."""
    factor = _check_factor(upsample_factor)
    pts = np.asarray(points_xy, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"points must have shape (N, 2), got {pts.shape}")
    xy = pts / factor - 1.0 + np.asarray(upper_left_xy, dtype=float)
    return xy[:, ::-1]


def upsample_image(image: np.ndarray, upsample_factor: int) -> np.ndarray:
    """Resize a 2D image by an integer factor with cubic interpolation.

    The output shape is exactly ``image.shape * upsample_factor``.
    """
    factor = int(upsample_factor)
    if factor < 1:
        raise ValueError(f"upsample_factor must be >= 1, got {upsample_factor!r}")
    arr = np.asarray(image, dtype=np.float32)
    if arr.ndim != 2:
        raise ValueError(f"thumbnail must be 2D, got shape {arr.shape}")
    if factor == 1 or arr.size == 0:
        return arr.copy()
    order = 3 if min(arr.shape) > 3 else 1
    out = zoom(arr, factor, order=order, mode="nearest", grid_mode=True)
    # zoom rounds the output shape; pin it to the exact multiple.
    target = (arr.shape[0] * factor, arr.shape[1] * factor)
    if out.shape != target:
        out = np.pad(out, [(0, max(0, t - s)) for t, s in zip(target, out.shape)], mode="edge")
        out = out[: target[0], : target[1]]
    return out


def color_limits(image: np.ndarray) -> Tuple[float, float]:
    """Return (vmin, vmax) for display, widening a zero range by one unit."""
    arr = np.asarray(image, dtype=float)
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return 0.0, 1.0
    lo, hi = float(finite.min()), float(finite.max())
    if hi <= lo:
        hi = lo + 1.0
    return lo, hi


def nan_outline() -> np.ndarray:
    """Outline geometry for a cleared display (a single NaN point)."""
    return np.full((1, 2), np.nan)


def thumbnail_extent(shape: Tuple[int, int]) -> Tuple[float, float, float, float]:
    """Matplotlib ``extent`` placing pixel centres at 1..w and 1..h."""
    h, w = int(shape[0]), int(shape[1])
    return 0.5, w + 0.5, h + 0.5, 0.5
