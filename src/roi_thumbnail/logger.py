"""Package logging: one console handler, records tagged with the ROI uid.

Modules call :func:`get_logger` with ``__name__`` and pass
``extra=roi_extra(roi)`` when a message concerns a single ROI, so every
line shows which ROI it belongs to (``roi=-`` otherwise).
"""

from __future__ import annotations

import logging
from typing import Optional

PACKAGE = "roi_thumbnail"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(module)s roi=%(roi_id)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


class _RoiTagFilter(logging.Filter):
    """Give records without ROI context a placeholder ``roi_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.roi_id = getattr(record, "roi_id", "-")
        return True


def roi_extra(roi) -> dict:
    """``extra`` mapping tagging a log record with a ROI (or its uid)."""
    if roi is None:
        return {"roi_id": "-"}
    return {"roi_id": roi if isinstance(roi, str) else roi.uid}


def _package_logger() -> logging.Logger:
    base = logging.getLogger(PACKAGE)
    if base.handlers:
        return base
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(_RoiTagFilter())
    base.addHandler(handler)
    base.setLevel(logging.INFO)
    base.propagate = False
    return base


def get_logger(name: str) -> logging.Logger:
    """Child of the ``roi_thumbnail`` logger for module ``name``."""
    _package_logger()
    suffix = name.split(".", 1)[1] if name.startswith(PACKAGE + ".") else name
    return logging.getLogger(f"{PACKAGE}.{suffix}")


def set_level(level: int) -> None:
    """Change the verbosity of the whole package."""
    _package_logger().setLevel(level)


def attach_gui_handler(handler: Optional[logging.Handler]) -> None:
    """Also send package records to ``handler`` (a status bar or log view)."""
    if handler is None:
        return
    base = _package_logger()
    if handler in base.handlers:
        return
    if handler.formatter is None:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(_RoiTagFilter())
    base.addHandler(handler)
