"""Notification payloads emitted by a ROI collection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union


class RoiEventType(str, Enum):
    """Kinds of change a ROI collection reports."""

    ADD = "add"
    MODIFY = "modify"
    RESHAPE = "reshape"
    REMOVE = "remove"
    SELECTION_CHANGED = "selection_changed"
    CLASSIFICATION_CHANGED = "classification_changed"

    @classmethod
    def parse(cls, value: Union[str, "RoiEventType"]) -> Optional["RoiEventType"]:
        """Return the member matching ``value`` (case-insensitive), or None."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in ("selectionchanged",):
            key = "selection_changed"
        elif key in ("classificationchanged",):
            key = "classification_changed"
        for member in cls:
            if member.value == key:
                return member
        return None


# Collection changes that alter a ROI's geometry or content.
GEOMETRY_EVENTS = frozenset({RoiEventType.MODIFY, RoiEventType.RESHAPE})


def _as_indices(indices: Sequence[int]) -> Tuple[int, ...]:
    return tuple(int(i) for i in indices)


@dataclass(frozen=True)
class RoiGroupChangedEvent:
    """ROIs were added, removed or edited.

    Parameters
    ----------
    event_type : RoiEventType or str
        Kind of change.
    roi_indices : tuple[int, ...]
        Indices touched by the change, in the order they were processed.
    """

    event_type: Union[RoiEventType, str]
    roi_indices: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "roi_indices", _as_indices(self.roi_indices))

    @property
    def kind(self) -> Optional[RoiEventType]:
        return RoiEventType.parse(self.event_type)


@dataclass(frozen=True)
class RoiSelectionChangedEvent:
    """The set of selected ROIs changed."""

    old_indices: Tuple[int, ...] = ()
    new_indices: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "old_indices", _as_indices(self.old_indices))
        object.__setattr__(self, "new_indices", _as_indices(self.new_indices))

    @property
    def kind(self) -> RoiEventType:
        return RoiEventType.SELECTION_CHANGED


@dataclass(frozen=True)
class RoiClassificationChangedEvent:
    """One or more ROIs were (re)classified."""

    roi_indices: Tuple[int, ...] = ()
    classification: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "roi_indices", _as_indices(self.roi_indices))

    @property
    def kind(self) -> RoiEventType:
        return RoiEventType.CLASSIFICATION_CHANGED
