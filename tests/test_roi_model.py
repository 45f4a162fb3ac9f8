"""Unit tests for the ROI record, events and the ROI group notifications."""

import numpy as np
import pytest

from roi_thumbnail.events import (RoiClassificationChangedEvent, RoiEventType,
                                  RoiGroupChangedEvent, RoiSelectionChangedEvent)
from roi_thumbnail.interfaces import RoiDisplay
from roi_thumbnail.roi_model import Roi, RoiGroup


class Recorder:
    def __init__(self):
        self.changed = []
        self.selection = []
        self.classification = []


def subscribe(group):
    rec = Recorder()
    group.subscribe(rec.changed.append, rec.selection.append, rec.classification.append)
    return rec


class TestRoi:
    def test_center_is_xy(self):
        roi = Roi(boundary=[[10.0, 2.0], [20.0, 4.0]])  # rows 10/20, cols 2/4
        assert roi.center == (3.0, 15.0)

    def test_upper_left_corner(self):
        roi = Roi.circle((40.0, 30.0), 5.0)
        assert roi.upper_left_corner((24, 24)) == (28.0, 18.0)
        assert roi.upper_left_corner((10, 20)) == (30.0, 25.0)

    def test_boundary_must_be_n_by_2(self):
        with pytest.raises(ValueError):
            Roi(boundary=np.zeros((5, 3)))

    def test_has_image(self):
        roi = Roi.circle((5.0, 5.0), 2.0)
        assert not roi.has_image()
        roi.enhanced_image = np.zeros((3, 3))
        assert not roi.has_image()
        roi.enhanced_image[1, 1] = 1.0
        assert roi.has_image()

    def test_reshaped_keeps_identity_and_drops_image(self):
        roi = Roi.circle((5.0, 5.0), 2.0, classification=3)
        roi.enhanced_image = np.ones((3, 3))
        new = roi.reshaped(roi.boundary * 2)
        assert new.uid == roi.uid
        assert new.classification == 3
        assert not new.has_image()

    def test_uids_are_unique(self):
        assert Roi.circle((1.0, 1.0), 1.0).uid != Roi.circle((1.0, 1.0), 1.0).uid


class TestEvents:
    def test_event_type_parsing(self):
        assert RoiEventType.parse("Modify") is RoiEventType.MODIFY
        assert RoiEventType.parse("selectionChanged") is RoiEventType.SELECTION_CHANGED
        assert RoiEventType.parse(RoiEventType.RESHAPE) is RoiEventType.RESHAPE
        assert RoiEventType.parse("bogus") is None

    def test_indices_are_tuples(self):
        event = RoiGroupChangedEvent("modify", [3, 1])
        assert event.roi_indices == (3, 1)
        assert event.kind is RoiEventType.MODIFY
        assert RoiSelectionChangedEvent([1], [2]).new_indices == (2,)


class TestRoiGroup:
    def test_getitem_out_of_range(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0)])
        with pytest.raises(IndexError):
            group[1]
        with pytest.raises(IndexError):
            group[-1]

    def test_add_emits_indices(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0)])
        rec = subscribe(group)
        indices = group.add_rois([Roi.circle((2.0, 2.0), 1.0), Roi.circle((3.0, 3.0), 1.0)])
        assert indices == (1, 2)
        assert rec.changed == [RoiGroupChangedEvent(RoiEventType.ADD, (1, 2))]

    def test_modify_and_reshape(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0)])
        rec = subscribe(group)
        group.modify_roi(0, Roi.circle((4.0, 4.0), 1.0))
        group.reshape_roi(0, [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
        kinds = [e.kind for e in rec.changed]
        assert kinds == [RoiEventType.MODIFY, RoiEventType.RESHAPE]
        assert group[0].boundary.shape == (3, 2)

    def test_select_emits_old_and_new(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0), Roi.circle((2.0, 2.0), 1.0)])
        rec = subscribe(group)
        group.select([0])
        group.select([1, 0])
        assert rec.selection[-1] == RoiSelectionChangedEvent((0,), (1, 0))
        assert group.selected_indices == (1, 0)

    def test_select_invalid_index(self):
        group = RoiGroup()
        with pytest.raises(IndexError):
            group.select([0])

    def test_remove_selected_clears_selection(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0), Roi.circle((2.0, 2.0), 1.0)])
        group.select([1])
        rec = subscribe(group)
        group.remove_rois([1])
        assert len(group) == 1
        assert rec.selection == [RoiSelectionChangedEvent((1,), ())]
        assert rec.changed[-1].kind is RoiEventType.REMOVE

    def test_remove_shifts_selection_down(self):
        rois = [Roi.circle((float(i), 1.0), 1.0) for i in range(5)]
        group = RoiGroup(rois)
        group.select([2, 4])
        rec = subscribe(group)
        group.remove_rois([0, 3])
        assert group.selected_indices == (1, 2)
        assert [group[i].uid for i in group.selected_indices] == [rois[2].uid, rois[4].uid]
        assert rec.selection == [RoiSelectionChangedEvent((2, 4), (1, 2))]
        assert rec.changed[-1] == RoiGroupChangedEvent(RoiEventType.REMOVE, (0, 3))

    def test_remove_above_selection_sends_no_selection_event(self):
        group = RoiGroup([Roi.circle((float(i), 1.0), 1.0) for i in range(3)])
        group.select([0])
        rec = subscribe(group)
        group.remove_rois([2])
        assert group.selected_indices == (0,)
        assert rec.selection == []

    def test_classification(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0)])
        rec = subscribe(group)
        group.set_classification([0], 2)
        assert group[0].classification == 2
        assert rec.classification == [RoiClassificationChangedEvent((0,), 2)]

    def test_unsubscribe(self):
        group = RoiGroup([Roi.circle((1.0, 1.0), 1.0)])
        rec = Recorder()
        group.subscribe(on_selection=rec.selection.append)
        group.unsubscribe(on_selection=rec.selection.append)
        group.select([0])
        assert rec.selection == []

    def test_display_protocol(self, renderer):
        from roi_thumbnail.thumbnail_display import RoiThumbnailDisplay

        display = RoiThumbnailDisplay(RoiGroup(), renderer)
        assert isinstance(display, RoiDisplay)
