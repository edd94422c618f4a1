from __future__ import annotations

from tracking_core.types import Landmark
from tracking_core.validator import has_landmarks

from conftest import make_pose


def test_all_required_present():
    pose = make_pose({11: (0, 0, 0), 13: (1, 0, 0), 15: (1, 1, 0)})
    assert has_landmarks(pose, [11, 13, 15])


def test_missing_index_fails():
    pose = make_pose({11: (0, 0, 0), 15: (1, 1, 0)})
    assert not has_landmarks(pose, [11, 13, 15])


def test_none_list_or_short_list_fails():
    assert not has_landmarks(None, [0])
    assert not has_landmarks([Landmark(0, 0)], [0, 5])
    assert not has_landmarks([Landmark(0, 0)], [-1])


def test_empty_requirement_is_satisfied():
    assert has_landmarks([], [])


def test_low_visibility_counts_as_absent():
    pose = make_pose({11: (0, 0, 0), 13: (1, 0, 0)}, visibility=0.2)
    assert has_landmarks(pose, [11, 13])
    assert not has_landmarks(pose, [11, 13], min_visibility=0.5)


def test_unknown_visibility_counts_as_present():
    pose = make_pose({11: (0, 0, 0)}, visibility=None)
    assert has_landmarks(pose, [11], min_visibility=0.9)
