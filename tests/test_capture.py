from __future__ import annotations

import pytest

from tracking_core.capture import CaptureError, CaptureLifecycle

from conftest import FakeCamera


def test_start_then_poll_forwards_frames():
    cams = []
    received = []

    def factory():
        cam = FakeCamera(frames=2)
        cams.append(cam)
        return cam

    cap = CaptureLifecycle(factory, on_frame=received.append)
    cap.start()
    assert cap.is_running
    assert cap.poll()
    assert cap.poll()
    assert len(received) == 2
    # 第三次读取失败：自动停止
    assert not cap.poll()
    assert not cap.is_running
    assert cams[0].released


def test_restart_stops_previous_stream_first():
    cams = []

    def factory():
        cam = FakeCamera()
        cams.append(cam)
        return cam

    cap = CaptureLifecycle(factory)
    cap.start()
    cap.start()
    assert len(cams) == 2
    assert cams[0].released
    assert not cams[1].released


def test_stop_without_stream_is_noop():
    cap = CaptureLifecycle(FakeCamera)
    cap.stop()
    assert not cap.is_running
    assert not cap.poll()


def test_bind_replaces_callback():
    first, second = [], []
    cap = CaptureLifecycle(lambda: FakeCamera(frames=5), on_frame=first.append)
    cap.start()
    cap.poll()
    cap.bind(second.append)
    cap.poll()
    assert len(first) == 1 and len(second) == 1


def test_failed_open_leaves_no_stream():
    def factory():
        raise CaptureError("no camera")

    cap = CaptureLifecycle(factory)
    with pytest.raises(CaptureError):
        cap.start()
    assert not cap.is_running
