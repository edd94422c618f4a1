from __future__ import annotations

import threading

from tracking_core.mode import ModeController
from tracking_core.pipeline import InferencePipeline
from tracking_core.types import CaptureMode

from conftest import FakeDetector, wait_until


def test_second_frame_dropped_while_first_in_flight(frame):
    gate = threading.Event()
    det = FakeDetector(CaptureMode.HANDS, gate=gate)
    pipe = InferencePipeline(ModeController({CaptureMode.HANDS: lambda: det}, initial=CaptureMode.HANDS))
    try:
        first = pipe.submit(frame)
        assert first is not None
        assert pipe.busy
        assert pipe.submit(frame) is None
        assert pipe.dropped_frames == 1

        gate.set()
        result = first.result(timeout=2)
        assert result.mode is CaptureMode.HANDS
        assert wait_until(lambda: not pipe.busy)
        assert pipe.submit(frame) is not None
    finally:
        gate.set()
        pipe.shutdown()
    assert det.calls == 2


def test_no_active_mode_submits_nothing(frame):
    pipe = InferencePipeline(ModeController({CaptureMode.HANDS: lambda: FakeDetector(CaptureMode.HANDS)}))
    try:
        assert pipe.submit(frame) is None
        assert pipe.dropped_frames == 0
    finally:
        pipe.shutdown()


def test_mode_switch_applies_to_next_frame(frame):
    gate = threading.Event()
    modes = ModeController({
        CaptureMode.HANDS: lambda: FakeDetector(CaptureMode.HANDS, gate=gate),
        CaptureMode.HOLISTIC: lambda: FakeDetector(CaptureMode.HOLISTIC),
    }, initial=CaptureMode.HANDS)
    pipe = InferencePipeline(modes)
    try:
        first = pipe.submit(frame)
        modes.set_holistic_mode(True)
        gate.set()
        assert first.result(timeout=2).mode is CaptureMode.HANDS
        assert wait_until(lambda: not pipe.busy)
        assert pipe.submit(frame).result(timeout=2).mode is CaptureMode.HOLISTIC
    finally:
        gate.set()
        pipe.shutdown()


def test_failed_inference_frees_the_slot(frame):
    def boom(_frame):
        raise RuntimeError("model crashed")

    det = FakeDetector(CaptureMode.HANDS, result_factory=boom)
    pipe = InferencePipeline(ModeController({CaptureMode.HANDS: lambda: det}, initial=CaptureMode.HANDS))
    try:
        fut = pipe.submit(frame)
        assert isinstance(fut.exception(timeout=2), RuntimeError)
        assert wait_until(lambda: not pipe.busy)
    finally:
        pipe.shutdown()


def test_submit_after_shutdown_returns_none(frame):
    pipe = InferencePipeline(ModeController({CaptureMode.HANDS: lambda: FakeDetector(CaptureMode.HANDS)},
                                            initial=CaptureMode.HANDS))
    pipe.shutdown()
    assert pipe.submit(frame) is None
