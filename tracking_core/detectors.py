from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import cv2
import numpy as np

from .types import CaptureMode, FrameResult, Landmark

logger = logging.getLogger(__name__)


def _check_confidence(name: str, value: float) -> None:
    if not 0.0 <= float(value) <= 1.0:
        raise ValueError(f"{name} 必须在 [0,1] 范围内，当前为 {value}")


def _check_complexity(value: int) -> None:
    if int(value) not in (0, 1, 2):
        raise ValueError(f"model_complexity 只能为 0/1/2，当前为 {value}")


@dataclass(frozen=True)
class HandsConfig:
    max_num_hands: int = 2
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    def __post_init__(self) -> None:
        if int(self.max_num_hands) < 1:
            raise ValueError(f"max_num_hands 至少为 1，当前为 {self.max_num_hands}")
        _check_complexity(self.model_complexity)
        _check_confidence("min_detection_confidence", self.min_detection_confidence)
        _check_confidence("min_tracking_confidence", self.min_tracking_confidence)


@dataclass(frozen=True)
class HolisticConfig:
    model_complexity: int = 1
    smooth_landmarks: bool = True
    enable_segmentation: bool = True
    smooth_segmentation: bool = True
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    def __post_init__(self) -> None:
        _check_complexity(self.model_complexity)
        _check_confidence("min_detection_confidence", self.min_detection_confidence)
        _check_confidence("min_tracking_confidence", self.min_tracking_confidence)


def landmarks_from_proto(proto: Any, with_visibility: bool = False) -> Optional[tuple[Landmark, ...]]:
    """把 MediaPipe 的 NormalizedLandmarkList 转为 Landmark 元组。

    输入: proto 为 MediaPipe 结果中的关键点列表（可为 None）；
          with_visibility 为 True 时保留 visibility（仅 Pose 提供）。
    输出: Landmark 元组；proto 为空时返回 None。
    """
    if proto is None:
        return None
    out = []
    for p in proto.landmark:
        out.append(
            Landmark(
                x=float(p.x),
                y=float(p.y),
                z=float(p.z),
                visibility=float(p.visibility) if with_visibility else None,
            )
        )
    return tuple(out)


def _collect(protos: Optional[Iterable[Any]]) -> Optional[list[tuple[Landmark, ...]]]:
    if not protos:
        return None
    out = [lm for lm in (landmarks_from_proto(p) for p in protos) if lm is not None]
    return out or None


class LandmarkDetector(ABC):
    """检测器接口：输入一帧图像，输出该帧的关键点结果。"""

    mode: CaptureMode = CaptureMode.NONE

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def detect(self, frame_bgr: np.ndarray) -> FrameResult: ...

    @abstractmethod
    def close(self) -> None: ...


class HandsDetector(LandmarkDetector):
    """MediaPipe Hands 的薄封装。业务层只拿到 Landmark，不暴露 MediaPipe 对象。"""

    mode = CaptureMode.HANDS

    def __init__(self, config: Optional[HandsConfig] = None):
        self._config = config or HandsConfig()
        # 延迟导入，避免没有安装 mediapipe 时 import 直接炸
        import mediapipe as mp

        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=self._config.max_num_hands,
            model_complexity=self._config.model_complexity,
            min_detection_confidence=self._config.min_detection_confidence,
            min_tracking_confidence=self._config.min_tracking_confidence,
        )
        logger.info("已创建 Hands 检测器: %s", self._config)

    def name(self) -> str:
        return "mediapipe_hands"

    def detect(self, frame_bgr: np.ndarray) -> FrameResult:
        """对单帧运行 Hands 推理。

        输入: frame_bgr 为 BGR 图像 (h,w,3)。
        输出: FrameResult，仅 multi_hand_landmarks 可能有值。
        """
        if frame_bgr is None or frame_bgr.size == 0:
            return FrameResult(image=None, mode=self.mode)

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        result = self._hands.process(frame_rgb)
        return FrameResult(
            image=frame_bgr,
            mode=self.mode,
            multi_hand_landmarks=_collect(result.multi_hand_landmarks),
        )

    def close(self) -> None:
        self._hands.close()


class HolisticDetector(LandmarkDetector):
    """MediaPipe Holistic 的薄封装：身体、面部与双手关键点。"""

    mode = CaptureMode.HOLISTIC

    def __init__(self, config: Optional[HolisticConfig] = None):
        self._config = config or HolisticConfig()
        import mediapipe as mp

        self._holistic = mp.solutions.holistic.Holistic(
            static_image_mode=False,
            model_complexity=self._config.model_complexity,
            smooth_landmarks=self._config.smooth_landmarks,
            enable_segmentation=self._config.enable_segmentation,
            smooth_segmentation=self._config.smooth_segmentation,
            min_detection_confidence=self._config.min_detection_confidence,
            min_tracking_confidence=self._config.min_tracking_confidence,
        )
        logger.info("已创建 Holistic 检测器: %s", self._config)

    def name(self) -> str:
        return "mediapipe_holistic"

    def detect(self, frame_bgr: np.ndarray) -> FrameResult:
        """对单帧运行 Holistic 推理。

        输入: frame_bgr 为 BGR 图像 (h,w,3)。
        输出: FrameResult；左右手合并到 multi_hand_landmarks，面部放入 face_landmarks。
        """
        if frame_bgr is None or frame_bgr.size == 0:
            return FrameResult(image=None, mode=self.mode)

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        result = self._holistic.process(frame_rgb)

        hands = _collect(
            [p for p in (result.left_hand_landmarks, result.right_hand_landmarks) if p is not None]
        )
        faces = _collect([result.face_landmarks] if result.face_landmarks is not None else None)
        return FrameResult(
            image=frame_bgr,
            mode=self.mode,
            multi_hand_landmarks=hands,
            pose_landmarks=landmarks_from_proto(result.pose_landmarks, with_visibility=True),
            face_landmarks=faces,
        )

    def close(self) -> None:
        self._holistic.close()
