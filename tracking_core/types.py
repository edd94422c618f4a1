from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np


class CaptureMode(Enum):
    """当前采集模式：手部 / 全身（Holistic）/ 关闭。"""

    NONE = "none"
    HANDS = "hands"
    HOLISTIC = "holistic"


@dataclass(frozen=True)
class Landmark:
    """单个关键点（归一化坐标）。

    属性:
    - x, y: 归一化到 [0,1] 的图像坐标。
    - z: 相对深度。
    - visibility: 检测器给出的可见度；None 表示检测器未提供，按可见处理。
    """

    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def xyz(self) -> np.ndarray:
        """返回 (3,) 的 numpy 坐标，便于向量计算。"""
        return np.array([self.x, self.y, self.z], dtype=np.float64)


# 某帧的一组关键点；None 项表示该索引本帧缺失
LandmarkList = Sequence[Optional[Landmark]]


@dataclass(frozen=True)
class FrameResult:
    """单帧检测结果，绘制后即丢弃。

    属性:
    - image: 源图像（BGR）；视频源已停止时为 None。
    - mode: 产生该结果的采集模式。
    - multi_hand_landmarks: 每只手 21 个关键点的列表。
    - pose_landmarks: 33 个身体关键点。
    - face_landmarks: 每张脸的面部关键点列表。
    """

    image: Optional[np.ndarray]
    mode: CaptureMode = CaptureMode.NONE
    multi_hand_landmarks: Optional[list[LandmarkList]] = None
    pose_landmarks: Optional[LandmarkList] = None
    face_landmarks: Optional[list[LandmarkList]] = None


@dataclass(frozen=True)
class AngleReading:
    """关节角度读数：度数 + 顶点关键点的二维位置（用于放置文字）。"""

    name: str
    degrees: float
    anchor: tuple[float, float]

    @property
    def is_valid(self) -> bool:
        # 退化向量得到 NaN，不可绘制
        return math.isfinite(self.degrees)
