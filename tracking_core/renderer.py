from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import cv2
import numpy as np

from .connections import HAND_CONNECTIONS, POSE_CONNECTIONS
from .joint_angles import compute_region_angles, format_angle, label_color
from .types import CaptureMode, FrameResult, Landmark, LandmarkList

Color = tuple[int, int, int]


@dataclass(frozen=True)
class OverlayStyle:
    """叠加层绘制样式（颜色均为 BGR）。"""

    hand_connector_color: Color = (255, 0, 0)
    hand_point_color: Color = (0, 0, 255)
    face_point_color: Color = (0, 255, 0)
    pose_connector_color: Color = (0, 255, 0)
    pose_point_color: Color = (0, 0, 255)
    point_radius: int = 1
    line_thickness: int = 2
    font_scale: float = 0.6
    font_thickness: int = 2


def to_pixel(lm: Landmark, width: int, height: int) -> tuple[int, int]:
    """归一化坐标 × 画布尺寸 -> 像素坐标。"""
    return (int(lm.x * width), int(lm.y * height))


def _visible(lm: Optional[Landmark], min_visibility: float) -> bool:
    if lm is None:
        return False
    return lm.visibility is None or lm.visibility >= min_visibility


class OverlayRenderer:
    """每帧清空并整体重绘画布：源图像、骨架连线、关键点与角度文字。"""

    def __init__(self, width: int = 640, height: int = 480, style: Optional[OverlayStyle] = None,
                 min_visibility: float = 0.0):
        self.width = int(width)
        self.height = int(height)
        self.style = style or OverlayStyle()
        self.min_visibility = float(min_visibility)
        self.canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def clear(self) -> None:
        self.canvas[:] = 0

    def render(self, result: Optional[FrameResult], show_angles: bool = False) -> np.ndarray:
        """把一帧检测结果绘制到画布上。

        输入: result 为检测结果（可为 None）；show_angles 是否绘制角度文字。
        输出: 画布（BGR，形状 (height,width,3)），为本对象持有的同一块缓冲区。
        作用: 源图像已不可用（采集已停止）时只清空画布，不再绘制。
        """
        self.clear()
        if result is None or result.image is None:
            return self.canvas

        self.canvas[:] = cv2.resize(result.image, (self.width, self.height))
        st = self.style

        for hand in result.multi_hand_landmarks or []:
            self._draw_connectors(hand, HAND_CONNECTIONS, st.hand_connector_color)
            self._draw_points(hand, st.hand_point_color)

        if result.mode is CaptureMode.HOLISTIC:
            for face in result.face_landmarks or []:
                self._draw_points(face, st.face_point_color)
            if result.pose_landmarks is not None:
                self._draw_connectors(result.pose_landmarks, POSE_CONNECTIONS, st.pose_connector_color)
                self._draw_points(result.pose_landmarks, st.pose_point_color)

        if show_angles and result.pose_landmarks is not None:
            self._draw_angles(result.pose_landmarks)

        return self.canvas

    def _draw_connectors(self, lms: LandmarkList, connections: Iterable[tuple[int, int]], color: Color) -> None:
        n = len(lms)
        for a, b in connections:
            if a >= n or b >= n:
                continue
            la, lb = lms[a], lms[b]
            if not (_visible(la, self.min_visibility) and _visible(lb, self.min_visibility)):
                continue
            cv2.line(
                self.canvas,
                to_pixel(la, self.width, self.height),
                to_pixel(lb, self.width, self.height),
                color,
                self.style.line_thickness,
            )

    def _draw_points(self, lms: LandmarkList, color: Color) -> None:
        for lm in lms:
            if not _visible(lm, self.min_visibility):
                continue
            cv2.circle(self.canvas, to_pixel(lm, self.width, self.height), self.style.point_radius, color, -1)

    def _draw_angles(self, pose: LandmarkList) -> None:
        st = self.style
        for reading in compute_region_angles(pose, self.min_visibility):
            # 退化读数不绘制
            if not reading.is_valid:
                continue
            x = int(reading.anchor[0] * self.width)
            y = int(reading.anchor[1] * self.height)
            cv2.putText(
                self.canvas,
                format_angle(reading.degrees),
                (x, y),
                cv2.FONT_HERSHEY_SIMPLEX,
                st.font_scale,
                label_color(reading.degrees),
                st.font_thickness,
                cv2.LINE_AA,
            )
