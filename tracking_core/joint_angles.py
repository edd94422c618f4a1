from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .angles import chain_angle, vertex_angle
from .types import AngleReading, LandmarkList
from .validator import has_landmarks


# MediaPipe Pose landmark indices
# https://developers.google.com/mediapipe/solutions/vision/pose_landmarker
L_SHOULDER = 11
R_SHOULDER = 12
L_ELBOW = 13
R_ELBOW = 14
L_WRIST = 15
R_WRIST = 16
L_HIP = 23
R_HIP = 24
L_KNEE = 25
R_KNEE = 26
L_ANKLE = 27
R_ANKLE = 28

ANGLE_WARNING_THRESHOLD_DEG = 90.0

# BGR
WARNING_COLOR: tuple[int, int, int] = (0, 0, 255)
NORMAL_COLOR: tuple[int, int, int] = (0, 255, 0)


@dataclass(frozen=True)
class AngleSpec:
    """沿关节链 start → vertex → end 的一个角度，文字放在 vertex 处。

    interior 为 True 时取顶点内角（A−B 与 C−B），否则取链上弯曲角（B−A 与 C−B）。
    """

    name: str
    start: int
    vertex: int
    end: int
    interior: bool = False

    @property
    def indices(self) -> tuple[int, int, int]:
        return (self.start, self.vertex, self.end)


@dataclass(frozen=True)
class BodyRegion:
    name: str
    angles: tuple[AngleSpec, ...]

    @property
    def required(self) -> frozenset[int]:
        """该区域所有角度用到的关键点并集。"""
        return frozenset(i for spec in self.angles for i in spec.indices)


# 每个区域只包含其角度实际用到的关键点，缺一个点不会连带屏蔽相邻关节
BODY_REGIONS: tuple[BodyRegion, ...] = (
    BodyRegion("left_elbow", (AngleSpec("l_elbow", L_SHOULDER, L_ELBOW, L_WRIST),)),
    BodyRegion("right_elbow", (AngleSpec("r_elbow", R_SHOULDER, R_ELBOW, R_WRIST),)),
    # 肩角取内角：手臂自然下垂为 0°，水平为 90°，上举为 180°
    BodyRegion("left_shoulder", (AngleSpec("l_shoulder", L_HIP, L_SHOULDER, L_ELBOW, interior=True),)),
    BodyRegion("right_shoulder", (AngleSpec("r_shoulder", R_HIP, R_SHOULDER, R_ELBOW, interior=True),)),
    BodyRegion("left_knee", (AngleSpec("l_knee", L_HIP, L_KNEE, L_ANKLE),)),
    BodyRegion("right_knee", (AngleSpec("r_knee", R_HIP, R_KNEE, R_ANKLE),)),
    BodyRegion("left_hip", (AngleSpec("l_hip", L_SHOULDER, L_HIP, L_KNEE),)),
    BodyRegion("right_hip", (AngleSpec("r_hip", R_SHOULDER, R_HIP, R_KNEE),)),
)


def compute_region_angles(
    lm: Optional[LandmarkList],
    min_visibility: float = 0.0,
    regions: tuple[BodyRegion, ...] = BODY_REGIONS,
) -> list[AngleReading]:
    """按身体区域计算关节角度。

    输入: lm 为身体关键点列表（可为 None）；min_visibility 可见度阈值。
    输出: AngleReading 列表；退化向量的读数 degrees 为 NaN，由调用方过滤。
    作用: 区域内任一所需关键点缺失时，该区域的角度不计算；其他区域不受影响。
    """
    if lm is None:
        return []

    readings: list[AngleReading] = []
    for region in regions:
        if not has_landmarks(lm, region.required, min_visibility):
            continue
        for spec in region.angles:
            a, b, c = lm[spec.start], lm[spec.vertex], lm[spec.end]
            angle_fn = vertex_angle if spec.interior else chain_angle
            readings.append(
                AngleReading(
                    name=spec.name,
                    degrees=angle_fn(a, b, c),
                    anchor=(b.x, b.y),
                )
            )
    return readings


def label_color(degrees: float) -> tuple[int, int, int]:
    """角度 > 90° 用警示色，否则用正常色。"""
    return WARNING_COLOR if degrees > ANGLE_WARNING_THRESHOLD_DEG else NORMAL_COLOR


def format_angle(degrees: float) -> str:
    return f"{degrees:.0f}"
