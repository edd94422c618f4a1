from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .types import Landmark

PointLike = Union[Landmark, Sequence[float], np.ndarray]


def as_vec3(p: PointLike) -> np.ndarray:
    """把关键点或坐标序列转换为 (3,) 向量。

    输入: Landmark，或长度为 2/3 的序列/数组（缺少 z 时按 0 处理）。
    输出: numpy.ndarray，形状 (3,)，float64。
    """
    if isinstance(p, Landmark):
        return p.xyz
    arr = np.asarray(p, dtype=np.float64).reshape(-1)
    if arr.size == 2:
        return np.array([arr[0], arr[1], 0.0], dtype=np.float64)
    return arr[:3]


def angle_between(v1: PointLike, v2: PointLike) -> float:
    """计算两个方向向量的夹角（度）。

    输入: v1, v2 为三维（或二维）向量。
    输出: 0~180 的角度；任一向量长度为 0 时返回 NaN，不抛异常。
    作用: 点积 / 模长之积，裁剪到 [-1,1] 后取 arccos。
    """
    a = as_vec3(v1)
    b = as_vec3(v2)
    denom = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if denom == 0.0:
        return float("nan")
    cosv = float(np.clip(np.dot(a, b) / denom, -1.0, 1.0))
    return float(np.degrees(np.arccos(cosv)))


def chain_angle(a: PointLike, b: PointLike, c: PointLike) -> float:
    """沿关节链 A→B→C 的弯曲角（度）。

    向量为 B−A 与 C−B：三点共线且同向时为 0°，直角弯折时为 90°。
    """
    pa, pb, pc = as_vec3(a), as_vec3(b), as_vec3(c)
    return angle_between(pb - pa, pc - pb)


def vertex_angle(a: PointLike, b: PointLike, c: PointLike) -> float:
    """以 B 为顶点的内角 ∠ABC（度），向量为 A−B 与 C−B。"""
    pa, pb, pc = as_vec3(a), as_vec3(b), as_vec3(c)
    return angle_between(pa - pb, pc - pb)
