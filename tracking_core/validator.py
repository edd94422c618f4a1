from __future__ import annotations

from typing import Iterable, Optional

from .types import Landmark, LandmarkList


def _present(lm: Optional[Landmark], min_visibility: float) -> bool:
    if lm is None:
        return False
    # 检测器未给出可见度时视为可见
    if lm.visibility is None:
        return True
    return float(lm.visibility) >= min_visibility


def has_landmarks(
    landmarks: Optional[LandmarkList],
    required: Iterable[int],
    min_visibility: float = 0.0,
) -> bool:
    """检查所需关键点是否全部存在。

    输入:
    - landmarks: 本帧的身体关键点列表，可为 None（本帧未检测到人体）。
    - required: 需要的关键点索引集合。
    - min_visibility: 可见度阈值，低于该值的点视为缺失。

    输出: 仅当每个索引都有定义（且可见度达标）时返回 True。
    作用: 作为角度计算前的门控，检测不完整时整组角度都不计算。
    """
    if landmarks is None:
        return False
    n = len(landmarks)
    for idx in required:
        if idx < 0 or idx >= n:
            return False
        if not _present(landmarks[idx], min_visibility):
            return False
    return True
