"""MediaPipe 手部与身体的骨架连接表（仅用于画面叠加显示）。

索引遵循 MediaPipe Hands 21 关键点与 Pose 33 关键点定义。
这里不依赖 mediapipe 包本身，便于业务/界面层解耦、减少类型检查噪音。
"""
from __future__ import annotations

# 连接对 (a, b)
HAND_CONNECTIONS: tuple[tuple[int, int], ...] = (
    # palm
    (0, 1),
    (0, 5),
    (5, 9),
    (9, 13),
    (13, 17),
    (0, 17),
    # thumb
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (17, 18),
    (18, 19),
    (19, 20),
)

POSE_CONNECTIONS: tuple[tuple[int, int], ...] = (
    # face
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 7),
    (0, 4),
    (4, 5),
    (5, 6),
    (6, 8),
    (9, 10),
    # torso
    (11, 12),
    (11, 23),
    (12, 24),
    (23, 24),
    # left arm + hand
    (11, 13),
    (13, 15),
    (15, 17),
    (15, 19),
    (15, 21),
    (17, 19),
    # right arm + hand
    (12, 14),
    (14, 16),
    (16, 18),
    (16, 20),
    (16, 22),
    (18, 20),
    # left leg
    (23, 25),
    (25, 27),
    (27, 29),
    (29, 31),
    (27, 31),
    # right leg
    (24, 26),
    (26, 28),
    (28, 30),
    (30, 32),
    (28, 32),
)
