from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .capture import FACING_ENVIRONMENT, FACING_USER, CameraConfig
from .detectors import HandsConfig, HolisticConfig

logger = logging.getLogger(__name__)

CONFIG_ENV = "POSE_TRACKER_CONFIG"


@dataclass(frozen=True)
class OverlayConfig:
    width: int = 640
    height: int = 480
    # 低于该可见度的身体关键点不绘制、不参与角度计算
    min_visibility: float = 0.5
    show_angles: bool = True


@dataclass(frozen=True)
class FrontendConfig:
    server_name: Optional[str] = None
    server_port: Optional[int] = None
    tick_interval_ms: int = 33  # ~30fps


@dataclass(frozen=True)
class AppConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    hands: HandsConfig = field(default_factory=HandsConfig)
    holistic: HolisticConfig = field(default_factory=HolisticConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    frontend: FrontendConfig = field(default_factory=FrontendConfig)
    log_level: str = "INFO"


def _repo_root() -> Path:
    # tracking_core/config.py -> repo root is one level up.
    return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return _repo_root() / "config.json"


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
    return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_float(v: Any, default: float) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return float(default)


def _as_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(default)


def _as_str(v: Any, default: str = "") -> str:
    return str(v) if v is not None else str(default)


def _parse_camera(raw: Dict[str, Any]) -> CameraConfig:
    d = CameraConfig()
    facing = _as_str(_deep_get(raw, ["camera", "facing_mode"], d.facing_mode), d.facing_mode).strip().lower()
    if facing not in (FACING_USER, FACING_ENVIRONMENT):
        facing = d.facing_mode
    width = _as_int(_deep_get(raw, ["camera", "width"], d.width), d.width)
    height = _as_int(_deep_get(raw, ["camera", "height"], d.height), d.height)
    return CameraConfig(
        index=_as_int(_deep_get(raw, ["camera", "index"], d.index), d.index),
        width=width if width > 0 else d.width,
        height=height if height > 0 else d.height,
        facing_mode=facing,
    )


def _parse_hands(raw: Dict[str, Any]) -> HandsConfig:
    d = HandsConfig()
    try:
        return HandsConfig(
            max_num_hands=_as_int(_deep_get(raw, ["hands", "max_num_hands"], d.max_num_hands), d.max_num_hands),
            model_complexity=_as_int(_deep_get(raw, ["hands", "model_complexity"], d.model_complexity), d.model_complexity),
            min_detection_confidence=_as_float(
                _deep_get(raw, ["hands", "min_detection_confidence"], d.min_detection_confidence),
                d.min_detection_confidence,
            ),
            min_tracking_confidence=_as_float(
                _deep_get(raw, ["hands", "min_tracking_confidence"], d.min_tracking_confidence),
                d.min_tracking_confidence,
            ),
        )
    except ValueError as e:
        logger.warning("hands 配置无效，使用默认值: %s", e)
        return d


def _parse_holistic(raw: Dict[str, Any]) -> HolisticConfig:
    d = HolisticConfig()
    try:
        return HolisticConfig(
            model_complexity=_as_int(
                _deep_get(raw, ["holistic", "model_complexity"], d.model_complexity), d.model_complexity
            ),
            smooth_landmarks=_as_bool(
                _deep_get(raw, ["holistic", "smooth_landmarks"], d.smooth_landmarks), d.smooth_landmarks
            ),
            enable_segmentation=_as_bool(
                _deep_get(raw, ["holistic", "enable_segmentation"], d.enable_segmentation), d.enable_segmentation
            ),
            smooth_segmentation=_as_bool(
                _deep_get(raw, ["holistic", "smooth_segmentation"], d.smooth_segmentation), d.smooth_segmentation
            ),
            min_detection_confidence=_as_float(
                _deep_get(raw, ["holistic", "min_detection_confidence"], d.min_detection_confidence),
                d.min_detection_confidence,
            ),
            min_tracking_confidence=_as_float(
                _deep_get(raw, ["holistic", "min_tracking_confidence"], d.min_tracking_confidence),
                d.min_tracking_confidence,
            ),
        )
    except ValueError as e:
        logger.warning("holistic 配置无效，使用默认值: %s", e)
        return d


def _parse_overlay(raw: Dict[str, Any]) -> OverlayConfig:
    d = OverlayConfig()
    width = _as_int(_deep_get(raw, ["overlay", "width"], d.width), d.width)
    height = _as_int(_deep_get(raw, ["overlay", "height"], d.height), d.height)
    vis = _as_float(_deep_get(raw, ["overlay", "min_visibility"], d.min_visibility), d.min_visibility)
    return OverlayConfig(
        width=width if width > 0 else d.width,
        height=height if height > 0 else d.height,
        min_visibility=max(0.0, min(1.0, vis)),
        show_angles=_as_bool(_deep_get(raw, ["overlay", "show_angles"], d.show_angles), d.show_angles),
    )


def _parse_frontend(raw: Dict[str, Any]) -> FrontendConfig:
    d = FrontendConfig()
    name = _deep_get(raw, ["frontend", "server_name"], None)
    port = _deep_get(raw, ["frontend", "server_port"], None)
    tick = _as_int(_deep_get(raw, ["frontend", "tick_interval_ms"], d.tick_interval_ms), d.tick_interval_ms)
    port_num = _as_int(port, 0) if port is not None else 0
    return FrontendConfig(
        server_name=_as_str(name) if name else None,
        server_port=port_num if port_num > 0 else None,
        tick_interval_ms=max(1, tick),
    )


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    """读取 JSON 配置。

    文件不存在时返回默认配置；文件格式错误时记录警告并返回默认配置；
    单项取值非法时该项回退为默认值。
    """
    p = Path(path).expanduser().resolve() if path else get_default_config_path()
    if not p.exists():
        return AppConfig()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("配置文件 %s 读取失败，使用默认配置: %s", p, e)
        return AppConfig()

    if not isinstance(raw, dict):
        logger.warning("配置文件 %s 顶层不是对象，使用默认配置", p)
        return AppConfig()

    return AppConfig(
        camera=_parse_camera(raw),
        hands=_parse_hands(raw),
        holistic=_parse_holistic(raw),
        overlay=_parse_overlay(raw),
        frontend=_parse_frontend(raw),
        log_level=_as_str(raw.get("log_level"), "INFO").strip().upper() or "INFO",
    )
