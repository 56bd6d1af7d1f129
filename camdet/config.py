from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .preprocess import CHANNEL_ORDERS


@dataclass(frozen=True)
class DetectorConfig:
    model: str
    backend: Optional[str] = None
    onnx_providers: Optional[Tuple[str, ...]] = None
    input_size: Tuple[int, int] = (640, 640)
    channel_order: str = "rgb"
    conf_threshold: float = 0.5
    labels: Tuple[str, ...] = ("billete",)
    metadata: Optional[str] = None
    apply_nms: bool = False
    iou_threshold: float = 0.45
    max_detections: Optional[int] = None
    min_interval_s: float = 0.1

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("model must be a non-empty string")
        if len(self.input_size) != 2 or any(int(v) < 32 for v in self.input_size):
            raise ValueError("input_size must be two integers >= 32")
        if self.channel_order not in CHANNEL_ORDERS:
            raise ValueError(f"channel_order must be one of {CHANNEL_ORDERS}")
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if not self.labels and self.metadata is None:
            raise ValueError("labels must not be empty unless metadata is provided")
        if self.max_detections is not None and self.max_detections < 1:
            raise ValueError("max_detections must be >= 1")
        if self.min_interval_s < 0:
            raise ValueError("min_interval_s must be >= 0")


def _require_str(payload: Dict[str, Any], key: str) -> str:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value


def _opt_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value


def _opt_number(payload: Dict[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _opt_bool(payload: Dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


def _str_list(value: object, key: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a string or list of strings")
    cleaned = tuple(item.strip() for item in value)
    if any(not item for item in cleaned):
        raise ValueError(f"{key} must not contain empty strings")
    return cleaned


def _input_size(value: object) -> Tuple[int, int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value, value
    if (
        isinstance(value, list)
        and len(value) == 2
        and all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        return int(value[0]), int(value[1])
    raise ValueError("input_size must be an integer or a [width, height] pair")


def parse_detector_config(payload: Dict[str, Any]) -> DetectorConfig:
    allowed = {
        "model",
        "backend",
        "onnx_providers",
        "input_size",
        "channel_order",
        "conf_threshold",
        "labels",
        "metadata",
        "apply_nms",
        "iou_threshold",
        "max_detections",
        "min_interval_s",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {unknown}")

    providers = payload.get("onnx_providers")
    max_detections = payload.get("max_detections")
    if max_detections is not None and (isinstance(max_detections, bool) or not isinstance(max_detections, int)):
        raise ValueError("max_detections must be an integer")
    channel_order = payload.get("channel_order", "rgb")
    if not isinstance(channel_order, str):
        raise ValueError("channel_order must be a string")

    return DetectorConfig(
        model=_require_str(payload, "model"),
        backend=_opt_str(payload, "backend"),
        onnx_providers=_str_list(providers, "onnx_providers") if providers is not None else None,
        input_size=_input_size(payload.get("input_size", [640, 640])),
        channel_order=channel_order.lower(),
        conf_threshold=_opt_number(payload, "conf_threshold", 0.5),
        labels=_str_list(payload.get("labels", ["billete"]), "labels"),
        metadata=_opt_str(payload, "metadata"),
        apply_nms=_opt_bool(payload, "apply_nms", False),
        iou_threshold=_opt_number(payload, "iou_threshold", 0.45),
        max_detections=max_detections,
        min_interval_s=_opt_number(payload, "min_interval_s", 0.1),
    )


def load_detector_config(path: Path) -> DetectorConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detector config must be a JSON object")
    return parse_detector_config(payload)
