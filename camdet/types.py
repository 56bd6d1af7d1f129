from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Detection:
    """
    One bounding box in original-frame pixel coordinates.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    score: float
    label: str
    class_id: Optional[int] = None

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "class_id": self.class_id,
            "score": self.score,
            "box": [self.x1, self.y1, self.x2, self.y2],
        }


@dataclass(frozen=True)
class PreprocessResult:
    tensor: np.ndarray
    orig_size: Tuple[int, int]
    ratio_x: float
    ratio_y: float


@dataclass(frozen=True)
class DetectionOutcome:
    """
    Result of a single detection call: either detections or an error message.
    """

    detections: List[Detection] = field(default_factory=list)
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.detections:
            raise ValueError("DetectionOutcome cannot carry both detections and an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, detections: List[Detection]) -> "DetectionOutcome":
        return cls(detections=list(detections))

    @classmethod
    def failure(cls, error: str) -> "DetectionOutcome":
        return cls(error=error)
