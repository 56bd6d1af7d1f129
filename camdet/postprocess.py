from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .errors import InferenceError
from .labels import LabelMap
from .nms import nms
from .types import Detection


@dataclass(frozen=True)
class PostprocessConfig:
    """
    Post-processing settings for (1, 4 + C, anchors) outputs.

    - conf_threshold: anchors with max class score <= threshold are dropped
    - labels: class id -> label mapping
    - apply_nms: overlapping boxes are kept as-is unless this is set
    - max_detections: keep only the top-K by score (None keeps everything)
    """

    conf_threshold: float = 0.5
    labels: LabelMap = field(default_factory=LabelMap.single)
    apply_nms: bool = False
    iou_threshold: float = 0.45
    max_detections: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if self.max_detections is not None and self.max_detections < 1:
            raise ValueError("max_detections must be >= 1")


class Postprocessor:
    """
    Raw model output -> detections in original-frame coordinates.

    Expected layout (per image) is attribute-major:

        row 0..3  : cx, cy, w, h   (model input pixels)
        row 4..   : per-class scores

    e.g. (1, 5, 8400) for a single-class YOLOv8 export.
    """

    def __init__(self, cfg: PostprocessConfig = PostprocessConfig()):
        self.cfg = cfg

    def process(self, output: np.ndarray, ratio_x: float, ratio_y: float) -> List[Detection]:
        preds = self._to_anchor_major(output)
        if preds.shape[0] == 0:
            return []

        class_scores = preds[:, 4:]
        class_ids = np.argmax(class_scores, axis=1)
        scores = class_scores[np.arange(class_scores.shape[0]), class_ids]

        keep = scores > np.float32(self.cfg.conf_threshold)
        if not np.any(keep):
            return []
        boxes, scores, class_ids = preds[keep, :4], scores[keep], class_ids[keep]

        boxes_xyxy = self._to_xyxy(boxes, ratio_x, ratio_y)

        if self.cfg.apply_nms:
            order = nms(boxes_xyxy, scores, self.cfg.iou_threshold, self.cfg.max_detections)
            boxes_xyxy, scores, class_ids = boxes_xyxy[order], scores[order], class_ids[order]
        elif self.cfg.max_detections is not None and scores.shape[0] > self.cfg.max_detections:
            order = np.argsort(-scores, kind="stable")[: self.cfg.max_detections]
            boxes_xyxy, scores, class_ids = boxes_xyxy[order], scores[order], class_ids[order]

        labels = self.cfg.labels
        return [
            Detection(
                x1=float(x1),
                y1=float(y1),
                x2=float(x2),
                y2=float(y2),
                score=float(score),
                label=labels.label_for(int(cls_id)),
                class_id=int(cls_id),
            )
            for (x1, y1, x2, y2), score, cls_id in zip(boxes_xyxy, scores, class_ids)
        ]

    __call__ = process

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _to_anchor_major(output: np.ndarray) -> np.ndarray:
        """
        (1, A, N) or (A, N) attribute-major -> (N, A) float32, one row per anchor.
        """

        p = np.asarray(output, dtype=np.float32)
        if p.ndim == 3:
            if p.shape[0] != 1:
                raise InferenceError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one frame at a time.")
            p = p[0]
        if p.ndim != 2:
            raise InferenceError(f"Unsupported model output shape: {np.shape(output)}")
        if p.shape[0] < 5:
            raise InferenceError(
                f"Model output needs 4 box rows plus at least one class row, got shape {np.shape(output)}"
            )
        return np.ascontiguousarray(p.T)

    @staticmethod
    def _to_xyxy(boxes: np.ndarray, ratio_x: float, ratio_y: float) -> np.ndarray:
        rx = np.float32(ratio_x)
        ry = np.float32(ratio_y)
        cx = boxes[:, 0] * rx
        cy = boxes[:, 1] * ry
        w = boxes[:, 2] * rx
        h = boxes[:, 3] * ry
        return np.stack([cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2], axis=1)

