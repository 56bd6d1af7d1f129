from __future__ import annotations

from typing import Optional

import numpy as np


def box_iou(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    """
    IoU between one xyxy box (4,) and a set of xyxy boxes (N, 4).
    """

    xx1 = np.maximum(box[0], others[:, 0])
    yy1 = np.maximum(box[1], others[:, 1])
    xx2 = np.minimum(box[2], others[:, 2])
    yy2 = np.minimum(box[3], others[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    area = max(0.0, float(box[2] - box[0])) * max(0.0, float(box[3] - box[1]))
    areas = np.maximum(0.0, others[:, 2] - others[:, 0]) * np.maximum(0.0, others[:, 3] - others[:, 1])
    union = area + areas - inter
    return inter / np.maximum(union, 1e-6)


def nms(
    boxes: np.ndarray,
    scores: np.ndarray,
    iou_threshold: float = 0.45,
    max_detections: Optional[int] = None,
) -> np.ndarray:
    """
    Greedy class-agnostic NMS. Boxes are (N, 4) xyxy, scores (N,).

    Returns indices of the kept boxes, highest score first.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    order = np.argsort(-scores, kind="stable")
    keep = []

    while order.size > 0:
        if max_detections is not None and len(keep) >= max_detections:
            break
        i = order[0]
        keep.append(i)
        rest = order[1:]
        if rest.size == 0:
            break
        iou = box_iou(boxes[i], boxes[rest])
        order = rest[iou <= iou_threshold]

    return np.array(keep, dtype=np.int64)
