from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np

from .types import Detection

BOX_COLOR: Tuple[int, int, int] = (0, 255, 0)
TEXT_COLOR: Tuple[int, int, int] = (255, 255, 255)


def format_results(detections: Sequence[Detection]) -> str:
    """
    One "label (score)" line per detection, or "No detections".
    """

    if not detections:
        return "No detections"
    return "\n".join(f"{det.label} ({det.score:.2f})" for det in detections)


def draw_detections(
    image: np.ndarray,
    detections: Iterable[Detection],
    *,
    show_score: bool = True,
    color: Tuple[int, int, int] = BOX_COLOR,
    box_thickness: int = 2,
    font_scale: float = 0.5,
    font_thickness: int = 1,
) -> np.ndarray:
    """
    Draw boxes + labels on a copy of `image` (H, W, 3) and return it.

    Boxes are expected in the image's own pixel coordinates, i.e. the frame
    that was passed to the detector.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array.")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image, 'shape', None)}")

    out = image.copy()
    h, w = out.shape[:2]

    for det in detections:
        x1, y1, x2, y2 = det.as_xyxy()
        x1i = int(np.clip(round(x1), 0, w - 1))
        y1i = int(np.clip(round(y1), 0, h - 1))
        x2i = int(np.clip(round(x2), 0, w - 1))
        y2i = int(np.clip(round(y2), 0, h - 1))

        cv2.rectangle(out, (x1i, y1i), (x2i, y2i), color, thickness=box_thickness)

        label = f"{det.label} {det.score:.2f}" if show_score else det.label
        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, font_thickness)
        # Above the box when it fits, otherwise inside it.
        y_text_top = y1i - th - baseline
        if y_text_top < 0:
            y_text_top = y1i

        x_text_right = min(x1i + tw, w - 1)
        y_text_bottom = min(y_text_top + th + baseline, h - 1)

        cv2.rectangle(out, (x1i, y_text_top), (x_text_right, y_text_bottom), color, thickness=-1)
        cv2.putText(
            out,
            label,
            (x1i, min(y_text_top + th, h - 1)),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            TEXT_COLOR,
            thickness=font_thickness,
            lineType=cv2.LINE_AA,
        )

    return out
