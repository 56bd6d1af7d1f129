from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import PreconditionError
from .types import PreprocessResult

CHANNEL_ORDERS = ("rgb", "bgr")


def _default_interpolation() -> int:
    import cv2  # type: ignore

    return int(cv2.INTER_LINEAR)


@dataclass(frozen=True)
class PreprocessConfig:
    """
    - input_size: (width, height) expected by the model
    - channel_order: layout of incoming frames ("rgb", or "bgr" for OpenCV captures)
    - interpolation: OpenCV interpolation flag; None means bilinear
    """

    input_size: Tuple[int, int] = (640, 640)
    channel_order: str = "rgb"
    interpolation: Optional[int] = None

    def __post_init__(self) -> None:
        w, h = self.input_size
        if int(w) <= 0 or int(h) <= 0:
            raise ValueError(f"input_size must be positive, got {self.input_size}")
        if self.channel_order not in CHANNEL_ORDERS:
            raise ValueError(f"channel_order must be one of {CHANNEL_ORDERS}, got {self.channel_order!r}")


class Preprocessor:
    """
    Frame -> model input tensor.

    The frame is stretched to exactly `input_size` (no letterbox padding), so
    the scale factors are plain per-axis ratios and postprocessing only has to
    multiply them back in.
    """

    def __init__(self, cfg: PreprocessConfig = PreprocessConfig()):
        self.cfg = cfg

    def preprocess(self, frame: np.ndarray) -> PreprocessResult:
        try:
            import cv2  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("OpenCV is required for preprocessing. Install with `pip install opencv-python`.") from e

        image = self._validate(frame)
        orig_h, orig_w = image.shape[:2]
        in_w, in_h = int(self.cfg.input_size[0]), int(self.cfg.input_size[1])

        image = image[:, :, :3]
        if self.cfg.channel_order == "bgr":
            image = image[:, :, ::-1]
        image = np.ascontiguousarray(image)
        if image.dtype != np.uint8:
            image = image.astype(np.float32)

        interpolation = self.cfg.interpolation if self.cfg.interpolation is not None else _default_interpolation()
        if (orig_w, orig_h) != (in_w, in_h):
            image = cv2.resize(image, (in_w, in_h), interpolation=interpolation)

        # HWC -> CHW (planar R, G, B), normalize, add batch
        tensor = image.astype(np.float32) / 255.0
        tensor = np.ascontiguousarray(np.transpose(tensor, (2, 0, 1))[None, ...], dtype=np.float32)

        return PreprocessResult(
            tensor=tensor,
            orig_size=(orig_w, orig_h),
            ratio_x=orig_w / float(in_w),
            ratio_y=orig_h / float(in_h),
        )

    __call__ = preprocess

    @staticmethod
    def _validate(frame: np.ndarray) -> np.ndarray:
        if frame is None or not hasattr(frame, "shape"):
            raise PreconditionError("frame must be a NumPy array of shape (H, W, 3) or (H, W, 4).")
        image = np.asarray(frame)
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise PreconditionError(f"Expected frame shape (H, W, 3) or (H, W, 4), got {image.shape}")
        h, w = image.shape[:2]
        if h == 0 or w == 0:
            raise PreconditionError(f"Frame has zero dimension: width={w}, height={h}")
        return image
