from __future__ import annotations

import contextlib
import logging
import threading
from typing import Callable, List, Optional

import numpy as np

from .backends.base import InferenceRuntime
from .config import DetectorConfig
from .errors import DetectorNotReadyError, InferenceError, InitializationError
from .labels import LabelMap, load_label_map
from .postprocess import PostprocessConfig, Postprocessor
from .preprocess import PreprocessConfig, Preprocessor
from .runtime import load_runtime, resolve_path
from .types import Detection, DetectionOutcome

logger = logging.getLogger(__name__)

RuntimeLoader = Callable[[], InferenceRuntime]


class ObjectDetector:
    """
    Frame -> preprocess -> inference -> postprocess -> detections.

    Owns one runtime session, acquired by `loader` on construction and released
    by `close()`. Calls are synchronous; at most one inference runs at a time
    per detector. Frames that arrive faster than inference should be dropped by
    the caller (see `FrameThrottle`), the detector does not queue them.
    """

    def __init__(
        self,
        loader: RuntimeLoader,
        *,
        preprocess_cfg: PreprocessConfig = PreprocessConfig(),
        post_cfg: PostprocessConfig = PostprocessConfig(),
    ):
        self._loader = loader
        self._lock = threading.Lock()
        self._runtime: Optional[InferenceRuntime] = None
        self.init_error: Optional[str] = None
        self.pre = Preprocessor(preprocess_cfg)
        self.post = Postprocessor(post_cfg)

        with contextlib.suppress(InitializationError):
            self.initialize()

    @property
    def ready(self) -> bool:
        return self._runtime is not None

    @property
    def runtime(self) -> Optional[InferenceRuntime]:
        return self._runtime

    def initialize(self) -> None:
        """
        (Re)load the model. Raises InitializationError on failure.
        """

        with self._lock:
            self._release()
            try:
                runtime = self._loader()
            except InitializationError as e:
                self.init_error = str(e)
                logger.error("%s", self.init_error)
                raise
            except Exception as e:
                self.init_error = f"Failed to initialize ONNX Runtime: {e}"
                logger.error("%s", self.init_error, exc_info=True)
                raise InitializationError(self.init_error) from e
            self._runtime = runtime
            self.init_error = None

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Run one detection. Raises DetectorNotReadyError, PreconditionError or InferenceError.
        """

        prep = self.pre.preprocess(frame)

        if self._runtime is None:
            msg = "ONNX session not initialized."
            if self.init_error:
                msg = f"{msg} {self.init_error}"
            raise DetectorNotReadyError(msg)

        with self._lock:
            runtime = self._runtime
            if runtime is None:
                raise DetectorNotReadyError("ONNX session not initialized.")
            try:
                output = runtime.run_inference(prep.tensor)
            except InferenceError:
                raise
            except Exception as e:
                raise InferenceError(f"Error during inference: {e}") from e

        detections = self.post.process(output, prep.ratio_x, prep.ratio_y)
        logger.debug("Inference completed successfully: %d detection(s).", len(detections))
        return detections

    __call__ = detect

    def try_detect(self, frame: np.ndarray) -> DetectionOutcome:
        """
        Like detect(), but initialization and inference failures are returned as
        an error message. Malformed frames still raise PreconditionError.
        """

        try:
            return DetectionOutcome.success(self.detect(frame))
        except (InitializationError, InferenceError) as e:
            logger.error("%s", e)
            return DetectionOutcome.failure(str(e))

    def close(self) -> None:
        with self._lock:
            self._release()

    def _release(self) -> None:
        runtime, self._runtime = self._runtime, None
        if runtime is not None:
            runtime.close()

    def __enter__(self) -> "ObjectDetector":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def build_label_map(cfg: DetectorConfig) -> LabelMap:
    if cfg.metadata:
        try:
            return load_label_map(str(resolve_path(cfg.metadata)))
        except (OSError, ValueError) as e:
            raise InitializationError(f"Failed to load class labels: {e}") from e
    if len(cfg.labels) == 1:
        return LabelMap.single(cfg.labels[0])
    return LabelMap.from_sequence(cfg.labels)


def load_detector(cfg: DetectorConfig) -> ObjectDetector:
    """
    Build a detector from config. Initialization errors are not raised here;
    check `detector.ready` / `detector.init_error`.
    """

    labels = LabelMap()
    label_error: Optional[InitializationError] = None
    try:
        labels = build_label_map(cfg)
    except InitializationError as e:
        label_error = e

    def loader() -> InferenceRuntime:
        if label_error is not None:
            raise label_error
        return load_runtime(
            cfg.model,
            backend=cfg.backend,
            onnx_providers=cfg.onnx_providers,
        )

    return ObjectDetector(
        loader,
        preprocess_cfg=PreprocessConfig(input_size=cfg.input_size, channel_order=cfg.channel_order),
        post_cfg=PostprocessConfig(
            conf_threshold=cfg.conf_threshold,
            labels=labels,
            apply_nms=cfg.apply_nms,
            iou_threshold=cfg.iou_threshold,
            max_detections=cfg.max_detections,
        ),
    )
