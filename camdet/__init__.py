"""
Camera-frame object detection around a single ONNX model.

Pre-processing (frame -> (1, 3, 640, 640) tensor) and post-processing
(raw (1, 4 + C, anchors) output -> boxes in frame pixels) only need NumPy and
OpenCV; ONNX Runtime is loaded lazily by `load_runtime`.
"""

from .types import Detection, DetectionOutcome, PreprocessResult
from .errors import DetectorError, DetectorNotReadyError, InferenceError, InitializationError, PreconditionError
from .labels import LabelMap, load_class_names, load_label_map
from .preprocess import Preprocessor, PreprocessConfig
from .postprocess import Postprocessor, PostprocessConfig
from .nms import nms
from .runtime import load_runtime, find_project_root, resolve_path
from .config import DetectorConfig, load_detector_config, parse_detector_config
from .detector import ObjectDetector, load_detector
from .throttle import FrameThrottle
from .visualize import draw_detections, format_results
from .logging_utils import setup_logging

__all__ = [
    "Detection",
    "DetectionOutcome",
    "PreprocessResult",
    "DetectorError",
    "DetectorNotReadyError",
    "InferenceError",
    "InitializationError",
    "PreconditionError",
    "LabelMap",
    "load_class_names",
    "load_label_map",
    "Preprocessor",
    "PreprocessConfig",
    "Postprocessor",
    "PostprocessConfig",
    "nms",
    "load_runtime",
    "find_project_root",
    "resolve_path",
    "DetectorConfig",
    "load_detector_config",
    "parse_detector_config",
    "ObjectDetector",
    "load_detector",
    "FrameThrottle",
    "draw_detections",
    "format_results",
    "setup_logging",
]
