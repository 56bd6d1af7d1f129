from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

import cv2

from camdet import DetectorConfig, draw_detections, format_results, load_detector, load_detector_config, setup_logging

DEFAULT_MODEL = "models/best.onnx"


def _build_config(args: argparse.Namespace) -> DetectorConfig:
    if args.config:
        cfg = load_detector_config(Path(args.config))
    else:
        cfg = DetectorConfig(model=args.model or DEFAULT_MODEL)
    overrides = {}
    if args.config and args.model:
        overrides["model"] = args.model
    if args.conf is not None:
        overrides["conf_threshold"] = float(args.conf)
    if args.nms:
        overrides["apply_nms"] = True
    # OpenCV reads BGR.
    overrides["channel_order"] = "bgr"
    return replace(cfg, **overrides)


def main() -> int:
    parser = argparse.ArgumentParser(description="Detect objects in a single image.")
    parser.add_argument("image", help="Path to an input image.")
    parser.add_argument("--config", default=None, help="Detector config JSON.")
    parser.add_argument("--model", default=None, help=f"Path to the .onnx model (default {DEFAULT_MODEL}).")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold (default 0.5).")
    parser.add_argument("--nms", action="store_true", help="Merge overlapping boxes with NMS (off by default).")
    parser.add_argument("--out", default=None, help="Optional output path for the annotated image.")
    parser.add_argument("--json", action="store_true", help="Print detections as JSON.")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    args = parser.parse_args()

    setup_logging(args.log_level)

    img = cv2.imread(args.image)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {args.image}")

    with load_detector(_build_config(args)) as detector:
        outcome = detector.try_detect(img)

    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([det.to_dict() for det in outcome.detections], indent=2))
    else:
        print(format_results(outcome.detections))

    if args.out:
        vis = draw_detections(img, outcome.detections)
        ok = cv2.imwrite(args.out, vis)
        if not ok:
            raise RuntimeError(f"Failed to write output image: {args.out}")
        print(f"Wrote annotated image: {args.out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
