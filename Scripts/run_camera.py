from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import cv2

from camdet import (
    DetectorConfig,
    FrameThrottle,
    PreconditionError,
    draw_detections,
    format_results,
    load_detector,
    load_detector_config,
    setup_logging,
)

logger = logging.getLogger("run_camera")


def main() -> int:
    parser = argparse.ArgumentParser(description="Live detection on a webcam or video file, rate-limited.")
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--video", default=None, help="Path to an input video file.")
    src.add_argument("--webcam", type=int, default=None, help="Webcam index (default 0).")
    parser.add_argument("--config", default=None, help="Detector config JSON.")
    parser.add_argument("--model", default="models/best.onnx", help="Path to the .onnx model.")
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Minimum seconds between detections; frames in between are dropped (default 0.1).",
    )
    parser.add_argument("--show", action="store_true", help="Show a window with the overlay.")
    parser.add_argument("--max-frames", type=int, default=0, help="Stop after N processed frames (0 = no limit).")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.max_frames < 0:
        raise ValueError("--max-frames must be >= 0")

    cfg = load_detector_config(Path(args.config)) if args.config else DetectorConfig(model=args.model)
    cfg = replace(cfg, channel_order="bgr")
    throttle = FrameThrottle(args.interval if args.interval is not None else cfg.min_interval_s)

    if args.video is not None:
        cap = cv2.VideoCapture(args.video)
        if not cap.isOpened():
            raise FileNotFoundError(f"Could not open video: {args.video}")
    else:
        cam_index = 0 if args.webcam is None else int(args.webcam)
        cap = cv2.VideoCapture(cam_index)
        if not cap.isOpened():
            raise RuntimeError(f"Could not open webcam index: {cam_index}")

    detector = load_detector(cfg)
    if not detector.ready:
        cap.release()
        print(detector.init_error)
        return 1

    processed = 0
    last_detections = []
    try:
        while True:
            ok, frame = cap.read()
            if not ok or frame is None:
                break

            if throttle.should_process():
                try:
                    outcome = detector.try_detect(frame)
                except PreconditionError as e:
                    logger.error("Error processing frame: %s", e)
                    continue
                if outcome.ok:
                    last_detections = outcome.detections
                    print(format_results(last_detections))
                processed += 1

            if args.show:
                cv2.imshow("detections", draw_detections(frame, last_detections))
                key = cv2.waitKey(1) & 0xFF
                if key in (27, ord("q")):
                    break

            if args.max_frames and processed >= args.max_frames:
                break
    finally:
        cap.release()
        detector.close()
        if args.show:
            cv2.destroyAllWindows()

    logger.info("Processed %d frame(s), dropped %d.", throttle.accepted, throttle.dropped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
