import json
import tempfile
import unittest
from pathlib import Path

from camdet.config import DetectorConfig, load_detector_config, parse_detector_config
from camdet.detector import build_label_map


class TestDetectorConfig(unittest.TestCase):
    def _write(self, payload) -> Path:
        tmp = tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8")
        with tmp:
            json.dump(payload, tmp)
        self.addCleanup(Path(tmp.name).unlink)
        return Path(tmp.name)

    def test_defaults(self) -> None:
        cfg = load_detector_config(self._write({"model": "models/best.onnx"}))
        self.assertEqual(cfg.input_size, (640, 640))
        self.assertEqual(cfg.conf_threshold, 0.5)
        self.assertEqual(cfg.labels, ("billete",))
        self.assertFalse(cfg.apply_nms)
        self.assertEqual(cfg.min_interval_s, 0.1)
        self.assertEqual(cfg.channel_order, "rgb")

    def test_full_payload(self) -> None:
        cfg = parse_detector_config(
            {
                "model": "m.onnx",
                "backend": "onnxruntime",
                "onnx_providers": ["CPUExecutionProvider"],
                "input_size": 320,
                "channel_order": "BGR",
                "conf_threshold": 0.6,
                "labels": ["billete", "moneda"],
                "apply_nms": True,
                "iou_threshold": 0.5,
                "max_detections": 10,
                "min_interval_s": 0.2,
            }
        )
        self.assertEqual(cfg.onnx_providers, ("CPUExecutionProvider",))
        self.assertEqual(cfg.input_size, (320, 320))
        self.assertEqual(cfg.channel_order, "bgr")
        self.assertEqual(cfg.labels, ("billete", "moneda"))
        self.assertEqual(cfg.max_detections, 10)

    def test_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ValueError):
            parse_detector_config({"model": "m.onnx", "threshold": 0.4})

    def test_rejects_bad_types(self) -> None:
        bad = [
            {},
            {"model": ""},
            {"model": "m.onnx", "conf_threshold": "high"},
            {"model": "m.onnx", "conf_threshold": True},
            {"model": "m.onnx", "conf_threshold": 1.2},
            {"model": "m.onnx", "apply_nms": "yes"},
            {"model": "m.onnx", "input_size": [640]},
            {"model": "m.onnx", "input_size": 16},
            {"model": "m.onnx", "labels": []},
            {"model": "m.onnx", "labels": ["ok", ""]},
            {"model": "m.onnx", "max_detections": 2.5},
            {"model": "m.onnx", "channel_order": "yuv"},
        ]
        for payload in bad:
            with self.assertRaises(ValueError, msg=str(payload)):
                parse_detector_config(payload)

    def test_invalid_json(self) -> None:
        tmp = tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8")
        with tmp:
            tmp.write("{not json")
        self.addCleanup(Path(tmp.name).unlink)
        with self.assertRaises(ValueError):
            load_detector_config(Path(tmp.name))

    def test_non_object_json(self) -> None:
        with self.assertRaises(ValueError):
            load_detector_config(self._write(["model"]))

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_detector_config(Path("does/not/exist.json"))

    def test_single_label_maps_every_class(self) -> None:
        labels = build_label_map(DetectorConfig(model="m.onnx"))
        self.assertEqual(labels.label_for(0), "billete")
        self.assertEqual(labels.label_for(7), "billete")

    def test_label_list_maps_by_index(self) -> None:
        labels = build_label_map(DetectorConfig(model="m.onnx", labels=("a", "b")))
        self.assertEqual(labels.label_for(1), "b")
        self.assertEqual(labels.label_for(5), "5")


if __name__ == "__main__":
    unittest.main()
