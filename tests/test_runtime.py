import importlib.util
import tempfile
import unittest
from pathlib import Path

import numpy as np

from camdet.backends.base import InferenceRuntime
from camdet.backends.onnxruntime_backend import OnnxRuntimeBackend
from camdet.errors import InferenceError, InitializationError
from camdet.runtime import find_project_root, load_runtime, resolve_path

HAS_ORT = importlib.util.find_spec("onnxruntime") is not None
HAS_ONNX = importlib.util.find_spec("onnx") is not None


def _identity_model_bytes() -> bytes:
    """
    Serialized ONNX graph: output0 = Identity(images), shape (1, 5, 4).
    """

    from onnx import TensorProto, helper

    images = helper.make_tensor_value_info("images", TensorProto.FLOAT, [1, 5, 4])
    output = helper.make_tensor_value_info("output0", TensorProto.FLOAT, [1, 5, 4])
    node = helper.make_node("Identity", ["images"], ["output0"])
    graph = helper.make_graph([node], "identity", [images], [output])
    model = helper.make_model(graph, opset_imports=[helper.make_opsetid("", 13)])
    model.ir_version = 8
    return model.SerializeToString()


class TestRuntimePaths(unittest.TestCase):
    def test_resolve_absolute_path_unchanged(self) -> None:
        p = Path(tempfile.gettempdir()).resolve() / "model.onnx"
        self.assertEqual(resolve_path(p), p)

    def test_resolve_relative_against_root(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            self.assertEqual(resolve_path("models/best.onnx", root=root), Path(root).resolve() / "models" / "best.onnx")

    def test_find_project_root_uses_markers(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            base = Path(root).resolve()
            (base / "pyproject.toml").write_text("", encoding="utf-8")
            nested = base / "a" / "b"
            nested.mkdir(parents=True)
            self.assertEqual(find_project_root(nested), base)


class TestLoadRuntime(unittest.TestCase):
    def test_unknown_extension(self) -> None:
        with self.assertRaises(InitializationError):
            load_runtime("models/best.tflite", root=tempfile.gettempdir())

    def test_unsupported_backend(self) -> None:
        with self.assertRaises(InitializationError):
            load_runtime("models/best.onnx", backend="tensorrt", root=tempfile.gettempdir())

    @unittest.skipUnless(HAS_ORT, "onnxruntime not installed")
    def test_missing_model_is_initialization_error(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            with self.assertRaises(InitializationError) as ctx:
                load_runtime("best.onnx", root=root)
        self.assertIn("Failed to initialize ONNX Runtime", str(ctx.exception))

    @unittest.skipUnless(HAS_ORT, "onnxruntime not installed")
    def test_corrupt_model_is_initialization_error(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            path = Path(root) / "best.onnx"
            path.write_bytes(b"definitely not an onnx model")
            with self.assertRaises(InitializationError):
                load_runtime(path)
        with self.assertRaises(InitializationError):
            load_runtime(b"definitely not an onnx model")

    @unittest.skipUnless(HAS_ORT, "onnxruntime not installed")
    def test_empty_model_bytes(self) -> None:
        with self.assertRaises(InitializationError):
            load_runtime(b"")


@unittest.skipUnless(HAS_ORT and HAS_ONNX, "onnxruntime and onnx are required")
class TestOnnxRuntimeBackend(unittest.TestCase):
    def setUp(self) -> None:
        self.model_bytes = _identity_model_bytes()
        self.tensor = np.arange(20, dtype=np.float32).reshape(1, 5, 4)

    def test_session_from_path(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            path = Path(root) / "best.onnx"
            path.write_bytes(self.model_bytes)
            runtime = load_runtime("best.onnx", root=root)

        self.assertIsInstance(runtime, OnnxRuntimeBackend)
        self.assertIsInstance(runtime, InferenceRuntime)
        self.assertEqual(runtime.input_name, "images")
        self.assertEqual(runtime.output_name, "output0")
        self.assertIn("CPUExecutionProvider", runtime.providers_in_use)
        out = runtime.run_inference(self.tensor)
        self.assertEqual(out.shape, (1, 5, 4))
        self.assertTrue(np.array_equal(out, self.tensor))
        runtime.close()

    def test_session_from_bytes(self) -> None:
        runtime = load_runtime(self.model_bytes)
        self.assertIsNone(runtime.model_path)
        self.assertTrue(np.array_equal(runtime.run_inference(self.tensor), self.tensor))
        runtime.close()

    def test_run_after_close(self) -> None:
        runtime = load_runtime(self.model_bytes)
        runtime.close()
        with self.assertRaises(InferenceError) as ctx:
            runtime.run_inference(self.tensor)
        self.assertEqual(str(ctx.exception), "ONNX session is closed.")
        self.assertEqual(tuple(runtime.providers_in_use), ())

    def test_rejected_input_is_inference_error(self) -> None:
        runtime = load_runtime(self.model_bytes)
        with self.assertRaises(InferenceError) as ctx:
            runtime.run_inference(np.zeros((1, 3, 8, 8), dtype=np.float32))
        self.assertTrue(str(ctx.exception).startswith("Error during inference: "))
        runtime.close()



if __name__ == "__main__":
    unittest.main()
