from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

from ..errors import InferenceError, InitializationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ModelSource = Union[str, Path, bytes]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CPUExecutionProvider"])
    - input_name/output_name: override auto-selected I/O names if needed
    - intra_op_num_threads: 0 lets ORT decide
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None
    intra_op_num_threads: int = 0


class OnnxRuntimeBackend:
    """
    ONNX Runtime session wrapper.

    `model` is a path to a .onnx file or the serialized model bytes. Creating
    the backend loads the model; `close()` releases the session.
    """

    def __init__(self, model: ModelSource, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise InitializationError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime`."
            ) from e

        self.model_path: Optional[Path] = None
        if isinstance(model, (bytes, bytearray)):
            model_arg: Union[str, bytes] = bytes(model)
            if not model_arg:
                raise InitializationError("Failed to initialize ONNX Runtime: model bytes are empty")
        else:
            self.model_path = Path(model)
            if not self.model_path.is_file():
                raise InitializationError(f"Failed to initialize ONNX Runtime: model not found: {self.model_path}")
            model_arg = str(self.model_path)

        sess_opts = ort.SessionOptions()
        if cfg.intra_op_num_threads > 0:
            sess_opts.intra_op_num_threads = int(cfg.intra_op_num_threads)
        providers = list(cfg.providers) if cfg.providers is not None else None

        try:
            self.session = ort.InferenceSession(model_arg, sess_options=sess_opts, providers=providers)
            self.input_name = cfg.input_name or self.session.get_inputs()[0].name
            self.output_name = cfg.output_name or self.session.get_outputs()[0].name
        except Exception as e:
            raise InitializationError(f"Failed to initialize ONNX Runtime: {e}") from e

        logger.info(
            "ONNX Runtime initialized successfully (input=%s, output=%s, providers=%s).",
            self.input_name,
            self.output_name,
            ",".join(self.providers_in_use),
        )

    @property
    def providers_in_use(self) -> Sequence[str]:
        if self.session is None:
            return ()
        return tuple(self.session.get_providers())

    def run_inference(self, tensor: np.ndarray) -> np.ndarray:
        if self.session is None:
            raise InferenceError("ONNX session is closed.")
        inputs: Dict[str, Any] = {self.input_name: tensor}
        try:
            outputs = self.session.run([self.output_name], inputs)
        except Exception as e:
            raise InferenceError(f"Error during inference: {e}") from e
        return np.asarray(outputs[0])

    def close(self) -> None:
        # ORT has no explicit release; dropping the last reference frees the session.
        self.session = None
