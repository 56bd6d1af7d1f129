from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class InferenceRuntime(Protocol):
    """
    Opaque model evaluator.

    `run_inference` takes the (1, 3, H, W) float32 input tensor and returns the
    raw (1, 4 + C, anchors) output tensor. Implementations are not required to
    be thread-safe; callers serialize access per instance.
    """

    def run_inference(self, tensor: np.ndarray) -> np.ndarray:
        ...

    def close(self) -> None:
        ...
