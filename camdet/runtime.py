from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

from .backends.base import InferenceRuntime
from .errors import InitializationError

PathLike = Union[str, Path]


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", ".git"),
) -> Path:
    """
    Best-effort project root discovery (first parent holding one of `markers`).
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Absolute paths are returned as-is; relative ones resolve against `root`
    (or the discovered project root when `root` is "auto"/None).
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


def load_runtime(
    model: Union[PathLike, bytes],
    *,
    backend: Optional[str] = None,
    root: Optional[PathLike] = "auto",
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
    intra_op_num_threads: int = 0,
) -> InferenceRuntime:
    """
    Load a serialized model and return a ready inference runtime.

        runtime = load_runtime("models/best.onnx")

    Args:
        model: path to the model file (relative paths resolve against `root`) or raw model bytes
        backend: "onnxruntime", or None to infer it from the file extension
    """

    chosen = backend
    source: Union[Path, bytes]
    if isinstance(model, (bytes, bytearray)):
        source = bytes(model)
        chosen = chosen or "onnxruntime"
    else:
        source = resolve_path(model, root=root)
        if chosen is None:
            suffix = source.suffix.lower()
            if suffix == ".onnx":
                chosen = "onnxruntime"
            else:
                raise InitializationError(
                    f"Could not infer backend from extension '{suffix}'. Pass backend=... explicitly."
                )

    chosen = chosen.lower()
    if chosen == "onnxruntime":
        from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

        return OnnxRuntimeBackend(
            source,
            OnnxRuntimeBackendConfig(
                providers=onnx_providers,
                input_name=onnx_input_name,
                output_name=onnx_output_name,
                intra_op_num_threads=intra_op_num_threads,
            ),
        )

    raise InitializationError(f"Unsupported backend: {backend!r}")
