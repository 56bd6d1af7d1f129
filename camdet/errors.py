from __future__ import annotations


class DetectorError(Exception):
    """Base class for every error raised by camdet."""


class InitializationError(DetectorError):
    """
    The model artifact is missing/corrupt or the runtime session could not be created.

    Fatal for the detector until it is re-initialized.
    """


class DetectorNotReadyError(InitializationError):
    pass


class InferenceError(DetectorError):
    """
    The runtime rejected the input tensor or failed during evaluation.

    Reported per call; the caller may submit the next frame.
    """


class PreconditionError(DetectorError, ValueError):
    """Malformed input frame (e.g. zero width or height)."""
