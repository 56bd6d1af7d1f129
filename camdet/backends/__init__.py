"""
Inference runtimes for camdet.

Runtimes live in a separate package so pre/post-processing stays importable
(and testable) without an inference library installed.
"""

from __future__ import annotations

from .base import InferenceRuntime

__all__ = ["InferenceRuntime"]
