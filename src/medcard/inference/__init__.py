"""Pluggable language model gateway layer.

Usage::

    from medcard.inference import (
        GatewayResponse,
        IInferenceBackend,
        RealTimeBackend,
        create_inference_backend,
    )
"""

from __future__ import annotations

from medcard.inference.factory import create_inference_backend
from medcard.inference.protocols import (
    GatewayResponse,
    IInferenceBackend,
    ModelReply,
    TextReply,
    ToolInvocation,
)
from medcard.inference.realtime import RealTimeBackend

__all__ = [
    "GatewayResponse",
    "IInferenceBackend",
    "ModelReply",
    "RealTimeBackend",
    "TextReply",
    "ToolInvocation",
    "create_inference_backend",
]
