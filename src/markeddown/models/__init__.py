"""markeddown configuration models."""

from .config import (
    ConfigLoader,
    ConverterConfig,
    ExclusionConfig,
    MarkedDownConfig,
    NormalizerConfig,
)

__all__ = [
    "ConfigLoader",
    "ConverterConfig",
    "ExclusionConfig",
    "MarkedDownConfig",
    "NormalizerConfig",
]
