"""Inference module -- LLM client and endpoint config loading."""

from .client import get_completion
from .config import get_model_config, log_inference_status

__all__ = [
    "get_completion",
    "get_model_config",
    "log_inference_status",
]
