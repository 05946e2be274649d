"""Transformer plug-in seam."""

from .base import EventTransformer
from .runner import TransformerRunner

__all__ = ["EventTransformer", "TransformerRunner"]
