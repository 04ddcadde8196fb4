"""Correlation-matrix utilities (modularised package)."""

from .base import CorrelationMatrix, build_correlation_matrix, threshold_mask
from .connectedness import ConnectednessVectors, compute_connectedness
from .network import build_cooccurrence_network

__all__ = [
    "CorrelationMatrix",
    "build_correlation_matrix",
    "threshold_mask",
    "ConnectednessVectors",
    "compute_connectedness",
    "build_cooccurrence_network",
]
