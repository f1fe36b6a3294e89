"""Upstream clients and response shapers."""

from .client import UpstreamClient, UpstreamError
from .shapers import ShapingError, shape_extract, shape_repo_analysis, shape_search

__all__ = [
    "ShapingError",
    "UpstreamClient",
    "UpstreamError",
    "shape_extract",
    "shape_repo_analysis",
    "shape_search",
]
