"""
Segmentation of rectified images.

Pure functions - no classes beyond the Blob dataclass, no state.
"""

from .blobs import (
    threshold,
    dilate,
    erode,
    fill_holes,
    segment,
    compactness,
    find_connected,
    extract_blobs,
    filter_blobs,
    detect_blobs,
)

__all__ = [
    "threshold",
    "dilate",
    "erode",
    "fill_holes",
    "segment",
    "compactness",
    "find_connected",
    "extract_blobs",
    "filter_blobs",
    "detect_blobs",
]
