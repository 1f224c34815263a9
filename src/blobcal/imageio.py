"""
Image loading and conversion helpers.
"""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from .exceptions import ImageLoadError


def load_image(path: Path | str) -> np.ndarray:
    """
    Load an image from disk.

    Args:
        path: Image file (any format OpenCV reads, e.g. bmp, png)

    Returns:
        Grayscale (h, w) or BGR (h, w, 3) uint8 array

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise ImageLoadError(f"Image not found: {path}")

    # ANYCOLOR without ANYDEPTH: 16-bit data is scaled to 8 bit, alpha dropped
    image = cv2.imread(str(path), cv2.IMREAD_ANYCOLOR)
    if image is None:
        raise ImageLoadError(f"Could not decode image: {path}")

    if image.dtype != np.uint8:
        raise ImageLoadError(f"Unsupported image depth {image.dtype}: {path}")

    return image


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert BGR/gray image to uint8 gray."""
    if image.ndim == 2:
        return image.astype(np.uint8, copy=False)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image.astype(np.uint8, copy=False), cv2.COLOR_BGR2GRAY)
    raise ValueError(f"Unsupported image shape for grayscale conversion: {image.shape}")


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Convert gray/BGR image to a uint8 BGR copy."""
    if image.ndim == 2:
        return cv2.cvtColor(image.astype(np.uint8, copy=False), cv2.COLOR_GRAY2BGR)
    if image.ndim == 3 and image.shape[2] == 3:
        return image.astype(np.uint8, copy=True)
    raise ValueError(f"Unsupported image shape for BGR conversion: {image.shape}")
