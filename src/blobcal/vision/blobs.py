"""
Blob extraction and shape filtering on rectified images.

Pipeline order is fixed: threshold -> dilate -> erode -> fill holes -> label.
Closing before hole filling merges nearby fragments first; swapping
the order changes the result.
"""

from __future__ import annotations

import math

import cv2
import numpy as np
from scipy import ndimage

from ..imageio import to_gray
from ..types import Blob, ExtractionConfig, RectifiedImage


# ============================================================================
# Morphology
# ============================================================================


def disc_kernel(radius: int) -> np.ndarray:
    """Elliptical structuring element of diameter 2 * radius + 1."""
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    size = 2 * int(radius) + 1
    return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size))


def threshold(gray: np.ndarray, low: int, high: int) -> np.ndarray:
    """
    Select pixels with low <= value <= high.

    Returns:
        uint8 mask (0 or 255)
    """
    return cv2.inRange(gray, int(low), int(high))


def dilate(mask: np.ndarray, radius: int) -> np.ndarray:
    return cv2.dilate(mask, disc_kernel(radius))


def erode(mask: np.ndarray, radius: int) -> np.ndarray:
    return cv2.erode(mask, disc_kernel(radius))


def fill_holes(mask: np.ndarray) -> np.ndarray:
    """
    Fill regions fully enclosed by foreground.

    Returns:
        uint8 mask (0 or 255)
    """
    filled = ndimage.binary_fill_holes(mask > 0)
    return filled.astype(np.uint8) * 255


def segment(gray: np.ndarray, config: ExtractionConfig) -> np.ndarray:
    """Run threshold, closing and hole filling on a gray image."""
    mask = threshold(gray, config.threshold_low, config.threshold_high)
    mask = dilate(mask, config.morph_radius)
    mask = erode(mask, config.morph_radius)
    return fill_holes(mask)


# ============================================================================
# Shape Measures
# ============================================================================


def compactness(area: float, perimeter: float) -> float:
    """
    Isoperimetric ratio 4 * pi * area / perimeter ** 2.

    1.0 for a perfect circle. Clamped to [0, 1]; 0 for a zero perimeter.
    """
    if perimeter <= 0:
        return 0.0
    value = 4.0 * math.pi * area / (perimeter ** 2)
    return float(min(max(value, 0.0), 1.0))


def _outer_perimeter(component: np.ndarray) -> float:
    """Length of the longest outer contour of a uint8 component mask."""
    contours, _ = cv2.findContours(component, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
    if not contours:
        return 0.0
    return max(cv2.arcLength(c, closed=True) for c in contours)


# ============================================================================
# Labelling
# ============================================================================


def find_connected(
    mask: np.ndarray,
    rectified: RectifiedImage,
    min_area_px: int = 1000,
) -> list[Blob]:
    """
    Label 8-connected components and keep those of at least min_area_px.

    Args:
        mask: uint8 mask (non-zero = foreground)
        rectified: Image the mask came from (for world coordinates)
        min_area_px: Minimum component size in pixels

    Returns:
        List of Blob in label order
    """
    binary = (mask > 0).astype(np.uint8)
    num, labels, stats, centroids = cv2.connectedComponentsWithStats(binary, connectivity=8)

    pixel_area_mm2 = rectified.pixel_size_mm ** 2
    blobs = []

    for label in range(1, num):
        area = int(stats[label, cv2.CC_STAT_AREA])
        if area < min_area_px:
            continue

        x = int(stats[label, cv2.CC_STAT_LEFT])
        y = int(stats[label, cv2.CC_STAT_TOP])
        w = int(stats[label, cv2.CC_STAT_WIDTH])
        h = int(stats[label, cv2.CC_STAT_HEIGHT])

        component = labels == label

        # Contour on a padded crop so border blobs still close
        crop = np.zeros((h + 2, w + 2), dtype=np.uint8)
        crop[1:-1, 1:-1] = component[y:y + h, x:x + w]
        perimeter = _outer_perimeter(crop)

        cx, cy = float(centroids[label, 0]), float(centroids[label, 1])

        blobs.append(Blob(
            label=label,
            mask=component,
            area_px=area,
            area_mm2=area * pixel_area_mm2,
            centroid_px=(cx, cy),
            centroid_mm=rectified.pixel_to_world(cx, cy),
            compactness=compactness(area, perimeter),
            bbox=(x, y, w, h),
        ))

    return blobs


def extract_blobs(
    rectified: RectifiedImage,
    config: ExtractionConfig | None = None,
) -> list[Blob]:
    """
    Segment dark regions of a rectified image into blobs.

    Args:
        rectified: RectifiedImage (gray or BGR)
        config: ExtractionConfig (defaults if None)

    Returns:
        Unfiltered list of Blob above the minimum area
    """
    if config is None:
        config = ExtractionConfig()

    gray = to_gray(rectified.pixels)
    mask = segment(gray, config)
    return find_connected(mask, rectified, config.min_area_px)


# ============================================================================
# Filtering
# ============================================================================


def filter_blobs(
    blobs: list[Blob],
    config: ExtractionConfig | None = None,
) -> list[Blob]:
    """
    Keep near-circular blobs and order them for reporting.

    Args:
        blobs: Candidate blobs
        config: ExtractionConfig with compactness range and sort key

    Returns:
        Filtered blobs, sorted by area ascending (stable) unless sort_by="none"
    """
    if config is None:
        config = ExtractionConfig()

    kept = [
        b for b in blobs
        if config.compactness_min <= b.compactness <= config.compactness_max
    ]

    if config.sort_by == "area":
        kept = sorted(kept, key=lambda b: b.area_px)
    elif config.sort_by != "none":
        raise ValueError(f"Unknown sort key: {config.sort_by}")

    return kept


def detect_blobs(
    rectified: RectifiedImage,
    config: ExtractionConfig | None = None,
) -> list[Blob]:
    """Extract and filter blobs in one call."""
    if config is None:
        config = ExtractionConfig()
    return filter_blobs(extract_blobs(rectified, config), config)
