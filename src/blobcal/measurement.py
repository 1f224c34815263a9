"""
Diameter measurement, pass/fail classification and result overlays.
"""

from __future__ import annotations

import math

from .types import Blob, DisplayConfig, MeasurementConfig, MeasurementResult, RectifiedImage
from .view import RegionDecoration, TextDecoration, Viewer


# ============================================================================
# Measurement
# ============================================================================


def diameter_from_area(area: float) -> float:
    """
    Diameter of the circle with the given area: 2 * sqrt(area / pi).
    """
    if area < 0:
        raise ValueError(f"area must be non-negative, got {area}")
    return 2.0 * math.sqrt(area / math.pi)


def classify(
    diameter: float,
    expected: float = 19.75,
    tolerance: float = 1.0,
) -> bool:
    """True (PASS) iff |diameter - expected| <= tolerance."""
    return abs(diameter - expected) <= tolerance


def measure_blob(
    blob: Blob,
    index: int,
    config: MeasurementConfig | None = None,
) -> MeasurementResult:
    if config is None:
        config = MeasurementConfig()

    diameter = diameter_from_area(blob.area_mm2)
    return MeasurementResult(
        index=index,
        blob=blob,
        diameter_mm=diameter,
        passed=classify(diameter, config.expected_diameter_mm, config.tolerance_mm),
    )


def measure_blobs(
    blobs: list[Blob],
    config: MeasurementConfig | None = None,
) -> list[MeasurementResult]:
    """
    Measure blobs in the given (filter) order.

    Returns:
        One MeasurementResult per blob, indexed from 1
    """
    return [measure_blob(blob, i, config) for i, blob in enumerate(blobs, start=1)]


# ============================================================================
# Reporting
# ============================================================================


def format_calibration_line(error_px: float) -> str:
    # Truncated to one decimal
    return f"Camera calibrated with average error: {math.floor(error_px * 10) / 10} px"


def format_report_line(result: MeasurementResult) -> str:
    return f"Diameter coin {result.index}: d = {result.diameter_mm:.2f}"


def format_label(result: MeasurementResult) -> str:
    return f"d = {result.diameter_mm:.1f}"


def label_position(result: MeasurementResult, rectified: RectifiedImage) -> tuple[float, float]:
    """Pixel position of the label: the blob centre moved right and up by its radius."""
    cx, cy = result.blob.centroid_mm
    r = result.radius_mm
    return rectified.world_to_pixel(cx + r, cy - r)


def draw_results(
    viewer: Viewer,
    rectified: RectifiedImage,
    results: list[MeasurementResult],
    display: DisplayConfig | None = None,
) -> None:
    """
    Add a pass/fail region and a diameter label per result.

    Does not present; the caller decides when to refresh.
    """
    if display is None:
        display = DisplayConfig()

    pass_decoration = RegionDecoration(color=display.pass_color)
    fail_decoration = RegionDecoration(color=display.fail_color)
    text_size_px = display.text_size_mm / rectified.pixel_size_mm

    for result in results:
        decoration = pass_decoration if result.passed else fail_decoration
        viewer.add_pixel_region(result.blob.mask, decoration)

        text = TextDecoration(
            position=label_position(result, rectified),
            size_px=text_size_px,
            color=display.text_color,
        )
        viewer.add_text(format_label(result), text)
