"""
Core data structures for blobcal.

All types are frozen dataclasses for immutability.
Logic is in separate pure functions - these are data containers only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import numpy as np


# ============================================================================
# Calibration Target
# ============================================================================


@dataclass(frozen=True)  # No slots - need properties
class CheckerboardConfig:
    """
    Configuration for the checkerboard calibration target.

    pattern_size counts inner corners, not squares.
    The aligned world rectangle is expressed in multiples of the square size.
    """

    pattern_size: tuple[int, int] = (10, 10)  # (columns, rows) of inner corners
    square_size_mm: float = 166.0 / 11
    center_squares: float = 6.0  # Center of aligned region, in squares (x and y)
    size_squares: float = 13.0  # Side of aligned region, in squares

    @property
    def center_mm(self) -> float:
        """Center of the aligned region in mm (same for x and y)."""
        return self.square_size_mm * self.center_squares

    @property
    def size_mm(self) -> float:
        """Side length of the aligned region in mm."""
        return self.square_size_mm * self.size_squares

    def world_rectangle(self) -> WorldRectangle:
        """Square world region to rectify into."""
        return WorldRectangle(
            center=(self.center_mm, self.center_mm),
            width=self.size_mm,
            height=self.size_mm,
        )


@dataclass(frozen=True)
class WorldRectangle:
    """
    Axis-aligned rectangle on the calibration plane (Z = 0), in mm.
    """

    center: tuple[float, float]
    width: float
    height: float

    @property
    def origin(self) -> tuple[float, float]:
        """Top-left corner (minimum x, minimum y)."""
        return (self.center[0] - self.width / 2.0, self.center[1] - self.height / 2.0)

    @property
    def size(self) -> tuple[float, float]:
        return (self.width, self.height)


# ============================================================================
# Calibration Results
# ============================================================================


@dataclass(frozen=True, slots=True)
class CameraModel:
    """
    Single-view camera model: intrinsics plus pose of the board plane.
    """

    image_size: tuple[int, int]  # (width, height)
    matrix: np.ndarray  # 3x3 camera matrix
    distortion: np.ndarray  # Distortion coefficients (5,)
    rotation: np.ndarray  # 3x3 rotation, board -> camera
    translation: np.ndarray  # (3,) translation, board -> camera


@dataclass(frozen=True)
class RectifiedImage:
    """
    Image in world-aligned coordinates.

    Pixel (col, row) covers the world square starting at
    origin_mm + (col, row) * pixel_size_mm.
    """

    pixels: np.ndarray
    origin_mm: tuple[float, float]
    pixel_size_mm: float

    @property
    def shape(self) -> tuple[int, ...]:
        return self.pixels.shape

    def pixel_to_world(self, x: float, y: float) -> tuple[float, float]:
        """Convert pixel-centre coordinates to world mm."""
        return (
            self.origin_mm[0] + (x + 0.5) * self.pixel_size_mm,
            self.origin_mm[1] + (y + 0.5) * self.pixel_size_mm,
        )

    def world_to_pixel(self, x: float, y: float) -> tuple[float, float]:
        """Convert world mm to pixel-centre coordinates."""
        return (
            (x - self.origin_mm[0]) / self.pixel_size_mm - 0.5,
            (y - self.origin_mm[1]) / self.pixel_size_mm - 0.5,
        )


# ============================================================================
# Blob Extraction
# ============================================================================


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """
    Segmentation and shape filter parameters.
    Radii and areas are in rectified pixels.
    """

    threshold_low: int = 1
    threshold_high: int = 125
    morph_radius: int = 5
    min_area_px: int = 1000
    compactness_min: float = 0.7
    compactness_max: float = 1.0
    sort_by: Literal["area", "none"] = "area"


@dataclass(frozen=True, slots=True)
class Blob:
    """
    A connected region in a rectified image.
    """

    label: int
    mask: np.ndarray = field(repr=False)  # (h, w) bool
    area_px: int
    area_mm2: float
    centroid_px: tuple[float, float]  # (x, y)
    centroid_mm: tuple[float, float]  # (x, y)
    compactness: float  # 1.0 = perfect circle
    bbox: tuple[int, int, int, int]  # (x, y, width, height) in pixels


# ============================================================================
# Measurement
# ============================================================================


@dataclass(frozen=True, slots=True)
class MeasurementConfig:
    """
    Expected coin size. The 10 cent Euro coin is 19.75 mm across.
    """

    expected_diameter_mm: float = 19.75
    tolerance_mm: float = 1.0


@dataclass(frozen=True)
class MeasurementResult:
    """
    Diameter measurement for one filtered blob.
    """

    index: int  # 1-based, in filter order
    blob: Blob
    diameter_mm: float
    passed: bool

    @property
    def radius_mm(self) -> float:
        return self.diameter_mm / 2.0


# ============================================================================
# Application Configuration
# ============================================================================


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """
    Visualization settings.
    """

    step_delay_ms: int = 1000  # Pause between steps, demo pacing only
    pixel_size_mm: float = 0.25  # Rectified image resolution
    text_size_mm: float = 8.0
    text_color: tuple[int, int, int] = (0, 0, 255)  # RGB
    pass_color: tuple[int, int, int, int] = (0, 255, 0, 100)  # RGBA
    fail_color: tuple[int, int, int, int] = (255, 0, 0, 100)  # RGBA


@dataclass(frozen=True, slots=True)
class AppConfig:
    """
    Complete application configuration.
    Loaded from TOML file (see config.py).
    """

    checkerboard: CheckerboardConfig = field(default_factory=CheckerboardConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    measurement: MeasurementConfig = field(default_factory=MeasurementConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    calibration_image: Path = Path("resources/pose.bmp")
    live_image: Path = Path("resources/coins.bmp")
    output_image: Path | None = None
    max_calibration_error_px: float | None = None
