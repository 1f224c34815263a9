"""
Vision capability interfaces and their OpenCV bindings.

The pipeline only talks to Calibrator, Rectifier and BlobDetector,
so any vision library can be plugged in without touching measurement code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

import numpy as np

from .calibration import create_align_correction, estimate_one_shot
from .types import (
    Blob,
    CameraModel,
    CheckerboardConfig,
    ExtractionConfig,
    RectifiedImage,
    WorldRectangle,
)
from .vision import detect_blobs


class Correction(Protocol):
    def apply(self, image: np.ndarray) -> RectifiedImage: ...


class Calibrator(ABC):
    """Estimates a camera model from one calibration target image."""

    @abstractmethod
    def calibrate(
        self,
        image: np.ndarray,
        board: CheckerboardConfig,
    ) -> tuple[CameraModel, float]:
        """
        Returns (camera model, reprojection error in pixels).
        Raises CalibrationError if the target cannot be used.
        """
        pass


class Rectifier(ABC):
    """Builds world-aligned corrections from a camera model."""

    @abstractmethod
    def create_correction(
        self,
        model: CameraModel,
        world_rect: WorldRectangle,
    ) -> Correction:
        pass


class BlobDetector(ABC):
    """Finds filtered, ordered blobs in a rectified image."""

    @abstractmethod
    def detect(self, rectified: RectifiedImage) -> list[Blob]:
        pass


# ============================================================================
# OpenCV Bindings
# ============================================================================


class OpenCVCalibrator(Calibrator):
    def __init__(self, max_error_px: float | None = None):
        self.max_error_px = max_error_px

    def calibrate(self, image, board):
        return estimate_one_shot(
            image,
            board.square_size_mm,
            board.pattern_size,
            max_error_px=self.max_error_px,
        )


class OpenCVRectifier(Rectifier):
    def __init__(self, pixel_size_mm: float = 0.25):
        self.pixel_size_mm = pixel_size_mm

    def create_correction(self, model, world_rect):
        return create_align_correction(model, world_rect, self.pixel_size_mm)


class OpenCVBlobDetector(BlobDetector):
    def __init__(self, config: ExtractionConfig | None = None):
        self.config = config or ExtractionConfig()

    def detect(self, rectified):
        return detect_blobs(rectified, self.config)
