"""
Tests for blobcal.types dataclasses.
"""

import numpy as np
import pytest

from blobcal.types import (
    AppConfig,
    CheckerboardConfig,
    DisplayConfig,
    ExtractionConfig,
    MeasurementConfig,
    RectifiedImage,
    WorldRectangle,
)


class TestCheckerboardConfig:
    def test_defaults(self):
        config = CheckerboardConfig()
        assert config.pattern_size == (10, 10)
        assert config.square_size_mm == pytest.approx(166.0 / 11)

    def test_aligned_region(self):
        """Center is 6 squares, side is 13 squares."""
        config = CheckerboardConfig(square_size_mm=10.0)
        assert config.center_mm == 60.0
        assert config.size_mm == 130.0

        rect = config.world_rectangle()
        assert rect.center == (60.0, 60.0)
        assert rect.width == 130.0
        assert rect.height == 130.0

    def test_frozen(self):
        config = CheckerboardConfig()
        with pytest.raises(AttributeError):
            config.square_size_mm = 5.0


class TestWorldRectangle:
    def test_origin(self):
        rect = WorldRectangle(center=(30.0, 40.0), width=100.0, height=60.0)
        assert rect.origin == (-20.0, 10.0)
        assert rect.size == (100.0, 60.0)


class TestRectifiedImage:
    def test_pixel_world_roundtrip(self):
        image = RectifiedImage(
            pixels=np.zeros((10, 20), dtype=np.uint8),
            origin_mm=(-5.0, 2.0),
            pixel_size_mm=0.5,
        )
        # Centre of pixel (0, 0) is half a pixel in from the origin
        assert image.pixel_to_world(0, 0) == (-4.75, 2.25)

        x, y = image.world_to_pixel(*image.pixel_to_world(7.0, 3.0))
        assert x == pytest.approx(7.0)
        assert y == pytest.approx(3.0)

    def test_shape(self):
        image = RectifiedImage(
            pixels=np.zeros((10, 20, 3), dtype=np.uint8),
            origin_mm=(0.0, 0.0),
            pixel_size_mm=1.0,
        )
        assert image.shape == (10, 20, 3)


class TestConfigDefaults:
    def test_extraction(self):
        config = ExtractionConfig()
        assert config.threshold_low == 1
        assert config.threshold_high == 125
        assert config.morph_radius == 5
        assert config.min_area_px == 1000
        assert config.compactness_min == 0.7
        assert config.compactness_max == 1.0
        assert config.sort_by == "area"

    def test_measurement(self):
        config = MeasurementConfig()
        assert config.expected_diameter_mm == 19.75
        assert config.tolerance_mm == 1.0

    def test_display(self):
        config = DisplayConfig()
        assert config.step_delay_ms == 1000
        assert config.pass_color == (0, 255, 0, 100)
        assert config.fail_color == (255, 0, 0, 100)

    def test_app_config(self):
        config = AppConfig()
        assert config.calibration_image.name == "pose.bmp"
        assert config.live_image.name == "coins.bmp"
        assert config.output_image is None
        assert config.max_calibration_error_px is None
        with pytest.raises(AttributeError):
            config.output_image = None
