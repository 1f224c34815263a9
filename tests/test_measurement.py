"""
Tests for blobcal.measurement.
"""

import math

import numpy as np
import pytest

from blobcal.measurement import (
    classify,
    diameter_from_area,
    draw_results,
    format_calibration_line,
    format_label,
    format_report_line,
    label_position,
    measure_blobs,
)
from blobcal.types import Blob, MeasurementConfig, RectifiedImage
from blobcal.view import Viewer


def make_blob(area_mm2, label=1, centroid_mm=(10.0, 10.0), shape=(40, 40)):
    mask = np.zeros(shape, dtype=bool)
    mask[10:20, 10:20] = True
    return Blob(
        label=label,
        mask=mask,
        area_px=int(mask.sum()),
        area_mm2=area_mm2,
        centroid_px=(14.5, 14.5),
        centroid_mm=centroid_mm,
        compactness=0.9,
        bbox=(10, 10, 10, 10),
    )


class TestDiameterFromArea:
    def test_formula(self):
        for area in [0.0, 1.0, 306.0, 400.0, 12345.6]:
            assert diameter_from_area(area) == 2 * math.sqrt(area / math.pi)

    def test_circle_roundtrip(self):
        r = 9.875
        assert diameter_from_area(math.pi * r * r) == pytest.approx(19.75)

    def test_monotonic(self):
        areas = np.linspace(0, 1000, 50)
        diameters = [diameter_from_area(a) for a in areas]
        assert all(b > a for a, b in zip(diameters, diameters[1:]))

    def test_negative_area_rejected(self):
        with pytest.raises(ValueError):
            diameter_from_area(-1.0)


class TestClassify:
    @pytest.mark.parametrize("diameter", [18.75, 19.75, 20.75, 19.0, 20.5])
    def test_pass(self, diameter):
        assert classify(diameter) is True

    @pytest.mark.parametrize("diameter", [18.74, 20.76, 0.0, 22.56])
    def test_fail(self, diameter):
        assert classify(diameter) is False

    def test_custom_tolerance(self):
        assert classify(25.0, expected=23.25, tolerance=2.0) is True
        assert classify(25.5, expected=23.25, tolerance=2.0) is False


class TestMeasureBlobs:
    def test_pass_and_fail(self):
        results = measure_blobs([make_blob(306.0), make_blob(400.0, label=2)])

        assert len(results) == 2
        assert results[0].diameter_mm == pytest.approx(19.75, abs=0.02)
        assert results[0].passed is True
        assert results[1].diameter_mm == pytest.approx(22.56, abs=0.02)
        assert results[1].passed is False

    def test_indices_follow_input_order(self):
        blobs = [make_blob(400.0, label=7), make_blob(306.0, label=3)]
        results = measure_blobs(blobs)

        assert [r.index for r in results] == [1, 2]
        assert [r.blob.label for r in results] == [7, 3]

    def test_empty(self):
        assert measure_blobs([]) == []

    def test_config_used(self):
        config = MeasurementConfig(expected_diameter_mm=22.5, tolerance_mm=0.5)
        results = measure_blobs([make_blob(306.0), make_blob(400.0)], config)
        assert [r.passed for r in results] == [False, True]

    def test_radius(self):
        result = measure_blobs([make_blob(400.0)])[0]
        assert result.radius_mm == pytest.approx(result.diameter_mm / 2)


class TestFormatting:
    def test_report_line_two_decimals(self):
        result = measure_blobs([make_blob(306.0)])[0]
        assert format_report_line(result) == "Diameter coin 1: d = 19.74"

    def test_label_one_decimal(self):
        result = measure_blobs([make_blob(400.0)])[0]
        assert format_label(result) == "d = 22.6"

    def test_calibration_line_truncates(self):
        assert format_calibration_line(0.37) == "Camera calibrated with average error: 0.3 px"
        assert format_calibration_line(1.99) == "Camera calibrated with average error: 1.9 px"


class TestDrawResults:
    @pytest.fixture
    def rectified(self):
        return RectifiedImage(
            pixels=np.full((40, 40), 128, dtype=np.uint8),
            origin_mm=(0.0, 0.0),
            pixel_size_mm=1.0,
        )

    def test_colors(self, rectified):
        viewer = Viewer()
        viewer.add_image(rectified.pixels)

        results = measure_blobs([make_blob(306.0)])
        draw_results(viewer, rectified, results)
        frame = viewer.present()

        # Inside the region: 100/255 green over gray 128
        b, g, r = frame[12, 12]
        assert g > 128
        assert b < 128
        assert r < 128

    def test_fail_is_red(self, rectified):
        viewer = Viewer()
        viewer.add_image(rectified.pixels)

        results = measure_blobs([make_blob(400.0)])
        draw_results(viewer, rectified, results)
        frame = viewer.present()

        b, g, r = frame[12, 12]
        assert r > 128
        assert g < 128

    def test_label_position(self, rectified):
        result = measure_blobs([make_blob(306.0, centroid_mm=(20.0, 20.0))])[0]
        x, y = label_position(result, rectified)
        r = result.radius_mm
        # Right of and above the centre by one radius (1 mm per pixel)
        assert x == pytest.approx(20.0 + r - 0.5)
        assert y == pytest.approx(20.0 - r - 0.5)

    def test_empty_draws_nothing(self, rectified):
        viewer = Viewer()
        viewer.add_image(rectified.pixels)
        draw_results(viewer, rectified, [])
        frame = viewer.present()
        assert np.all(frame == 128)
