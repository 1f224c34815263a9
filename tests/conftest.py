"""
Pytest configuration and shared fixtures.

Synthetic scenes are painted on a flat world plane (mm) and projected into
the camera with a known model, so calibration and rectification have
ground truth.
"""

import tempfile
from pathlib import Path

import cv2
import numpy as np
import pytest

# Flat plane rendering resolution and extent
PX_PER_MM = 10.0
PLANE_ORIGIN_MM = (-20.0, -20.0)
PLANE_SIZE_MM = 120.0


def plane_coordinates():
    """World (X, Y) in mm of every flat-plane pixel centre."""
    n = int(PLANE_SIZE_MM * PX_PER_MM)
    coords = (np.arange(n, dtype=np.float64) + 0.5) / PX_PER_MM
    xs, ys = np.meshgrid(coords + PLANE_ORIGIN_MM[0], coords + PLANE_ORIGIN_MM[1])
    return xs, ys


def paint_checkerboard(pattern_size, square_size_mm):
    """White plane with a checkerboard of (cols + 1) x (rows + 1) squares."""
    cols, rows = pattern_size
    xs, ys = plane_coordinates()
    i = np.floor(xs / square_size_mm)
    j = np.floor(ys / square_size_mm)
    inside = (i >= -1) & (i <= cols - 1) & (j >= -1) & (j <= rows - 1)
    black = inside & ((i + j) % 2 == 0)
    plane = np.full(xs.shape, 255, dtype=np.uint8)
    plane[black] = 0
    return plane


def paint_coins(coins, background=230, value=30):
    """Plane with dark discs; coins is a list of (x_mm, y_mm, diameter_mm)."""
    xs, ys = plane_coordinates()
    plane = np.full(xs.shape, background, dtype=np.uint8)
    for cx, cy, d in coins:
        plane[(xs - cx) ** 2 + (ys - cy) ** 2 <= (d / 2.0) ** 2] = value
    return plane


def project_plane(plane, model):
    """Project a flat plane image into the camera described by model."""
    s = 1.0 / PX_PER_MM
    # Flat pixel index -> world mm (pixel centres)
    to_world = np.array([
        [s, 0.0, PLANE_ORIGIN_MM[0] + 0.5 * s],
        [0.0, s, PLANE_ORIGIN_MM[1] + 0.5 * s],
        [0.0, 0.0, 1.0],
    ])
    rt = np.column_stack([model.rotation[:, 0], model.rotation[:, 1], model.translation])
    homography = model.matrix @ rt @ to_world

    smooth = cv2.GaussianBlur(plane, (0, 0), 1.5)
    return cv2.warpPerspective(
        smooth,
        homography,
        model.image_size,
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=255,
    )


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sample_board():
    """Small 7x7 inner corner board, 10 mm squares, 10 square aligned region."""
    from blobcal.types import CheckerboardConfig
    return CheckerboardConfig(
        pattern_size=(7, 7),
        square_size_mm=10.0,
        center_squares=3.0,
        size_squares=10.0,
    )


@pytest.fixture
def sample_camera_model():
    """Tilted view of the board plane, centred on world (30, 30)."""
    from blobcal.types import CameraModel

    width, height = 640, 480
    matrix = np.array([
        [800.0, 0.0, (width - 1) / 2.0],
        [0.0, 800.0, (height - 1) / 2.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)
    rotation = cv2.Rodrigues(np.array([0.35, 0.17, 0.05]))[0]
    translation = np.array([0.0, 0.0, 300.0]) - rotation @ np.array([30.0, 30.0, 0.0])

    return CameraModel(
        image_size=(width, height),
        matrix=matrix,
        distortion=np.zeros(5, dtype=np.float64),
        rotation=rotation,
        translation=translation,
    )


@pytest.fixture
def checkerboard_image(sample_camera_model, sample_board):
    """Camera image of the sample board."""
    plane = paint_checkerboard(sample_board.pattern_size, sample_board.square_size_mm)
    return project_plane(plane, sample_camera_model)


@pytest.fixture
def coins_image(sample_camera_model):
    """Camera image of a 10 cent coin and an oversized coin."""
    plane = paint_coins([
        (10.0, 10.0, 24.0),
        (50.0, 45.0, 19.75),
    ])
    return project_plane(plane, sample_camera_model)


@pytest.fixture
def rectified_coins():
    """
    Already-rectified scene at 0.25 mm/px:
    oversized coin, 20 mm coin, a bar and a speck.
    """
    from blobcal.types import RectifiedImage

    pixels = np.full((300, 400), 200, dtype=np.uint8)
    cv2.circle(pixels, (80, 80), 46, 60, thickness=-1)  # 23 mm
    cv2.circle(pixels, (250, 150), 40, 60, thickness=-1)  # 20 mm
    cv2.rectangle(pixels, (60, 220), (139, 239), 60, thickness=-1)  # 80 x 20 bar
    cv2.circle(pixels, (350, 40), 10, 60, thickness=-1)  # below min area

    return RectifiedImage(pixels=pixels, origin_mm=(0.0, 0.0), pixel_size_mm=0.25)
