"""
One-shot camera calibration from a single checkerboard view.

Pure functions - no threading, no state.
"""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from ..exceptions import CalibrationError
from ..imageio import to_gray
from ..types import CameraModel


# Intrinsics that a single planar view cannot pin down are held fixed
ONE_SHOT_FLAGS = (
    cv2.CALIB_USE_INTRINSIC_GUESS
    | cv2.CALIB_FIX_PRINCIPAL_POINT
    | cv2.CALIB_FIX_ASPECT_RATIO
    | cv2.CALIB_ZERO_TANGENT_DIST
    | cv2.CALIB_FIX_K2
    | cv2.CALIB_FIX_K3
)


@dataclass(frozen=True, slots=True)
class CheckerboardDetection:
    found: bool
    corners: np.ndarray  # (n, 2) image coordinates (x, y)
    image_size: tuple[int, int]  # (width, height)
    method: str


# ============================================================================
# Checkerboard Detection
# ============================================================================


def detect_checkerboard(
    image: np.ndarray,
    pattern_size: tuple[int, int],
    refine_subpix: bool = True,
) -> CheckerboardDetection:
    """
    Detect inner checkerboard corners.

    Tries the sector-based detector first and falls back to the classic one.

    Args:
        image: Gray or BGR image
        pattern_size: (columns, rows) of inner corners
        refine_subpix: Refine classic detections to sub-pixel accuracy

    Returns:
        CheckerboardDetection (corners empty if not found)
    """
    gray = to_gray(image)
    height, width = gray.shape[:2]
    pattern = (int(pattern_size[0]), int(pattern_size[1]))

    found = False
    corners = None
    method = "none"

    try:
        flags = cv2.CALIB_CB_EXHAUSTIVE | cv2.CALIB_CB_ACCURACY
        found, corners = cv2.findChessboardCornersSB(gray, pattern, flags=flags)
        method = "findChessboardCornersSB"
    except cv2.error:
        found = False
        corners = None

    if not found or corners is None:
        flags = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE
        found, corners = cv2.findChessboardCorners(gray, pattern, flags=flags)
        method = "findChessboardCorners"
        if found and corners is not None and refine_subpix:
            criteria = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, 30, 1e-3)
            corners = cv2.cornerSubPix(gray, corners, (11, 11), (-1, -1), criteria)

    if not found or corners is None:
        return CheckerboardDetection(
            found=False,
            corners=np.array([], dtype=np.float32).reshape(0, 2),
            image_size=(width, height),
            method=method,
        )

    return CheckerboardDetection(
        found=True,
        corners=corners.reshape(-1, 2).astype(np.float32),
        image_size=(width, height),
        method=method,
    )


def get_board_object_points(
    pattern_size: tuple[int, int],
    square_size_mm: float,
) -> np.ndarray:
    """
    Inner corner positions on the board plane (Z = 0), row by row.

    Returns:
        (columns * rows, 3) float32 array in mm
    """
    cols, rows = int(pattern_size[0]), int(pattern_size[1])
    grid = np.zeros((rows * cols, 3), dtype=np.float32)
    grid[:, :2] = np.mgrid[0:cols, 0:rows].T.reshape(-1, 2)
    return grid * np.float32(square_size_mm)


# ============================================================================
# Calibration
# ============================================================================


def estimate_one_shot(
    image: np.ndarray,
    square_size_mm: float,
    pattern_size: tuple[int, int] = (10, 10),
    max_error_px: float | None = None,
) -> tuple[CameraModel, float]:
    """
    Calibrate camera and board pose from a single checkerboard image.

    Args:
        image: Gray or BGR image of the checkerboard
        square_size_mm: Physical edge length of one square
        pattern_size: (columns, rows) of inner corners
        max_error_px: Reject fits with a larger RMS reprojection error

    Returns:
        (CameraModel, RMS reprojection error in pixels)

    Raises:
        ValueError: If square_size_mm is not positive
        CalibrationError: If the board is not found or the fit is unusable
    """
    if square_size_mm <= 0:
        raise ValueError(f"square_size_mm must be positive, got {square_size_mm}")

    detection = detect_checkerboard(image, pattern_size)
    if not detection.found:
        raise CalibrationError(
            f"Checkerboard with {pattern_size[0]}x{pattern_size[1]} inner corners not found"
        )

    obj_loc = get_board_object_points(pattern_size, square_size_mm)
    img_loc = detection.corners.reshape(-1, 1, 2)

    width, height = detection.image_size
    focal_guess = float(max(width, height))
    matrix_guess = np.array([
        [focal_guess, 0.0, (width - 1) / 2.0],
        [0.0, focal_guess, (height - 1) / 2.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)

    try:
        error, matrix, dist, rvecs, tvecs = cv2.calibrateCamera(
            [obj_loc],
            [img_loc],
            (width, height),
            matrix_guess,
            np.zeros(5, dtype=np.float64),
            flags=ONE_SHOT_FLAGS,
        )
    except cv2.error as exc:
        raise CalibrationError(f"Calibration failed: {exc}") from exc

    if not np.isfinite(error) or not np.all(np.isfinite(matrix)) or not np.all(np.isfinite(dist)):
        raise CalibrationError("Calibration produced a non-finite model")

    if max_error_px is not None and error > max_error_px:
        raise CalibrationError(
            f"Reprojection error {error:.3f} px exceeds limit {max_error_px:.3f} px"
        )

    rotation = cv2.Rodrigues(rvecs[0])[0]
    translation = np.asarray(tvecs[0], dtype=np.float64).reshape(3)

    # Board must lie in front of the camera
    if translation[2] <= 0:
        raise CalibrationError("Calibration placed the board behind the camera")

    model = CameraModel(
        image_size=(width, height),
        matrix=matrix,
        distortion=np.asarray(dist, dtype=np.float64).reshape(-1)[:5],
        rotation=rotation,
        translation=translation,
    )
    return model, float(error)


def compute_reprojection_error(
    model: CameraModel,
    obj_loc: np.ndarray,
    img_loc: np.ndarray,
) -> float:
    """
    RMS reprojection error of board points under a camera model.

    Args:
        model: CameraModel
        obj_loc: (n, 3) board points in mm
        img_loc: (n, 2) observed image points

    Returns:
        RMS error in pixels
    """
    rvec = cv2.Rodrigues(model.rotation)[0]
    projected, _ = cv2.projectPoints(
        obj_loc.astype(np.float64),
        rvec,
        model.translation,
        model.matrix,
        model.distortion,
    )
    projected = projected[:, 0, :]
    residual = np.asarray(img_loc, dtype=np.float64).reshape(-1, 2) - projected
    return float(np.sqrt(np.mean(np.sum(residual ** 2, axis=1))))
