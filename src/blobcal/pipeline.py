"""
Calibrate-then-measure pipeline.

Strictly sequential, single pass, no retries. Any BlobcalError raised by
calibration, rectification or image loading aborts the run.

on_step(name) is called after each visual step; the CLI uses it to pace
the display for a human observer. It has no effect on results.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import cv2
import numpy as np

from .capabilities import (
    BlobDetector,
    Calibrator,
    Correction,
    OpenCVBlobDetector,
    OpenCVCalibrator,
    OpenCVRectifier,
    Rectifier,
)
from .exceptions import OutputError
from .imageio import load_image
from .measurement import draw_results, format_calibration_line, format_report_line, measure_blobs
from .types import AppConfig, CheckerboardConfig, DisplayConfig, MeasurementConfig, MeasurementResult
from .view import Viewer

StepHook = Callable[[str], None]
Emit = Callable[[str], None]


def _show(viewer: Viewer, image: np.ndarray, step: str, on_step: StepHook | None) -> None:
    viewer.clear()
    viewer.add_image(image)
    viewer.present()
    if on_step is not None:
        on_step(step)


def calibrate(
    checkerboard: np.ndarray,
    board: CheckerboardConfig,
    calibrator: Calibrator,
    rectifier: Rectifier,
    viewer: Viewer,
    on_step: StepHook | None = None,
    emit: Emit = print,
) -> Correction:
    """
    Calibrate from a checkerboard image and build the world-aligned correction.

    The corrected checkerboard is shown as a visual check.

    Returns:
        Correction reusable for every later image from this camera
    """
    model, error = calibrator.calibrate(checkerboard, board)
    emit(format_calibration_line(error))

    correction = rectifier.create_correction(model, board.world_rectangle())
    corrected = correction.apply(checkerboard)
    _show(viewer, corrected.pixels, "corrected_checkerboard", on_step)
    return correction


def measure(
    live_image: np.ndarray,
    correction: Correction,
    detector: BlobDetector,
    viewer: Viewer,
    config: MeasurementConfig | None = None,
    display: DisplayConfig | None = None,
    on_step: StepHook | None = None,
    emit: Emit = print,
) -> list[MeasurementResult]:
    """
    Rectify an image, find coins and report their diameters.

    Returns:
        MeasurementResult per detected coin, in detector order
    """
    rectified = correction.apply(live_image)
    _show(viewer, rectified.pixels, "corrected_live_image", on_step)

    blobs = detector.detect(rectified)
    results = measure_blobs(blobs, config)

    draw_results(viewer, rectified, results, display)
    for result in results:
        emit(format_report_line(result))

    viewer.present()
    emit("App finished.")
    return results


def run(
    config: AppConfig | None = None,
    viewer: Viewer | None = None,
    on_step: StepHook | None = None,
    emit: Emit = print,
    calibrator: Calibrator | None = None,
    rectifier: Rectifier | None = None,
    detector: BlobDetector | None = None,
) -> list[MeasurementResult]:
    """
    Full demo: load both images, calibrate, then measure.

    Capabilities default to the OpenCV bindings configured from config.
    """
    if config is None:
        config = AppConfig()
    if viewer is None:
        viewer = Viewer()
    if calibrator is None:
        calibrator = OpenCVCalibrator(max_error_px=config.max_calibration_error_px)
    if rectifier is None:
        rectifier = OpenCVRectifier(pixel_size_mm=config.display.pixel_size_mm)
    if detector is None:
        detector = OpenCVBlobDetector(config.extraction)

    checkerboard = load_image(config.calibration_image)
    _show(viewer, checkerboard, "checkerboard", on_step)

    correction = calibrate(
        checkerboard, config.checkerboard, calibrator, rectifier, viewer, on_step, emit
    )

    # Calibrated measurement in a simulated live image
    live_image = load_image(config.live_image)
    _show(viewer, live_image, "live_image", on_step)

    results = measure(
        live_image,
        correction,
        detector,
        viewer,
        config.measurement,
        config.display,
        on_step,
        emit,
    )

    if config.output_image is not None and viewer.last_frame is not None:
        save_frame(viewer.last_frame, config.output_image)

    return results


def save_frame(frame: np.ndarray, path: Path) -> None:
    """
    Write a presented frame to disk.

    Raises:
        OutputError: If the directory or file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        written = cv2.imwrite(str(path), frame)
    except (OSError, cv2.error) as e:
        raise OutputError(f"Could not write image: {path}: {e}") from e
    if not written:
        raise OutputError(f"Could not write image: {path}")
