"""
Image correction into world-aligned coordinates ("align" mode).

The transform is built once from a camera model and a world rectangle,
then applied to any number of images from the same camera.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import cv2
import numpy as np

from ..types import CameraModel, RectifiedImage, WorldRectangle


@dataclass(frozen=True, slots=True)
class CorrectionTransform:
    """
    Precomputed remap tables from rectified pixels to source pixels.
    """

    model: CameraModel
    world_rect: WorldRectangle
    pixel_size_mm: float
    map_x: np.ndarray = field(repr=False)  # (out_h, out_w) float32
    map_y: np.ndarray = field(repr=False)  # (out_h, out_w) float32

    @property
    def output_size(self) -> tuple[int, int]:
        """(width, height) of rectified images."""
        return (self.map_x.shape[1], self.map_x.shape[0])

    def apply(self, image: np.ndarray) -> RectifiedImage:
        return apply_correction(self, image)


def world_grid(
    world_rect: WorldRectangle,
    pixel_size_mm: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    World coordinates of every rectified pixel centre.

    Returns:
        (xs, ys) each of shape (out_h, out_w), in mm
    """
    out_w = int(math.ceil(world_rect.width / pixel_size_mm - 1e-9))
    out_h = int(math.ceil(world_rect.height / pixel_size_mm - 1e-9))
    x0, y0 = world_rect.origin

    xs = x0 + (np.arange(out_w, dtype=np.float64) + 0.5) * pixel_size_mm
    ys = y0 + (np.arange(out_h, dtype=np.float64) + 0.5) * pixel_size_mm
    return np.meshgrid(xs, ys)


def create_align_correction(
    model: CameraModel,
    world_rect: WorldRectangle,
    pixel_size_mm: float = 0.25,
) -> CorrectionTransform:
    """
    Build a correction that maps the world rectangle onto an image grid.

    Every output pixel is projected through the full camera model,
    so lens distortion is removed together with perspective.

    Args:
        model: CameraModel from one-shot calibration
        world_rect: Region of the board plane to keep, in mm
        pixel_size_mm: Edge length of one rectified pixel in mm

    Returns:
        CorrectionTransform

    Raises:
        ValueError: If sizes are not positive
    """
    if pixel_size_mm <= 0:
        raise ValueError(f"pixel_size_mm must be positive, got {pixel_size_mm}")
    if world_rect.width <= 0 or world_rect.height <= 0:
        raise ValueError(f"World rectangle must have positive size, got {world_rect.size}")

    xs, ys = world_grid(world_rect, pixel_size_mm)
    out_h, out_w = xs.shape

    world = np.zeros((xs.size, 3), dtype=np.float64)
    world[:, 0] = xs.ravel()
    world[:, 1] = ys.ravel()

    rvec = cv2.Rodrigues(model.rotation)[0]
    projected, _ = cv2.projectPoints(
        world,
        rvec,
        model.translation,
        model.matrix,
        model.distortion,
    )
    projected = projected.reshape(out_h, out_w, 2)

    map_x = np.ascontiguousarray(projected[:, :, 0], dtype=np.float32)
    map_y = np.ascontiguousarray(projected[:, :, 1], dtype=np.float32)

    return CorrectionTransform(
        model=model,
        world_rect=world_rect,
        pixel_size_mm=float(pixel_size_mm),
        map_x=map_x,
        map_y=map_y,
    )


def apply_correction(
    transform: CorrectionTransform,
    image: np.ndarray,
) -> RectifiedImage:
    """
    Rectify an image with a prebuilt correction.

    Pixels that fall outside the source image are 0.

    Args:
        transform: CorrectionTransform
        image: Gray or BGR image from the calibrated camera

    Returns:
        RectifiedImage in world-aligned coordinates
    """
    pixels = cv2.remap(
        image,
        transform.map_x,
        transform.map_y,
        interpolation=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    return RectifiedImage(
        pixels=pixels,
        origin_mm=transform.world_rect.origin,
        pixel_size_mm=transform.pixel_size_mm,
    )
