"""
Visualization surface.

A Viewer collects an image plus overlays and composes them into a BGR
canvas on present(). It is passed explicitly through the pipeline;
the display callback decides where frames go (Qt window, file, nothing).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import cv2
import numpy as np

from .imageio import to_bgr


@dataclass(frozen=True, slots=True)
class RegionDecoration:
    color: tuple[int, int, int, int] = (0, 0, 255, 255)  # RGBA


@dataclass(frozen=True, slots=True)
class TextDecoration:
    position: tuple[float, float] = (0.0, 0.0)  # (x, y) pixels, text baseline start
    size_px: float = 20.0  # Cap height in pixels
    color: tuple[int, int, int] = (255, 255, 255)  # RGB


def _rgb_to_bgr(color: tuple[int, ...]) -> tuple[int, int, int]:
    return (int(color[2]), int(color[1]), int(color[0]))


class Viewer:
    """
    Retained-mode drawing surface.

    Layers are drawn in insertion order on top of the last added image.
    """

    def __init__(self, display: Callable[[np.ndarray], None] | None = None):
        self.display = display
        self.last_frame: np.ndarray | None = None
        self._image: np.ndarray | None = None
        self._layers: list[tuple[str, object, object]] = []

    def clear(self) -> None:
        self._image = None
        self._layers = []

    def add_image(self, image: np.ndarray) -> None:
        self._image = to_bgr(image)

    def add_pixel_region(self, mask: np.ndarray, decoration: RegionDecoration) -> None:
        self._layers.append(("region", mask.astype(bool, copy=False), decoration))

    def add_text(self, text: str, decoration: TextDecoration) -> None:
        self._layers.append(("text", text, decoration))

    def render(self) -> np.ndarray:
        """Compose the current image and overlays into a BGR canvas."""
        if self._image is None:
            return np.zeros((1, 1, 3), dtype=np.uint8)

        canvas = self._image.copy()
        for kind, payload, decoration in self._layers:
            if kind == "region":
                _blend_region(canvas, payload, decoration)
            else:
                _draw_text(canvas, payload, decoration)
        return canvas

    def present(self) -> np.ndarray:
        frame = self.render()
        self.last_frame = frame
        if self.display is not None:
            self.display(frame)
        return frame


def _blend_region(canvas: np.ndarray, mask: np.ndarray, decoration: RegionDecoration) -> None:
    if mask.shape != canvas.shape[:2]:
        raise ValueError(f"Region mask {mask.shape} does not match image {canvas.shape[:2]}")

    alpha = decoration.color[3] / 255.0
    color = np.array(_rgb_to_bgr(decoration.color), dtype=np.float32)
    pixels = canvas[mask].astype(np.float32)
    canvas[mask] = np.clip(np.rint((1.0 - alpha) * pixels + alpha * color), 0, 255).astype(np.uint8)


def _draw_text(canvas: np.ndarray, text: str, decoration: TextDecoration) -> None:
    font = cv2.FONT_HERSHEY_SIMPLEX
    thickness = max(1, int(round(decoration.size_px / 10)))
    scale = cv2.getFontScaleFromHeight(font, max(1, int(round(decoration.size_px))), thickness)
    x, y = decoration.position
    cv2.putText(
        canvas,
        text,
        (int(round(x)), int(round(y))),
        font,
        scale,
        _rgb_to_bgr(decoration.color),
        thickness,
        cv2.LINE_AA,
    )
