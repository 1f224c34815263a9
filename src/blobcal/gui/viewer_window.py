"""
Qt window that shows frames presented by a Viewer.
"""

from __future__ import annotations

import time

import numpy as np
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QLabel

from .frame_utils import bgr_to_pixmap, scale_pixmap_to_fit


class ViewerWindow(QLabel):
    """
    Single-image display. show_frame() is the Viewer display callback.
    """

    def __init__(self, title: str = "blobcal", max_size: tuple[int, int] = (1000, 800)):
        super().__init__()
        self.setWindowTitle(title)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumSize(320, 240)
        self.max_size = max_size

    def show_frame(self, frame: np.ndarray) -> None:
        pixmap = scale_pixmap_to_fit(bgr_to_pixmap(frame), *self.max_size)
        self.setPixmap(pixmap)
        self.resize(pixmap.size())
        if not self.isVisible():
            self.show()
        QApplication.processEvents()


def make_step_pause(delay_ms: int):
    """
    Step hook that keeps the window responsive while pausing.
    """
    def pause(step: str) -> None:
        deadline = time.monotonic() + delay_ms / 1000.0
        while True:
            QApplication.processEvents()
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(remaining, 0.02))

    return pause
