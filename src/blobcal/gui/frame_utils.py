"""
Frame conversion utilities for PySide6 display.
"""

import numpy as np
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap


def bgr_to_qimage(frame: np.ndarray) -> QImage:
    """
    Convert BGR numpy array to a QImage that owns its pixels.

    Args:
        frame: (H, W, 3) BGR uint8 array from OpenCV

    Returns:
        QImage (null if frame is empty)
    """
    if frame is None or frame.size == 0:
        return QImage()

    height, width = frame.shape[:2]

    # BGR to RGB, contiguous
    rgb = np.ascontiguousarray(frame[:, :, ::-1])

    image = QImage(
        rgb.data,
        width,
        height,
        width * 3,  # bytes per line
        QImage.Format.Format_RGB888,
    )

    # Detach from the numpy buffer before it goes out of scope
    return image.copy()


def bgr_to_pixmap(frame: np.ndarray) -> QPixmap:
    """Convert BGR numpy array to QPixmap for display."""
    image = bgr_to_qimage(frame)
    if image.isNull():
        return QPixmap()
    return QPixmap.fromImage(image)


def scale_pixmap_to_fit(pixmap: QPixmap, max_width: int, max_height: int) -> QPixmap:
    """
    Scale pixmap to fit within bounds while preserving aspect ratio.
    """
    if pixmap.isNull():
        return pixmap

    return pixmap.scaled(
        max_width,
        max_height,
        aspectMode=Qt.AspectRatioMode.KeepAspectRatio,
        mode=Qt.TransformationMode.SmoothTransformation,
    )
