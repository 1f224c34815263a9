"""
Calibration module for blobcal.

All functions are pure - they take dataclasses and return dataclasses.
No threading, no state management. Caller handles sequencing.
"""

from .pose import (
    CheckerboardDetection,
    detect_checkerboard,
    get_board_object_points,
    estimate_one_shot,
    compute_reprojection_error,
)

from .correction import (
    CorrectionTransform,
    create_align_correction,
    apply_correction,
)

__all__ = [
    # Pose
    "CheckerboardDetection",
    "detect_checkerboard",
    "get_board_object_points",
    "estimate_one_shot",
    "compute_reprojection_error",
    # Correction
    "CorrectionTransform",
    "create_align_correction",
    "apply_correction",
]
