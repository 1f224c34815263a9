"""
PySide6 display for blobcal.
"""

from .viewer_window import ViewerWindow, make_step_pause

__all__ = ["ViewerWindow", "make_step_pause"]
