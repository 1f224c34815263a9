"""
Exceptions raised by blobcal.

Any of these aborts a run. An empty blob set is not an error.
"""


class BlobcalError(Exception):
    """Base class for blobcal errors."""


class ImageLoadError(BlobcalError):
    """Image file missing or unreadable."""


class CalibrationError(BlobcalError):
    """Calibration target not found or fit unusable."""


class ConfigError(BlobcalError):
    """Configuration file unreadable or holds an invalid value."""


class OutputError(BlobcalError):
    """Result image could not be written."""
