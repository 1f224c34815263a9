# blobcal - calibrated blob diameter measurement

__version__ = "0.1.0"

# Core types
from blobcal.types import (
    CheckerboardConfig,
    WorldRectangle,
    CameraModel,
    RectifiedImage,
    ExtractionConfig,
    Blob,
    MeasurementConfig,
    MeasurementResult,
    DisplayConfig,
    AppConfig,
)

# Errors
from blobcal.exceptions import (
    BlobcalError,
    CalibrationError,
    ConfigError,
    ImageLoadError,
    OutputError,
)

# Configuration
from blobcal.config import (
    load_app_config,
    save_app_config,
    create_default_app_config,
)

# Capabilities
from blobcal.capabilities import (
    Calibrator,
    Rectifier,
    BlobDetector,
    OpenCVCalibrator,
    OpenCVRectifier,
    OpenCVBlobDetector,
)

# Measurement
from blobcal.measurement import (
    diameter_from_area,
    classify,
    measure_blobs,
)

# Pipeline
from blobcal.pipeline import (
    calibrate,
    measure,
    run,
)
from blobcal.view import Viewer

__all__ = [
    # Core types
    "CheckerboardConfig",
    "WorldRectangle",
    "CameraModel",
    "RectifiedImage",
    "ExtractionConfig",
    "Blob",
    "MeasurementConfig",
    "MeasurementResult",
    "DisplayConfig",
    "AppConfig",
    # Errors
    "BlobcalError",
    "CalibrationError",
    "ConfigError",
    "ImageLoadError",
    "OutputError",
    # Configuration
    "load_app_config",
    "save_app_config",
    "create_default_app_config",
    # Capabilities
    "Calibrator",
    "Rectifier",
    "BlobDetector",
    "OpenCVCalibrator",
    "OpenCVRectifier",
    "OpenCVBlobDetector",
    # Measurement
    "diameter_from_area",
    "classify",
    "measure_blobs",
    # Pipeline
    "calibrate",
    "measure",
    "run",
    "Viewer",
]
