"""
Configuration loading/saving.

Pure functions operating on dataclasses.
- TOML for application configuration
"""

from __future__ import annotations

from pathlib import Path

import rtoml

from .exceptions import ConfigError
from .types import (
    AppConfig,
    CheckerboardConfig,
    DisplayConfig,
    ExtractionConfig,
    MeasurementConfig,
)

DEFAULT_CONFIG_NAME = "blobcal.toml"
SORT_KEYS = ("area", "none")


# ============================================================================
# TOML Application Configuration
# ============================================================================


def load_app_config(path: Path) -> AppConfig:
    """
    Load application configuration from TOML file.

    Missing sections and keys fall back to defaults.
    Relative image paths are resolved against the config file's directory.

    Args:
        path: Path to blobcal.toml

    Returns:
        AppConfig dataclass

    Raises:
        ConfigError: If the file is not valid TOML or a value is invalid
    """
    try:
        data = rtoml.load(path)
    except rtoml.TomlParsingError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    try:
        config = _parse_app_config(data, path.parent)
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in {path}: {e}") from e

    validate_app_config(config)
    return config


def _int_tuple(values, name: str) -> tuple[int, ...]:
    if not isinstance(values, (list, tuple)):
        raise TypeError(f"{name} must be an array, got {values!r}")
    return tuple(int(v) for v in values)


def _parse_app_config(data: dict, base_dir: Path) -> AppConfig:
    defaults = AppConfig()

    board_data = data.get("checkerboard", {})
    d_board = defaults.checkerboard
    checkerboard = CheckerboardConfig(
        pattern_size=_int_tuple(board_data.get("pattern_size", d_board.pattern_size), "pattern_size"),
        square_size_mm=float(board_data.get("square_size_mm", d_board.square_size_mm)),
        center_squares=float(board_data.get("center_squares", d_board.center_squares)),
        size_squares=float(board_data.get("size_squares", d_board.size_squares)),
    )

    ext_data = data.get("extraction", {})
    d_ext = defaults.extraction
    extraction = ExtractionConfig(
        threshold_low=int(ext_data.get("threshold_low", d_ext.threshold_low)),
        threshold_high=int(ext_data.get("threshold_high", d_ext.threshold_high)),
        morph_radius=int(ext_data.get("morph_radius", d_ext.morph_radius)),
        min_area_px=int(ext_data.get("min_area_px", d_ext.min_area_px)),
        compactness_min=float(ext_data.get("compactness_min", d_ext.compactness_min)),
        compactness_max=float(ext_data.get("compactness_max", d_ext.compactness_max)),
        sort_by=ext_data.get("sort_by", d_ext.sort_by),
    )

    meas_data = data.get("measurement", {})
    d_meas = defaults.measurement
    measurement = MeasurementConfig(
        expected_diameter_mm=float(
            meas_data.get("expected_diameter_mm", d_meas.expected_diameter_mm)
        ),
        tolerance_mm=float(meas_data.get("tolerance_mm", d_meas.tolerance_mm)),
    )

    disp_data = data.get("display", {})
    d_disp = defaults.display
    display = DisplayConfig(
        step_delay_ms=int(disp_data.get("step_delay_ms", d_disp.step_delay_ms)),
        pixel_size_mm=float(disp_data.get("pixel_size_mm", d_disp.pixel_size_mm)),
        text_size_mm=float(disp_data.get("text_size_mm", d_disp.text_size_mm)),
        text_color=_int_tuple(disp_data.get("text_color", d_disp.text_color), "text_color"),
        pass_color=_int_tuple(disp_data.get("pass_color", d_disp.pass_color), "pass_color"),
        fail_color=_int_tuple(disp_data.get("fail_color", d_disp.fail_color), "fail_color"),
    )

    images = data.get("images", {})

    def resolve(value: str) -> Path:
        p = Path(value)
        return p if p.is_absolute() else base_dir / p

    calibration_image = resolve(images["calibration"]) if "calibration" in images else defaults.calibration_image
    live_image = resolve(images["live"]) if "live" in images else defaults.live_image
    output_image = resolve(images["output"]) if "output" in images else None

    max_error = data.get("calibration", {}).get("max_error_px")

    return AppConfig(
        checkerboard=checkerboard,
        extraction=extraction,
        measurement=measurement,
        display=display,
        calibration_image=calibration_image,
        live_image=live_image,
        output_image=output_image,
        max_calibration_error_px=float(max_error) if max_error is not None else None,
    )


def validate_app_config(config: AppConfig) -> None:
    """
    Check value ranges that would otherwise fail mid-run.

    Raises:
        ConfigError: On the first invalid value
    """
    board = config.checkerboard
    if len(board.pattern_size) != 2 or min(board.pattern_size) < 2:
        raise ConfigError(f"pattern_size must be two counts >= 2, got {list(board.pattern_size)}")
    if board.square_size_mm <= 0 or board.size_squares <= 0:
        raise ConfigError("square_size_mm and size_squares must be positive")

    ext = config.extraction
    if not 0 <= ext.threshold_low <= ext.threshold_high <= 255:
        raise ConfigError(
            f"Thresholds must satisfy 0 <= low <= high <= 255, "
            f"got {ext.threshold_low}..{ext.threshold_high}"
        )
    if ext.morph_radius < 0 or ext.min_area_px < 0:
        raise ConfigError("morph_radius and min_area_px must not be negative")
    if ext.compactness_min > ext.compactness_max:
        raise ConfigError("compactness_min must not exceed compactness_max")
    if ext.sort_by not in SORT_KEYS:
        raise ConfigError(f"sort_by must be one of {', '.join(SORT_KEYS)}, got {ext.sort_by!r}")

    if config.measurement.tolerance_mm < 0:
        raise ConfigError("tolerance_mm must not be negative")

    disp = config.display
    if disp.step_delay_ms < 0:
        raise ConfigError("step_delay_ms must not be negative")
    if disp.pixel_size_mm <= 0 or disp.text_size_mm <= 0:
        raise ConfigError("pixel_size_mm and text_size_mm must be positive")
    for name, color, channels in (
        ("text_color", disp.text_color, 3),
        ("pass_color", disp.pass_color, 4),
        ("fail_color", disp.fail_color, 4),
    ):
        if len(color) != channels or not all(0 <= c <= 255 for c in color):
            raise ConfigError(f"{name} needs {channels} values in 0..255, got {list(color)}")

    if config.max_calibration_error_px is not None and config.max_calibration_error_px <= 0:
        raise ConfigError("max_error_px must be positive")


def save_app_config(config: AppConfig, path: Path) -> None:
    """
    Save application configuration to TOML file.

    Args:
        config: AppConfig dataclass
        path: Path to save blobcal.toml
    """
    board = config.checkerboard
    ext = config.extraction
    meas = config.measurement
    disp = config.display

    data = {
        "checkerboard": {
            "pattern_size": list(board.pattern_size),
            "square_size_mm": board.square_size_mm,
            "center_squares": board.center_squares,
            "size_squares": board.size_squares,
        },
        "extraction": {
            "threshold_low": ext.threshold_low,
            "threshold_high": ext.threshold_high,
            "morph_radius": ext.morph_radius,
            "min_area_px": ext.min_area_px,
            "compactness_min": ext.compactness_min,
            "compactness_max": ext.compactness_max,
            "sort_by": ext.sort_by,
        },
        "measurement": {
            "expected_diameter_mm": meas.expected_diameter_mm,
            "tolerance_mm": meas.tolerance_mm,
        },
        "display": {
            "step_delay_ms": disp.step_delay_ms,
            "pixel_size_mm": disp.pixel_size_mm,
            "text_size_mm": disp.text_size_mm,
            "text_color": list(disp.text_color),
            "pass_color": list(disp.pass_color),
            "fail_color": list(disp.fail_color),
        },
        "images": {
            "calibration": str(config.calibration_image),
            "live": str(config.live_image),
        },
    }

    if config.output_image is not None:
        data["images"]["output"] = str(config.output_image)

    # TOML has no null; omit unset limit
    if config.max_calibration_error_px is not None:
        data["calibration"] = {"max_error_px": config.max_calibration_error_px}

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def create_default_app_config() -> AppConfig:
    """
    Create a default application configuration.

    Returns:
        AppConfig for the 10 cent coin demo with a 166 mm / 11 square target
    """
    return AppConfig()


def find_config(explicit: Path | None = None) -> Path | None:
    """
    Pick the config file to use.

    Args:
        explicit: Path given on the command line, if any

    Returns:
        explicit if given, ./blobcal.toml if present, else None
    """
    if explicit is not None:
        return explicit
    local = Path.cwd() / DEFAULT_CONFIG_NAME
    return local if local.exists() else None
