#!/usr/bin/env python3
"""
blobcal CLI - calibrated coin diameter measurement.

Usage:
    blobcal [config.toml]              - Run the demo in a window (default)
    blobcal gui [config.toml]          - Same as above
    blobcal headless [config.toml]     - Run without a window, print results only
    blobcal init-config [config.toml]  - Write a default configuration file
    blobcal --help                     - Show this help

Without a config argument, ./blobcal.toml is used if present.
"""

import sys
import time
from pathlib import Path

from blobcal.config import (
    DEFAULT_CONFIG_NAME,
    create_default_app_config,
    find_config,
    load_app_config,
    save_app_config,
)
from blobcal.exceptions import BlobcalError


def _load(args: list[str]):
    explicit = Path(args[0]) if args else None
    path = find_config(explicit)
    if path is None:
        return create_default_app_config()
    if not path.exists():
        raise BlobcalError(f"Config not found: {path}")
    return load_app_config(path)


def run_gui(args: list[str]) -> int:
    from PySide6.QtWidgets import QApplication

    from blobcal.gui import ViewerWindow, make_step_pause
    from blobcal.pipeline import run
    from blobcal.view import Viewer

    config = _load(args)

    app = QApplication.instance() or QApplication(sys.argv)
    window = ViewerWindow()
    viewer = Viewer(display=window.show_frame)

    run(config, viewer=viewer, on_step=make_step_pause(config.display.step_delay_ms))

    # Keep the final overlay on screen until the window is closed
    return app.exec()


def run_headless(args: list[str]) -> int:
    from blobcal.pipeline import run

    config = _load(args)
    delay_s = config.display.step_delay_ms / 1000.0

    def pause(step: str) -> None:
        time.sleep(delay_s)

    run(config, on_step=pause if delay_s > 0 else None)
    if config.output_image is not None:
        print(f"Overlay written to {config.output_image}")
    return 0


def init_config(args: list[str]) -> int:
    path = Path(args[0]) if args else Path(DEFAULT_CONFIG_NAME)
    if path.exists():
        print(f"Refusing to overwrite existing file: {path}")
        return 1
    save_app_config(create_default_app_config(), path)
    print(f"Wrote {path}")
    return 0


def main():
    args = sys.argv[1:]

    if args and args[0] in ("-h", "--help"):
        print(__doc__)
        return 0

    try:
        if not args or args[0].endswith(".toml"):
            return run_gui(args)

        command, rest = args[0], args[1:]

        if command == "gui":
            return run_gui(rest)

        elif command == "headless":
            return run_headless(rest)

        elif command == "init-config":
            return init_config(rest)

        else:
            print(f"Unknown command: {command}")
            print("Run 'blobcal --help' for usage")
            return 1

    except BlobcalError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
