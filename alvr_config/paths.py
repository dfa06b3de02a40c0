"""
Resolve where the ALVR driver and its settings document live.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

ROOT_DIR = Path(__file__).resolve().parent.parent

ENV_DRIVER_DIR = "ALVR_DRIVER_DIR"
ENV_CONFIG_PATH = "ALVR_CONFIG_PATH"

DEFAULT_DRIVER_DIR = ROOT_DIR / "driver"
CONFIG_RELATIVE_PATH = Path("resources") / "settings" / "default.vrsettings"


class DriverPaths:
    """
    Preference order for both paths:
    1. Explicit constructor argument.
    2. ``ALVR_DRIVER_DIR`` / ``ALVR_CONFIG_PATH`` environment variables.
    3. ``<root>/driver`` and the driver's ``resources/settings/default.vrsettings``.

    Environment variables are read on every call so a changed ``.env`` is
    picked up without rebuilding the object.
    """

    def __init__(self, driver_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> None:
        self._driver_dir = Path(driver_dir) if driver_dir else None
        self._config_path = Path(config_path) if config_path else None

    def driver_dir(self) -> Path:
        if self._driver_dir is not None:
            return self._driver_dir
        env_value = os.environ.get(ENV_DRIVER_DIR, "").strip()
        if env_value:
            return Path(env_value)
        return DEFAULT_DRIVER_DIR

    def config_path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        env_value = os.environ.get(ENV_CONFIG_PATH, "").strip()
        if env_value:
            return Path(env_value)
        return self.driver_dir() / CONFIG_RELATIVE_PATH


__all__ = ["DriverPaths", "ENV_DRIVER_DIR", "ENV_CONFIG_PATH", "CONFIG_RELATIVE_PATH"]
