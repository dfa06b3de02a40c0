import json
import sys
from pathlib import Path

import pytest

# Ensure project root is in sys.path
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from alvr_config.paths import DriverPaths


@pytest.fixture
def driver_dir(tmp_path):
    path = tmp_path / "driver"
    (path / "resources" / "settings").mkdir(parents=True)
    return path


@pytest.fixture
def driver_paths(driver_dir):
    return DriverPaths(driver_dir=driver_dir)


@pytest.fixture
def write_settings(driver_paths):
    """Write a settings document at the driver's default location."""

    def _write(document):
        path = driver_paths.config_path()
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(document, fp, indent=2)
        return path

    return _write


@pytest.fixture
def read_settings(driver_paths):
    def _read():
        with open(driver_paths.config_path(), "r", encoding="utf-8") as fp:
            return json.load(fp)

    return _read


@pytest.fixture
def sample_document():
    return {
        "steamvr": {"activateMultipleDrivers": True},
        "driver_alvr_server": {
            "nvencOptions": "-codec h264 -bitrate 50M -maxbitrate 50M",
            "renderWidth": 1024,
            "clientRecvBufferSize": 500000,
            "extraFeatureFlag": True,
            "listenPort": 9944,
        },
    }
