"""
ALVR server settings package.

Exposes the store that reads and writes the encoder/render/network tuning
values kept in the ALVR driver's settings document.
"""

import logging
import sys

from .config_store import DEFAULTS, SUPPORTED_WIDTHS, ConfigStore, ServerSettings  # noqa: F401
from .document import DocumentUnavailable  # noqa: F401
from .paths import DriverPaths  # noqa: F401


def _configure_alvr_logging():
    base_logger = logging.getLogger("alvr_config")
    has_handler = any(getattr(handler, "_alvr_config_handler", False) for handler in base_logger.handlers)
    if not has_handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("[ALVR] %(levelname)s %(message)s"))
        handler._alvr_config_handler = True
        base_logger.addHandler(handler)
    base_logger.setLevel(logging.INFO)
    base_logger.propagate = True


_configure_alvr_logging()
