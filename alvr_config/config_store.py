"""
Load and save the ALVR server tuning values (bitrate, render width, client
receive buffer) inside the driver's settings document.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import asdict, dataclass
from threading import Lock
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional, Tuple

from .document import (
    DocumentUnavailable,
    get_int,
    get_string,
    has,
    read_document,
    server_section,
    write_document,
)
from .paths import DriverPaths

LOGGER = logging.getLogger("alvr_config.config_store")

DEFAULTS = MappingProxyType(
    {
        "bitrate_mbps": 30,
        "render_width": 2048,
        "buffer_size": 200 * 1000,  # 200kB
    }
)
SUPPORTED_WIDTHS: Tuple[int, ...] = (1024, 1536, 2048)

NVENC_OPTIONS_TEMPLATE = (
    "-codec h264 -preset ll_hq -rc cbr_ll_hq -gop 120 -fps 60 "
    "-bitrate {bitrate}M -maxbitrate {bitrate}M"
)

# Greedy prefix: the last "-bitrate <N>M" token wins.
_BITRATE_RE = re.compile(r".*-bitrate ([^ ]+)M")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

EXIT_FAILURE = 1

# Encoder option values are 32-bit signed integers.
_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1


@dataclass
class ServerSettings:
    bitrate_mbps: int = DEFAULTS["bitrate_mbps"]  # Mbps
    render_width: int = DEFAULTS["render_width"]  # pixels
    buffer_size: int = DEFAULTS["buffer_size"]  # bytes

    @property
    def render_height(self) -> int:
        return self.render_width // 2

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def parse_bitrate(nvenc_options: Optional[str]) -> int:
    if not nvenc_options:
        return DEFAULTS["bitrate_mbps"]
    match = _BITRATE_RE.search(nvenc_options)
    if not match or not _INTEGER_RE.fullmatch(match.group(1)):
        return DEFAULTS["bitrate_mbps"]
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        return DEFAULTS["bitrate_mbps"]
    return value


def build_nvenc_options(bitrate_mbps: int) -> str:
    return NVENC_OPTIONS_TEMPLATE.format(bitrate=bitrate_mbps)


def unavailable_message(path: Any) -> str:
    return f"Error opening {path}\nPlease check existence of driver folder."


def _log_error(message: str) -> None:
    LOGGER.error("%s", message)


class ConfigStore:
    """
    Reads and writes the tuning values; holds no state between calls.

    ``report_error`` receives user-facing failure text (the caller decides how
    to display it). ``terminate`` is invoked with a non-zero status when a save
    cannot be completed.
    """

    def __init__(
        self,
        paths: Optional[DriverPaths] = None,
        report_error: Optional[Callable[[str], None]] = None,
        terminate: Optional[Callable[[int], Any]] = None,
    ) -> None:
        self.paths = paths or DriverPaths()
        self._report_error = report_error or _log_error
        self._terminate = terminate or sys.exit
        self._lock = Lock()

    def load(self) -> Tuple[Optional[ServerSettings], bool]:
        path = self.paths.config_path()
        try:
            with self._lock:
                document = read_document(path)
        except DocumentUnavailable:
            self._report_error(unavailable_message(path))
            return None, False

        section = server_section(document)

        bitrate = parse_bitrate(get_string(section, "nvencOptions"))

        width = get_int(section, "renderWidth")
        if width not in SUPPORTED_WIDTHS:
            LOGGER.debug("Unsupported renderWidth %r, using default", section.get("renderWidth"))
            width = DEFAULTS["render_width"]

        buffer_size = DEFAULTS["buffer_size"]
        if has(section, "clientRecvBufferSize"):
            parsed = get_int(section, "clientRecvBufferSize")
            if parsed is not None:
                buffer_size = parsed

        settings = ServerSettings(bitrate_mbps=bitrate, render_width=width, buffer_size=buffer_size)
        LOGGER.info("Loaded server settings from %s: %s", path, settings.as_dict())
        return settings, True

    def save(self, bitrate_mbps: int, render_width: int, buffer_size: int) -> bool:
        # Width is not checked against SUPPORTED_WIDTHS here; the input surface does that.
        path = self.paths.config_path()
        try:
            with self._lock:
                document = read_document(path)
                section = server_section(document)
                section["nvencOptions"] = build_nvenc_options(bitrate_mbps)
                section["renderWidth"] = render_width
                section["renderHeight"] = render_width // 2
                section["debugOutputDir"] = str(self.paths.driver_dir())
                section["clientRecvBufferSize"] = buffer_size
                write_document(path, document)
        except DocumentUnavailable:
            self._report_error(unavailable_message(path))
            self._terminate(EXIT_FAILURE)
            return False

        LOGGER.info(
            "Saved server settings to %s (bitrate=%sM width=%s buffer=%s)",
            path,
            bitrate_mbps,
            render_width,
            buffer_size,
        )
        return True


__all__ = [
    "ConfigStore",
    "ServerSettings",
    "DEFAULTS",
    "SUPPORTED_WIDTHS",
    "NVENC_OPTIONS_TEMPLATE",
    "parse_bitrate",
    "build_nvenc_options",
    "unavailable_message",
]
