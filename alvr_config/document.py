"""
Helpers for reading and writing the ALVR driver settings document.

The document is owned by the SteamVR driver; we only touch a handful of keys
under ``driver_alvr_server`` and hand everything else back untouched.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER = logging.getLogger("alvr_config.document")

SERVER_NAMESPACE = "driver_alvr_server"


class DocumentUnavailable(RuntimeError):
    """The settings document is missing, unreadable or not the expected shape."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def read_document(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        LOGGER.warning("Failed to read settings document %s: %s", path, exc)
        raise DocumentUnavailable(path, str(exc)) from exc

    if not isinstance(data, dict):
        raise DocumentUnavailable(path, "top-level value is not an object")
    if not isinstance(data.get(SERVER_NAMESPACE), dict):
        raise DocumentUnavailable(path, f"missing '{SERVER_NAMESPACE}' section")
    return data


def write_document(path: Path, document: Dict[str, Any]) -> None:
    # Single overwrite, no temp file: a crash mid-write can truncate the file.
    try:
        text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        with open(path, "w", encoding="utf-8") as fp:
            fp.write(text)
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.warning("Failed to write settings document %s: %s", path, exc)
        raise DocumentUnavailable(path, str(exc)) from exc


def server_section(document: Dict[str, Any]) -> Dict[str, Any]:
    return document[SERVER_NAMESPACE]


def has(section: Dict[str, Any], key: str) -> bool:
    return section.get(key) is not None


def get_int(section: Dict[str, Any], key: str) -> Optional[int]:
    """
    Return ``section[key]`` as an int, or None when absent or not numeric.

    Integral floats (``1024.0``) are accepted; booleans and strings are not.
    """

    value = section.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def get_string(section: Dict[str, Any], key: str) -> Optional[str]:
    value = section.get(key)
    return value if isinstance(value, str) else None


__all__ = [
    "DocumentUnavailable",
    "SERVER_NAMESPACE",
    "read_document",
    "write_document",
    "server_section",
    "has",
    "get_int",
    "get_string",
]
