# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/settings.py

"""Environment-variable settings for the bench and the CLI.

Configuration Precedence:
    1. Environment variables (NAME or CDC_FIFO_NAME)
    2. Default values

Functions:
    get_bool_setting: Resolve boolean configuration
    get_str_setting: Resolve string configuration
    get_int_setting: Resolve integer configuration (supports hex with 0x)

Example:
    >>> seed = get_int_setting("SEED", 1)
    >>> verbosity = get_str_setting("VERBOSITY", "info")
"""

from __future__ import annotations

import os

PREFIX = "CDC_FIFO_"

_TRUE_SET = {"1", "true", "yes", "y", "on"}
_FALSE_SET = {"0", "false", "no", "n", "off"}


def _parse_bool(s: str) -> bool | None:
    """Convert str to bool."""
    v = s.strip().lower()
    if v in _TRUE_SET:
        return True
    if v in _FALSE_SET:
        return False
    return None


def _keys(name: str) -> tuple[str, str]:
    return (name, f"{PREFIX}{name}")


def get_bool_setting(name: str, default: bool) -> bool:
    """Resolve a boolean setting with precedence: env > default."""
    for key in _keys(name):
        v = os.environ.get(key)
        if v is not None:
            parsed = _parse_bool(v)
            if parsed is not None:
                return parsed
    return default


def get_str_setting(name: str, default: str) -> str:
    """Resolve a string setting: env > default (always returns str)."""
    for key in _keys(name):
        v = os.environ.get(key)
        if v is not None:
            return v
    return default


def get_int_setting(name: str, default: int) -> int:
    """Resolve an int setting: env > default (always returns int)."""
    for key in _keys(name):
        v = os.environ.get(key)
        if v is not None:
            try:
                return int(v, 0)  # supports 10/16 prefixes (e.g., "0x10")
            except ValueError:
                continue  # try the prefixed variant, then fall through to default
    return default
