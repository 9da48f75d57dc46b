"""
payments_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_settings()`` is the only way to obtain settings.  It loads the
    packaged ``defaults.yaml``, merges an optional override file, applies
    the database URL environment override, and returns a frozen
    ``KernelSettings``.  ``bridges`` turns settings into kernel inputs
    (engine, cap policy).

Architecture position:
    Sits above ``payments_kernel``.  The kernel never imports this package;
    callers wire settings into the kernel through the bridges.

Environment:
    PAYMENTS_DATABASE_URL  -- takes precedence over every file value
    DATABASE_URL           -- used when PAYMENTS_DATABASE_URL is unset
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from payments_config.loader import load_yaml_file, merge_settings, parse_settings
from payments_config.schema import KernelSettings

_logger = logging.getLogger("payments_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_URL_ENV_VARS = ("PAYMENTS_DATABASE_URL", "DATABASE_URL")


def get_settings(config_path: Path | str | None = None) -> KernelSettings:
    """
    Load settings: defaults.yaml, then config_path, then environment.

    Raises:
        FileNotFoundError: config_path given but missing.
        ValueError: a value fails validation.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if config_path is not None:
        data = merge_settings(data, load_yaml_file(Path(config_path)))

    settings = parse_settings(data)

    for var in _URL_ENV_VARS:
        url = os.environ.get(var)
        if url:
            settings = replace(settings, database=replace(settings.database, url=url))
            break

    _logger.info(
        "settings_loaded",
        extra={
            "config_path": str(config_path) if config_path else None,
            "dialect": settings.database.url.split(":", 1)[0],
            "deposit_cap_ratio": str(settings.deposits.cap_ratio),
            "zero_outstanding_policy": settings.deposits.zero_outstanding_policy,
        },
    )
    return settings


__all__ = ["KernelSettings", "get_settings"]
