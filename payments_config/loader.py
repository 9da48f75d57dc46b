"""
Settings Loader (``payments_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into the frozen dataclasses of
``payments_config.schema``.  The public entry point is
``payments_config.get_settings()``.

Invariants enforced
-------------------
* Every parse error raises ``ValueError`` with a descriptive message; no
  silent fallback for a value that is present but malformed.
* Money-like values (``cap_ratio``) are parsed as ``Decimal``; floats in
  YAML are converted through ``str`` so ``0.25`` stays exactly ``0.25``.
* Override files are merged key by key over the defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad values  -> ``ValueError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payments_config.schema import (
    DatabaseSettings,
    DepositSettings,
    KernelSettings,
    LoggingSettings,
)

_VALID_ZERO_POLICIES = ("reject", "uncapped")
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping at top level")
    return data


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a Decimal from YAML (string, int, or float via str)."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    url = data.get("url", DatabaseSettings.url)
    if not isinstance(url, str) or not url:
        raise ValueError(f"database.url must be a non-empty string, got {url!r}")
    return DatabaseSettings(
        url=url,
        echo_sql=bool(data.get("echo_sql", False)),
        pool_size=_positive_int(data.get("pool_size", 20), "database.pool_size"),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=_positive_int(data.get("pool_timeout", 30), "database.pool_timeout"),
        lock_timeout_ms=_positive_int(
            data.get("lock_timeout_ms", 5000), "database.lock_timeout_ms"
        ),
    )


def parse_deposits(data: dict[str, Any]) -> DepositSettings:
    ratio = parse_decimal(data.get("cap_ratio", "0.25"), "deposits.cap_ratio")
    if not (Decimal("0") < ratio <= Decimal("1")):
        raise ValueError(f"deposits.cap_ratio must be in (0, 1], got {ratio}")

    policy = str(data.get("zero_outstanding_policy", "reject")).lower()
    if policy not in _VALID_ZERO_POLICIES:
        raise ValueError(
            f"deposits.zero_outstanding_policy must be one of "
            f"{_VALID_ZERO_POLICIES}, got {policy!r}"
        )
    return DepositSettings(cap_ratio=ratio, zero_outstanding_policy=policy)


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    level = str(data.get("level", "INFO")).upper()
    if level not in _VALID_LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {_VALID_LOG_LEVELS}, got {level!r}")
    return LoggingSettings(level=level)


def parse_settings(data: dict[str, Any]) -> KernelSettings:
    """Parse a complete (merged) settings mapping."""
    return KernelSettings(
        database=parse_database(data.get("database") or {}),
        deposits=parse_deposits(data.get("deposits") or {}),
        logging=parse_logging(data.get("logging") or {}),
    )
