from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from check_mountpoints.models.mounts import TableLayout, Thresholds

logger = logging.getLogger(__name__)

CONFIG_ENV = "CHECK_MOUNTPOINTS_CONFIG"


class ConfigError(ValueError):
    """Invalid invocation; reported before any mount is touched."""


@dataclass(frozen=True)
class PlatformProfile:
    kernel: str
    layout: TableLayout
    noauto_marker: str
    static_table: str
    live_table: str


def platform_profile(kernel: str | None = None) -> PlatformProfile:
    kernel = kernel or platform.system()
    if kernel == "SunOS":
        return PlatformProfile(
            kernel=kernel,
            layout=TableLayout(
                fs_type_field=4, mount_field=3, options_field=6, dump_field=None, pass_field=5
            ),
            noauto_marker="no",
            static_table="/etc/vfstab",
            live_table="/etc/mnttab",
        )
    if kernel == "HP-UX":
        return PlatformProfile(kernel, TableLayout(), "noauto", "/etc/fstab", "/dev/mnttab")
    if kernel == "FreeBSD":
        return PlatformProfile(kernel, TableLayout(), "noauto", "/etc/fstab", "none")
    return PlatformProfile(kernel, TableLayout(), "noauto", "/etc/fstab", "/proc/mounts")


@dataclass(frozen=True)
class CheckConfig:
    mountpoints: tuple[str, ...] = ()
    kernel: str = "Linux"
    static_table: str = "/etc/fstab"
    live_table: str = "/proc/mounts"
    layout: TableLayout = field(default_factory=TableLayout)
    noauto_marker: str = "noauto"
    stale_timeout: int = 3
    accept_symlinks: bool = False
    ignore_fstab: bool = False
    autodiscover: bool = False
    ok_if_empty: bool = False
    exclude: str | None = None
    respect_noauto: bool = False
    write_test: bool = False
    df_args: tuple[str, ...] = ()
    fs_types: tuple[str, ...] = ()
    thresholds: Thresholds | None = None
    verbose: bool = False
    vz_marker: str = "/proc/vz/veinfo"
    zfs_command: str = "/sbin/zfs"

    @property
    def thresholds_defined(self) -> bool:
        return self.thresholds is not None

    def expected_fs_type(self, index: int) -> str | None:
        if 0 <= index < len(self.fs_types):
            return self.fs_types[index] or None
        return None


def _is_integer(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def parse_thresholds(warn: str | None, crit: str | None) -> Thresholds | None:
    if warn is None and crit is None:
        return None
    if warn is None:
        raise ConfigError(
            "You have defined only a critical threshold, you must define warning and critical threshold!"
        )
    if crit is None:
        raise ConfigError(
            "You have defined only a warning threshold, you must define warning and critical threshold!"
        )
    if not _is_integer(warn):
        raise ConfigError(f"The warning threshold: '{warn}' is not an integer!")
    if not _is_integer(crit):
        raise ConfigError(f"The critical threshold: '{crit}' is not an integer!")
    if int(warn) < 0:
        raise ConfigError(f"The warning threshold: '{warn}' must not be negative.")
    if int(warn) > int(crit):
        raise ConfigError(
            f"The warning threshold: '{warn}' is greater than the critical threshold: '{crit}'."
        )
    return Thresholds(warning=int(warn), critical=int(crit))


def parse_fs_types(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(t.strip() for t in value.split(","))


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


class ConfigService:
    """Loads option defaults from a JSON object file."""

    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths

    @staticmethod
    def from_env_or_arg(arg: str | None) -> ConfigService:
        raw = arg or os.environ.get(CONFIG_ENV)
        return ConfigService(ConfigPaths(path=Path(raw)) if raw else None)

    def load(self) -> dict[str, Any]:
        if self.paths is None:
            return {}
        p = self.paths.path
        if not p.exists():
            logger.warning("config file %s not found, using built-in defaults", p)
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("config file %s ignored: %s", p, e)
            return {}
        if not isinstance(obj, dict):
            logger.warning("config file %s ignored: not a JSON object", p)
            return {}
        return obj
