from __future__ import annotations

import logging
import os
from pathlib import Path

from check_mountpoints.models.common import CommandSucceeded
from check_mountpoints.models.mounts import MountTableRecord, normalize_path
from check_mountpoints.services.command_service import Runner

logger = logging.getLogger(__name__)

# Dataset property that hides a dataset from this host, per kernel.
_CONFINEMENT_PROPERTY = {
    "SunOS": "zoned",
    "FreeBSD": "jailed",
}


class ZfsVolumeCollector:
    """Turns mountable ZFS filesystem datasets into extra static table rows."""

    def __init__(
        self,
        runner: Runner,
        kernel: str,
        zfs_command: str = "/sbin/zfs",
        timeout_s: float = 10.0,
    ) -> None:
        self.runner = runner
        self.kernel = kernel
        self.zfs_command = zfs_command
        self.timeout_s = float(timeout_s)

    def available(self) -> bool:
        return os.access(self.zfs_command, os.X_OK)

    def collect(self) -> list[MountTableRecord]:
        props = ["name", "mountpoint", "canmount", "readonly"]
        confinement = _CONFINEMENT_PROPERTY.get(self.kernel)
        if confinement:
            props.append(confinement)

        cmd = [self.zfs_command, "list", "-H", "-t", "filesystem", "-o", ",".join(props)]
        outcome = self.runner.run(cmd, self.timeout_s)
        if not isinstance(outcome, CommandSucceeded):
            logger.warning("zfs dataset listing failed: %s", outcome)
            return []

        rows: list[MountTableRecord] = []
        for line in outcome.stdout.splitlines():
            fields = line.split("\t")
            if len(fields) < len(props):
                continue
            values = dict(zip(props, fields))

            mountpoint = values["mountpoint"]
            # none, legacy and "-" are not directories
            if not Path(mountpoint).is_dir():
                continue
            if values["canmount"] == "off":
                continue
            if confinement and values[confinement] == "on":
                continue

            ro = "ro" if values["readonly"] == "on" else "rw"
            rows.append(
                MountTableRecord(
                    device=values["name"],
                    path=normalize_path(mountpoint),
                    fs_type="zfs",
                    options=frozenset({ro}),
                )
            )

        logger.debug("zfs contributed %d static rows", len(rows))
        return rows
