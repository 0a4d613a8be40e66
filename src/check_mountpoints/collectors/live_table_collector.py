from __future__ import annotations

import logging
from pathlib import Path

import psutil

from check_mountpoints.collectors.static_table_collector import parse_options, unescape
from check_mountpoints.models.mounts import MountTable, MountTableRecord, normalize_path

logger = logging.getLogger(__name__)

# Live table value meaning "this platform has no live table file".
SYNTHESIZED = "none"


def parse_live_table(text: str) -> list[MountTableRecord]:
    """Parse /proc/mounts style rows: device, mount path, fs type, options."""
    rows: list[MountTableRecord] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        rows.append(
            MountTableRecord(
                device=unescape(parts[0]),
                path=normalize_path(unescape(parts[1])),
                fs_type=parts[2] if len(parts) > 2 else "",
                options=parse_options(parts[3]) if len(parts) > 3 else frozenset(),
            )
        )
    return rows


class LiveTableCollector:
    def __init__(self, path: str) -> None:
        self.path = path

    @property
    def synthesized(self) -> bool:
        return self.path == SYNTHESIZED

    def available(self) -> bool:
        return self.synthesized or Path(self.path).exists()

    def collect(self) -> MountTable:
        if self.synthesized:
            return MountTable(source="<psutil>", records=tuple(self._partitions()))

        text = Path(self.path).read_text(encoding="utf-8", errors="replace")
        return MountTable(source=self.path, records=tuple(parse_live_table(text)))

    def _partitions(self) -> list[MountTableRecord]:
        rows: list[MountTableRecord] = []
        for p in psutil.disk_partitions(all=True):
            rows.append(
                MountTableRecord(
                    device=str(p.device),
                    path=normalize_path(str(p.mountpoint)),
                    fs_type=str(p.fstype),
                    options=parse_options(str(p.opts)),
                )
            )
        logger.debug("synthesized live table with %d partitions", len(rows))
        return rows
