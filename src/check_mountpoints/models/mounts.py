from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from check_mountpoints.models.common import State


def normalize_path(path: str) -> str:
    """Strip trailing slashes; the root directory stays "/"."""
    stripped = path.rstrip("/")
    return stripped or ("/" if path.startswith("/") else "")


@dataclass(frozen=True)
class TableLayout:
    fs_type_field: int = 3
    mount_field: int = 2
    options_field: int = 4
    device_field: int = 1
    dump_field: int | None = 5
    pass_field: int | None = 6


@dataclass(frozen=True)
class MountTableRecord:
    device: str
    path: str
    fs_type: str
    options: frozenset[str] = frozenset()
    dump: int = 0
    passno: int = 0


@dataclass(frozen=True)
class MountTable:
    source: str
    records: tuple[MountTableRecord, ...]

    def find(self, path: str) -> MountTableRecord | None:
        wanted = normalize_path(path)
        for rec in self.records:
            if rec.path == wanted:
                return rec
        return None

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.find(path) is not None

    def extended(self, extra: list[MountTableRecord]) -> MountTable:
        return MountTable(source=self.source, records=self.records + tuple(extra))


class CandidateSource(Enum):
    EXPLICIT = "explicit"
    AUTODISCOVERED = "autodiscovered"


@dataclass(frozen=True)
class MountCandidate:
    path: str
    source: CandidateSource


@dataclass(frozen=True)
class Thresholds:
    warning: int
    critical: int


@dataclass(frozen=True)
class UsageSample:
    available: str
    used_percent: int


@dataclass(frozen=True)
class UsageReport:
    sample: UsageSample
    verdict: State
    perf_tokens: tuple[str, ...]
    info_line: str


@dataclass
class CheckResult:
    path: str
    in_static_table: bool = True
    is_live_mounted: bool = True
    stale: bool = False
    exists_on_fs: bool = False
    write_ok: bool | None = None
    fs_type_match: bool | None = None
    usage: UsageSample | None = None
    messages: list[str] = field(default_factory=list)
