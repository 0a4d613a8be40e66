from __future__ import annotations

import re
from collections.abc import Iterable

from check_mountpoints.models.mounts import (
    CandidateSource,
    MountCandidate,
    MountTable,
    normalize_path,
)

AUTODISCOVER_FS_TYPES = frozenset(
    {
        "ext2",
        "ext3",
        "ext4",
        "xfs",
        "auto",
        "nfs",
        "nfs4",
        "davfs",
        "cifs",
        "fuse",
        "glusterfs",
        "ocfs2",
        "lustre",
        "ufs",
        "zfs",
        "ceph",
        "btrfs",
        "yas3fs",
    }
)


def compile_exclude(pattern: str | None) -> re.Pattern[str] | None:
    if not pattern:
        return None
    # grep style "\|" alternation is what older setups pass
    return re.compile(pattern.replace(r"\|", "|"))


class MountSelector:
    def __init__(
        self,
        exclude: str | None = None,
        respect_noauto: bool = False,
        noauto_marker: str = "noauto",
    ) -> None:
        self.exclude = compile_exclude(exclude)
        self.respect_noauto = bool(respect_noauto)
        self.noauto_marker = noauto_marker

    def select_explicit(self, paths: Iterable[str]) -> list[MountCandidate]:
        return _unique(paths, CandidateSource.EXPLICIT)

    def select_autodiscovered(self, table: MountTable) -> list[MountCandidate]:
        paths: list[str] = []
        for rec in table.records:
            if rec.fs_type not in AUTODISCOVER_FS_TYPES:
                continue
            if self.exclude is not None and self.exclude.search(rec.path):
                continue
            if self.respect_noauto and self.noauto_marker in rec.options:
                continue
            paths.append(rec.path)
        return _unique(paths, CandidateSource.AUTODISCOVERED)

    def select(
        self,
        autodiscover: bool,
        table: MountTable,
        explicit_paths: Iterable[str] = (),
    ) -> list[MountCandidate]:
        if autodiscover:
            return self.select_autodiscovered(table)
        return self.select_explicit(explicit_paths)


def _unique(paths: Iterable[str], source: CandidateSource) -> list[MountCandidate]:
    seen: set[str] = set()
    out: list[MountCandidate] = []
    for p in paths:
        path = normalize_path(p)
        if not path or path in seen:
            continue
        seen.add(path)
        out.append(MountCandidate(path=path, source=source))
    return out
