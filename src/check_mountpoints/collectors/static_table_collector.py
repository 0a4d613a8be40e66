from __future__ import annotations

import re
from pathlib import Path

from check_mountpoints.models.mounts import (
    MountTable,
    MountTableRecord,
    TableLayout,
    normalize_path,
)

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def unescape(field: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_options(field: str) -> frozenset[str]:
    return frozenset(o for o in field.split(",") if o)


def parse_static_table(text: str, layout: TableLayout) -> list[MountTableRecord]:
    rows: list[MountTableRecord] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        parts = stripped.split()
        path = _field(parts, layout.mount_field)
        if not path:
            continue

        rows.append(
            MountTableRecord(
                device=unescape(_field(parts, layout.device_field)),
                path=normalize_path(unescape(path)),
                fs_type=_field(parts, layout.fs_type_field),
                options=parse_options(_field(parts, layout.options_field)),
                dump=_int_field(parts, layout.dump_field),
                passno=_int_field(parts, layout.pass_field),
            )
        )
    return rows


def _field(parts: list[str], number: int | None) -> str:
    if number is None or number < 1 or number > len(parts):
        return ""
    return parts[number - 1]


def _int_field(parts: list[str], number: int | None) -> int:
    try:
        return int(_field(parts, number))
    except ValueError:
        return 0


class StaticTableCollector:
    def __init__(self, path: str, layout: TableLayout | None = None) -> None:
        self.path = path
        self.layout = layout or TableLayout()

    def collect(self) -> MountTable:
        # OSError propagates: an unreadable static table is fatal.
        text = Path(self.path).read_text(encoding="utf-8", errors="replace")
        return MountTable(source=self.path, records=tuple(parse_static_table(text, self.layout)))
