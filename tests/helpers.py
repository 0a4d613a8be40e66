from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from check_mountpoints.models.common import (
    CommandFailed,
    CommandOutcome,
    CommandSucceeded,
    CommandTimedOut,
)

Handler = Callable[[list[str], float], CommandOutcome]


class FakeRunner:
    """Answers commands by executable name; anything unknown fails like a missing binary."""

    def __init__(self, handlers: dict[str, Handler] | None = None) -> None:
        self.handlers = dict(handlers or {})
        self.calls: list[list[str]] = []

    def run(self, cmd, timeout_s):
        argv = [str(c) for c in cmd]
        self.calls.append(argv)
        handler = self.handlers.get(Path(argv[0]).name)
        if handler is None:
            return CommandFailed(returncode=127, stderr=f"{argv[0]}: not found")
        return handler(argv, timeout_s)

    def commands(self, name: str) -> list[list[str]]:
        return [c for c in self.calls if Path(c[0]).name == name]


def df_handler(
    usage: dict[str, tuple[str, int]] | None = None,
    stale: Iterable[str] = (),
    default: tuple[str, int] = ("1.0G", 10),
) -> Handler:
    usage = usage or {}
    stale = set(stale)

    def handle(argv: list[str], timeout_s: float) -> CommandOutcome:
        path = argv[-1]
        if path in stale:
            return CommandTimedOut(after_s=timeout_s)
        if "-k" in argv:
            return CommandSucceeded(stdout="")
        avail, pct = usage.get(path, default)
        return CommandSucceeded(
            stdout=(
                "Filesystem      Size  Used Avail Use% Mounted on\n"
                f"server:/export  10G   1G  {avail}  {pct}% {path}\n"
            )
        )

    return handle


def touch_handler(argv: list[str], timeout_s: float) -> CommandOutcome:
    Path(argv[1]).touch()
    return CommandSucceeded(stdout="")


def stat_handler(types: dict[str, str]) -> Handler:
    def handle(argv: list[str], timeout_s: float) -> CommandOutcome:
        path = argv[-1]
        if path not in types:
            return CommandFailed(returncode=1, stderr="cannot read file system information")
        return CommandSucceeded(stdout=types[path])

    return handle


def write_fstab(path: Path, rows: Iterable[tuple[str, str, str, str]]) -> Path:
    lines = ["# /etc/fstab: static file system information.", ""]
    for device, mp, fstype, opts in rows:
        lines.append(f"{device}\t{mp}\t{fstype}\t{opts}\t0\t0")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_mtab(path: Path, rows: Iterable[tuple[str, str, str]]) -> Path:
    lines = [f"{device} {mp} {fstype} rw,relatime 0 0" for device, mp, fstype in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
