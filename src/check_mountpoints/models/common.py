from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class State(IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    State.OK: "OK",
    State.WARNING: "WARN",
    State.CRITICAL: "CRIT",
    State.UNKNOWN: "UNKNOWN",
}


class AbortCode(IntEnum):
    SIGTERM = 40
    SIGINT = 41
    SIGHUP = 42
    INTERNAL_ERROR = 45


@dataclass(frozen=True)
class CommandSucceeded:
    stdout: str


@dataclass(frozen=True)
class CommandTimedOut:
    after_s: float


@dataclass(frozen=True)
class CommandFailed:
    returncode: int | None
    stderr: str


CommandOutcome = Union[CommandSucceeded, CommandTimedOut, CommandFailed]


@dataclass(frozen=True)
class Responsive:
    pass


@dataclass(frozen=True)
class Stale:
    after_s: float


@dataclass(frozen=True)
class ProbeError:
    cause: str


ProbeOutcome = Union[Responsive, Stale, ProbeError]
