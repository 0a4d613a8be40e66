from __future__ import annotations

import logging
import os
import signal
from pathlib import Path
from types import FrameType, TracebackType
from typing import Any

from check_mountpoints.models.common import AbortCode

logger = logging.getLogger(__name__)


class Terminated(BaseException):
    """Raised from a signal handler to unwind the run through its cleanup path."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        self.signame = signal.Signals(signum).name
        super().__init__(self.signame)

    @property
    def exit_code(self) -> int:
        return int(AbortCode[self.signame])


class CleanupRegistry:
    """Files to remove when the run ends, however it ends."""

    def __init__(self) -> None:
        self._paths: dict[Path, None] = {}

    def track(self, path: str | os.PathLike[str]) -> None:
        self._paths[Path(path)] = None

    def release(self, path: str | os.PathLike[str]) -> None:
        self._paths.pop(Path(path), None)

    @property
    def pending(self) -> list[Path]:
        return list(self._paths)

    def cleanup(self) -> None:
        for p in list(self._paths):
            self._paths.pop(p, None)
            if not p.is_file():
                continue
            try:
                p.unlink()
                logger.info("Deleting file: '%s' was successful.", p)
            except OSError:
                logger.warning("Deleting file: '%s' was not successful.", p)

    def __enter__(self) -> CleanupRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()


class SignalGuard:
    signals = (signal.SIGTERM, signal.SIGINT, signal.SIGHUP)

    def __init__(self) -> None:
        self._previous: dict[int, Any] = {}

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        raise Terminated(signum)

    def __enter__(self) -> SignalGuard:
        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()
