from __future__ import annotations

import logging
import os
import random
import socket
from datetime import datetime
from pathlib import Path

from check_mountpoints.models.common import CommandTimedOut
from check_mountpoints.services.cleanup_service import CleanupRegistry
from check_mountpoints.services.command_service import Runner

logger = logging.getLogger(__name__)


def marker_name(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return (
        f".mount_test_from_{socket.gethostname()}"
        f"_{now:%Y-%m-%d--%H-%M-%S}.{random.randint(0, 32767)}.{os.getpid()}"
    )


class WriteProbe:
    def __init__(self, runner: Runner, cleanup: CleanupRegistry, timeout_s: float) -> None:
        self.runner = runner
        self.cleanup = cleanup
        self.timeout_s = float(timeout_s)

    def probe(self, path: str) -> tuple[bool, str | None]:
        """Return (writable, message)."""
        marker = Path(path) / marker_name()
        self.cleanup.track(marker)

        outcome = self.runner.run(["touch", str(marker)], self.timeout_s)
        if isinstance(outcome, CommandTimedOut):
            # a stat on the hung mount at exit would block without a deadline
            self.cleanup.release(marker)
            logger.warning("CRIT: %s is not writable.", marker)
            return False, f"Could not write in {path} in {self.timeout_s:g} sec. Seems to be stale."

        if not marker.is_file():
            self.cleanup.release(marker)
            logger.warning("CRIT: %s is not writable.", marker)
            return False, f"Could not write in {path}."

        try:
            marker.unlink()
            self.cleanup.release(marker)
        except OSError as e:
            # left tracked so the exit cleanup gets another go
            logger.debug("removing %s failed: %s", marker, e)
        return True, None
