from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from typing import Protocol

import psutil

from check_mountpoints.models.common import (
    CommandFailed,
    CommandOutcome,
    CommandSucceeded,
    CommandTimedOut,
)

logger = logging.getLogger(__name__)


class Runner(Protocol):
    def run(self, cmd: Sequence[str], timeout_s: float) -> CommandOutcome:
        ...


class CommandRunner:
    """Run an external command bounded by a deadline.

    On expiry the command and its children get SIGTERM, then SIGKILL once
    ``grace_s`` has passed. A command stuck in uninterruptible sleep (the
    usual stale NFS case) may survive both; it is abandoned rather than
    waited for.
    """

    def __init__(self, grace_s: float = 1.0) -> None:
        self.grace_s = float(grace_s)
        self.env = {**os.environ, "LANG": "C", "LC_ALL": "C"}

    def run(self, cmd: Sequence[str], timeout_s: float) -> CommandOutcome:
        argv = [str(c) for c in cmd]
        logger.debug("running %s (timeout %ss)", argv, timeout_s)
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=self.env,
            )
        except OSError as e:
            return CommandFailed(returncode=None, stderr=str(e))

        try:
            out, err = proc.communicate(timeout=timeout_s)
        except subprocess.TimeoutExpired:
            logger.debug("%s timed out after %ss", argv[0], timeout_s)
            self._terminate(proc)
            return CommandTimedOut(after_s=timeout_s)
        except BaseException:
            self._terminate(proc)
            raise

        if proc.returncode != 0:
            return CommandFailed(returncode=proc.returncode, stderr=err.strip())
        return CommandSucceeded(stdout=out)

    def _terminate(self, proc: subprocess.Popen[str]) -> None:
        try:
            parent = psutil.Process(proc.pid)
            procs = [parent, *parent.children(recursive=True)]
        except psutil.NoSuchProcess:
            procs = []

        for p in procs:
            try:
                p.terminate()
            except psutil.NoSuchProcess:
                continue

        _gone, alive = psutil.wait_procs(procs, timeout=self.grace_s)
        for p in alive:
            try:
                p.kill()
            except psutil.NoSuchProcess:
                continue

        try:
            proc.communicate(timeout=self.grace_s)
        except subprocess.TimeoutExpired:
            logger.warning("pid %d did not exit after SIGKILL, abandoning it", proc.pid)
