from __future__ import annotations

from collections.abc import Sequence

from check_mountpoints.models.common import (
    CommandFailed,
    CommandTimedOut,
    ProbeError,
    ProbeOutcome,
    Responsive,
    Stale,
)
from check_mountpoints.services.command_service import Runner


class StaleProbe:
    def __init__(self, runner: Runner, timeout_s: float, df_args: Sequence[str] = ()) -> None:
        self.runner = runner
        self.timeout_s = float(timeout_s)
        self.df_args = tuple(df_args)

    def probe(self, path: str) -> ProbeOutcome:
        outcome = self.runner.run(["df", "-k", *self.df_args, path], self.timeout_s)
        if isinstance(outcome, CommandTimedOut):
            return Stale(after_s=outcome.after_s)
        if isinstance(outcome, CommandFailed):
            return ProbeError(cause=outcome.stderr or f"df exited with {outcome.returncode}")
        return Responsive()
