from __future__ import annotations

from check_mountpoints.models.common import CommandSucceeded
from check_mountpoints.services.command_service import Runner


class TypeProbe:
    def __init__(self, runner: Runner, timeout_s: float) -> None:
        self.runner = runner
        self.timeout_s = float(timeout_s)

    def fetch(self, path: str) -> str | None:
        outcome = self.runner.run(["stat", "-f", "--printf=%T", path], self.timeout_s)
        if not isinstance(outcome, CommandSucceeded):
            return None
        return outcome.stdout.strip()

    def probe(self, path: str, expected: str | None) -> tuple[bool | None, str | None]:
        """Return (match, message); (None, None) when nothing is expected."""
        if not expected:
            return None, None

        actual = self.fetch(path)
        if actual is None:
            return False, f"Fail to fetch FS type for {path}"
        if actual != expected:
            return False, f"Bad FS type for {path}. Got '{actual}' while '{expected}' was expected"
        return True, None
