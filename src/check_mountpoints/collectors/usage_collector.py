from __future__ import annotations

import logging

from check_mountpoints.models.common import CommandSucceeded, State
from check_mountpoints.models.mounts import Thresholds, UsageReport, UsageSample
from check_mountpoints.services.command_service import Runner

logger = logging.getLogger(__name__)


def parse_df_portable(stdout: str) -> UsageSample | None:
    """Read available space and use% from the last line of ``df -h -P``."""
    lines = [line for line in stdout.splitlines() if line.strip()]
    if not lines:
        return None

    parts = lines[-1].split()
    if len(parts) < 6:
        return None

    available = parts[3]
    try:
        used_percent = int(parts[4].rstrip("%"))
    except ValueError:
        return None
    return UsageSample(available=available, used_percent=used_percent)


def classify(used_percent: int, thresholds: Thresholds | None) -> State:
    if thresholds is None:
        return State.OK
    if used_percent > thresholds.critical:
        return State.CRITICAL
    if used_percent > thresholds.warning:
        return State.WARNING
    return State.OK


def perf_tokens(path: str, sample: UsageSample, thresholds: Thresholds | None) -> tuple[str, str]:
    levels = f"{thresholds.warning};{thresholds.critical}" if thresholds else ";"
    return (
        f"'{path}_space_avail'={sample.available};;;;",
        f"'{path}_used_percent'={sample.used_percent}%;{levels};;",
    )


def info_line(path: str, sample: UsageSample, verdict: State, thresholds: Thresholds | None) -> str:
    values = f"(space_avail={sample.available}, used_percent={sample.used_percent}%)"
    if thresholds is None:
        return f"OK: Mountpoint: '{path}' {values}"
    if verdict is State.CRITICAL:
        return f"CRIT: Mountpoint: '{path}' used percent is higher than critical threshold {values}"
    if verdict is State.WARNING:
        return f"WARN: Mountpoint: '{path}' used percent is higher than warning threshold {values}"
    return f"OK: Mountpoint: '{path}' used percent is less than warning threshold {values}"


class UsageCollector:
    def __init__(self, runner: Runner, thresholds: Thresholds | None, timeout_s: float) -> None:
        self.runner = runner
        self.thresholds = thresholds
        self.timeout_s = float(timeout_s)

    def aggregate(self, path: str) -> UsageReport | None:
        outcome = self.runner.run(["df", "-h", "-P", path], self.timeout_s)
        if not isinstance(outcome, CommandSucceeded):
            logger.debug("usage query for %s failed: %s", path, outcome)
            return None

        sample = parse_df_portable(outcome.stdout)
        if sample is None:
            logger.debug("unparsable df output for %s: %r", path, outcome.stdout)
            return None

        verdict = classify(sample.used_percent, self.thresholds)
        return UsageReport(
            sample=sample,
            verdict=verdict,
            perf_tokens=perf_tokens(path, sample, self.thresholds),
            info_line=info_line(path, sample, verdict, self.thresholds),
        )
