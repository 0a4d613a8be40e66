from __future__ import annotations

from dataclasses import dataclass, field

from check_mountpoints.models.common import State
from check_mountpoints.models.mounts import CheckResult, UsageReport


@dataclass
class AggregateState:
    error_messages: list[str] = field(default_factory=list)
    warn_count: int = 0
    crit_count: int = 0
    perf_tokens: list[str] = field(default_factory=list)
    info_lines: list[str] = field(default_factory=list)
    results: list[CheckResult] = field(default_factory=list)

    def add_error(self, result: CheckResult, message: str) -> None:
        result.messages.append(message)
        self.error_messages.append(message)

    def add_usage(self, report: UsageReport) -> None:
        if report.verdict is State.CRITICAL:
            self.crit_count += 1
        elif report.verdict is State.WARNING:
            self.warn_count += 1
        self.perf_tokens.extend(report.perf_tokens)
        self.info_lines.append(report.info_line)
