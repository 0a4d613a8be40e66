from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from check_mountpoints.models.aggregate import AggregateState
from check_mountpoints.models.common import State

ERROR_SEPARATOR = " ; "


@dataclass(frozen=True)
class Report:
    state: State
    text: str


class ReportService:
    def build_report(
        self,
        *,
        aggregate: AggregateState,
        mountpoints: Sequence[str],
        thresholds_defined: bool,
    ) -> Report:
        if aggregate.error_messages:
            return self.errors(aggregate.error_messages)

        state, summary = self._summary(aggregate, ", ".join(mountpoints), thresholds_defined)
        lines = [summary, *aggregate.info_lines, "| " + " ".join(aggregate.perf_tokens)]
        return Report(state=state, text="\n".join(lines) + "\n")

    def errors(self, messages: Sequence[str]) -> Report:
        return Report(
            state=State.CRITICAL,
            text="CRITICAL: " + ERROR_SEPARATOR.join(messages) + "\n",
        )

    def empty_autodiscovery(self, table: str) -> Report:
        return Report(state=State.OK, text=f"OK: no external mounts were found in {table}\n")

    def _summary(self, aggregate: AggregateState, mps: str, thresholds_defined: bool) -> tuple[State, str]:
        if aggregate.crit_count > 0:
            state, tail = State.CRITICAL, "but critical threshold exceeded."
        elif aggregate.warn_count > 0:
            state, tail = State.WARNING, "but warning threshold exceeded."
        elif thresholds_defined:
            state, tail = State.OK, "no thresholds exceeded."
        else:
            state, tail = State.OK, "no thresholds defined."
        return state, f"{state.label}: All mounts ({mps}) were found, {tail}"
