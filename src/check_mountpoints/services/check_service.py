from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from check_mountpoints.collectors.usage_collector import UsageCollector
from check_mountpoints.models.aggregate import AggregateState
from check_mountpoints.models.common import ProbeError, Stale
from check_mountpoints.models.mounts import CandidateSource, CheckResult, MountCandidate, MountTable
from check_mountpoints.probes.stale_probe import StaleProbe
from check_mountpoints.probes.type_probe import TypeProbe
from check_mountpoints.probes.write_probe import WriteProbe
from check_mountpoints.services.config_service import CheckConfig

logger = logging.getLogger(__name__)


class CheckOrchestrator:
    """Runs the per-mount pipeline and accumulates into one AggregateState.

    For each candidate, in order: static table presence, live table
    presence, stale probe, then (unless stale) existence, write and type
    checks, and finally usage, which always runs.
    """

    def __init__(
        self,
        config: CheckConfig,
        static_table: MountTable,
        live_table: MountTable,
        stale_probe: StaleProbe,
        write_probe: WriteProbe,
        type_probe: TypeProbe,
        usage: UsageCollector,
    ) -> None:
        self.config = config
        self.static_table = static_table
        self.live_table = live_table
        self.stale_probe = stale_probe
        self.write_probe = write_probe
        self.type_probe = type_probe
        self.usage = usage

    def run(self, candidates: Sequence[MountCandidate]) -> AggregateState:
        state = AggregateState()
        for index, candidate in enumerate(candidates):
            state.results.append(self.check_mount(state, candidate, index))
        return state

    def check_mount(self, state: AggregateState, candidate: MountCandidate, index: int) -> CheckResult:
        mp = candidate.path
        result = CheckResult(path=mp)

        if self._fstab_check_enabled(candidate):
            if mp not in self.static_table:
                result.in_static_table = False
                logger.warning("CRIT: %s doesn't exist in %s", mp, self.static_table.source)
                state.add_error(result, f"{mp} doesn't exist in fstab {self.static_table.source}")

        if mp not in self.live_table:
            if self.config.accept_symlinks and os.path.islink(mp):
                logger.debug("%s is not mounted but accepted as a softlink", mp)
            else:
                result.is_live_mounted = False
                logger.warning("CRIT: %s is not mounted", mp)
                state.add_error(result, f"{mp} is not mounted")

        outcome = self.stale_probe.probe(mp)
        if isinstance(outcome, Stale):
            result.stale = True
            logger.warning("CRIT: %s did not respond in %g sec", mp, outcome.after_s)
            state.add_error(
                result, f"{mp} did not respond in {self.config.stale_timeout} sec. Seems to be stale."
            )
        else:
            if isinstance(outcome, ProbeError):
                logger.debug("df on %s failed: %s", mp, outcome.cause)
            self._check_on_filesystem(state, result, candidate, index)

        report = self.usage.aggregate(mp)
        if report is None:
            if not result.messages:
                logger.warning("CRIT: Failed to fetch usage for %s", mp)
                state.add_error(result, f"Failed to fetch usage for {mp}")
        else:
            result.usage = report.sample
            state.add_usage(report)

        return result

    def _fstab_check_enabled(self, candidate: MountCandidate) -> bool:
        if Path(self.config.vz_marker).is_file():
            return False
        if candidate.source is CandidateSource.AUTODISCOVERED:
            return False
        return not self.config.ignore_fstab

    def _check_on_filesystem(
        self,
        state: AggregateState,
        result: CheckResult,
        candidate: MountCandidate,
        index: int,
    ) -> None:
        mp = candidate.path
        if not os.path.isdir(mp):
            logger.warning("CRIT: %s doesn't exist on filesystem", mp)
            state.add_error(result, f"{mp} doesn't exist on filesystem")
            return
        result.exists_on_fs = True

        if self.config.write_test:
            if self._mounted_read_only(candidate):
                result.write_ok = False
                logger.warning("CRIT: %s is not mounted as writable.", mp)
                state.add_error(result, f"Could not write in {mp} filesystem was mounted RO.")
            else:
                result.write_ok, message = self.write_probe.probe(mp)
                if message:
                    state.add_error(result, message)

        result.fs_type_match, message = self.type_probe.probe(mp, self.config.expected_fs_type(index))
        if message:
            logger.warning("CRIT: %s", message)
            state.add_error(result, message)

    def _mounted_read_only(self, candidate: MountCandidate) -> bool:
        if candidate.source is not CandidateSource.AUTODISCOVERED:
            return False
        rec = self.static_table.find(candidate.path)
        return rec is not None and "ro" in rec.options
