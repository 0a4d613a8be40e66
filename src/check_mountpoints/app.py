from __future__ import annotations

import contextlib
import faulthandler
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from check_mountpoints.cli import parse_arguments, usage_text
from check_mountpoints.collectors.live_table_collector import LiveTableCollector
from check_mountpoints.collectors.static_table_collector import StaticTableCollector
from check_mountpoints.collectors.usage_collector import UsageCollector
from check_mountpoints.collectors.volume_collector import ZfsVolumeCollector
from check_mountpoints.models.common import AbortCode, State
from check_mountpoints.models.mounts import MountTable
from check_mountpoints.probes.stale_probe import StaleProbe
from check_mountpoints.probes.type_probe import TypeProbe
from check_mountpoints.probes.write_probe import WriteProbe
from check_mountpoints.services.check_service import CheckOrchestrator
from check_mountpoints.services.cleanup_service import CleanupRegistry, SignalGuard, Terminated
from check_mountpoints.services.command_service import CommandRunner, Runner
from check_mountpoints.services.config_service import (
    CheckConfig,
    ConfigError,
    PlatformProfile,
)
from check_mountpoints.services.log_service import setup_logging
from check_mountpoints.services.report_service import Report, ReportService
from check_mountpoints.services.selection_service import MountSelector

logger = logging.getLogger(__name__)


def _static_table_required(config: CheckConfig) -> bool:
    # explicit paths with the fstab check off never look at the static table
    if config.autodiscover:
        return True
    return not config.ignore_fstab and not Path(config.vz_marker).is_file()


def check(
    config: CheckConfig,
    runner: Runner,
    cleanup: CleanupRegistry,
    profile: PlatformProfile | None = None,
) -> Report:
    reporter = ReportService()

    try:
        static_table = StaticTableCollector(config.static_table, config.layout).collect()
    except OSError as e:
        if _static_table_required(config):
            logger.error("CRIT: %s is not readable: %s", config.static_table, e)
            return Report(State.CRITICAL, f"CRIT: {config.static_table} is not readable: {e}\n")
        logger.debug("%s not readable, not needed for this run: %s", config.static_table, e)
        static_table = MountTable(source=config.static_table, records=())

    volumes = ZfsVolumeCollector(runner, config.kernel, config.zfs_command)
    if volumes.available():
        static_table = static_table.extended(volumes.collect())

    selector = MountSelector(
        exclude=config.exclude,
        respect_noauto=config.respect_noauto,
        noauto_marker=config.noauto_marker,
    )
    candidates = selector.select(config.autodiscover, static_table, config.mountpoints)

    if not candidates:
        if config.autodiscover and config.ok_if_empty:
            return reporter.empty_autodiscovery(static_table.source)
        logger.error("ERROR: no mountpoints given!")
        return Report(State.UNKNOWN, f"ERROR: no mountpoints given!\n{usage_text(profile)}")

    live = LiveTableCollector(config.live_table)
    if not live.available():
        logger.error("CRIT: %s doesn't exist!", config.live_table)
        return Report(State.CRITICAL, f"CRIT: {config.live_table} doesn't exist!\n")
    try:
        live_table = live.collect()
    except OSError as e:
        logger.error("CRIT: %s is not readable: %s", config.live_table, e)
        return Report(State.CRITICAL, f"CRIT: {config.live_table} is not readable: {e}\n")

    timeout = config.stale_timeout
    orchestrator = CheckOrchestrator(
        config=config,
        static_table=static_table,
        live_table=live_table,
        stale_probe=StaleProbe(runner, timeout, config.df_args),
        write_probe=WriteProbe(runner, cleanup, timeout),
        type_probe=TypeProbe(runner, timeout),
        usage=UsageCollector(runner, config.thresholds, timeout),
    )
    aggregate = orchestrator.run(candidates)

    return reporter.build_report(
        aggregate=aggregate,
        mountpoints=[c.path for c in candidates],
        thresholds_defined=config.thresholds_defined,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    runner: Runner | None = None,
    profile: PlatformProfile | None = None,
    out: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    argv = sys.argv[1:] if argv is None else argv

    try:
        # argparse writes -h/-V output to sys.stdout and then exits
        with contextlib.redirect_stdout(out):
            config = parse_arguments(argv, profile)
    except ConfigError as e:
        out.write(f"{e}\n\n{usage_text(profile)}")
        return int(State.UNKNOWN)
    except SystemExit as e:
        return int(State.OK) if not e.code else int(State.UNKNOWN)

    setup_logging(config.verbose)
    runner = runner or CommandRunner()

    with CleanupRegistry() as cleanup, SignalGuard():
        try:
            report = check(config, runner, cleanup, profile)
        except Terminated as e:
            logger.warning("Caught %s, exiting script...", e.signame)
            return e.exit_code
        except Exception:
            logger.exception("Caught unexpected error, exiting script...")
            return int(AbortCode.INTERNAL_ERROR)

    out.write(report.text)
    return int(report.state)


def run() -> None:
    faulthandler.enable()
    raise SystemExit(main())
