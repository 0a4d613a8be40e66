from __future__ import annotations

import argparse
import dataclasses
import logging
import re
import shlex
from collections.abc import Sequence
from typing import NoReturn

from check_mountpoints.services.config_service import (
    CheckConfig,
    ConfigError,
    ConfigService,
    PlatformProfile,
    parse_fs_types,
    parse_thresholds,
    platform_profile,
)
from check_mountpoints.services.selection_service import compile_exclude

logger = logging.getLogger(__name__)

PROG = "check_mountpoints"
VERSION = "3.0.0"

DESCRIPTION = "Check if nfs/cifs/davfs/zfs/btrfs mountpoints are correctly implemented and mounted."


class UsageError(ConfigError):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser(profile: PlatformProfile) -> argparse.ArgumentParser:
    layout = profile.layout
    parser = _Parser(prog=PROG, description=DESCRIPTION)
    parser.add_argument(
        "mountpoints",
        nargs="*",
        metavar="MOUNTPOINT",
        help="list of mountpoints to check. Ignored when -a is given",
    )
    parser.add_argument(
        "-m",
        dest="live_table",
        metavar="FILE",
        default=profile.live_table,
        help=f"Use this mtab instead (default: {profile.live_table})",
    )
    parser.add_argument(
        "-f",
        dest="static_table",
        metavar="FILE",
        default=profile.static_table,
        help=f"Use this fstab instead (default: {profile.static_table})",
    )
    parser.add_argument(
        "-N",
        dest="fs_field",
        type=int,
        metavar="NUMBER",
        default=layout.fs_type_field,
        help=f"FS Field number in fstab (default: {layout.fs_type_field})",
    )
    parser.add_argument(
        "-M",
        dest="mount_field",
        type=int,
        metavar="NUMBER",
        default=layout.mount_field,
        help=f"Mount Field number in fstab (default: {layout.mount_field})",
    )
    parser.add_argument(
        "-O",
        dest="options_field",
        type=int,
        metavar="NUMBER",
        default=layout.options_field,
        help=f"Option Field number in fstab (default: {layout.options_field})",
    )
    parser.add_argument(
        "-T",
        dest="stale_timeout",
        type=int,
        metavar="SECONDS",
        default=3,
        help="Responsetime at which an NFS is declared as staled (default: 3)",
    )
    parser.add_argument(
        "-L",
        dest="accept_symlinks",
        action="store_true",
        help="Allow softlinks to be accepted instead of mount points",
    )
    parser.add_argument(
        "-i",
        dest="ignore_fstab",
        action="store_true",
        help="Ignore fstab. Do not fail just because mount is not in fstab.",
    )
    parser.add_argument(
        "-a",
        dest="autodiscover",
        action="store_true",
        help="Autoselect mounts from fstab",
    )
    parser.add_argument(
        "-A",
        dest="ok_if_empty",
        action="store_true",
        help="Autoselect from fstab. Return OK if no mounts found.",
    )
    parser.add_argument(
        "-E",
        dest="exclude",
        metavar="PATTERN",
        help=r"Use with -a or -A to exclude paths matching this regular expression. '\|' separates alternatives.",
    )
    parser.add_argument(
        "-o",
        dest="respect_noauto",
        action="store_true",
        help="When autoselecting mounts from fstab, ignore mounts having noauto flag.",
    )
    parser.add_argument(
        "-w",
        dest="write_test",
        action="store_true",
        help="Writetest. Touch file $mountpoint/.mount_test_from_$(hostname)",
    )
    parser.add_argument(
        "-e",
        dest="df_args",
        metavar="ARGS",
        default="",
        help="Extra arguments for df",
    )
    parser.add_argument(
        "-t",
        dest="fs_types",
        metavar="FS_TYPE",
        help="FS Type to check for using stat. Multiple values should be separated with commas",
    )
    parser.add_argument("-W", dest="warning", metavar="PERCENT", help="Warning threshold of used_percent")
    parser.add_argument("-C", dest="critical", metavar="PERCENT", help="Critical threshold of used_percent")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="JSON file with option defaults (default: $CHECK_MOUNTPOINTS_CONFIG)",
    )
    parser.add_argument("-V", "--version", action="version", version=f"{PROG} v{VERSION}")
    return parser


def _config_defaults(argv: Sequence[str], parser: argparse.ArgumentParser) -> dict[str, object]:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config")
    known, _rest = pre.parse_known_args(list(argv))

    raw = ConfigService.from_env_or_arg(known.config).load()
    dests = {a.dest for a in parser._actions}
    defaults: dict[str, object] = {}
    for key, value in raw.items():
        if key not in dests or key in ("help", "version", "config"):
            logger.warning("unknown config key %r ignored", key)
            continue
        defaults[key] = value
    return defaults


def parse_arguments(argv: Sequence[str], profile: PlatformProfile | None = None) -> CheckConfig:
    profile = profile or platform_profile()
    parser = build_parser(profile)
    parser.set_defaults(**_config_defaults(argv, parser))
    args = parser.parse_args(list(argv))

    for mp in args.mountpoints:
        if not str(mp).startswith("/"):
            raise UsageError(f"mountpoint must be an absolute path: {mp}")

    thresholds = parse_thresholds(
        None if args.warning is None else str(args.warning),
        None if args.critical is None else str(args.critical),
    )

    layout = dataclasses.replace(
        profile.layout,
        fs_type_field=int(args.fs_field),
        mount_field=int(args.mount_field),
        options_field=int(args.options_field),
    )

    try:
        df_args = tuple(shlex.split(str(args.df_args or "")))
    except ValueError as e:
        raise UsageError(f"bad df arguments {args.df_args!r}: {e}") from e

    try:
        compile_exclude(args.exclude)
    except re.error as e:
        raise UsageError(f"bad exclude pattern {args.exclude!r}: {e}") from e

    return CheckConfig(
        mountpoints=tuple(args.mountpoints),
        kernel=profile.kernel,
        static_table=str(args.static_table),
        live_table=str(args.live_table),
        layout=layout,
        noauto_marker=profile.noauto_marker,
        stale_timeout=int(args.stale_timeout),
        accept_symlinks=bool(args.accept_symlinks),
        ignore_fstab=bool(args.ignore_fstab),
        autodiscover=bool(args.autodiscover or args.ok_if_empty),
        ok_if_empty=bool(args.ok_if_empty),
        exclude=args.exclude or None,
        respect_noauto=bool(args.respect_noauto),
        write_test=bool(args.write_test),
        df_args=df_args,
        fs_types=parse_fs_types(args.fs_types),
        thresholds=thresholds,
        verbose=bool(args.verbose),
    )


def usage_text(profile: PlatformProfile | None = None) -> str:
    return build_parser(profile or platform_profile()).format_usage()
