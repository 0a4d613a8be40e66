from __future__ import annotations

import json

import pytest

from check_mountpoints.cli import UsageError, parse_arguments
from check_mountpoints.models.mounts import TableLayout, Thresholds
from check_mountpoints.services.config_service import (
    CONFIG_ENV,
    ConfigError,
    parse_thresholds,
    platform_profile,
)

LINUX = platform_profile("Linux")


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)


def test_defaults():
    config = parse_arguments(["/data"], LINUX)
    assert config.mountpoints == ("/data",)
    assert config.static_table == "/etc/fstab"
    assert config.live_table == "/proc/mounts"
    assert config.layout == TableLayout()
    assert config.stale_timeout == 3
    assert config.thresholds is None
    assert not config.autodiscover


def test_all_flags():
    config = parse_arguments(
        [
            "-m", "/tmp/mtab", "-f", "/tmp/fstab", "-N", "4", "-M", "3", "-O", "6",
            "-T", "7", "-L", "-i", "-w", "-o", "-E", "/srv", "-e=-l -x tmpfs",
            "-t", "nfs,,cifs", "-W", "80", "-C", "90", "/a", "/b",
        ],
        LINUX,
    )
    assert config.live_table == "/tmp/mtab"
    assert config.static_table == "/tmp/fstab"
    assert (config.layout.fs_type_field, config.layout.mount_field, config.layout.options_field) == (4, 3, 6)
    assert config.stale_timeout == 7
    assert config.accept_symlinks and config.ignore_fstab and config.write_test and config.respect_noauto
    assert config.exclude == "/srv"
    assert config.df_args == ("-l", "-x", "tmpfs")
    assert config.fs_types == ("nfs", "", "cifs")
    assert config.expected_fs_type(1) is None
    assert config.expected_fs_type(2) == "cifs"
    assert config.expected_fs_type(3) is None
    assert config.thresholds == Thresholds(warning=80, critical=90)
    assert config.mountpoints == ("/a", "/b")


def test_ok_if_empty_implies_autodiscovery():
    config = parse_arguments(["-A"], LINUX)
    assert config.autodiscover and config.ok_if_empty


def test_solaris_profile():
    config = parse_arguments(["-a"], platform_profile("SunOS"))
    assert config.static_table == "/etc/vfstab"
    assert config.live_table == "/etc/mnttab"
    assert config.noauto_marker == "no"
    assert (config.layout.fs_type_field, config.layout.mount_field, config.layout.options_field) == (4, 3, 6)


def test_freebsd_synthesizes_live_table():
    assert platform_profile("FreeBSD").live_table == "none"


@pytest.mark.parametrize(
    "warn,crit,message",
    [
        ("80", None, "You have defined only a warning threshold, you must define warning and critical threshold!"),
        (None, "90", "You have defined only a critical threshold, you must define warning and critical threshold!"),
        ("eighty", "90", "The warning threshold: 'eighty' is not an integer!"),
        ("80", "90%", "The critical threshold: '90%' is not an integer!"),
        ("95", "90", "The warning threshold: '95' is greater than the critical threshold: '90'."),
        ("-5", "90", "The warning threshold: '-5' must not be negative."),
    ],
)
def test_threshold_validation(warn, crit, message):
    with pytest.raises(ConfigError) as e:
        parse_thresholds(warn, crit)
    assert str(e.value) == message


def test_equal_thresholds_allowed():
    assert parse_thresholds("90", "90") == Thresholds(90, 90)


@pytest.mark.parametrize("argv", [["relative/path"], ["-X", "/a"], ["-T", "soon", "/a"]])
def test_usage_errors(argv):
    with pytest.raises(UsageError):
        parse_arguments(argv, LINUX)


def test_config_file_supplies_defaults(tmp_path):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"stale_timeout": 9, "warning": 70, "critical": 80, "bogus": 1}), encoding="utf-8")

    config = parse_arguments(["--config", str(cfg), "/a"], LINUX)
    assert config.stale_timeout == 9
    assert config.thresholds == Thresholds(70, 80)

    overridden = parse_arguments(["--config", str(cfg), "-T", "2", "/a"], LINUX)
    assert overridden.stale_timeout == 2


def test_config_file_from_environment(tmp_path, monkeypatch):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"write_test": True}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(cfg))

    assert parse_arguments(["/a"], LINUX).write_test


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_bad_config_file_ignored(tmp_path, content):
    cfg = tmp_path / "config.json"
    cfg.write_text(content, encoding="utf-8")
    assert parse_arguments(["--config", str(cfg), "/a"], LINUX).stale_timeout == 3


def test_negative_warning_rejected_from_command_line():
    with pytest.raises(ConfigError, match="must not be negative"):
        parse_arguments(["-W", "-5", "-C", "90", "/a"], LINUX)


@pytest.mark.parametrize("pattern", ["(unclosed", "[a-"])
def test_invalid_exclude_pattern_is_usage_error(pattern):
    with pytest.raises(UsageError, match="bad exclude pattern"):
        parse_arguments(["-a", "-E", pattern], LINUX)
