from __future__ import annotations

import os
import signal
import time

import pytest

from check_mountpoints.models.common import AbortCode
from check_mountpoints.services.cleanup_service import CleanupRegistry, SignalGuard, Terminated


def test_registry_removes_tracked_files_on_exit(tmp_path):
    marker = tmp_path / ".mount_test_from_host"
    released = tmp_path / "keep"
    marker.touch()
    released.touch()

    with pytest.raises(RuntimeError):
        with CleanupRegistry() as cleanup:
            cleanup.track(marker)
            cleanup.track(released)
            cleanup.track(tmp_path / "never-created")
            cleanup.release(released)
            raise RuntimeError("boom")

    assert not marker.exists()
    assert released.exists()
    assert cleanup.pending == []


@pytest.mark.parametrize(
    "sig,code",
    [
        (signal.SIGTERM, AbortCode.SIGTERM),
        (signal.SIGINT, AbortCode.SIGINT),
        (signal.SIGHUP, AbortCode.SIGHUP),
    ],
)
def test_signal_guard_raises_terminated(sig, code):
    previous = signal.getsignal(sig)
    with pytest.raises(Terminated) as e:
        with SignalGuard():
            os.kill(os.getpid(), sig)
            time.sleep(5)

    assert e.value.exit_code == code
    assert signal.getsignal(sig) == previous


def test_terminated_is_not_an_exception():
    assert not issubclass(Terminated, Exception)
