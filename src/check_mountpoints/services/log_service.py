from __future__ import annotations

import logging
import logging.handlers
import os
import sys

SYSLOG_ADDRESS = "/dev/log"

_FORMAT = "%(message)s"

# handlers set up by the previous call, replaced on the next one
_installed: list[logging.Handler] = []


def syslog_handler(ident: str, address: str = SYSLOG_ADDRESS) -> logging.Handler | None:
    # no syslog daemon on this host; plugin output is unaffected
    if not os.path.exists(address):
        return None
    try:
        handler = logging.handlers.SysLogHandler(
            address=address,
            facility=logging.handlers.SysLogHandler.LOG_KERN,
        )
    except OSError:
        return None
    handler.ident = f"{ident}[{os.getpid()}]: "
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


def setup_logging(verbose: bool, ident: str = "check_mountpoints", address: str = SYSLOG_ADDRESS) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    while _installed:
        old = _installed.pop()
        root.removeHandler(old)
        old.close()

    handler = syslog_handler(ident, address)
    if handler is not None:
        _installed.append(handler)

    if verbose:
        stderr = logging.StreamHandler(sys.stderr)
        stderr.setLevel(logging.DEBUG)
        stderr.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        _installed.append(stderr)

    if not _installed:
        # keeps logging.lastResort from writing warnings to stderr
        _installed.append(logging.NullHandler())

    for h in _installed:
        root.addHandler(h)
