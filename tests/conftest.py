from __future__ import annotations

from pathlib import Path

import pytest

from helpers import FakeRunner, df_handler, touch_handler


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner({"df": df_handler(), "touch": touch_handler})


@pytest.fixture
def mounts(tmp_path: Path) -> list[str]:
    paths = []
    for name in ("data", "backup", "share"):
        p = tmp_path / "mnt" / name
        p.mkdir(parents=True)
        paths.append(str(p))
    return paths
