import os
import pathlib

import pytest  # pyright: ignore [reportMissingImports]

from system_timezone.configlib import Config, TimezonePaths
from system_timezone.timezone import NAME

ZONES = ["UTC", "Etc/UTC", "Europe/London", "Europe/Paris", "America/New_York"]


@pytest.fixture(autouse=True)
def reset_config():
    Config.init(NAME)
    yield
    Config.init(NAME)


@pytest.fixture
def zoneinfo(tmp_path: pathlib.Path) -> pathlib.Path:
    root = tmp_path / "usr" / "share" / "zoneinfo"
    for zone in ZONES:
        path = root.joinpath(zone)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"TZif2")
    return root


@pytest.fixture
def paths(tmp_path: pathlib.Path, zoneinfo: pathlib.Path) -> TimezonePaths:
    etc = tmp_path / "etc"
    etc.mkdir()
    (etc / "localtime").symlink_to(zoneinfo / "UTC")
    return TimezonePaths(
        zoneinfo=zoneinfo,
        localtime=etc / "localtime",
        clock=etc / "sysconfig" / "clock",
        lock_marker=tmp_path / "var" / "lock" / "subsys" / "system-timezone",
    )


@pytest.fixture
def clock_file(paths: TimezonePaths) -> pathlib.Path:
    paths.clock.parent.mkdir(parents=True, exist_ok=True)
    paths.clock.write_text('# managed\nZONE="UTC"\nUTC=true\n')
    return paths.clock


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)
