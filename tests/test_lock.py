import os
import pathlib
import signal

import pytest  # pyright: ignore [reportMissingImports]

from system_timezone.lock import AlreadyLockedError, LockGuard, exit_on_signal


@pytest.fixture
def marker(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "lock" / "subsys" / "system-timezone"


def test_acquire_creates_empty_marker(marker: pathlib.Path):
    guard = LockGuard(marker)
    assert not guard.is_locked
    guard.acquire()
    try:
        assert marker.is_file()
        assert marker.stat().st_size == 0
        assert guard.acquired
    finally:
        guard.release()
    assert not marker.exists()
    assert not guard.acquired


def test_release_is_idempotent(marker: pathlib.Path):
    guard = LockGuard(marker)
    guard.release()
    guard.acquire()
    guard.release()
    guard.release()
    assert not marker.exists()


def test_release_with_marker_already_gone(marker: pathlib.Path):
    guard = LockGuard(marker).acquire()
    marker.unlink()
    guard.release()
    assert not marker.exists()


def test_existing_marker_is_left_untouched(marker: pathlib.Path):
    marker.parent.mkdir(parents=True)
    marker.write_text("other instance")
    guard = LockGuard(marker)
    with pytest.raises(AlreadyLockedError):
        guard.acquire()
    guard.release()
    assert marker.read_text() == "other instance"


def test_second_guard_fails(marker: pathlib.Path):
    with LockGuard(marker):
        with pytest.raises(AlreadyLockedError):
            with LockGuard(marker):
                pass  # pragma: no cover
        assert marker.exists()
    assert not marker.exists()


def test_released_on_exception(marker: pathlib.Path):
    with pytest.raises(RuntimeError):
        with LockGuard(marker):
            assert marker.exists()
            raise RuntimeError("boom")
    assert not marker.exists()


def test_released_on_exit(marker: pathlib.Path):
    with pytest.raises(SystemExit):
        with LockGuard(marker):
            raise SystemExit(1)
    assert not marker.exists()


@pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGHUP, signal.SIGINT])
def test_released_on_signal(marker: pathlib.Path, signum: int):
    previous = signal.getsignal(signum)
    with pytest.raises(SystemExit) as exc_info:
        with LockGuard(marker):
            assert signal.getsignal(signum) is exit_on_signal
            os.kill(os.getpid(), signum)
            pytest.fail("signal was not handled")
    assert exc_info.value.code == 1
    assert not marker.exists()
    assert signal.getsignal(signum) == previous


def test_handlers_restored(marker: pathlib.Path):
    previous = signal.getsignal(signal.SIGTERM)
    with LockGuard(marker):
        assert signal.getsignal(signal.SIGTERM) is exit_on_signal
    assert signal.getsignal(signal.SIGTERM) == previous
