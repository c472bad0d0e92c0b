""" Cooperative, non-blocking lock marker for cross-process exclusion """

import os
import pathlib
import signal
import sys
import threading
from typing import Any, Optional, Union

from system_timezone.configlib import Config, TimezoneError, ensure_folder

# termination requests turned into a regular exit so the marker gets removed
HANDLED_SIGNALS = [signal.SIGINT, signal.SIGTERM, signal.SIGHUP, signal.SIGQUIT]


class AlreadyLockedError(TimezoneError):
    ...


def exit_on_signal(signum, frame):
    Config.logger.debug(f"received signal {signum}, exiting")
    sys.exit(1)


class LockGuard:
    """Exclusive zero-byte marker file, held for the lifetime of a with block

    A second guard on the same marker fails immediately (no waiting).
    The marker is removed on every exit path including termination signals;
    only a SIGKILL leaves it behind."""

    def __init__(self, marker: Union[str, pathlib.Path]):
        self.marker = pathlib.Path(marker)
        self.acquired = False
        self._previous_handlers: dict[int, Any] = {}

    @property
    def is_locked(self) -> bool:
        """whether a marker (ours or not) is present"""
        return self.marker.exists()

    def acquire(self) -> "LockGuard":
        if self.acquired:
            return self
        if self.is_locked:
            raise AlreadyLockedError(f"lock marker exists: {self.marker}")
        ensure_folder(self.marker.parent)
        try:
            fd = os.open(self.marker, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError as exc:
            # lost the race against another instance
            raise AlreadyLockedError(f"lock marker exists: {self.marker}") from exc
        os.close(fd)
        self.acquired = True
        Config.logger.debug(f"acquired {self.marker}")
        self._install_handlers()
        return self

    def release(self):
        """removes our marker. Safe to call multiple times"""
        if self.acquired:
            self.marker.unlink(missing_ok=True)
            self.acquired = False
            Config.logger.debug(f"released {self.marker}")
        self._restore_handlers()

    def _install_handlers(self):
        # signal.signal() is only allowed from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in HANDLED_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, exit_on_signal)

    def _restore_handlers(self):
        while self._previous_handlers:
            signum, handler = self._previous_handlers.popitem()
            # None: handler was not set from python
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)

    def __enter__(self) -> "LockGuard":
        return self.acquire()

    def __exit__(self, exc_type, exc_value, traceback) -> Optional[bool]:
        self.release()
        return None
