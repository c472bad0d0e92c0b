import logging
import os
import pathlib
import sys
from typing import NoReturn

from attrs import define, field, frozen

TERM_COLORS = {"red": "31", "green": "32", "blue": "34"}
# above CRITICAL so that nothing gets through
SILENT_LEVEL = logging.CRITICAL + 10


def colored(text, color: str) -> str:
    """foreground-term-colored string"""
    value = TERM_COLORS.get(color, "39")
    return f"\033[{value}m{text}\033[39m"


logging.basicConfig(
    level=logging.INFO,
    format=f"{colored('%(name)s', 'blue')} %(levelname)s: %(message)s",
)


class TimezoneError(Exception):
    """Base for all errors ending an invocation"""


class NotPrivilegedError(TimezoneError):
    ...


@frozen
class TimezonePaths:
    """filesystem locations the tool reads from and writes to"""

    zoneinfo: pathlib.Path = field(
        default=pathlib.Path("/usr/share/zoneinfo"), converter=pathlib.Path
    )
    localtime: pathlib.Path = field(
        default=pathlib.Path("/etc/localtime"), converter=pathlib.Path
    )
    clock: pathlib.Path = field(
        default=pathlib.Path("/etc/sysconfig/clock"), converter=pathlib.Path
    )
    lock_marker: pathlib.Path = field(
        default=pathlib.Path("/var/lock/subsys/system-timezone"),
        converter=pathlib.Path,
    )


PATHS = TimezonePaths()


@define
class Config:
    name: str = "-"
    debug: bool = False
    verbosity: int = 0
    logger: logging.Logger = field(init=False)

    @classmethod
    def init(cls, name: str):
        cls.name = name
        cls.debug = False
        cls.verbosity = 0
        cls.logger = logging.getLogger(name)
        cls.apply_level()

    @classmethod
    def set_debug(cls, *, enabled: bool = False):
        cls.debug = bool(enabled)
        cls.apply_level()

    @classmethod
    def set_verbosity(cls, level: int = 0):
        """0: everything, 1 (quiet): no info, 2+ (silent): no info nor errors"""
        cls.verbosity = max(int(level), 0)
        cls.apply_level()

    @classmethod
    def apply_level(cls):
        if cls.verbosity >= 2:
            cls.logger.setLevel(SILENT_LEVEL)
        elif cls.verbosity == 1:
            cls.logger.setLevel(logging.WARNING)
        elif cls.debug:
            cls.logger.setLevel(logging.DEBUG)
        else:
            cls.logger.setLevel(logging.INFO)


def fail_error(message: str) -> NoReturn:
    Config.logger.error(colored(message, "red"))
    sys.exit(1)


def succeed(message: str) -> int:
    Config.logger.info(colored(message, "green"))
    return 0


def ensure_root():
    """raises NotPrivilegedError unless running with effective uid 0"""
    if os.geteuid() != 0:
        Config.logger.debug(f"euid={os.geteuid()}")
        raise NotPrivilegedError("must be run as root")


def get_progname() -> str:
    """human-friendly program name for use in usage help text"""
    try:
        return pathlib.Path(sys.argv[0]).stem
    except Exception:
        return sys.argv[0]


def ensure_folder(fpath: pathlib.Path):
    """ensures folder exists"""
    fpath.mkdir(exist_ok=True, parents=True)
