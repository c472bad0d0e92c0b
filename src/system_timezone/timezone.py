#!/usr/bin/env python3

""" Reports or sets machine's timezone (using /etc/localtime symlink) """

import argparse
import os
import pathlib
import re
import sys
from typing import NoReturn, Optional

from system_timezone.__about__ import __version__
from system_timezone.checks import is_valid_zone, zone_path
from system_timezone.configlib import (
    PATHS,
    Config,
    NotPrivilegedError,
    TimezoneError,
    TimezonePaths,
    ensure_root,
    fail_error,
    get_progname,
    succeed,
)
from system_timezone.lock import AlreadyLockedError, LockGuard

NAME = "system-timezone"
RE_CLOCK_ZONE = re.compile(
    r"^(?P<prefix>[ \t]*ZONE[ \t]*=[ \t]*)(?P<value>.*?)[ \t]*$"
)

Config.init(NAME)
logger = Config.logger


class InvalidZoneError(TimezoneError):
    ...


class CorruptLinkError(TimezoneError):
    ...


class WriteFailureError(TimezoneError):
    ...


def link_target(link: pathlib.Path) -> pathlib.Path:
    """absolute, normalized target of symlink (single hop)"""
    target = pathlib.Path(os.readlink(link))
    if not target.is_absolute():
        target = link.parent / target
    return pathlib.Path(os.path.normpath(target))


def read_current(paths: TimezonePaths = PATHS) -> str:
    """zone identifier currently pointed to by the localtime link"""
    link = paths.localtime
    if not link.is_symlink():
        if link.exists():
            raise CorruptLinkError(f"{link} is not a symbolic link")
        raise CorruptLinkError(f"{link} is missing")

    try:
        target = link_target(link)
    except OSError as exc:
        raise CorruptLinkError(f"unable to read {link}: {exc}") from exc
    logger.debug(f"{link} -> {target}")

    root = pathlib.Path(os.path.normpath(paths.zoneinfo))
    try:
        zone = target.relative_to(root).as_posix()
    except ValueError:
        # zoneinfo might be reached through another link (/usr/share vs /usr/lib)
        try:
            zone = target.resolve().relative_to(root.resolve()).as_posix()
        except (ValueError, OSError):
            raise CorruptLinkError(
                f"{link} points outside of {paths.zoneinfo}: {target}"
            ) from None

    try:
        is_valid_zone(zone, paths.zoneinfo).raise_for_status()
    except ValueError as exc:
        raise CorruptLinkError(
            f"{link} points to invalid zone “{zone}”: {exc}"
        ) from None
    return zone


def update_clock_file(zone: str, clock: pathlib.Path) -> bool:
    """rewrite ZONE= line of a sysconfig clock file, if any. Returns whether changed

    Other lines are left untouched and value quoting is preserved"""
    if not clock.exists():
        return False

    # newline="" keeps CRLF endings as they are
    with open(clock, "r", newline="") as fh:
        lines = fh.read().splitlines(keepends=True)
    changed = False
    for index, line in enumerate(lines):
        body = line.rstrip("\r\n")
        match = RE_CLOCK_ZONE.match(body)
        if not match:
            continue
        value = match.group("value")
        quote = value[0] if value[:1] in ("'", '"') else ""
        ending = line[len(body) :]
        lines[index] = f"{match.group('prefix')}{quote}{zone}{quote}{ending}"
        changed = True

    if changed:
        with open(clock, "w", newline="") as fh:
            fh.write("".join(lines))
        logger.debug(f"updated {clock}")
    return changed


def replace_link(link: pathlib.Path, target: pathlib.Path):
    """atomically (re)point link at target, replacing whatever link was"""
    tmp_link = link.with_name(f".{link.name}.{os.getpid()}.tmp")
    tmp_link.unlink(missing_ok=True)
    tmp_link.symlink_to(target)
    try:
        os.replace(tmp_link, link)
    except OSError:
        tmp_link.unlink(missing_ok=True)
        raise


def apply_zone(zone: str, paths: TimezonePaths = PATHS):
    """point localtime (and legacy clock file) to a validated zone"""
    target = zone_path(zone, paths.zoneinfo)
    if target is None:
        raise InvalidZoneError(f"invalid zone: {zone}")

    try:
        update_clock_file(zone, paths.clock)
        replace_link(paths.localtime, target)
    except OSError as exc:
        raise WriteFailureError(f"unable to set timezone to {zone}: {exc}") from exc
    logger.debug(f"{paths.localtime} -> {target}")


def confirm_zone(zone: str, paths: TimezonePaths = PATHS):
    """raises WriteFailureError unless localtime now reads as zone"""
    try:
        current = read_current(paths)
    except CorruptLinkError as exc:
        raise WriteFailureError(f"unable to confirm timezone: {exc}") from exc
    if current != zone:
        raise WriteFailureError(
            f"timezone mismatch after write: expected {zone}, found {current}"
        )


def run(zone: Optional[str], paths: TimezonePaths) -> int:
    """read or set zone. Expects to be called while holding the lock"""
    if zone is None:
        try:
            print(read_current(paths), flush=True)
        except CorruptLinkError as exc:
            fail_error(f"corrupt link: {exc}")
        return 0

    logger.debug(f"Configuring timezone for `{zone}`")
    check = is_valid_zone(zone, paths.zoneinfo)
    if not check.passed:
        logger.debug(check.help_text)
        fail_error(f"invalid zone: {zone}")

    try:
        apply_zone(zone, paths)
        confirm_zone(zone, paths)
    except TimezoneError as exc:
        fail_error(str(exc))

    return succeed(f"Timezone set to {zone}")


def main(zone: Optional[str] = None, paths: TimezonePaths = PATHS) -> int:
    try:
        ensure_root()
    except NotPrivilegedError as exc:
        fail_error(str(exc))

    try:
        with LockGuard(paths.lock_marker):
            return run(zone, paths)
    except AlreadyLockedError as exc:
        logger.debug(exc)
        fail_error("lock detected - aborting")


class ArgumentParser(argparse.ArgumentParser):
    """prints full help (not just usage) on error, exiting with 1"""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def entrypoint():
    parser = ArgumentParser(
        prog=get_progname(), description="Report or set system's timezone"
    )
    parser.add_argument("-V", "--version", action="version", version=__version__)
    parser.add_argument("--debug", action="store_true", dest="debug")
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        dest="verbosity",
        help="Suppress informational messages. Repeat (-qq) to also hide errors",
    )
    parser.add_argument(
        "--silent",
        action="store_const",
        const=2,
        default=0,
        dest="silent",
        help="Suppress informational and error messages (same as -qq)",
    )
    parser.add_argument(
        "-z",
        "--zone",
        dest="zone",
        help="Timezone to set, as in /usr/share/zoneinfo (ex: Europe/London). "
        "Current timezone is printed if omitted",
    )

    kwargs = dict(parser.parse_args()._get_kwargs())
    if kwargs["zone"] is not None and not kwargs["zone"]:
        parser.error("--zone requires a non-empty value")

    Config.set_debug(enabled=kwargs.pop("debug", False))
    Config.set_verbosity(max(kwargs.pop("verbosity"), kwargs.pop("silent")))

    try:
        sys.exit(main(paths=PATHS, **kwargs))
    except Exception as exc:
        if Config.debug:
            logger.exception(exc)
        else:
            logger.error(exc)
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(entrypoint())
