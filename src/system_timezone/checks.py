import os
import pathlib
from typing import NamedTuple, Optional, Union


class CheckResponse(NamedTuple):
    """Check Response Interface"""

    passed: Optional[bool] = False
    help_text: str = ""

    def __bool__(self) -> bool:
        return self.passed or False

    def raise_for_status(self):
        if not self.passed:
            raise ValueError(self.help_text)


def zone_path(
    name: str, zoneinfo: Union[str, pathlib.Path]
) -> Optional[pathlib.Path]:
    """path of name's file inside zoneinfo, None if outside of it or not canonical

    Purely lexical: neither zoneinfo nor the returned path need to exist"""
    root = pathlib.Path(os.path.normpath(zoneinfo))
    if pathlib.PurePath(name).is_absolute():
        return None
    path = pathlib.Path(os.path.normpath(root.joinpath(name)))
    if path == root:
        return None
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None
    # reject spellings (`./UTC`, `Europe//Paris`) that would not read back as-is
    if relative.as_posix() != name:
        return None
    return path


def is_valid_zone(name: str, zoneinfo: Union[str, pathlib.Path]) -> CheckResponse:
    """whether name represents a zone installed in the zoneinfo database"""
    if not isinstance(name, str):
        return CheckResponse(False, "Incorrect type")

    if not name:
        return CheckResponse(False, "Empty zone name")

    path = zone_path(name, zoneinfo)
    if path is None:
        return CheckResponse(False, f"Invalid zone name “{name}”")

    try:
        found = path.is_file()
    except OSError:
        found = False
    if not found:
        return CheckResponse(False, f"Zone “{name}” not found")

    return CheckResponse(True)
