"""Parsing of human-readable byte sizes such as ``1g``, ``20M`` or ``512``."""

import re
from enum import Enum

from common.constants import INT64_MAX
from common.exceptions import InvalidFormatError


SIZE_PATTERN = re.compile(r"^([0-9]+)([bBkKmMgG]?)$")


class SizeUnit(Enum):
    """
    Recognized size suffixes.

    Lowercase letters are binary prefixes, uppercase letters are decimal ones.
    """
    NONE = ""
    BYTE = "b"
    BYTE_UPPER = "B"
    KIBI = "k"
    KILO = "K"
    MEBI = "m"
    MEGA = "M"
    GIBI = "g"
    GIGA = "G"

    @property
    def multiplier(self) -> int:
        return _MULTIPLIERS[self]


_MULTIPLIERS = {
    SizeUnit.NONE: 1,
    SizeUnit.BYTE: 1,
    SizeUnit.BYTE_UPPER: 1,
    SizeUnit.KIBI: 1024,
    SizeUnit.KILO: 1000,
    SizeUnit.MEBI: 1024 ** 2,
    SizeUnit.MEGA: 1000 ** 2,
    SizeUnit.GIBI: 1024 ** 3,
    SizeUnit.GIGA: 1000 ** 3,
}


def parse_byte_count(size: str) -> int:
    """
    Convert a size string like ``4m`` or ``1G`` into an exact number of bytes.

    Only whole numbers are supported. No surrounding whitespace is accepted.

    Args:
        size: Size string matching ``^[0-9]+[bBkKmMgG]?$``

    Returns:
        Number of bytes

    Raises:
        InvalidFormatError: If the string does not match the grammar or the
            result does not fit in a signed 64-bit integer
    """
    if not isinstance(size, str):
        raise InvalidFormatError(f"Size must be a string, got {type(size).__name__}")

    match = SIZE_PATTERN.fullmatch(size)
    if match is None:
        raise InvalidFormatError(f"Incorrect size format: {size!r}")

    digits, suffix = match.groups()
    try:
        unit = SizeUnit(suffix)
    except ValueError:
        raise InvalidFormatError(f"Unknown size unit: {suffix!r}")

    count = int(digits) * unit.multiplier
    if count > INT64_MAX:
        raise InvalidFormatError(f"Size {size!r} exceeds {INT64_MAX} bytes")

    return count
