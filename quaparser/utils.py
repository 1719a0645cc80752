"""
Classes and functions that provide general utility.
"""
from enum import Flag

__all__ = [
    "to_pascal_case",
    "is_whole",
    "format_time",
    "parse_flag_names",
]


def to_pascal_case(name: str) -> str:
    """
    Convert a snake_case attribute name to the PascalCase form used for document keys.

    :param name: The attribute name, e.g. ``map_set_id``.
    :returns: The key, e.g. ``MapSetId``.
    """
    return "".join(part.capitalize() for part in name.split("_"))


def is_whole(value: float) -> bool:
    """Check whether a number has no fractional part. Infinities and NaN are not whole."""
    return float(value).is_integer()


def format_time(ms: float) -> str:
    """
    Format a duration in milliseconds for display.

    :param ms: The duration in milliseconds.
    :returns: The duration in ``m:ss.fff`` format.
    """
    sign = "-" if ms < 0 else ""
    minutes, rem = divmod(abs(ms), 60000)
    return f"{sign}{minutes:.0f}:{rem / 1000:06.3f}"


def parse_flag_names(s: str, flag_type: type[Flag]) -> int:
    """
    Parse a comma-separated list of flag names, such as ``"Clap, Whistle"``.

    Names are matched case-insensitively against the member names of ``flag_type``.

    :param s: The string to parse. An empty string yields 0.
    :param flag_type: The flag enumeration the names belong to.
    :returns: The bitwise combination of the named flags.
    :raises ValueError: if a name does not belong to ``flag_type``.
    """
    value = 0
    for name in s.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            value |= flag_type[name.upper()].value
        except KeyError as e:
            raise ValueError(f"invalid {flag_type.__name__} name (got {name})") from e
    return value
