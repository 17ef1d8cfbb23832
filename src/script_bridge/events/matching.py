"""Switch-value matching.

Every switch on a trigger declaration is compared against a runtime value
with the same small, closed set of operators:

==================  ===========================  ==========================
Form                Example                      Matches
==================  ===========================  ==========================
exact text          ``chest``                    ``CHEST``, ``chest``
option list         ``chest|barrel``             either option
wildcard            ``*_chest``                  ``trapped_chest``
numeric range       ``5..10``, ``..3``, ``2..``  numbers inside the range
regex               ``regex:(chest|barrel)``     full, case-insensitive match
==================  ===========================  ==========================

All comparisons are case-insensitive.  A ``regex:`` pattern is taken whole,
so ``|`` inside it is regex alternation, not an option separator.

Patterns are checked once at script-load time by :func:`validate_pattern`,
so matching itself never meets a broken regex.
"""

from __future__ import annotations

import re
from functools import lru_cache

REGEX_PREFIX = "regex:"

_RANGE_RE = re.compile(r"^(?P<low>-?\d+(?:\.\d+)?)?\.\.(?P<high>-?\d+(?:\.\d+)?)?$")


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=512)
def _wildcard(option: str) -> re.Pattern[str]:
    parts = (re.escape(part) for part in option.split("*"))
    return re.compile(".*".join(parts), re.IGNORECASE)


def validate_pattern(pattern: str) -> None:
    """Raise ``re.error`` if *pattern* carries an invalid regex."""
    if pattern[: len(REGEX_PREFIX)].lower() == REGEX_PREFIX:
        _compile(pattern[len(REGEX_PREFIX) :])


def _in_range(value: str, match: re.Match[str]) -> bool:
    try:
        number = float(value)
    except ValueError:
        return False
    low, high = match.group("low"), match.group("high")
    if low is not None and number < float(low):
        return False
    if high is not None and number > float(high):
        return False
    return True


def _matches_option(value: str, option: str) -> bool:
    option = option.strip()
    if not option:
        return False
    if option == "..":
        return False
    range_match = _RANGE_RE.match(option)
    if range_match:
        return _in_range(value, range_match)
    if "*" in option:
        return _wildcard(option).fullmatch(value) is not None
    return value.lower() == option.lower()


def advanced_matches(value: str, pattern: str) -> bool:
    """Return True if *value* satisfies the switch *pattern*."""
    if pattern[: len(REGEX_PREFIX)].lower() == REGEX_PREFIX:
        return _compile(pattern[len(REGEX_PREFIX) :]).fullmatch(value) is not None
    return any(_matches_option(value, option) for option in pattern.split("|"))
