"""
Dotted-numeric version ordering for tool version strings.

Tool versions are compared numerically component by component, with
missing trailing components treated as zero (``6`` == ``6.0.0``).

Vendor suffixes are tolerated: every dot-separated segment contributes
its leading digits, and the first segment without leading digits ends
the numeric part. ``14.0.0git`` reads as ``14.0.0`` and ``6.0.0-rc1`` as
``6.0.0``.
"""

import logging
import re
from typing import Tuple

from packaging.version import Version

from ..core.exceptions import InvalidVersionError

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"^(\d+)")


def numeric_components(version: str) -> Tuple[int, ...]:
    """
    Extract the numeric release components of a version string.

    Args:
        version: Version string such as '18.1.8' or '14.0.0git'

    Returns:
        Tuple of integer components

    Raises:
        InvalidVersionError: If the string has no leading numeric component

    Example:
        >>> numeric_components("14.0.6git")
        (14, 0, 6)
    """
    components = []
    for segment in version.strip().split("."):
        match = _LEADING_DIGITS.match(segment)
        if not match:
            break
        components.append(int(match.group(1)))

    if not components:
        raise InvalidVersionError(f"Not a numeric version: {version!r}")
    return tuple(components)


def _as_version(version: str) -> Version:
    return Version(".".join(str(c) for c in numeric_components(version)))


def compare_versions(a: str, b: str) -> int:
    """
    Compare two version strings.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b

    Example:
        >>> compare_versions("10.0.0", "9.0.0")
        1
        >>> compare_versions("6", "6.0.0")
        0
    """
    left, right = _as_version(a), _as_version(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def satisfies(candidate: str, minimum: str) -> bool:
    """Check that ``candidate`` is at least ``minimum``."""
    return compare_versions(candidate, minimum) >= 0


def major_version(version: str) -> str:
    """
    Return the text before the first dot.

    Example:
        >>> major_version("18.1.8")
        '18'
    """
    return version.split(".")[0]


__all__ = [
    "numeric_components",
    "compare_versions",
    "satisfies",
    "major_version",
]
