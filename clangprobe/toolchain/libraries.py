"""
Library discovery and link argument assembly.

We don't link against every library in the system directories, only the
LLVM and Clang ones, found by name prefix. That helps keep link times
low.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.filesystem import unique
from ..core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

START_GROUP = "-Wl,--start-group"
END_GROUP = "-Wl,--end-group"


class LinkageMode(Enum):
    """Which kind of library artifact to link against."""

    STATIC = ".a"
    DYNAMIC = ".so"

    @property
    def suffix(self) -> str:
        return self.value

    @classmethod
    def from_dynamic(cls, dynamic: bool) -> "LinkageMode":
        return cls.DYNAMIC if dynamic else cls.STATIC


def find_libraries(
    paths: Iterable[str], prefix: str, mode: LinkageMode = LinkageMode.STATIC
) -> List[str]:
    """
    Find libraries named ``lib<prefix>*.a`` (or ``.so``) in directories.

    Versioned shared objects such as ``libLLVM.so.18`` are not recognized.

    Args:
        paths: Directories to scan
        prefix: Library name prefix, e.g. 'clang' or 'LLVM'
        mode: Static or dynamic linkage

    Returns:
        Canonical library names (``lib`` and suffix stripped), deduplicated,
        in directory order and sorted within a directory

    Example:
        >>> find_libraries(["/usr/lib/llvm-18/lib"], "clang")
        ['clangAST', 'clangBasic', ...]
    """
    name_pattern = re.compile(
        rf"^lib({re.escape(prefix)}.*){re.escape(mode.suffix)}$"
    )
    names = []

    for path in paths:
        directory = Path(path)
        if not directory.is_dir():
            continue
        for entry in sorted(directory.glob(f"lib{prefix}*{mode.suffix}")):
            match = name_pattern.match(entry.name)
            if match:
                names.append(match.group(1))

    libraries = unique(names)
    logger.debug(f"Found {len(libraries)} {prefix} libraries ({mode.name.lower()})")
    return libraries


def get_lib_args(
    libraries: Iterable[str], platform: Optional[PlatformInfo] = None
) -> List[str]:
    """
    Build the ``-l...`` link arguments for a list of libraries.

    Libraries must precede their dependencies. Rather than computing that
    order, GNU-style linkers get the list wrapped in a start/end group.

    Args:
        libraries: Canonical library names
        platform: Target platform (detected if not given)

    Returns:
        Link arguments

    Example:
        >>> get_lib_args(["A", "B"], PlatformInfo("linux", "x64"))
        ['-Wl,--start-group', '-lA', '-lB', '-Wl,--end-group']
    """
    platform = platform or detect_platform()
    args = [f"-l{name}" for name in libraries]

    if platform.requires_link_groups:
        return [START_GROUP, *args, END_GROUP]
    return args


__all__ = [
    "START_GROUP",
    "END_GROUP",
    "LinkageMode",
    "find_libraries",
    "get_lib_args",
]
