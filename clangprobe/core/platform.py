"""
Platform detection for clangprobe.

This module answers the few platform questions a probe run needs:

- Operating system and CPU architecture of the host
- Linux distribution name, read from an os-release file
- Whether the linker needs ``--start-group``/``--end-group`` wrapping
- Whether LLVM should be linked dynamically by default

Usage:
    from clangprobe.core.platform import detect_platform

    platform_info = detect_platform()
    if platform_info.requires_link_groups:
        ...
"""

import functools
import logging
import platform
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

# Distributions that ship LLVM/Clang without static archives
DYNAMIC_LLVM_DISTRIBUTIONS = re.compile(r"Fedora|openSUSE", re.IGNORECASE)


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows', 'freebsd', ...)
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
    """

    os: str
    arch: str

    @property
    def is_macos(self) -> bool:
        return self.os == "macos"

    @property
    def requires_link_groups(self) -> bool:
        """
        Whether static libraries must be wrapped in a linker group.

        The macOS linker resolves symbols across all archives on its own;
        GNU-style linkers need ``--start-group``/``--end-group`` to cope with
        circular dependencies between static LLVM/Clang archives.
        """
        return not self.is_macos

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos' or the lowercased
        ``platform.system()`` value for anything else
    """
    system = platform.system().lower()

    if system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def parse_os_release(path: Union[str, Path]) -> Dict[str, str]:
    """
    Parse an os-release file into a dictionary.

    Only ``key=value`` lines are considered; comment lines are skipped.
    Values are reported as-is, quotes included.

    Args:
        path: Path to the os-release file

    Returns:
        Mapping of keys to raw values

    Example:
        >>> parse_os_release('/etc/os-release')['NAME']
        '"Fedora Linux"'
    """
    data: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\n")
            if "=" not in line or re.match(r"^\s*#", line):
                continue
            key, value = re.split(r"\s*=\s*", line, maxsplit=1)
            data[key] = value
    return data


def prefers_dynamic_llvm(os_release: Optional[Dict[str, str]]) -> bool:
    """
    Decide the default linkage mode from os-release data.

    Args:
        os_release: Parsed os-release data, or None if no file was found

    Returns:
        True if the distribution is known to lack static LLVM archives
    """
    if not os_release:
        return False

    name = os_release.get("NAME")
    if name and DYNAMIC_LLVM_DISTRIBUTIONS.search(name):
        logger.debug(f"Distribution {name} ships shared LLVM libraries")
        return True
    return False


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "parse_os_release",
    "prefers_dynamic_llvm",
    "clear_platform_cache",
]
