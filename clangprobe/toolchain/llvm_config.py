"""
Interrogation of the ``llvm-config`` configuration tool.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .version import major_version

logger = logging.getLogger(__name__)

# Warning flags are dropped, pass-through options (-Wa, -Wl, -Wp) are kept
_WARNING_FLAG = re.compile(r"^-W(?![alp],)")


@dataclass(frozen=True)
class LlvmConfigInfo:
    """
    Settings reported by llvm-config.

    Attributes:
        binary: Path of the llvm-config binary that was queried
        version: Full version string, e.g. '18.1.8'
        cxx_flags: Cleaned compile flags
        ld_flags: Link flags
        bindir: Directory holding LLVM executables
        libdir: Directory holding LLVM libraries
    """

    binary: str
    version: str
    cxx_flags: str
    ld_flags: str
    bindir: str
    libdir: str

    @property
    def version_major(self) -> str:
        return major_version(self.version)


def output_of(*argv: Union[str, Path]) -> str:
    """
    Run a command and return its stdout with one trailing newline removed.

    The exit status is not checked.
    """
    result = subprocess.run(
        [str(a) for a in argv],
        stdout=subprocess.PIPE,
        text=True,
        errors="replace",
        check=False,
    )
    output = result.stdout or ""
    if output.endswith("\r\n"):
        return output[:-2]
    if output.endswith("\n"):
        return output[:-1]
    return output


def collapse_whitespace(flags: str) -> str:
    return re.sub(r"\s+", " ", flags)


def clean_cxx_flags(flags: str) -> str:
    """
    Strip flags that break bindings compilation from llvm-config --cxxflags.

    ``-fno-exceptions`` and warning flags are removed.

    Example:
        >>> clean_cxx_flags("-I/usr/include -fno-exceptions -Wall -Wl,-z,defs -std=c++17")
        '-I/usr/include -Wl,-z,defs -std=c++17'
    """
    kept = [
        token
        for token in flags.split()
        if token != "-fno-exceptions" and not _WARNING_FLAG.match(token)
    ]
    return " ".join(kept)


def query_llvm_config(binary: Union[str, Path]) -> LlvmConfigInfo:
    """
    Query llvm-config for version, flags and directories.

    Args:
        binary: Path to llvm-config

    Returns:
        LlvmConfigInfo with the reported settings
    """
    logger.debug(f"Querying {binary}")
    return LlvmConfigInfo(
        binary=str(binary),
        version=output_of(binary, "--version"),
        cxx_flags=clean_cxx_flags(output_of(binary, "--cxxflags")),
        ld_flags=collapse_whitespace(output_of(binary, "--ldflags")),
        bindir=output_of(binary, "--bindir"),
        libdir=output_of(binary, "--libdir"),
    )


__all__ = [
    "LlvmConfigInfo",
    "output_of",
    "collapse_whitespace",
    "clean_cxx_flags",
    "query_llvm_config",
]
