"""
clangprobe/toolchain/clang_output.py

Parse the command traces printed by ``clang++ -###``.

With ``-###`` the clang driver prints the commands it would run instead of
running them. The second-to-last line is the compiler front-end
invocation (preprocess/compile) and the last line is the linker
invocation. Both are lists of double-quoted arguments:

    "/usr/bin/clang-18" "-cc1" ... "-internal-isystem" "/usr/include/c++/13" ...
    "/usr/bin/ld" ... "-L/usr/lib/gcc/x86_64-linux-gnu/13" ...

Those arguments are classified into system include and library
directories.
"""

import logging
import os
import re
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..core.exceptions import MalformedProbeOutputError
from ..core.filesystem import existing_directories, unique
from ..core.platform import PlatformInfo, detect_platform
from ..core.shell import QUOTE_CHAR

logger = logging.getLogger(__name__)

PROBE_SOURCE_NAME = "probe.cpp"
PROBE_SOURCE = "int main() { return 0; }\n"

_TRACE_SEPARATOR = re.compile(r'"\s+"')


@dataclass(frozen=True)
class ParsedFlags:
    """
    Directories and flags extracted from the compiler traces.

    Attributes:
        system_include_dirs: Existing include directories, canonical, first-seen order
        system_lib_dirs: Existing library directories, canonical, first-seen order
        cppflags: Front-end arguments merged with CPPFLAGS, deduplicated
        ldflags: Linker arguments merged with LDFLAGS, deduplicated
    """

    system_include_dirs: Tuple[str, ...] = ()
    system_lib_dirs: Tuple[str, ...] = ()
    cppflags: Tuple[str, ...] = ()
    ldflags: Tuple[str, ...] = ()


# ============================================================================
# Tokenizing
# ============================================================================


def split_trace_line(line: str) -> List[str]:
    """
    Split one ``-###`` trace line into its arguments.

    One layer of surrounding quotes is removed, then the line is split on
    the ``" "`` boundaries between arguments.

    Example:
        >>> split_trace_line(' "/usr/bin/ld" "-o" "a.out"')
        ['/usr/bin/ld', '-o', 'a.out']
    """
    stripped = line.strip()
    if stripped.startswith(QUOTE_CHAR):
        stripped = stripped[1:]
    if stripped.endswith(QUOTE_CHAR):
        stripped = stripped[:-1]
    return [token for token in _TRACE_SEPARATOR.split(stripped) if token]


# ============================================================================
# Flag classification
# ============================================================================


@dataclass
class _ScanState:
    include_dirs: List[str] = field(default_factory=list)
    lib_dirs: List[str] = field(default_factory=list)
    internal_isystem: bool = False


@dataclass(frozen=True)
class FlagRule:
    """
    One recognized flag shape.

    Attributes:
        flag: Flag text, matched exactly or as a prefix
        action: Called with the scan state, the matched token and its operand
        prefix: Match tokens starting with ``flag`` instead of equal to it
        takes_operand: Consume the following token as operand
    """

    flag: str
    action: Callable[[_ScanState, str, Optional[str]], None]
    prefix: bool = False
    takes_operand: bool = False

    def matches(self, token: str) -> bool:
        if self.prefix:
            return token.startswith(self.flag)
        return token == self.flag


def _begin_internal_isystem(state: _ScanState, token: str, operand: Optional[str]):
    state.internal_isystem = True


def _resource_dir(state: _ScanState, token: str, operand: Optional[str]):
    # <prefix>/lib/clang/<version> -> <prefix>/include
    state.include_dirs.append(f"{operand}/../../../include")


def _lto_library(state: _ScanState, token: str, operand: Optional[str]):
    state.lib_dirs.append(operand.split("/lib/")[0] + "/lib/")


def _library_dir(state: _ScanState, token: str, operand: Optional[str]):
    path = token[2:] if operand is None else operand
    if not path.endswith("/"):
        path += "/"
    state.lib_dirs.append(path)


FLAG_RULES: Tuple[FlagRule, ...] = (
    FlagRule("-internal-isystem", _begin_internal_isystem),
    FlagRule("-resource-dir", _resource_dir, takes_operand=True),
    FlagRule("-lto_library", _lto_library, takes_operand=True),
    # A bare -L names its directory in the next argument
    FlagRule("-L", _library_dir, takes_operand=True),
    FlagRule("-L", _library_dir, prefix=True),
)


class FlagClassifier:
    """
    Single left-to-right scan sorting arguments into directory lists.

    After ``-internal-isystem`` every argument not starting with ``-`` is an
    include directory, until the next ``-``-prefixed argument.
    """

    def __init__(self, rules: Sequence[FlagRule] = FLAG_RULES):
        self.rules = tuple(rules)

    def classify(self, flags: Sequence[str]) -> Tuple[List[str], List[str]]:
        """
        Classify arguments.

        Args:
            flags: Merged argument list

        Returns:
            Tuple of (include_dirs, lib_dirs), raw and in scan order
        """
        state = _ScanState()
        index = 0

        while index < len(flags):
            flag = flags[index]

            if state.internal_isystem:
                if flag.startswith("-"):
                    state.internal_isystem = False
                else:
                    state.include_dirs.append(flag)
                    index += 1
                    continue

            rule = self._match(flag)
            if rule is not None:
                operand = None
                if rule.takes_operand:
                    if index + 1 >= len(flags):
                        logger.debug(f"Ignoring {flag} without operand")
                        index += 1
                        continue
                    index += 1
                    operand = flags[index]
                rule.action(state, flag, operand)

            index += 1

        return state.include_dirs, state.lib_dirs

    def _match(self, flag: str) -> Optional[FlagRule]:
        for rule in self.rules:
            if rule.matches(flag):
                return rule
        return None


# ============================================================================
# Probe
# ============================================================================


class CommandOutputParser:
    """
    Run the compiler diagnostic probe and parse its traces.

    Example:
        >>> parser = CommandOutputParser()
        >>> lines = parser.run_probe("/usr/bin/clang++")
        >>> flags = parser.parse(lines, "/usr/bin/clang++", "/usr/lib/llvm-18/lib", "18.1.8")
    """

    def __init__(
        self,
        platform: Optional[PlatformInfo] = None,
        classifier: Optional[FlagClassifier] = None,
    ):
        self.platform = platform or detect_platform()
        self.classifier = classifier or FlagClassifier()

    def run_probe(self, compiler: Union[str, Path]) -> List[str]:
        """
        Run ``<compiler> -### <probe source>`` and capture its output lines.

        stderr is merged into stdout; there is no timeout.
        """
        with tempfile.TemporaryDirectory(prefix="clangprobe_") as tmpdir:
            source = Path(tmpdir) / PROBE_SOURCE_NAME
            source.write_text(PROBE_SOURCE, encoding="utf-8")

            argv = [str(compiler), "-###", str(source)]
            logger.info(" ".join(argv))
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )

        return (result.stdout or "").splitlines()

    def parse(
        self,
        lines: Sequence[str],
        binary: Union[str, Path],
        llvm_libdir: str,
        llvm_version: str,
        extra_cppflags: Sequence[str] = (),
        extra_ldflags: Sequence[str] = (),
    ) -> ParsedFlags:
        """
        Parse probe output into ParsedFlags.

        Args:
            lines: Probe output lines
            binary: Compiler that produced the output, for diagnostics
            llvm_libdir: LLVM library directory (llvm-config --libdir)
            llvm_version: LLVM version (llvm-config --version)
            extra_cppflags: Override tokens appended to the front-end arguments
            extra_ldflags: Override tokens appended to the linker arguments

        Returns:
            ParsedFlags with existing, canonical directories

        Raises:
            MalformedProbeOutputError: If fewer than two lines were printed
        """
        if len(lines) < 2:
            raise MalformedProbeOutputError(str(binary), len(lines))

        cppflags = unique([*split_trace_line(lines[-2]), *extra_cppflags])
        ldflags = unique([*split_trace_line(lines[-1]), *extra_ldflags])

        include_dirs, lib_dirs = self.classifier.classify(cppflags + ldflags)

        if self.platform.is_macos and os.path.isdir("/usr/local/include/"):
            include_dirs.append("/usr/local/include")

        # Clang's own headers; duplicates are removed below
        include_dirs.append(os.path.join(llvm_libdir, "clang", llvm_version, "include"))

        return ParsedFlags(
            system_include_dirs=tuple(existing_directories(include_dirs)),
            system_lib_dirs=tuple(existing_directories(lib_dirs)),
            cppflags=tuple(cppflags),
            ldflags=tuple(ldflags),
        )

    def probe(
        self,
        compiler: Union[str, Path],
        llvm_libdir: str,
        llvm_version: str,
        extra_cppflags: Sequence[str] = (),
        extra_ldflags: Sequence[str] = (),
    ) -> ParsedFlags:
        """Run the probe and parse its output."""
        lines = self.run_probe(compiler)
        return self.parse(
            lines,
            compiler,
            llvm_libdir,
            llvm_version,
            extra_cppflags=extra_cppflags,
            extra_ldflags=extra_ldflags,
        )


__all__ = [
    "ParsedFlags",
    "split_trace_line",
    "FlagRule",
    "FLAG_RULES",
    "FlagClassifier",
    "CommandOutputParser",
]
