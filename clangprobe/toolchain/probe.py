"""
clangprobe/toolchain/probe.py

One probe run: locate llvm-config and clang++, interrogate them, and
collect everything the generated artifacts need.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import ProbeConfig
from ..core.exceptions import EmptyLibrarySetError, ToolNotFoundError
from ..core.platform import PlatformInfo, detect_platform
from .clang_output import CommandOutputParser, ParsedFlags
from .libraries import LinkageMode, find_libraries, get_lib_args
from .llvm_config import LlvmConfigInfo, query_llvm_config
from .path_finder import find_clang_binary, find_llvm_config_binary

logger = logging.getLogger(__name__)

CLANG_LIBRARY_PREFIX = "clang"
LLVM_LIBRARY_PREFIX = "LLVM"


@dataclass(frozen=True)
class ProbeResult:
    """
    Everything discovered during a probe run.

    Attributes:
        clang: clang++ binary used for the probe
        llvm: Settings reported by llvm-config
        flags: Parsed directories and flags
        clang_libs: Canonical clang library names
        llvm_libs: Canonical LLVM library names
        dynamic: Whether shared libraries were scanned
        platform: Platform the link arguments are built for
    """

    clang: str
    llvm: LlvmConfigInfo
    flags: ParsedFlags
    clang_libs: Tuple[str, ...]
    llvm_libs: Tuple[str, ...]
    dynamic: bool
    platform: PlatformInfo

    @property
    def linkage(self) -> LinkageMode:
        return LinkageMode.from_dynamic(self.dynamic)

    def clang_lib_args(self) -> List[str]:
        return get_lib_args(self.clang_libs, self.platform)

    def llvm_lib_args(self) -> List[str]:
        return get_lib_args(self.llvm_libs, self.platform)

    def all_lib_args(self) -> List[str]:
        """Clang libraries followed by LLVM libraries, in one group."""
        return get_lib_args(self.clang_libs + self.llvm_libs, self.platform)

    def include_flags(self) -> List[str]:
        return [f"-I{path}" for path in self.flags.system_include_dirs]

    def require_libraries(self) -> None:
        """
        Ensure both library sets are non-empty.

        Raises:
            EmptyLibrarySetError: If clang or LLVM libraries are missing
        """
        missing = []
        if not self.llvm_libs:
            missing.append(LLVM_LIBRARY_PREFIX)
        if not self.clang_libs:
            missing.append(CLANG_LIBRARY_PREFIX)
        if missing:
            raise EmptyLibrarySetError(missing)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clang": self.clang,
            "llvm_config": self.llvm.binary,
            "llvm_version": self.llvm.version,
            "llvm_cxx_flags": self.llvm.cxx_flags,
            "llvm_ld_flags": self.llvm.ld_flags,
            "llvm_bindir": self.llvm.bindir,
            "llvm_libdir": self.llvm.libdir,
            "cppflags": list(self.flags.cppflags),
            "ldflags": list(self.flags.ldflags),
            "system_include_dirs": list(self.flags.system_include_dirs),
            "system_lib_dirs": list(self.flags.system_lib_dirs),
            "clang_libs": list(self.clang_libs),
            "llvm_libs": list(self.llvm_libs),
            "dynamic": self.dynamic,
            "platform": self.platform.platform_string(),
        }


class ToolchainProbe:
    """
    Runs the discovery pipeline for one ProbeConfig.

    Example:
        >>> result = ToolchainProbe(config).run()
        >>> result.all_lib_args()
        ['-Wl,--start-group', '-lclangAST', ..., '-Wl,--end-group']
    """

    def __init__(
        self,
        config: ProbeConfig,
        platform: Optional[PlatformInfo] = None,
        output_parser: Optional[CommandOutputParser] = None,
    ):
        self.config = config
        self.platform = platform or detect_platform()
        self.output_parser = output_parser or CommandOutputParser(self.platform)

    def resolve_llvm_config(self) -> Path:
        """
        Determine which llvm-config to use.

        Raises:
            ToolNotFoundError: If no llvm-config satisfies the minimum version
        """
        if self.config.llvm_config:
            return self.config.llvm_config

        found = find_llvm_config_binary(
            self.config.search_paths, self.config.min_version
        )
        if found is None:
            raise ToolNotFoundError(
                "llvm-config", self.config.search_paths, self.config.min_version
            )
        return found

    def resolve_clang(self, llvm: LlvmConfigInfo) -> Path:
        """
        Determine which clang++ to use, preferring llvm-config's bindir.

        Raises:
            ToolNotFoundError: If no clang++ satisfies the minimum version
        """
        if self.config.clang:
            return self.config.clang

        found = find_clang_binary([llvm.bindir], self.config.min_version)
        if found is None:
            raise ToolNotFoundError("clang++", [llvm.bindir], self.config.min_version)
        return found

    def run(self) -> ProbeResult:
        """
        Run the whole pipeline.

        Returns:
            ProbeResult of this run

        Raises:
            ToolNotFoundError: If a tool cannot be located
            MalformedProbeOutputError: If the clang probe output is unusable
        """
        llvm_config = self.resolve_llvm_config()
        logger.info(f"Using llvm-config binary in {str(llvm_config)!r}.")
        llvm = query_llvm_config(llvm_config)

        clang = self.resolve_clang(llvm)
        logger.info(f"Using clang binary in {str(clang)!r}. Querying it.")

        flags = self.output_parser.probe(
            clang,
            llvm.libdir,
            llvm.version,
            extra_cppflags=self.config.cppflags,
            extra_ldflags=self.config.ldflags,
        )

        mode = LinkageMode.from_dynamic(self.config.dynamic)
        clang_libs = find_libraries(flags.system_lib_dirs, CLANG_LIBRARY_PREFIX, mode)
        llvm_libs = find_libraries(flags.system_lib_dirs, LLVM_LIBRARY_PREFIX, mode)

        return ProbeResult(
            clang=str(clang),
            llvm=llvm,
            flags=flags,
            clang_libs=tuple(clang_libs),
            llvm_libs=tuple(llvm_libs),
            dynamic=self.config.dynamic,
            platform=self.platform,
        )


__all__ = [
    "CLANG_LIBRARY_PREFIX",
    "LLVM_LIBRARY_PREFIX",
    "ProbeResult",
    "ToolchainProbe",
]
