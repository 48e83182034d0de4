"""
Run configuration for clangprobe.

A ProbeConfig is built exactly once per run, from parsed command-line
arguments and the process environment, and is then passed to every
component. It is immutable.

Environment variables:
    CLANGPROBE_DYNAMIC  '1' links against shared LLVM libraries, anything
                        else against static ones. When unset, the default
                        comes from the os-release NAME.
    CPPFLAGS            Extra tokens merged into the front-end arguments
    LDFLAGS             Extra tokens merged into the linker arguments
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .platform import parse_os_release, prefers_dynamic_llvm
from .shell import shell_split

logger = logging.getLogger(__name__)

DYNAMIC_ENV_VAR = "CLANGPROBE_DYNAMIC"
CPPFLAGS_ENV_VAR = "CPPFLAGS"
LDFLAGS_ENV_VAR = "LDFLAGS"

DEFAULT_MIN_VERSION = "6.0.0"

GENERATED_HPP = Path("clang") / "include" / "generated.hpp"
MAKEFILE_VARIABLES = Path("clang") / "Makefile.variables"
SPEC_BASE = Path("spec") / "integration" / "spec_base.yml"

OsReleaseFinder = Callable[[], Optional[Path]]


@dataclass(frozen=True)
class ProbeConfig:
    """
    Immutable configuration of a probe run.

    Attributes:
        clang: Explicit clang++ binary, searched for if None
        llvm_config: Explicit llvm-config binary, searched for if None
        min_version: Minimum version of both tools
        search_paths: Directories searched for llvm-config
        dynamic: Link against shared libraries instead of static archives
        cppflags: Extra front-end tokens (from CPPFLAGS)
        ldflags: Extra linker tokens (from LDFLAGS)
        generated_hpp: Output path of the generated header
        makefile_variables: Output path of the Makefile variables
        spec_base: Output path of the integration test configuration
        print_clang_libs: Print clang link arguments and stop
        print_llvm_libs: Print LLVM link arguments and stop
        debug: Dump the resolved configuration and stop
    """

    clang: Optional[Path] = None
    llvm_config: Optional[Path] = None
    min_version: str = DEFAULT_MIN_VERSION
    search_paths: Tuple[str, ...] = ()
    dynamic: bool = False
    cppflags: Tuple[str, ...] = ()
    ldflags: Tuple[str, ...] = ()
    generated_hpp: Path = GENERATED_HPP
    makefile_variables: Path = MAKEFILE_VARIABLES
    spec_base: Path = SPEC_BASE
    print_clang_libs: bool = False
    print_llvm_libs: bool = False
    debug: bool = False

    @classmethod
    def from_sources(
        cls,
        args: Any,
        environ: Optional[Mapping[str, str]] = None,
        find_os_release: Optional[OsReleaseFinder] = None,
    ) -> "ProbeConfig":
        """
        Build the configuration from CLI arguments and the environment.

        Args:
            args: Parsed argparse namespace
            environ: Environment mapping (defaults to os.environ)
            find_os_release: Locates the os-release file when
                CLANGPROBE_DYNAMIC is unset

        Returns:
            ProbeConfig for this run
        """
        environ = os.environ if environ is None else environ
        project_root = Path(getattr(args, "project_root", None) or Path.cwd())
        project_root = project_root.resolve()

        return cls(
            clang=_optional_path(getattr(args, "clang", None)),
            llvm_config=_optional_path(getattr(args, "llvm_config", None)),
            search_paths=path_environment(environ),
            dynamic=resolve_dynamic(environ, find_os_release),
            cppflags=tuple(shell_split(environ.get(CPPFLAGS_ENV_VAR, ""))),
            ldflags=tuple(shell_split(environ.get(LDFLAGS_ENV_VAR, ""))),
            generated_hpp=project_root / GENERATED_HPP,
            makefile_variables=project_root / MAKEFILE_VARIABLES,
            spec_base=project_root / SPEC_BASE,
            print_clang_libs=bool(getattr(args, "print_clang_libs", False)),
            print_llvm_libs=bool(getattr(args, "print_llvm_libs", False)),
            debug=bool(getattr(args, "debug", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view, used by the --debug dump."""
        return {
            "clang": str(self.clang) if self.clang else None,
            "llvm_config": str(self.llvm_config) if self.llvm_config else None,
            "min_version": self.min_version,
            "search_paths": list(self.search_paths),
            "dynamic": self.dynamic,
            "cppflags": list(self.cppflags),
            "ldflags": list(self.ldflags),
            "generated_hpp": str(self.generated_hpp),
            "makefile_variables": str(self.makefile_variables),
            "spec_base": str(self.spec_base),
            "print_clang_libs": self.print_clang_libs,
            "print_llvm_libs": self.print_llvm_libs,
            "debug": self.debug,
        }


def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


def path_environment(environ: Optional[Mapping[str, str]] = None) -> Tuple[str, ...]:
    """Split the PATH variable into its non-empty entries."""
    environ = os.environ if environ is None else environ
    return tuple(p for p in environ.get("PATH", "").split(os.pathsep) if p)


def resolve_dynamic(
    environ: Mapping[str, str], find_os_release: Optional[OsReleaseFinder] = None
) -> bool:
    """
    Decide between shared and static LLVM libraries.

    CLANGPROBE_DYNAMIC wins when set. Otherwise distributions without
    static LLVM archives (Fedora, openSUSE) default to shared libraries.
    Without an os-release finder, static libraries are used.
    """
    value = environ.get(DYNAMIC_ENV_VAR)

    if value is None:
        os_release_file = find_os_release() if find_os_release else None
        os_release = parse_os_release(os_release_file) if os_release_file else None
        dynamic = prefers_dynamic_llvm(os_release)
    else:
        dynamic = value == "1"

    logger.info(
        f"Link against LLVM shared libraries: {dynamic}. "
        f"(Adjust with env {DYNAMIC_ENV_VAR}=0/1 if needed)"
    )
    return dynamic


__all__ = [
    "DYNAMIC_ENV_VAR",
    "CPPFLAGS_ENV_VAR",
    "LDFLAGS_ENV_VAR",
    "ProbeConfig",
    "path_environment",
    "resolve_dynamic",
]
