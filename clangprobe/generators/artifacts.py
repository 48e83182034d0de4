"""
Generated build artifacts.

A full probe run emits three files consumed by the downstream build:

- ``generated.hpp``: the system include directories as a compiled-in list
- ``Makefile.variables``: make variables with tool paths, flags and libraries
- ``spec_base.yml``: build/run command templates for the integration tests,
  parameterized by the ``{SPEC_NAME}`` placeholder

Files are only rewritten when their content changes so that make's
timestamp-based dependency tracking is not disturbed.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.config import ProbeConfig
from ..core.filesystem import write_if_changed
from ..toolchain.probe import ProbeResult

logger = logging.getLogger(__name__)

GENERATOR_NAME = "clangprobe"
SPEC_NAME_PLACEHOLDER = "{SPEC_NAME}"
INCLUDES_MACRO = "BG_SYSTEM_INCLUDES"

CPP_PREAMBLE = '#include <gc/gc_cpp.h>\n#include "bindgen_helper.hpp"'


def render_generated_hpp(result: ProbeResult) -> str:
    """
    Render the header exposing the system include directories.

    Example:
        // Generated by clangprobe
        // DO NOT CHANGE

        #define BG_SYSTEM_INCLUDES { "/usr/include", "/usr/lib/llvm-18/lib/clang/18/include" }
    """
    includes = ", ".join(json.dumps(path) for path in result.flags.system_include_dirs)
    return (
        f"// Generated by {GENERATOR_NAME}\n"
        "// DO NOT CHANGE\n"
        "\n"
        f"#define {INCLUDES_MACRO} {{ {includes} }}\n"
    )


def render_makefile_variables(result: ProbeResult) -> str:
    """Render the make variable definitions."""
    lines = [
        f"CLANG_BINARY := {result.clang}",
        f"CLANG_INCLUDES := {' '.join(result.include_flags())}",
        f"CLANG_LIBS := {' '.join(result.all_lib_args())}",
        "",
        f"LLVM_CONFIG_BINARY := {result.llvm.binary}",
        f"LLVM_VERSION_MAJOR := {result.llvm.version_major}",
        f"LLVM_VERSION := {result.llvm.version}",
        f"LLVM_CXX_FLAGS := {result.llvm.cxx_flags}",
        f"LLVM_LD_FLAGS := {result.llvm.ld_flags}",
        f"LLVM_LIBS := {' '.join(result.llvm_lib_args())}",
    ]
    return "\n".join(lines) + "\n"


def cpp_build_command(result: ProbeResult) -> str:
    """Compile command for one generated C++ test file."""
    command = " ".join(
        [
            result.clang,
            result.llvm.cxx_flags,
            " ".join(result.include_flags()),
            f"-c -o {SPEC_NAME_PLACEHOLDER}.o {SPEC_NAME_PLACEHOLDER}.cpp",
            "-I.. -Wall -Werror -Wno-unused-function",
        ]
    )
    if not result.dynamic:
        command += " -fPIC"
    return command


def spec_base_document(result: ProbeResult) -> Dict[str, Any]:
    """Build the integration test configuration as plain data."""
    includes: List[str] = ["%", *result.flags.system_include_dirs]
    return {
        "module": "Test",
        "generators": {
            "cpp": {
                "output": f"tmp/{SPEC_NAME_PLACEHOLDER}.cpp",
                "build": cpp_build_command(result),
                "preamble": CPP_PREAMBLE,
            },
            "crystal": {
                "output": f"tmp/{SPEC_NAME_PLACEHOLDER}.cr",
            },
        },
        "library": f"%/tmp/{SPEC_NAME_PLACEHOLDER}.o -lstdc++ -lgccpp",
        "parser": {
            "files": [f"{SPEC_NAME_PLACEHOLDER}.cpp"],
            "includes": includes,
        },
    }


def render_spec_base(result: ProbeResult) -> str:
    return yaml.safe_dump(
        spec_base_document(result),
        explicit_start=True,
        default_flow_style=False,
        sort_keys=False,
        width=float("inf"),
    )


class ArtifactWriter:
    """
    Writes the three artifacts of a probe run.

    Example:
        >>> writer = ArtifactWriter(config)
        >>> writer.write_all(result)
        {PosixPath('.../generated.hpp'): True, ...}
    """

    def __init__(self, config: ProbeConfig):
        self.config = config

    def write_all(self, result: ProbeResult) -> Dict[Path, bool]:
        """
        Render and write every artifact.

        Returns:
            Mapping of artifact path to whether the file changed
        """
        artifacts = [
            (self.config.generated_hpp, render_generated_hpp(result)),
            (self.config.makefile_variables, render_makefile_variables(result)),
            (self.config.spec_base, render_spec_base(result)),
        ]

        changed = {}
        for path, content in artifacts:
            logger.info(f"Generating {path}")
            changed[path] = write_if_changed(path, content)
        return changed


__all__ = [
    "GENERATOR_NAME",
    "SPEC_NAME_PLACEHOLDER",
    "INCLUDES_MACRO",
    "render_generated_hpp",
    "render_makefile_variables",
    "cpp_build_command",
    "spec_base_document",
    "render_spec_base",
    "ArtifactWriter",
]
