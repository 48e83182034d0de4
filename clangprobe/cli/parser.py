"""
clangprobe CLI argument parser.

This module implements the command-line interface using argparse. The
tool takes no subcommands: every invocation is one probe run, optionally
cut short by one of the print/debug options.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .. import __version__
from ..core.config import DYNAMIC_ENV_VAR, ProbeConfig
from ..core.exceptions import ClangProbeError, ToolNotFoundError
from ..generators.artifacts import ArtifactWriter
from ..toolchain.path_finder import find_os_release_file
from ..toolchain.probe import ToolchainProbe

logger = logging.getLogger(__name__)

MISSING_TOOLCHAIN_HELP = f"""\
You're missing the LLVM and/or Clang executables or development libraries.

If you've installed the binaries in a non-standard location:
  1) Make sure that `llvm-config` or `llvm-config-*` is set with --llvm-config PATH or is in PATH. The first binary found which satisfies version will be used.
  2) In rare cases if clang++ isn't found or is incorrect, you can also specify it with --clang PATH.

If your distro does not support static libraries like openSUSE then set env var {DYNAMIC_ENV_VAR}=1.
This will use .so instead of .a libraries during linking.

If you are missing the packages, please install them:
  ArchLinux: pacman -S llvm clang gc libyaml
  Ubuntu: apt install clang libclang-dev llvm-dev zlib1g-dev libncurses-dev libgc-dev libpcre3-dev
  CentOS: yum install libyaml-devel gc-devel pcre-devel zlib-devel clang-devel llvm-devel
  openSUSE: zypper install llvm clang libyaml-devel gc-devel pcre-devel zlib-devel clang-devel ncurses-devel
  Mac OS: brew install bdw-gc gmp libevent libxml2 libyaml llvm
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class CLI:
    """clangprobe command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()
        self.unknown_args: List[str] = []

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        ``--help`` is handled by hand: it prints usage to stderr and exits
        with status 1 like every other unsuccessful run.
        """
        parser = _ArgumentParser(
            prog="clangprobe",
            description=(
                "Locate llvm-config and clang++, query their settings and "
                "generate build configuration files"
            ),
            epilog=f"Environment: {DYNAMIC_ENV_VAR}=0/1, CPPFLAGS, LDFLAGS",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            add_help=False,
        )

        parser.add_argument(
            "--llvm-config",
            metavar="PATH",
            help="Path to llvm-config binary (default: find llvm-config[-*] in PATH)",
        )
        parser.add_argument(
            "--clang",
            metavar="PATH",
            help="Path to clang binary (default: find clang++[-*] in llvm bindir)",
        )
        parser.add_argument(
            "--print-clang-libs",
            action="store_true",
            help="Print detected clang libs and exit",
        )
        parser.add_argument(
            "--print-llvm-libs",
            action="store_true",
            help="Print detected llvm libs and exit",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=None,
            help="Directory the generated files are written under (default: current directory)",
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Suppress diagnostic output on stderr",
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Print the complete internal and parsed config and exit",
        )
        parser.add_argument(
            "--version", action="version", version=f"clangprobe {__version__}"
        )
        parser.add_argument("--help", "-h", action="store_true", help="This help")

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Unknown arguments are collected in ``unknown_args`` instead of
        aborting the run.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        parsed, self.unknown_args = self.parser.parse_known_args(args)
        return parsed

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        if parsed_args.help:
            self.parser.print_help(sys.stderr)
            return 1

        self._configure_logging(parsed_args)
        if self.unknown_args:
            logger.warning(f"Ignoring unknown arguments: {' '.join(self.unknown_args)}")

        try:
            config = ProbeConfig.from_sources(
                parsed_args, find_os_release=find_os_release_file
            )
            return self._run_probe(config)
        except ToolNotFoundError as e:
            logger.error(f"Error: {e}")
            print(MISSING_TOOLCHAIN_HELP, file=sys.stderr)
            return 1
        except ClangProbeError as e:
            logger.error(f"Error: {e}")
            return 1
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _run_probe(self, config: ProbeConfig) -> int:
        """
        Probe the toolchain and emit output according to the run mode.

        Args:
            config: Configuration of this run

        Returns:
            Exit code
        """
        result = ToolchainProbe(config).run()

        if config.debug:
            print(
                yaml.safe_dump(
                    {"config": config.to_dict(), "result": result.to_dict()},
                    default_flow_style=False,
                    sort_keys=False,
                ),
                end="",
            )
            return 0

        if config.print_clang_libs:
            logger.info("Option --print-clang-libs detected. Printing libraries and exiting.")
            sys.stdout.write(";".join(result.clang_lib_args()))
            return 0

        if config.print_llvm_libs:
            logger.info("Option --print-llvm-libs detected. Printing libraries and exiting.")
            sys.stdout.write(";".join(result.llvm_lib_args()))
            return 0

        result.require_libraries()

        ArtifactWriter(config).write_all(result)
        logger.info("All done.")
        return 0

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        elif args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,
        )


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
