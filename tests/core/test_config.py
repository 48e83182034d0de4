"""
Tests for clangprobe.core.config module.
"""

import dataclasses
import os
from argparse import Namespace
from pathlib import Path
from unittest.mock import Mock

import pytest

from clangprobe.core.config import ProbeConfig, path_environment, resolve_dynamic


def _args(**overrides):
    values = dict(
        clang=None,
        llvm_config=None,
        print_clang_libs=False,
        print_llvm_libs=False,
        quiet=False,
        debug=False,
        verbose=False,
        project_root=None,
    )
    values.update(overrides)
    return Namespace(**values)


class TestProbeConfig:
    """Tests for building ProbeConfig."""

    def test_from_sources(self, tmp_path):
        environ = {
            "PATH": "/opt/llvm/bin:/usr/bin",
            "CLANGPROBE_DYNAMIC": "0",
            "CPPFLAGS": '-I/opt/inc -DNAME="a b"',
            "LDFLAGS": "-L/opt/lib",
        }

        config = ProbeConfig.from_sources(
            _args(llvm_config="/opt/llvm/bin/llvm-config", project_root=tmp_path),
            environ,
        )

        assert config.llvm_config == Path("/opt/llvm/bin/llvm-config")
        assert config.clang is None
        assert config.search_paths == ("/opt/llvm/bin", "/usr/bin")
        assert config.dynamic is False
        assert config.cppflags == ("-I/opt/inc", '-DNAME="a b"')
        assert config.ldflags == ("-L/opt/lib",)
        assert config.min_version == "6.0.0"

    def test_output_paths_under_project_root(self, tmp_path):
        config = ProbeConfig.from_sources(
            _args(project_root=tmp_path), {"CLANGPROBE_DYNAMIC": "1"}
        )

        root = tmp_path.resolve()
        assert config.generated_hpp == root / "clang" / "include" / "generated.hpp"
        assert config.makefile_variables == root / "clang" / "Makefile.variables"
        assert config.spec_base == root / "spec" / "integration" / "spec_base.yml"

    def test_mode_flags(self, tmp_path):
        config = ProbeConfig.from_sources(
            _args(print_clang_libs=True, debug=True, project_root=tmp_path),
            {"CLANGPROBE_DYNAMIC": "1"},
        )

        assert config.print_clang_libs is True
        assert config.print_llvm_libs is False
        assert config.debug is True
        assert "quiet" not in config.to_dict()

    def test_immutable(self):
        config = ProbeConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.dynamic = True

    def test_to_dict(self):
        data = ProbeConfig(clang=Path("/usr/bin/clang++"), cppflags=("-O2",)).to_dict()

        assert data["clang"] == "/usr/bin/clang++"
        assert data["llvm_config"] is None
        assert data["cppflags"] == ["-O2"]


class TestResolveDynamic:
    """Tests for the dynamic linking decision."""

    def test_env_one(self):
        assert resolve_dynamic({"CLANGPROBE_DYNAMIC": "1"}) is True

    def test_env_other_values(self):
        assert resolve_dynamic({"CLANGPROBE_DYNAMIC": "0"}) is False
        assert resolve_dynamic({"CLANGPROBE_DYNAMIC": "yes"}) is False

    def test_env_overrides_os_release(self):
        finder = Mock()

        assert resolve_dynamic({"CLANGPROBE_DYNAMIC": "0"}, finder) is False
        finder.assert_not_called()

    def test_os_release_fedora(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text('NAME="Fedora Linux"\nID=fedora\n')

        assert resolve_dynamic({}, lambda: os_release) is True

    def test_os_release_ubuntu(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text('NAME="Ubuntu"\nID=ubuntu\n')

        assert resolve_dynamic({}, lambda: os_release) is False

    def test_no_os_release(self):
        assert resolve_dynamic({}, lambda: None) is False

    def test_without_finder(self):
        assert resolve_dynamic({}) is False

    def test_from_sources_uses_finder(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text("NAME=openSUSE Tumbleweed\n")

        config = ProbeConfig.from_sources(
            _args(project_root=tmp_path), {}, find_os_release=lambda: os_release
        )

        assert config.dynamic is True


def test_path_environment():
    environ = {"PATH": os.pathsep.join(["/usr/local/bin", "", "/usr/bin", ""])}
    assert path_environment(environ) == ("/usr/local/bin", "/usr/bin")


def test_path_environment_unset():
    assert path_environment({}) == ()
