"""
Tests for clangprobe.toolchain.llvm_config module.
"""

from unittest.mock import Mock, patch

import pytest

from clangprobe.toolchain.llvm_config import (
    LlvmConfigInfo,
    clean_cxx_flags,
    collapse_whitespace,
    output_of,
    query_llvm_config,
)


class TestCleanCxxFlags:
    """Tests for clean_cxx_flags."""

    def test_removes_no_exceptions(self):
        assert clean_cxx_flags("-I/usr/include -fno-exceptions -std=c++17") == (
            "-I/usr/include -std=c++17"
        )

    def test_removes_warning_flags(self):
        flags = "-Wall -Wextra -Wno-unused-parameter -Wcovered-switch-default -O2"
        assert clean_cxx_flags(flags) == "-O2"

    def test_keeps_pass_through_options(self):
        flags = "-Wl,-z,defs -Wa,--noexecstack -Wp,-D_FORTIFY_SOURCE=2"
        assert clean_cxx_flags(flags) == flags

    def test_collapses_whitespace(self):
        assert clean_cxx_flags("  -O2 \n  -g  ") == "-O2 -g"


def test_collapse_whitespace():
    assert collapse_whitespace("-L/usr/lib  \n -lz") == "-L/usr/lib -lz"


class TestOutputOf:
    """Tests for output_of."""

    def test_strips_one_trailing_newline(self):
        with patch("clangprobe.toolchain.llvm_config.subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="14.0.0\n\n")

            assert output_of("/usr/bin/llvm-config", "--version") == "14.0.0\n"

        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["/usr/bin/llvm-config", "--version"]

    def test_no_newline(self):
        with patch("clangprobe.toolchain.llvm_config.subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=1, stdout="")

            assert output_of("llvm-config", "--libdir") == ""


class TestQueryLlvmConfig:
    """Tests for query_llvm_config."""

    def test_query_mocked(self):
        outputs = {
            "--version": "18.1.8\n",
            "--cxxflags": "-I/usr/lib/llvm-18/include -std=c++17 -fno-exceptions -D_GNU_SOURCE\n",
            "--ldflags": "-L/usr/lib/llvm-18/lib   \n",
            "--bindir": "/usr/lib/llvm-18/bin\n",
            "--libdir": "/usr/lib/llvm-18/lib\n",
        }

        def fake_run(argv, **kwargs):
            return Mock(returncode=0, stdout=outputs[argv[1]])

        with patch(
            "clangprobe.toolchain.llvm_config.subprocess.run", side_effect=fake_run
        ):
            info = query_llvm_config("/usr/bin/llvm-config-18")

        assert info == LlvmConfigInfo(
            binary="/usr/bin/llvm-config-18",
            version="18.1.8",
            cxx_flags="-I/usr/lib/llvm-18/include -std=c++17 -D_GNU_SOURCE",
            ld_flags="-L/usr/lib/llvm-18/lib ",
            bindir="/usr/lib/llvm-18/bin",
            libdir="/usr/lib/llvm-18/lib",
        )
        assert info.version_major == "18"

    @pytest.mark.integration
    def test_query_stub(self, fake_llvm):
        info = query_llvm_config(fake_llvm.llvm_config)

        assert info.version == fake_llvm.version
        assert info.bindir == str(fake_llvm.bin_dir)
        assert info.libdir == str(fake_llvm.lib_dir)
        assert "-fno-exceptions" not in info.cxx_flags
        assert "-Wall" not in info.cxx_flags
        assert info.ld_flags == f"-L{fake_llvm.lib_dir} -Wl,-rpath"

    @pytest.mark.integration
    def test_undecodable_output_replaced(self, tmp_path, make_executable):
        stub = make_executable(tmp_path / "llvm-config", "printf '/opt/llvm\\377/lib\\n'")

        assert output_of(stub, "--libdir") == "/opt/llvm\ufffd/lib"
