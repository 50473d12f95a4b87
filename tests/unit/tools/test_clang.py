"""Tests for C compiler discovery."""

from unittest.mock import patch

from conftest import posix_only
from swiftgo.tools.clang import CC_OVERRIDE_KEY, CCompiler, locate_c_compiler
from swiftgo.tools.tool import ForwardMode

pytestmark = posix_only


def test_clang_detected(make_script):
    # accepts the sentinel only when invoked with the preprocessing flags
    cc = make_script("cc", '[ "$1 $2 $3 $4" = "-E -x c -" ] && grep -q __clang__ && exit 0; exit 1')
    tool = locate_c_compiler({CC_OVERRIDE_KEY: str(cc)})
    assert tool.path == str(cc)
    assert tool.is_clang


def test_non_clang_compiler_is_not_an_error(make_script):
    cc = make_script("gcc", 'echo "#error Unsupported" >&2; exit 1')
    tool = locate_c_compiler({CC_OVERRIDE_KEY: f"{cc} -m64"})
    assert tool.path == str(cc)
    assert tool.args == ["-m64"]
    assert not tool.is_clang


def test_probe_spawn_failure_leaves_flag_unset(make_script):
    cc = make_script("cc", "exit 0")
    cc.chmod(0o644)
    with patch("swiftgo.tools.tool.shutil.which", return_value=str(cc)):
        tool = locate_c_compiler({CC_OVERRIDE_KEY: str(cc)})
    assert not tool.is_clang


def test_fallback_to_xcrun(make_script):
    cc = make_script("clang", "exit 0")
    with patch("swiftgo.tools.locator.query_xcrun", return_value=str(cc)):
        tool = locate_c_compiler({})
    assert tool.desc == 'C compiler "xcrun clang"'
    assert tool.path == str(cc)


def test_naked_command_drops_prefix():
    tool = CCompiler(desc="cc", hint="cc", path="/usr/bin/cc", args=["-target", "arm64"])
    assert tool.naked_command(ForwardMode.FORWARD, "-c", "a.c").argv == ["/usr/bin/cc", "-c", "a.c"]
    assert tool.command(ForwardMode.FORWARD, "-c").argv == ["/usr/bin/cc", "-target", "arm64", "-c"]
