"""
Command-line entry point of the swiftgo driver.

swiftgo wraps the Go tool: every argument is forwarded to it unchanged, but
the build runs with CC pointing at swiftgocc, so that each C compiler
invocation made by the Go tool passes through our wrapper first.

Steps:
    1. Locate the Go tool and read its environment
    2. Locate swiftgocc and check that it comes from the same build
    3. Create a temporary build directory (removed on every exit path)
    4. Run the Go tool with the bridge variables in its environment
    5. Exit with the Go tool's exit code
"""

import os
import shlex
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

from swiftgo import output
from swiftgo.bridge import BridgeConfig, build_directory
from swiftgo.errors import InvocationError, SwiftGoError, find_exit_error
from swiftgo.subprocess_utils import child_env, signal_name
from swiftgo.tools.go import GO_OVERRIDE_KEY, locate_go_tool
from swiftgo.tools.swiftc import SWIFTC_FLAGS_KEY, SWIFTC_OVERRIDE_KEY
from swiftgo.tools.swiftgocc import QUERY_KEY, locate_swiftgocc
from swiftgo.tools.tool import ForwardMode
from swiftgo.version import check_revision, get_revision, get_version

PROGRAM = "swiftgo"

# Exit code for driver-side failures
EXIT_FAILURE = 2

REINSTALL_HINT = "reinstalling swiftgo might solve the issue"

USAGE = """SwiftGo is a wrapper for the standard Go tool that adds support for embedded
Swift code when targeting darwin systems.

Usage:

    swiftgo <go command> [go arguments]

SwiftGo reads its configuration from the following environment variables:

    {go:<{w}} - Go tool binary
    {blank:<{w}}   (default: '$GOROOT/bin/go', 'go')
    {swiftc:<{w}} - Swift compiler binary
    {blank:<{w}}   (default: 'xcrun swiftc', 'swiftc')
    {flags:<{w}} - Swift compiler flags
    {blank:<{w}}   (default: '-g -O')

If a package contains files with the extension '.swift.m' and the current build
context has GOOS=darwin, SwiftGo will compile them as Swift code instead of
Objective-C; otherwise, it will report an error.

SwiftGo finds all header files in the package with extension '.h' and makes
them available to Swift code as importable modules: for example, the directive

    import SwiftGo.HEADER

imports all declarations contained in 'HEADER.h' from the module directory,
if such a file is present. As a special case, the directive

    import SwiftGo.CgoExports

imports all declarations - if any - exported by Cgo files in the package.

A Swift to Objective-C bridging header will also be generated automatically
and included in the build, so that all Objective-C code may refer to Swift
classes marked with @objc/@objcMembers attributes.

Finally, SwiftGo scans each Go package for additional C flags specified
by '#cgo CFLAGS' directives and forwards them to the Swift compiler as follows:

    - if the '-mmacosx-version-min=<VERSION>' flag is present, it is used to
      select a target for the Swift compiler;
    - every additional header/framework search path is passed on as a
      module/framework search path.
"""

SHORT_USAGE = """
The Go build tool has been invoked through swiftgo, a wrapper that adds support
for embedded Swift code when targeting darwin systems.

For more about embedding Swift code, run '{program} help swift'.
"""


def usage_text() -> str:
    """Return the long help text shown by 'swiftgo help swift'."""
    width = max(len(GO_OVERRIDE_KEY), len(SWIFTC_OVERRIDE_KEY), len(SWIFTC_FLAGS_KEY))
    return USAGE.format(
        go=GO_OVERRIDE_KEY,
        swiftc=SWIFTC_OVERRIDE_KEY,
        flags=SWIFTC_FLAGS_KEY,
        blank="",
        w=width,
    )


class _Terminated(Exception):
    def __init__(self, signum: int):
        super().__init__(signum)
        self.signum = signum


@contextmanager
def _terminate_on_signals() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into an exception so that cleanup blocks run."""
    signums = [s for s in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if s is not None]

    def handler(signum, frame):  # noqa: ARG001
        raise _Terminated(signum)

    previous = {}
    for signum in signums:
        try:
            previous[signum] = signal.signal(signum, handler)
        except ValueError:
            # not in the main thread
            pass
    try:
        yield
    finally:
        for signum, prev in previous.items():
            signal.signal(signum, prev)


def main_exit_code(argv: Optional[list[str]] = None) -> int:
    """Run the driver and return the process exit code.

    Never exits the interpreter itself, so that cleanup always runs.

    Args:
        argv: Full argument vector, program name first (defaults to sys.argv)
    """
    args = list(sys.argv if argv is None else argv)
    if not args:
        args = [PROGRAM]

    output.configure(output.is_verbose_env(os.environ))
    if output.is_verbose():
        output.log(f"{PROGRAM} {get_version() or '(unknown version)'} revision {get_revision() or '(unknown)'}")

    # a short help message is displayed either when no command is given,
    # or when the help command is invoked with no topic or with topic 'build'
    command = "help"
    short_help = True
    if len(args) > 1:
        command = args[1]
        short_help = False

    if command == "help":
        # no topic is not the same as an empty topic for the Go tool
        topic = " ".join(args[1:])
        if topic in ("help", "help build"):
            short_help = True
        elif topic == "help swift":
            output.write(usage_text())
            return 0

    try:
        go_tool = locate_go_tool()
    except SwiftGoError as e:
        output.error(PROGRAM, str(e))
        exit_error = find_exit_error(e)
        return exit_error.exit_code if exit_error is not None else EXIT_FAILURE
    output.log(f"Using {go_tool.desc} at {go_tool.path} (go{go_tool.version.major}.{go_tool.version.minor})")

    try:
        swiftgocc = locate_swiftgocc()
        check_revision(get_revision(), swiftgocc.revision, swiftgocc.desc)
    except SwiftGoError as e:
        output.error(PROGRAM, f"{e}; {REINSTALL_HINT}")
        return EXIT_FAILURE
    output.log(f"Using {swiftgocc.desc} at {swiftgocc.path} (revision {swiftgocc.revision})")

    try:
        with build_directory() as build_dir, _terminate_on_signals():
            bridge = BridgeConfig(
                build_dir=build_dir,
                cc_override=go_tool.env.get("CC", ""),
                cc=shlex.quote(swiftgocc.path),
            )
            output.log(f"Build directory: {build_dir}")

            # forward invocation to the Go tool
            cmd = go_tool.command(ForwardMode.FORWARD, *args[1:])
            cmd.env = child_env(bridge.to_env(), unset=(QUERY_KEY,))
            _, exit_code = go_tool.invoke(cmd)
    except InvocationError as e:
        output.error(PROGRAM, str(e))
        return EXIT_FAILURE
    except OSError as e:
        output.error(PROGRAM, f"could not create build directory: {e}")
        return EXIT_FAILURE
    except _Terminated as e:
        return 128 + e.signum
    except KeyboardInterrupt:
        return 128 + signal.SIGINT

    name = signal_name(exit_code)
    if name is not None:
        output.log(f"Go tool terminated by {name}")

    if short_help:
        output.write(SHORT_USAGE.format(program=args[0]), to_stderr=exit_code != 0)

    # forward the exit code of the Go tool
    return exit_code


def main() -> None:
    """Console script entry point."""
    sys.exit(main_exit_code())


if __name__ == "__main__":
    main()
