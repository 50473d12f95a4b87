"""
Entry point of swiftgocc, the internal C compiler wrapper.

The Go tool runs swiftgocc in place of the C compiler, with exactly the
argument vector the compiler would receive. The wrapper recovers the real
compiler from the private variables exported by the driver and forwards the
invocation to it, returning the compiler's exit code unchanged.

swiftgocc refuses to run unless the driver's private variables are present.
"""

import os
import platform
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from swiftgo import output
from swiftgo.bridge import MISCONFIGURED_MESSAGE, BridgeConfig
from swiftgo.errors import ConfigError, SwiftGoError
from swiftgo.tools.clang import CCompiler, locate_c_compiler
from swiftgo.tools.swiftc import SwiftCompiler
from swiftgo.tools.swiftgocc import QUERY_KEY, QUERY_REVISION
from swiftgo.version import get_revision

PROGRAM = "swiftgocc"

# Host machine names mapped to GOARCH values
_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def host_goarch() -> str:
    """Return the GOARCH name of the host machine."""
    machine = platform.machine().lower()
    return _GOARCH.get(machine, machine)


def host_goos() -> str:
    """Return the GOOS name of the host system."""
    if sys.platform == "win32":
        return "windows"
    for goos in ("darwin", "linux", "freebsd", "openbsd", "netbsd"):
        if sys.platform.startswith(goos):
            return goos
    return sys.platform


@dataclass
class DelegateConfig:
    """Configuration of one swiftgocc invocation.

    Attributes:
        target_arch: Target architecture (GOARCH, or the host's)
        target_os: Target operating system (GOOS, or the host's)
        package: Import path of the package being built
        in_package: True if the Go tool reported a package import path
        bridge: State exported by the driver
        c_compiler: Real C compiler, once located
        swift_compiler: Swift compiler, once located
    """

    target_arch: str
    target_os: str
    package: str
    in_package: bool
    bridge: BridgeConfig
    c_compiler: Optional[CCompiler] = None
    swift_compiler: Optional[SwiftCompiler] = None

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> "DelegateConfig":
        """Load the configuration from the environment.

        Raises:
            ConfigError: If the driver's private variables are missing
        """
        env = os.environ if environ is None else environ
        bridge = BridgeConfig.from_env(env)

        return cls(
            target_arch=env.get("GOARCH") or host_goarch(),
            target_os=env.get("GOOS") or host_goos(),
            package=env.get("TOOLEXEC_IMPORTPATH", ""),
            in_package="TOOLEXEC_IMPORTPATH" in env,
            bridge=bridge,
        )


def main_exit_code(argv: Optional[list[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """Run the wrapper and return the process exit code.

    Args:
        argv: Full argument vector, program name first (defaults to sys.argv)
        environ: Environment to read (defaults to os.environ)
    """
    args = list(sys.argv if argv is None else argv)
    env = os.environ if environ is None else environ

    if env.get(QUERY_KEY) == QUERY_REVISION:
        sys.stdout.write(get_revision() + "\n")
        return 0

    output.configure(output.is_verbose_env(env))

    try:
        config = DelegateConfig.load(env)
    except ConfigError:
        output.error(PROGRAM, MISCONFIGURED_MESSAGE)
        return 1

    output.log(f"{PROGRAM}: building {config.package or '<none>'} for {config.target_os}/{config.target_arch}")

    try:
        config.c_compiler = locate_c_compiler(env)
        # TODO: redirect Swift sources to config.swift_compiler once per-file dispatch is designed
        exit_code = config.c_compiler.run(*args[1:])
    except SwiftGoError as e:
        output.error("swiftgo", str(e))
        return 1

    # forward the C compiler's exit code
    return exit_code


def main() -> None:
    """Console script entry point."""
    sys.exit(main_exit_code())


if __name__ == "__main__":
    main()
