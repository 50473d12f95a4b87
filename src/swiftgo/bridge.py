"""Environment bridge between the swiftgo driver and swiftgocc.

The driver cannot pass arguments to swiftgocc directly: the Go tool spawns
it in place of the C compiler, with the compiler's argument vector. State is
therefore carried in the child environment instead. BridgeConfig is the
typed form of that state; the driver serializes it with to_env() when
spawning the Go tool and swiftgocc reads it back with from_env().
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from swiftgo.errors import ConfigError
from swiftgo.tools.clang import CC_OVERRIDE_KEY

# Private variable holding the invocation-scoped build directory
BUILD_DIR_KEY = "__SWIFTGO_PRIVATE_BUILDDIR"

# Standard compiler override honoured by the Go tool
CC_KEY = "CC"

# Prefix chosen by analogy with the Go tool's own 'go-build' directories
BUILD_DIR_PREFIX = "swiftgo-build"

MISCONFIGURED_MESSAGE = (
    "environment variables are not configured correctly; ensure swiftgocc is only invoked through the swiftgo driver"
)


@dataclass(frozen=True)
class BridgeConfig:
    """State handed from the driver to swiftgocc.

    Attributes:
        build_dir: Temporary build directory shared by all swiftgocc invocations
        cc_override: Command line of the real C compiler (may be empty)
        cc: Command line the Go tool uses as C compiler, i.e. swiftgocc itself
    """

    build_dir: str
    cc_override: str
    cc: str = "swiftgocc"

    def to_env(self) -> dict[str, str]:
        """Serialize into environment variables."""
        return {
            BUILD_DIR_KEY: self.build_dir,
            CC_OVERRIDE_KEY: self.cc_override,
            CC_KEY: self.cc,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Read the configuration back from the environment.

        The real compiler override may be empty, but it must be present.

        Raises:
            ConfigError: If the build directory or the compiler override is missing
        """
        env = os.environ if environ is None else environ

        build_dir = env.get(BUILD_DIR_KEY, "")
        if not build_dir or CC_OVERRIDE_KEY not in env:
            raise ConfigError(MISCONFIGURED_MESSAGE)

        return cls(build_dir=build_dir, cc_override=env[CC_OVERRIDE_KEY], cc=env.get(CC_KEY, ""))


@contextmanager
def build_directory() -> Iterator[str]:
    """Create a temporary build directory and remove it when the block exits.

    Raises:
        OSError: If the directory cannot be created
    """
    path = tempfile.mkdtemp(prefix=BUILD_DIR_PREFIX)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
