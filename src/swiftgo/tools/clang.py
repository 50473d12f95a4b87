"""C compiler discovery.

The C compiler is located according to the following heuristics:

    - if the __SWIFTGO_PRIVATE_CC environment variable is set, it is parsed
      as a command followed by a sequence of arguments;
    - otherwise xcrun is asked for the path of 'clang';
    - finally a binary named 'clang' is looked up in PATH.

The variable is private: the driver sets it to the compiler configured in the
Go environment before handing control to the Go tool.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from swiftgo.errors import InvocationError
from swiftgo.tools.locator import Locator, override_step, xcrun_step
from swiftgo.tools.tool import Command, ForwardMode, Tool

logger = logging.getLogger(__name__)

CC_OVERRIDE_KEY = "__SWIFTGO_PRIVATE_CC"

CLANG_TEST_SOURCE = """#ifdef __clang__
#else
#error "Unsupported"
#endif
"""

CC_LOCATOR = Locator(
    "C compiler",
    "clang",
    [
        override_step(CC_OVERRIDE_KEY),
        xcrun_step("clang"),
    ],
)


@dataclass
class CCompiler(Tool):
    """C compiler.

    Attributes:
        is_clang: True if the compiler accepted the Clang sentinel source
    """

    is_clang: bool = False

    def naked_command(self, mode: ForwardMode, *args: str) -> Command:
        """Like command(), but without the fixed argument prefix."""
        with self.suppressed_args():
            return self.command(mode, *args)


def probe_clang(tool: CCompiler) -> bool:
    """Preprocess the sentinel source and report whether the compiler is Clang."""
    cmd = tool.command(ForwardMode.CAPTURE, "-E", "-x", "c", "-", "-o", "-")
    cmd.input = CLANG_TEST_SOURCE.encode()

    try:
        _, exit_code = tool.invoke(cmd)
    except InvocationError as e:
        logger.debug("Clang probe failed: %s", e)
        return False

    return exit_code == 0


def locate_c_compiler(environ: Optional[Mapping[str, str]] = None) -> CCompiler:
    """Locate the C compiler and detect whether it is Clang.

    Raises:
        ConfigError: If the override is malformed
        ToolNotFoundError: If the binary cannot be found
    """
    tool = CCompiler()
    CC_LOCATOR.locate(tool, environ)
    tool.is_clang = probe_clang(tool)
    return tool
