"""Discovery of the internal C compiler wrapper (swiftgocc).

The wrapper is located according to the following heuristics:

    - first, a binary named 'swiftgocc' next to the running program;
    - if GOPATH is set either in the program environment or in the Go
      environment configuration file, '$GOPATH/bin/swiftgocc';
    - otherwise a binary named 'swiftgocc' in PATH.

Once found, the wrapper is asked for its build revision.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional

from swiftgo.errors import InvocationError
from swiftgo.subprocess_utils import child_env
from swiftgo.tools.locator import Locator, executable_dir_step, root_step
from swiftgo.tools.tool import ForwardMode, Tool

logger = logging.getLogger(__name__)

SWIFTGOCC_NAME = "swiftgocc"

# Private variable that makes swiftgocc print a piece of metadata and exit
QUERY_KEY = "__SWIFTGO_PRIVATE_QUERY"
QUERY_REVISION = "revision"

SWIFTGOCC_LOCATOR = Locator(
    "internal C compiler wrapper",
    SWIFTGOCC_NAME,
    [
        executable_dir_step(SWIFTGOCC_NAME),
        root_step("GOPATH", "bin", SWIFTGOCC_NAME),
    ],
)


@dataclass
class SwiftGoCC(Tool):
    """Internal C compiler wrapper.

    Attributes:
        revision: Build identity the wrapper was installed from
    """

    revision: str = ""


def read_revision(tool: Tool) -> str:
    """Ask a swiftgocc binary for its build revision.

    Returns:
        The revision, or an empty string if the binary could not tell
    """
    cmd = tool.command(ForwardMode.CAPTURE)
    cmd.stdout = subprocess.PIPE
    cmd.env = child_env({QUERY_KEY: QUERY_REVISION})

    try:
        output, exit_code = tool.invoke(cmd)
    except InvocationError as e:
        logger.debug("Revision query failed: %s", e)
        return ""

    if exit_code != 0:
        logger.debug("Revision query for %s exited with code %d", tool.desc, exit_code)
        return ""
    return output.decode(errors="replace").strip()


def locate_swiftgocc(environ: Optional[Mapping[str, str]] = None) -> SwiftGoCC:
    """Locate the internal C compiler wrapper and read its revision.

    Raises:
        ToolNotFoundError: If the binary cannot be found
    """
    tool = SwiftGoCC()
    SWIFTGOCC_LOCATOR.locate(tool, environ)
    tool.revision = read_revision(tool)
    return tool
