"""Go build tool discovery.

The Go tool is located according to the following heuristics:

    - if the SWIFTGO_GOTOOL environment variable is set, it is parsed as a
      command followed by a sequence of arguments and used to look up the binary;
    - if GOROOT is set either in the program environment or in the Go
      environment configuration file, '$GOROOT/bin/go' is used;
    - otherwise a binary named 'go' is looked up in PATH.

Once found, the tool is asked for its version and its environment.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from swiftgo.errors import ExitError, VersionError
from swiftgo.tools.locator import Locator, override_step, root_step
from swiftgo.tools.tool import Tool
from swiftgo.tools.versions import VersionTriple, parse_go_env, parse_go_version

# Environment variable that end users may set to override the Go tool
GO_OVERRIDE_KEY = "SWIFTGO_GOTOOL"

GO_LOCATOR = Locator(
    "Go tool",
    "go",
    [
        override_step(GO_OVERRIDE_KEY),
        root_step("GOROOT", "bin", "go"),
    ],
)


@dataclass
class GoTool(Tool):
    """Go build tool.

    Attributes:
        version: Version reported by 'go version'
        env: Go environment as reported by 'go env -json'
    """

    version: VersionTriple = field(default_factory=VersionTriple)
    env: dict[str, str] = field(default_factory=dict)


def locate_go_tool(environ: Optional[Mapping[str, str]] = None) -> GoTool:
    """Locate the Go tool and query its version and environment.

    Args:
        environ: Environment used for discovery (defaults to os.environ)

    Raises:
        ConfigError: If the override is malformed or 'go env' returns bad data
        ToolNotFoundError: If the binary cannot be found
        VersionError: If 'go version' or 'go env' exits non-zero
        UnsupportedVersionError: If the version string cannot be parsed
        InvocationError: If the tool cannot be run
    """
    tool = GoTool()
    GO_LOCATOR.locate(tool, environ)

    scope = "Go version"
    version, exit_code = tool.output("version")
    if exit_code == 0:
        scope = "Go environment configuration"
        env, exit_code = tool.output("env", "-json")

    if exit_code != 0:
        exit_error = ExitError(exit_code, tool)
        raise VersionError(f"{scope} could not be retrieved: {exit_error}") from exit_error

    tool.version = parse_go_version(version.decode(errors="replace"), tool.desc)
    tool.env = parse_go_env(env)
    return tool
