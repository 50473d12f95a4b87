"""Generic locator cascade.

Every tool kind is located through the same shape: an ordered list of steps
is tried until one applies, the winning step decides the lookup hint (and
possibly a resolved path and a fixed argument prefix), and finally the tool
is looked up in the executable search path if its path is still unknown.

Steps available to the tool kinds:

    override_step        - environment variable holding a shell-quoted command line
    xcrun_step           - ask the developer tools dispatcher for a concrete path
    root_step            - binary under an installation root (env or Go env file)
    executable_dir_step  - binary next to the running program
"""

import logging
import os
import shlex
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence

from swiftgo.errors import ConfigError
from swiftgo.tools.tool import Tool
from swiftgo.tools.utils import query_executable_dir, query_root, query_xcrun

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of a locator step that applied.

    Attributes:
        hint: Name or path used to look up the binary
        path: Resolved path, when the step already knows it
        args: Fixed argument prefix for every invocation
        label: Text quoted in the tool description (defaults to hint)
    """

    hint: str
    path: str = ""
    args: list[str] = field(default_factory=list)
    label: str = ""


Step = Callable[[Mapping[str, str]], Optional[Resolution]]


def split_command_line(key: str, value: str) -> list[str]:
    """Split a shell-quoted variable value into tokens.

    Raises:
        ConfigError: If the quoting is malformed
    """
    try:
        return shlex.split(value)
    except ValueError as e:
        raise ConfigError(f"{key} environment variable could not be parsed: {e}") from e


def override_step(key: str) -> Step:
    """Step that reads a command line override from an environment variable.

    The first token becomes the lookup hint, the remaining tokens become the
    fixed argument prefix. An unset or empty variable does not apply.
    """

    def step(environ: Mapping[str, str]) -> Optional[Resolution]:
        override = environ.get(key, "")
        if not override:
            return None

        tokens = split_command_line(key, override)
        if not tokens:
            raise ConfigError(f"{key} environment variable could not be parsed: no command given")

        return Resolution(hint=tokens[0], args=tokens[1:], label=override)

    step.__name__ = f"override({key})"
    return step


def xcrun_step(name: str) -> Step:
    """Step that asks xcrun for the path of a tool."""

    def step(environ: Mapping[str, str]) -> Optional[Resolution]:
        path = query_xcrun(name)
        if not path:
            return None
        return Resolution(hint=f"xcrun {name}", path=path)

    step.__name__ = f"xcrun({name})"
    return step


def root_step(key: str, *relative: str) -> Step:
    """Step that roots a binary under an installation directory.

    The root is read from the process environment first, then from the Go
    environment configuration file. Only the first entry of a path list is used.
    """

    def step(environ: Mapping[str, str]) -> Optional[Resolution]:
        root = query_root(key, environ)
        if not root:
            return None
        root = root.split(os.pathsep)[0]
        return Resolution(hint=os.path.join(root, *relative))

    step.__name__ = f"root({key})"
    return step


def executable_dir_step(name: str) -> Step:
    """Step that finds a binary in the directory of the running program."""

    def step(environ: Mapping[str, str]) -> Optional[Resolution]:
        path = query_executable_dir(name)
        if not path:
            return None
        return Resolution(hint=path, path=path)

    step.__name__ = f"executable_dir({name})"
    return step


class Locator:
    """Ordered cascade of discovery steps for one kind of tool."""

    def __init__(self, kind: str, default_hint: str, steps: Sequence[Step]):
        """Initialize the locator.

        Args:
            kind: Tool kind used in descriptions (e.g., "Go tool")
            default_hint: Conventional binary name used when no step applies
            steps: Discovery steps, in priority order
        """
        self.kind = kind
        self.default_hint = default_hint
        self.steps = list(steps)

    def resolve(self, environ: Mapping[str, str]) -> Resolution:
        """Run the steps in order and return the first resolution.

        Raises:
            ConfigError: If an override step finds a malformed value
        """
        for step in self.steps:
            resolution = step(environ)
            if resolution is not None:
                logger.debug("%s: step %s applied (hint %r)", self.kind, step.__name__, resolution.hint)
                return resolution
            logger.debug("%s: step %s not applicable", self.kind, step.__name__)

        return Resolution(hint=self.default_hint)

    def locate(self, tool: Tool, environ: Optional[Mapping[str, str]] = None) -> Tool:
        """Configure the tool from the cascade and look up its binary.

        Args:
            tool: Tool to configure (its desc, hint, path and args are replaced)
            environ: Environment to read (defaults to os.environ)

        Returns:
            The same tool, located

        Raises:
            ConfigError: If an override is malformed
            ToolNotFoundError: If the binary cannot be found
        """
        resolution = self.resolve(os.environ if environ is None else environ)

        tool.hint = resolution.hint
        tool.path = resolution.path
        tool.args = list(resolution.args)
        tool.desc = f'{self.kind} "{resolution.label or resolution.hint}"'

        tool.locate()
        return tool
