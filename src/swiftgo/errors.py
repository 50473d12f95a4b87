"""Error types raised while locating, probing and running tools.

Locators raise these errors and let them propagate; only the driver and the
delegate entry points convert them into process exit codes.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from swiftgo.tools.tool import Tool


class SwiftGoError(Exception):
    """Base class for all swiftgo errors."""

    pass


class ConfigError(SwiftGoError):
    """Raised when an environment variable is missing or cannot be parsed."""

    pass


class ToolNotFoundError(SwiftGoError):
    """Raised when a tool binary cannot be found in the search path."""

    pass


class VersionError(SwiftGoError):
    """Raised when a tool fails while reporting its version or configuration."""

    pass


class UnsupportedVersionError(SwiftGoError):
    """Raised when a tool reports a version string we cannot parse."""

    pass


class RevisionMismatchError(SwiftGoError):
    """Raised when the driver and the delegate were built from different revisions."""

    pass


class InvocationError(SwiftGoError):
    """Raised when a tool process could not be spawned or waited for."""

    pass


class ExitError(SwiftGoError):
    """Reports an unsuccessful exit by some tool while it was being probed.

    Attributes:
        exit_code: Exit status returned by the tool
        tool: The tool that returned it
    """

    def __init__(self, exit_code: int, tool: "Tool"):
        super().__init__(f"{tool.desc} returned non-zero exit code")
        self.exit_code = exit_code
        self.tool = tool


def find_exit_error(error: Optional[BaseException]) -> Optional[ExitError]:
    """Walk the cause chain of an error looking for an ExitError.

    Args:
        error: Error to inspect (may be None)

    Returns:
        The first ExitError found in the chain, or None
    """
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, ExitError):
            return error
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return None
