"""Tool base abstraction.

A Tool bundles everything needed to invoke an external binary: a
user-readable description used in error messages, the hint used to look the
binary up, the resolved path and a fixed prefix of arguments that is passed
on every invocation.

Invocation results follow one contract across run(), output() and
combined_output(): a child that terminates normally is never an error, its
exit status is returned to the caller; only a failure to spawn or wait for
the child raises InvocationError.
"""

import logging
import shutil
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, Iterator, Optional

from swiftgo.errors import InvocationError, ToolNotFoundError
from swiftgo.subprocess_utils import normalize_returncode, safe_run

logger = logging.getLogger(__name__)


class ForwardMode(IntFlag):
    """Set of streams that are wired to the streams of the running process.

    Streams whose bit is unset are connected to the null device, unless a
    method of Tool captures them explicitly.
    """

    CAPTURE = 0
    INPUT = 1
    OUTPUT = 2
    ERRORS = 4

    FORWARD = INPUT | OUTPUT | ERRORS

    CAPTURE_INPUT = OUTPUT | ERRORS
    CAPTURE_OUTPUT = INPUT | ERRORS
    CAPTURE_ERRORS = INPUT | OUTPUT


@dataclass
class Command:
    """Process descriptor built by Tool.command.

    Stream attributes take the same values as the corresponding arguments
    of subprocess.run: None inherits the stream of the running process.

    Attributes:
        argv: Full argument vector, executable first
        stdin: Standard input wiring
        stdout: Standard output wiring
        stderr: Standard error wiring
        input: Bytes fed to standard input (takes precedence over stdin)
        env: Environment for the child (None inherits os.environ)
    """

    argv: list[str]
    stdin: Any = subprocess.DEVNULL
    stdout: Any = subprocess.DEVNULL
    stderr: Any = subprocess.DEVNULL
    input: Optional[bytes] = None
    env: Optional[dict[str, str]] = None

    def run(self) -> subprocess.CompletedProcess:
        """Start the process and block until it exits.

        Raises:
            OSError: If the process could not be spawned
        """
        kwargs: dict[str, Any] = {
            "stdout": self.stdout,
            "stderr": self.stderr,
            "env": self.env,
            "check": False,
        }
        if self.input is not None:
            kwargs["input"] = self.input
        else:
            kwargs["stdin"] = self.stdin
        return safe_run(self.argv, **kwargs)


@dataclass
class Tool:
    """Path, arguments and description of a binary tool.

    Attributes:
        desc: User-readable description of the tool for error messages
        hint: Name or path used to look up the tool binary
        path: Absolute path to the tool binary, empty while unknown
        args: Arguments passed on whenever the tool is invoked
    """

    desc: str = ""
    hint: str = ""
    path: str = ""
    args: list[str] = field(default_factory=list)

    def locate(self) -> None:
        """Look up the tool binary from the hint, if the path is still unknown.

        Raises:
            ToolNotFoundError: If no executable matches the hint
        """
        if self.path:
            return

        path = shutil.which(self.hint)
        if path is None:
            raise ToolNotFoundError(f"{self.desc} not found: executable file {self.hint!r} not found in $PATH")
        self.path = path
        logger.debug("Located %s at %s", self.desc, path)

    def command(self, mode: ForwardMode, *args: str) -> Command:
        """Build a command that executes the tool with the given arguments.

        Arguments in self.args are placed before the given ones. Streams
        selected by mode are wired to the streams of the running process.
        Nothing is executed until the command is run.
        """
        cmd = Command(argv=[self.path, *self.args, *args])

        if mode & ForwardMode.INPUT:
            cmd.stdin = None
        if mode & ForwardMode.OUTPUT:
            cmd.stdout = None
        if mode & ForwardMode.ERRORS:
            cmd.stderr = None

        return cmd

    @contextmanager
    def suppressed_args(self) -> Iterator["Tool"]:
        """Temporarily clear the fixed argument prefix within a with-block."""
        default_args = self.args
        self.args = []
        try:
            yield self
        finally:
            self.args = default_args

    def invoke(self, cmd: Command) -> tuple[bytes, int]:
        """Run a command built by this tool and normalize its result.

        Returns:
            Tuple of (captured output, exit code). Output is empty unless the
            command captures a stream.

        Raises:
            InvocationError: If the process could not be spawned or waited for
        """
        logger.debug("Running %s", cmd.argv)
        try:
            result = cmd.run()
        except OSError as e:
            raise InvocationError(f"{self.desc} invocation failed: {e}") from e

        return result.stdout or b"", normalize_returncode(result.returncode)

    def run(self, *args: str) -> int:
        """Run the tool with all streams forwarded and return its exit code.

        A non-zero exit code is not an error.
        """
        _, exit_code = self.invoke(self.command(ForwardMode.FORWARD, *args))
        return exit_code

    def output(self, *args: str) -> tuple[bytes, int]:
        """Run the tool and return its standard output and exit code.

        Input and error streams are forwarded.
        """
        cmd = self.command(ForwardMode.CAPTURE_OUTPUT, *args)
        cmd.stdout = subprocess.PIPE
        return self.invoke(cmd)

    def combined_output(self, *args: str) -> tuple[bytes, int]:
        """Run the tool and return its combined output and error streams and exit code.

        Only the input stream is forwarded.
        """
        cmd = self.command(ForwardMode.INPUT, *args)
        cmd.stdout = subprocess.PIPE
        cmd.stderr = subprocess.STDOUT
        return self.invoke(cmd)
