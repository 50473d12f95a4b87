"""
Console output for the swiftgo driver and swiftgocc.

The Go tool owns standard output and standard error during a build, so
swiftgo keeps quiet unless something goes wrong: failures are reported as a
single line attributed to the program, e.g.

    swiftgo: Go tool "go" not found: executable file 'go' not found in $PATH

Setting SWIFTGO_VERBOSE=1 enables verbose output on stderr. Verbose lines
are prefixed with the elapsed time since program start in MM:SS.cc format
(minutes:seconds.centiseconds), and diagnostic logging is routed through
rich at DEBUG level.

Usage:
    from swiftgo.output import configure, error, log

    configure(verbose=True)
    log("Located Go tool")
    error("swiftgo", "revision mismatch")
"""

import logging
import time
from typing import Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler

# Environment variable enabling verbose output
VERBOSE_KEY = "SWIFTGO_VERBOSE"

# Global state for the timer
_start_time: Optional[float] = None
_verbose: bool = False

# Consoles resolve sys.stdout/sys.stderr at write time
_stdout = Console(highlight=False, emoji=False, soft_wrap=True)
_stderr = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)


def init_timer() -> None:
    """Set the reference time for all timestamps to now."""
    global _start_time
    _start_time = time.time()


def get_elapsed() -> float:
    """
    Get elapsed time since timer initialization.

    Returns:
        Elapsed time in seconds
    """
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """
    Format the current elapsed time as MM:SS.cc.

    Returns:
        Formatted timestamp string
    """
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def is_verbose_env(environ: Mapping[str, str]) -> bool:
    """Check whether the environment requests verbose output."""
    return environ.get(VERBOSE_KEY, "") not in ("", "0")


def configure(verbose: bool) -> None:
    """
    Set verbose mode and configure logging accordingly.

    Args:
        verbose: If True, verbose messages and DEBUG logs are printed on stderr
    """
    global _verbose
    _verbose = verbose
    init_timer()

    root = logging.getLogger("swiftgo")
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if verbose:
        root.addHandler(RichHandler(console=_stderr, show_path=False, markup=False))
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(logging.WARNING)


def is_verbose() -> bool:
    """Return True if verbose mode is enabled."""
    return _verbose


def log(message: str) -> None:
    """
    Log a verbose message with timestamp on stderr.

    Args:
        message: Message to log
    """
    if not _verbose:
        return
    _stderr.print(f"{format_timestamp()} {message}", markup=False)


def error(program: str, message: str) -> None:
    """
    Report a failure as one line attributed to the program on stderr.

    Args:
        program: Program name (e.g., "swiftgo")
        message: Error description
    """
    _stderr.print(f"{program}: {message}", markup=False)


def write(text: str, to_stderr: bool = False) -> None:
    """
    Write text verbatim on stdout (or stderr).

    Args:
        text: Text to write (no newline is appended)
        to_stderr: Write on stderr instead of stdout
    """
    console = _stderr if to_stderr else _stdout
    console.print(text, markup=False, end="")
