"""Version and metadata parsing for tool self-reports."""

import json
import re
from typing import NamedTuple, Optional, Pattern, Union

from swiftgo.errors import ConfigError, UnsupportedVersionError

GO_VERSION_PATTERN = re.compile(r"\bgo(\d+)\.(\d+)(?:\.(\d+))?\b")
SWIFT_VERSION_PATTERN = re.compile(r"\bversion (\d+)\.(\d+)(?:\.(\d+))?\b")


class VersionTriple(NamedTuple):
    """Major, minor version and patch number, plus the text they came from."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    string: str = ""


def match_version(pattern: Pattern[str], text: str) -> Optional[VersionTriple]:
    """Search text for a version triple; a missing patch number counts as 0."""
    match = pattern.search(text)
    if match is None:
        return None

    major, minor, patch = match.groups()
    return VersionTriple(int(major), int(minor), int(patch) if patch else 0, text)


def parse_go_version(text: str, desc: str = "Go tool") -> VersionTriple:
    """Parse the output of 'go version'.

    Examples:
        "go version go1.22.3 darwin/arm64" -> (1, 22, 3)
        "go1.22" -> (1, 22, 0)

    Raises:
        UnsupportedVersionError: If no go<major>.<minor> token is present
    """
    version = match_version(GO_VERSION_PATTERN, text)
    if version is None:
        raise UnsupportedVersionError(f"Go version could not be retrieved: {desc} returned unsupported version string")
    return version


def parse_swift_version(text: str, desc: str = "Swift compiler") -> VersionTriple:
    """Parse the compilerVersion field reported by 'swiftc -print-target-info'.

    Raises:
        UnsupportedVersionError: If no 'version <major>.<minor>' token is present
    """
    version = match_version(SWIFT_VERSION_PATTERN, text)
    if version is None:
        raise UnsupportedVersionError(f"Swift version could not be retrieved: {desc} returned unsupported version string")
    return version


def parse_go_env(data: Union[bytes, str]) -> dict[str, str]:
    """Decode the output of 'go env -json' into a mapping.

    Raises:
        ConfigError: If the data is not a JSON object of string values
    """
    try:
        env = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise ConfigError(f"Go environment configuration could not be retrieved: {e}") from e

    if not isinstance(env, dict) or not all(isinstance(v, str) for v in env.values()):
        raise ConfigError("Go environment configuration could not be retrieved: expected an object of strings")

    return env
