"""Swift compiler discovery and linker flag derivation.

The Swift compiler is located according to the following heuristics:

    - if the SWIFTGO_SWIFTC environment variable is set, it is parsed as a
      command followed by a sequence of arguments;
    - otherwise xcrun is asked for the path of 'swiftc';
    - finally a binary named 'swiftc' is looked up in PATH.

Flags from SWIFTGO_SWIFTFLAGS and caller-supplied flags are then appended to
the fixed argument prefix, and the compiler is asked for its target
information ('-print-target-info'), from which the version and the flags
needed to link Swift code into a C program are derived.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from swiftgo.errors import ExitError, VersionError
from swiftgo.tools.locator import Locator, override_step, split_command_line, xcrun_step
from swiftgo.tools.tool import Tool
from swiftgo.tools.utils import query_sdk_path
from swiftgo.tools.versions import VersionTriple, parse_swift_version

logger = logging.getLogger(__name__)

# Environment variable that end users may set to override the Swift compiler
SWIFTC_OVERRIDE_KEY = "SWIFTGO_SWIFTC"

# Environment variable that end users may set to pass additional flags to the Swift compiler
SWIFTC_FLAGS_KEY = "SWIFTGO_SWIFTFLAGS"

# Required for Objective-C interop regardless of the target
BASELINE_LINKER_FLAGS = ("-lobjc", "-Wl,-no_objc_category_merging")

SWIFTC_LOCATOR = Locator(
    "Swift compiler",
    "swiftc",
    [
        override_step(SWIFTC_OVERRIDE_KEY),
        xcrun_step("swiftc"),
    ],
)


def _expect(value, kind: type, what: str):
    # null decodes to the zero value
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise ValueError(f"{what}: expected {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class TargetInfo:
    """Target information reported by 'swiftc -print-target-info'.

    Only the fields needed to derive linker flags are decoded.
    """

    compiler_version: str = ""
    compatibility_libraries: list[str] = field(default_factory=list)
    libraries_require_rpath: bool = False
    sdk_path: str = ""
    runtime_library_paths: list[str] = field(default_factory=list)
    _sdk_queried: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "TargetInfo":
        """Decode a target information document.

        Missing and null fields take their zero value.

        Raises:
            ValueError: If the data is not valid JSON or a field has the wrong type
        """
        doc = _expect(json.loads(data), dict, "document")
        target = _expect(doc.get("target", {}), dict, "target")
        paths = _expect(doc.get("paths", {}), dict, "paths")

        libraries = []
        for entry in _expect(target.get("compatibilityLibraries", []), list, "compatibilityLibraries"):
            entry = _expect(entry, dict, "compatibilityLibraries entry")
            libraries.append(_expect(entry.get("libraryName", ""), str, "libraryName"))

        runtime_paths = _expect(paths.get("runtimeLibraryPaths", []), list, "runtimeLibraryPaths")

        return cls(
            compiler_version=_expect(doc.get("compilerVersion", ""), str, "compilerVersion"),
            compatibility_libraries=libraries,
            libraries_require_rpath=_expect(target.get("librariesRequireRPath", False), bool, "librariesRequireRPath"),
            sdk_path=_expect(paths.get("sdkPath", ""), str, "sdkPath"),
            runtime_library_paths=[_expect(p, str, "runtimeLibraryPaths entry") for p in runtime_paths],
        )

    def resolve_sdk_path(self) -> str:
        """Return the SDK path, querying xcrun once if the compiler did not report one."""
        if not self.sdk_path and not self._sdk_queried:
            self._sdk_queried = True
            self.sdk_path = query_sdk_path()
            logger.debug("Queried SDK path: %r", self.sdk_path)
        return self.sdk_path

    def find_library(self, name: str) -> str:
        """Attempt to find an absolute path for a static library.

        Each runtime library path is probed first as-is, then rooted under
        the SDK path.

        Returns:
            Path to the archive, or an empty string if none was found
        """
        if os.path.isabs(name) and os.path.isfile(name):
            return name

        candidates = (f"lib{name}.a", f"{name}.a")

        for search_path in self.runtime_library_paths:
            for candidate in candidates:
                lib_path = os.path.join(search_path, candidate)
                if os.path.isfile(lib_path):
                    return lib_path

            sdk_path = self.resolve_sdk_path()
            if not sdk_path:
                continue

            for candidate in candidates:
                lib_path = os.path.join(sdk_path, search_path.lstrip("/\\"), candidate)
                if os.path.isfile(lib_path):
                    return lib_path

        return ""


def derive_linker_flags(info: TargetInfo) -> list[str]:
    """Compute the flags needed to link Swift code for the given target.

    Order matters to the linker: baseline flags, one entry per compatibility
    library, library search paths, then run paths.
    """
    flags = list(BASELINE_LINKER_FLAGS)

    for lib in info.compatibility_libraries:
        path = info.find_library(lib)
        if path:
            flags.extend(["-force_load", path])
        else:
            flags.append("-l" + lib)

    for path in info.runtime_library_paths:
        flags.append("-L" + path)

    if info.libraries_require_rpath:
        for path in info.runtime_library_paths:
            flags.extend(["-rpath", path])

    return flags


@dataclass
class SwiftCompiler(Tool):
    """Swift compiler.

    Attributes:
        version: Version reported in the target information
        linker_flags: Flags to pass to the linker when linking Swift modules
            compiled with the current configuration
    """

    version: VersionTriple = field(default_factory=VersionTriple)
    linker_flags: list[str] = field(default_factory=lambda: list(BASELINE_LINKER_FLAGS))


def locate_swift_compiler(
    flags: Sequence[str] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> SwiftCompiler:
    """Locate the Swift compiler and derive its linker flags.

    Args:
        flags: Flags appended after user flags (e.g., a minimum target version)
        environ: Environment used for discovery (defaults to os.environ)

    Raises:
        ConfigError: If an environment variable is malformed
        ToolNotFoundError: If the binary cannot be found
        VersionError: If target information cannot be retrieved or decoded
        UnsupportedVersionError: If the version string cannot be parsed
        InvocationError: If the compiler cannot be run
    """
    env = os.environ if environ is None else environ
    user_flags = split_command_line(SWIFTC_FLAGS_KEY, env.get(SWIFTC_FLAGS_KEY, ""))

    tool = SwiftCompiler()
    SWIFTC_LOCATOR.locate(tool, env)

    tool.args.extend(user_flags)
    tool.args.extend(flags)

    data, exit_code = tool.output("-print-target-info")
    if exit_code != 0:
        exit_error = ExitError(exit_code, tool)
        raise VersionError(f"Swift target information could not be retrieved: {exit_error}") from exit_error

    try:
        info = TargetInfo.from_json(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise VersionError(
            f"Swift target information could not be retrieved: {tool.desc} returned invalid or unsupported data"
        ) from e

    tool.version = parse_swift_version(info.compiler_version, tool.desc)
    tool.linker_flags = derive_linker_flags(info)
    return tool
