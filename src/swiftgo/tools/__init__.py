"""Locating, configuring and running external tools.

Exports:
    Tool, Command, ForwardMode: Base abstraction
    Locator: Ordered discovery cascade
    GoTool, CCompiler, SwiftCompiler, SwiftGoCC: Tool kinds and their locators
"""

from swiftgo.tools.clang import CC_OVERRIDE_KEY, CCompiler, locate_c_compiler
from swiftgo.tools.go import GO_OVERRIDE_KEY, GoTool, locate_go_tool
from swiftgo.tools.locator import Locator, Resolution
from swiftgo.tools.swiftc import (
    SWIFTC_FLAGS_KEY,
    SWIFTC_OVERRIDE_KEY,
    SwiftCompiler,
    TargetInfo,
    derive_linker_flags,
    locate_swift_compiler,
)
from swiftgo.tools.swiftgocc import QUERY_KEY, SwiftGoCC, locate_swiftgocc
from swiftgo.tools.tool import Command, ForwardMode, Tool
from swiftgo.tools.versions import VersionTriple, parse_go_version, parse_swift_version

__all__ = [
    "CC_OVERRIDE_KEY",
    "CCompiler",
    "Command",
    "ForwardMode",
    "GO_OVERRIDE_KEY",
    "GoTool",
    "Locator",
    "QUERY_KEY",
    "Resolution",
    "SWIFTC_FLAGS_KEY",
    "SWIFTC_OVERRIDE_KEY",
    "SwiftCompiler",
    "SwiftGoCC",
    "TargetInfo",
    "Tool",
    "VersionTriple",
    "derive_linker_flags",
    "locate_c_compiler",
    "locate_go_tool",
    "locate_swift_compiler",
    "locate_swiftgocc",
    "parse_go_version",
    "parse_swift_version",
]
