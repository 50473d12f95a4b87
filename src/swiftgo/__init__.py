"""swiftgo - Go build tool wrapper that adds support for embedded Swift code.

The swiftgo driver forwards its arguments to the Go tool after pointing the
CC variable at swiftgocc, an internal wrapper that stands in for the C
compiler during the build.
"""

__version__ = "0.1.0"
