"""Facts about the Go standard library."""

from vulndb.modpath import ModulePathError, check_import_path

MODULE_PATH = "std"
"""Name of the standard library module."""

TOOLCHAIN_MODULE_PATH = "cmd"
"""Name of the module containing the toolchain binaries."""


def contains(path: str) -> bool:
    """Report whether path could be part of the standard library.

    It could if it is a valid import path whose first element has no dot.
    """
    try:
        check_import_path(path)
    except ModulePathError:
        return False
    return "." not in path.split("/", 1)[0]