"""Validation and escaping of module paths, import paths and versions."""

from __future__ import annotations

import json
import string
from enum import Enum

from vulndb import semver


class ModulePathError(ValueError):
    """A module path, import path or version is malformed."""


class _Invalid(Exception):
    pass


class _Kind(Enum):
    MODULE = "module"
    IMPORT = "import"
    FILE = "file"


_ALPHANUM = frozenset(string.ascii_letters + string.digits)
_MOD_PATH_CHARS = _ALPHANUM | frozenset("-._~")
_IMPORT_PATH_CHARS = _MOD_PATH_CHARS | frozenset("+")
_FIRST_ELEM_CHARS = frozenset(string.ascii_lowercase + string.digits + "-.")
_FILE_NAME_PUNCT = frozenset("!#$%&()+,-.=@[]^_{}~ ")
_BAD_WINDOWS_NAMES = (
    "CON", "PRN", "AUX", "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
)


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _char_ok(r: str, kind: _Kind) -> bool:
    if kind is _Kind.MODULE:
        return r in _MOD_PATH_CHARS
    if kind is _Kind.IMPORT:
        return r in _IMPORT_PATH_CHARS
    if ord(r) < 0x80:
        return r in _ALPHANUM or r in _FILE_NAME_PUNCT
    return r.isalpha()


def _check_elem(elem: str, kind: _Kind) -> None:
    if not elem:
        raise _Invalid("empty path element")
    if elem.count(".") == len(elem):
        raise _Invalid(f"invalid path element {_quote(elem)}")
    if elem[0] == "." and kind is _Kind.MODULE:
        raise _Invalid("leading dot in path element")
    if elem[-1] == ".":
        raise _Invalid("trailing dot in path element")
    for r in elem:
        if not _char_ok(r, kind):
            raise _Invalid(f"invalid char {r!r}")
    short = elem.split(".", 1)[0]
    for bad in _BAD_WINDOWS_NAMES:
        if bad.lower() == short.lower():
            raise _Invalid(f"{_quote(short)} disallowed as path element component on Windows")
    if kind is _Kind.FILE:
        tilde = short.rfind("~")
        if 0 <= tilde < len(short) - 1:
            suffix = short[tilde + 1:]
            if all("0" <= c <= "9" for c in suffix):
                raise _Invalid("trailing tilde and digits in path element")


def _check_path(path: str, kind: _Kind) -> None:
    if not path:
        raise _Invalid("empty string")
    if path[0] == "-" and kind is not _Kind.FILE:
        raise _Invalid("leading dash")
    if "//" in path:
        raise _Invalid("double slash")
    if path[-1] == "/":
        raise _Invalid("trailing slash")
    for elem in path.split("/"):
        _check_elem(elem, kind)


def _split_gopkg_in(path: str) -> tuple[str, str, bool]:
    i = len(path)
    if path.endswith("-unstable"):
        i -= len("-unstable")
    while i > 0 and "0" <= path[i - 1] <= "9":
        i -= 1
    if i <= 1 or path[i - 1] != "v" or path[i - 2] != ".":
        return path, "", False
    prefix, path_major = path[: i - 2], path[i - 2:]
    if len(path_major) <= 2 or (path_major[2] == "0" and path_major != ".v0"):
        return path, "", False
    return prefix, path_major, True


def _split_path_version(path: str) -> tuple[str, str, bool]:
    if path.startswith("gopkg.in/"):
        return _split_gopkg_in(path)
    i = len(path)
    dot = False
    while i > 0 and ("0" <= path[i - 1] <= "9" or path[i - 1] == "."):
        if path[i - 1] == ".":
            dot = True
        i -= 1
    if i <= 1 or i == len(path) or path[i - 1] != "v" or path[i - 2] != "/":
        return path, "", True
    prefix, path_major = path[: i - 2], path[i - 2:]
    if dot or len(path_major) <= 2 or path_major[2] == "0" or path_major == "/v1":
        return path, "", False
    return prefix, path_major, True


def check_path(path: str) -> None:
    """Raise ModulePathError unless path is a valid module path."""
    try:
        _check_path(path, _Kind.MODULE)
        first = path.split("/", 1)[0]
        if not first:
            raise _Invalid("leading slash")
        if "." not in first:
            raise _Invalid("missing dot in first path element")
        if path[0] == "-":
            raise _Invalid("leading dash in first path element")
        for r in first:
            if r not in _FIRST_ELEM_CHARS:
                raise _Invalid(f"invalid char {r!r} in first path element")
        if not _split_path_version(path)[2]:
            raise _Invalid("invalid version")
    except _Invalid as exc:
        raise ModulePathError(f"malformed module path {_quote(path)}: {exc}") from None


def check_import_path(path: str) -> None:
    """Raise ModulePathError unless path is a valid import path."""
    try:
        _check_path(path, _Kind.IMPORT)
    except _Invalid as exc:
        raise ModulePathError(f"malformed import path {_quote(path)}: {exc}") from None


def _major(v: str) -> str:
    c = semver.canonical(v)
    return c.split(".", 1)[0] if c else ""


def _match_path_major(v: str, path_major: str) -> bool:
    if path_major.startswith(".v") and path_major.endswith("-unstable"):
        path_major = path_major[: -len("-unstable")]
    if v.startswith("v0.0.0-") and path_major == ".v1":
        return True
    m = _major(v)
    if not path_major:
        return m in ("v0", "v1") or semver.build(v) == "+incompatible"
    return path_major[0] in "/." and m == path_major[1:]


def check(path: str, version: str) -> None:
    """Raise ModulePathError unless path@version is a valid module version."""
    check_path(path)
    if not semver.is_valid(version):
        raise ModulePathError(f"{path}@{version}: invalid version: not a semantic version")
    _, path_major, _ = _split_path_version(path)
    if not _match_path_major(version, path_major):
        if not path_major:
            expected = "v0 or v1"
        else:
            expected = path_major[1:]
            if expected.endswith("-unstable"):
                expected = expected[: -len("-unstable")]
        raise ModulePathError(
            f"{path}@{version}: invalid version: should be {expected}, not {_major(version)}"
        )


def _escape_string(s: str) -> str:
    if any(r == "!" or ord(r) >= 0x80 for r in s):
        raise ModulePathError("internal error: inconsistency in escape")
    return "".join(f"!{r.lower()}" if "A" <= r <= "Z" else r for r in s)


def escape_path(path: str) -> str:
    """Return the case-encoded form of a module path used by module proxies."""
    check_path(path)
    return _escape_string(path)


def escape_version(version: str) -> str:
    """Return the case-encoded form of a version used by module proxies."""
    try:
        _check_elem(version, _Kind.FILE)
        if "!" in version:
            raise _Invalid("contains '!'")
    except _Invalid:
        raise ModulePathError(
            f"version {_quote(version)} invalid: disallowed version string"
        ) from None
    return _escape_string(version)