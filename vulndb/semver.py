"""Semantic versions written with a leading "v", as used by Go modules.

Shorthands such as "v1" and "v1.2" are accepted and stand for "v1.0.0"
and "v1.2.0". Invalid versions compare equal to each other and less than
every valid version.
"""

from __future__ import annotations

from dataclasses import dataclass

_IDENT_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-"
)


@dataclass(frozen=True)
class _Parsed:
    major: str
    minor: str
    patch: str
    short: str
    prerelease: str
    build: str


def _is_num(s: str) -> bool:
    return bool(s) and all("0" <= c <= "9" for c in s)


def _is_bad_num(s: str) -> bool:
    return _is_num(s) and len(s) > 1 and s[0] == "0"


def _parse_int(s: str) -> tuple[str, str] | None:
    end = 0
    while end < len(s) and "0" <= s[end] <= "9":
        end += 1
    if end == 0 or (s[0] == "0" and end != 1):
        return None
    return s[:end], s[end:]


def _valid_idents(body: str, *, check_numbers: bool) -> bool:
    for ident in body.split("."):
        if not ident or any(c not in _IDENT_CHARS for c in ident):
            return False
        if check_numbers and _is_bad_num(ident):
            return False
    return True


def _parse(v: str) -> _Parsed | None:
    if not v or v[0] != "v":
        return None
    parsed = _parse_int(v[1:])
    if parsed is None:
        return None
    major, rest = parsed
    if not rest:
        return _Parsed(major, "0", "0", ".0.0", "", "")
    if rest[0] != ".":
        return None
    parsed = _parse_int(rest[1:])
    if parsed is None:
        return None
    minor, rest = parsed
    if not rest:
        return _Parsed(major, minor, "0", ".0", "", "")
    if rest[0] != ".":
        return None
    parsed = _parse_int(rest[1:])
    if parsed is None:
        return None
    patch, rest = parsed

    prerelease = ""
    if rest.startswith("-"):
        plus = rest.find("+")
        prerelease = rest if plus < 0 else rest[:plus]
        if not _valid_idents(prerelease[1:], check_numbers=True):
            return None
        rest = rest[len(prerelease):]

    build = ""
    if rest.startswith("+"):
        build = rest
        if not _valid_idents(build[1:], check_numbers=False):
            return None
        rest = ""

    if rest:
        return None
    return _Parsed(major, minor, patch, "", prerelease, build)


def is_valid(v: str) -> bool:
    """Report whether v is a valid semantic version."""
    return _parse(v) is not None


def canonical(v: str) -> str:
    """Return the canonical form of v, without build metadata, or "" if invalid."""
    p = _parse(v)
    if p is None:
        return ""
    if p.build:
        return v[: len(v) - len(p.build)]
    return v + p.short


def build(v: str) -> str:
    """Return the build suffix of v (including the "+"), or ""."""
    p = _parse(v)
    return p.build if p else ""


def prerelease(v: str) -> str:
    """Return the prerelease suffix of v (including the "-"), or ""."""
    p = _parse(v)
    return p.prerelease if p else ""


def _compare_int(x: str, y: str) -> int:
    if x == y:
        return 0
    if len(x) != len(y):
        return -1 if len(x) < len(y) else 1
    return -1 if x < y else 1


def _compare_prerelease(x: str, y: str) -> int:
    if x == y:
        return 0
    if not x:
        return 1
    if not y:
        return -1
    xs = x[1:].split(".")
    ys = y[1:].split(".")
    for a, b in zip(xs, ys):
        if a == b:
            continue
        a_num, b_num = _is_num(a), _is_num(b)
        if a_num != b_num:
            return -1 if a_num else 1
        if a_num:
            return _compare_int(a, b)
        return -1 if a < b else 1
    return -1 if len(xs) < len(ys) else 1


def compare(v: str, w: str) -> int:
    """Return -1, 0 or 1 as v is less than, equal to or greater than w."""
    if v == w:
        return 0
    pv, pw = _parse(v), _parse(w)
    if pv is None and pw is None:
        return 0
    if pv is None:
        return -1
    if pw is None:
        return 1
    for a, b in ((pv.major, pw.major), (pv.minor, pw.minor), (pv.patch, pw.patch)):
        c = _compare_int(a, b)
        if c:
            return c
    return _compare_prerelease(pv.prerelease, pw.prerelease)