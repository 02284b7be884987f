"""Version ranges taken from GitHub Security Advisories."""

from __future__ import annotations

import json
from dataclasses import dataclass

from vulndb.report import Version, VersionRange


@dataclass(frozen=True)
class VulnRangeItem:
    """One "OP VERSION" item of an advisory's vulnerable version range."""

    op: str
    version: str


def parse_vuln_range(s: str) -> list[VulnRangeItem]:
    """Split a comma-separated vulnerable version range into items."""
    items = []
    for part in s.split(","):
        part = part.strip()
        if not part:
            continue
        before, sep, after = part.partition(" ")
        if not sep:
            raise ValueError(f"invalid vuln range item {json.dumps(part)}")
        items.append(VulnRangeItem(before.strip(), after.strip()))
    return items


def versions(earliest_fixed: str, vuln_range: str) -> list[VersionRange]:
    """Derive the introduced and fixed versions from an advisory's fields.

    Only the common shapes are handled; anything else yields a TODO
    for a person to resolve.
    """
    try:
        items = parse_vuln_range(vuln_range)
    except ValueError as exc:
        return [VersionRange(introduced=Version(f"TODO (got error {json.dumps(str(exc))})"))]

    intro = ""
    fixed = ""
    if len(items) == 1 and items[0].op == "<" and items[0].version == earliest_fixed:
        intro = "0.0.0"
        fixed = earliest_fixed
    if (
        len(items) == 2
        and items[0].op == ">="
        and items[1].op == "<"
        and items[1].version == earliest_fixed
    ):
        intro = items[0].version
        fixed = earliest_fixed
    if len(items) == 1 and items[0].op == "<=" and earliest_fixed == "":
        intro = "0.0.0"

    if intro == "":
        intro = (
            f"TODO (earliest fixed {json.dumps(earliest_fixed)}, "
            f"vuln range {json.dumps(vuln_range)})"
        )
    if intro == "0.0.0":
        intro = ""
    return [VersionRange(introduced=Version(intro), fixed=Version(fixed))]