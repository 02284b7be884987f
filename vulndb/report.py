"""Vulnerability reports: their data model and YAML encoding."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

import yaml

from vulndb import semver


class ReportError(ValueError):
    """A report could not be decoded or a report path is malformed."""


class Version(str):
    """A semantic version without the leading "v", as used by OSV."""

    __slots__ = ()

    def v(self) -> str:
        """Return the version with a "v" prefix."""
        return "v" + self

    def is_valid(self) -> bool:
        """Report whether this is a valid semantic version."""
        return semver.is_valid(self.v())

    def before(self, other: str) -> bool:
        """Report whether this version is less than other."""
        return semver.compare(self.v(), Version(other).v()) < 0

    def canonical(self) -> str:
        """Return the canonical formatting of the version."""
        return semver.canonical(self.v()).removeprefix("v")


EXCLUDED_REASONS = (
    "NOT_IMPORTABLE",
    "NOT_GO_CODE",
    "NOT_A_VULNERABILITY",
    "EFFECTIVELY_PRIVATE",
    "DEPENDENT_VULNERABILITY",
)
"""The reasons a report may be excluded from the database."""


class ReferenceType(str, Enum):
    """The kind of a reference link, as defined by OSV."""

    ADVISORY = "ADVISORY"
    ARTICLE = "ARTICLE"
    REPORT = "REPORT"
    FIX = "FIX"
    PACKAGE = "PACKAGE"
    EVIDENCE = "EVIDENCE"
    WEB = "WEB"


REFERENCE_TYPES = tuple(ReferenceType)

NIST_PREFIX = "https://nvd.nist.gov/vuln/detail/"
MITRE_PREFIX = "https://cve.org/CVERecord?id="
_GHSA_URL_PREFIX = "https://github.com/advisories/"
_GO_URL_PREFIX = "https://pkg.go.dev/vuln/"


# --- decoding helpers -------------------------------------------------------


def _mapping(data: Any, allowed: tuple[str, ...], type_name: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ReportError(f"cannot decode {type(data).__name__} into {type_name}")
    for key in data:
        if key not in allowed:
            raise ReportError(f"field {key} not found in type {type_name}")
    return data


def _sequence(data: Any, where: str) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ReportError(f"{where}: cannot decode {type(data).__name__} into a sequence")
    return data


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise ReportError(f"{where}: cannot decode {type(value).__name__} into a string")


def _strings(data: Any, where: str) -> list[str]:
    return [_string(item, where) for item in _sequence(data, where)]


def _time(value: Any, where: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ReportError(f"{where}: invalid time {value!r}") from None
    raise ReportError(f"{where}: cannot decode {type(value).__name__} into a time")


# --- data model -------------------------------------------------------------


@dataclass
class VersionRange:
    """A range of affected versions: introduced (inclusive) to fixed (exclusive)."""

    introduced: Version = Version("")
    fixed: Version = Version("")

    def __post_init__(self) -> None:
        self.introduced = Version(self.introduced)
        self.fixed = Version(self.fixed)

    def _to_yaml(self) -> dict:
        out: dict[str, Any] = {}
        if self.introduced:
            out["introduced"] = str(self.introduced)
        if self.fixed:
            out["fixed"] = str(self.fixed)
        return out

    @classmethod
    def _from_yaml(cls, data: Any) -> VersionRange:
        d = _mapping(data, ("introduced", "fixed"), "VersionRange")
        return cls(
            introduced=Version(_string(d.get("introduced"), "introduced")),
            fixed=Version(_string(d.get("fixed"), "fixed")),
        )


@dataclass
class Package:
    """An affected package and the vulnerable symbols in it."""

    package: str = ""
    goos: list[str] = field(default_factory=list)
    goarch: list[str] = field(default_factory=list)
    symbols: list[str] = field(default_factory=list)
    derived_symbols: list[str] = field(default_factory=list)

    def all_symbols(self) -> list[str]:
        """Return both the original and the derived symbols."""
        return [*self.symbols, *self.derived_symbols]

    def _to_yaml(self) -> dict:
        out: dict[str, Any] = {}
        if self.package:
            out["package"] = str(self.package)
        for key in ("goos", "goarch", "symbols", "derived_symbols"):
            values = getattr(self, key)
            if values:
                out[key] = [str(v) for v in values]
        return out

    @classmethod
    def _from_yaml(cls, data: Any) -> Package:
        d = _mapping(
            data, ("package", "goos", "goarch", "symbols", "derived_symbols"), "Package"
        )
        return cls(
            package=_string(d.get("package"), "package"),
            goos=_strings(d.get("goos"), "goos"),
            goarch=_strings(d.get("goarch"), "goarch"),
            symbols=_strings(d.get("symbols"), "symbols"),
            derived_symbols=_strings(d.get("derived_symbols"), "derived_symbols"),
        )


@dataclass
class Module:
    """An affected module, its version ranges and packages."""

    module: str = ""
    versions: list[VersionRange] = field(default_factory=list)
    vulnerable_at: Version = Version("")
    packages: list[Package] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.vulnerable_at = Version(self.vulnerable_at)

    def _to_yaml(self) -> dict:
        out: dict[str, Any] = {}
        if self.module:
            out["module"] = str(self.module)
        if self.versions:
            out["versions"] = [vr._to_yaml() for vr in self.versions]
        if self.vulnerable_at:
            out["vulnerable_at"] = str(self.vulnerable_at)
        if self.packages:
            out["packages"] = [p._to_yaml() for p in self.packages]
        return out

    @classmethod
    def _from_yaml(cls, data: Any) -> Module:
        d = _mapping(data, ("module", "versions", "vulnerable_at", "packages"), "Module")
        return cls(
            module=_string(d.get("module"), "module"),
            versions=[
                VersionRange._from_yaml(v) for v in _sequence(d.get("versions"), "versions")
            ],
            vulnerable_at=Version(_string(d.get("vulnerable_at"), "vulnerable_at")),
            packages=[
                Package._from_yaml(p) for p in _sequence(d.get("packages"), "packages")
            ],
        )


@dataclass
class CVEMeta:
    """CVE information for a CVE that is assigned by this database."""

    id: str = ""
    cwe: str = ""
    description: str = ""

    def _to_yaml(self) -> dict:
        return {
            key: str(getattr(self, key))
            for key in ("id", "cwe", "description")
            if getattr(self, key)
        }

    @classmethod
    def _from_yaml(cls, data: Any) -> CVEMeta:
        d = _mapping(data, ("id", "cwe", "description"), "CVEMeta")
        return cls(
            id=_string(d.get("id"), "id"),
            cwe=_string(d.get("cwe"), "cwe"),
            description=_string(d.get("description"), "description"),
        )


def _type_name(t: ReferenceType | str) -> str:
    return t.value if isinstance(t, ReferenceType) else str(t)


@dataclass
class Reference:
    """A link to an external resource.

    In YAML a reference is a one-entry mapping from lower-case type to URL.
    A type outside ReferenceType is kept as a plain string.
    """

    type: ReferenceType | str
    url: str

    def __post_init__(self) -> None:
        try:
            self.type = ReferenceType(self.type)
        except ValueError:
            self.type = str(self.type)

    def to_yaml(self) -> dict[str, str]:
        """Return the one-entry mapping that represents this reference."""
        return {_type_name(self.type).lower(): str(self.url)}

    @classmethod
    def from_yaml(cls, data: Any) -> Reference:
        """Build a reference from its one-entry mapping."""
        if (
            not isinstance(data, dict)
            or len(data) != 1
            or not all(isinstance(x, str) for item in data.items() for x in item)
        ):
            raise ReportError("report.Reference must contain a mapping with one value")
        ((kind, url),) = data.items()
        return cls(type=kind.upper(), url=url)


_REPORT_FIELDS = (
    "do_not_export",
    "excluded",
    "modules",
    "description",
    "published",
    "withdrawn",
    "cves",
    "ghsas",
    "credit",
    "references",
    "cve_metadata",
)


@dataclass
class Report:
    """A vulnerability report in the database."""

    do_not_export: bool = False
    excluded: str = ""
    modules: list[Module] = field(default_factory=list)
    description: str = ""
    published: datetime | None = None
    withdrawn: datetime | None = None
    cves: list[str] = field(default_factory=list)
    ghsas: list[str] = field(default_factory=list)
    credit: str = ""
    references: list[Reference] = field(default_factory=list)
    cve_metadata: CVEMeta | None = None

    def get_cves(self) -> list[str]:
        """Return all CVE IDs of the report."""
        if self.cve_metadata is not None:
            return [self.cve_metadata.id]
        return list(self.cves)

    def get_aliases(self) -> list[str]:
        """Return all aliases (CVEs, then GHSAs) of the report."""
        return [*self.get_cves(), *self.ghsas]

    def to_dict(self) -> dict[str, Any]:
        """Return the report as plain data, leaving out empty fields."""
        out: dict[str, Any] = {}
        if self.do_not_export:
            out["do_not_export"] = True
        if self.excluded:
            out["excluded"] = str(self.excluded)
        if self.modules:
            out["modules"] = [m._to_yaml() for m in self.modules]
        if self.description:
            out["description"] = str(self.description)
        if self.published is not None:
            out["published"] = self.published
        if self.withdrawn is not None:
            out["withdrawn"] = self.withdrawn
        if self.cves:
            out["cves"] = [str(c) for c in self.cves]
        if self.ghsas:
            out["ghsas"] = [str(g) for g in self.ghsas]
        if self.credit:
            out["credit"] = str(self.credit)
        if self.references:
            out["references"] = [r.to_yaml() for r in self.references]
        if self.cve_metadata is not None:
            out["cve_metadata"] = self.cve_metadata._to_yaml()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Report:
        """Build a report from plain data; unknown fields are an error."""
        d = _mapping(data, _REPORT_FIELDS, "Report")
        do_not_export = d.get("do_not_export", False)
        if do_not_export is None:
            do_not_export = False
        if not isinstance(do_not_export, bool):
            raise ReportError("do_not_export: cannot decode value into a bool")
        cve_metadata = d.get("cve_metadata")
        return cls(
            do_not_export=do_not_export,
            excluded=_string(d.get("excluded"), "excluded"),
            modules=[Module._from_yaml(m) for m in _sequence(d.get("modules"), "modules")],
            description=_string(d.get("description"), "description"),
            published=_time(d.get("published"), "published"),
            withdrawn=_time(d.get("withdrawn"), "withdrawn"),
            cves=_strings(d.get("cves"), "cves"),
            ghsas=_strings(d.get("ghsas"), "ghsas"),
            credit=_string(d.get("credit"), "credit"),
            references=[
                Reference.from_yaml(r) for r in _sequence(d.get("references"), "references")
            ],
            cve_metadata=None if cve_metadata is None else CVEMeta._from_yaml(cve_metadata),
        )

    def to_string(self) -> str:
        """Encode the report as YAML."""
        return yaml.dump(
            self.to_dict(),
            Dumper=_Dumper,
            indent=4,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=2**31 - 1,
        )

    def write(self, filename: str | os.PathLike[str]) -> None:
        """Write the report to filename as YAML."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.to_string())


# --- YAML dialect -----------------------------------------------------------
# Numbers are kept as strings so that versions such as "1.10" survive intact.

_NUMERIC_TAGS = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})


def _without_numbers(resolvers: dict) -> dict:
    return {
        first: [(tag, regexp) for tag, regexp in entries if tag not in _NUMERIC_TAGS]
        for first, entries in resolvers.items()
    }


class _Loader(yaml.SafeLoader):
    pass


_Loader.yaml_implicit_resolvers = _without_numbers(yaml.SafeLoader.yaml_implicit_resolvers)


class _Dumper(yaml.SafeDumper):
    def increase_indentation(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indentation(flow, False)


_Dumper.yaml_implicit_resolvers = _without_numbers(yaml.SafeDumper.yaml_implicit_resolvers)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


def _represent_datetime(dumper: yaml.SafeDumper, data: datetime) -> yaml.ScalarNode:
    text = data.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return dumper.represent_scalar("tag:yaml.org,2002:timestamp", text)


_Dumper.add_representer(str, _represent_str)
_Dumper.add_representer(datetime, _represent_datetime)


# --- files ------------------------------------------------------------------


def read(filename: str | os.PathLike[str]) -> Report:
    """Read a report in YAML format from filename."""
    with open(filename, encoding="utf-8") as f:
        try:
            data = yaml.load(f, Loader=_Loader)
        except yaml.YAMLError as exc:
            raise ReportError(f"{os.fspath(filename)}: yaml.Decode: {exc}") from exc
    if data is None:
        raise ReportError(f"{os.fspath(filename)}: yaml.Decode: empty document")
    try:
        return Report.from_dict(data)
    except ReportError as exc:
        raise ReportError(f"{os.fspath(filename)}: yaml.Decode: {exc}") from exc


_REPORT_FILEPATH = re.compile(r"^(data/\w+)/(GO-\d\d\d\d-0*(\d+)\.yaml)$", re.ASCII)


def parse_filepath(path: str) -> tuple[str, str, int]:
    """Split a report path into (folder, filename, issue number)."""
    m = _REPORT_FILEPATH.match(path)
    if m is None:
        raise ReportError(f"{path}: not a report filepath")
    return m.group(1), m.group(2), int(m.group(3))


def get_go_id_from_filename(filename: str) -> str:
    """Return the base name of filename without its extension."""
    base = os.path.basename(filename)
    dot = base.rfind(".")
    return base[:dot] if dot >= 0 else base


def get_go_advisory_link(id: str) -> str:
    """Return the link to the advisory page for a Go vulnerability ID."""
    return f"{_GO_URL_PREFIX}{id}"