from datetime import datetime, timezone

import pytest

from vulndb.report import (
    CVEMeta,
    Module,
    Package,
    Reference,
    ReferenceType,
    Report,
    ReportError,
    Version,
    VersionRange,
    get_go_advisory_link,
    get_go_id_from_filename,
    parse_filepath,
    read,
)

SAMPLE = """\
modules:
  - module: github.com/gin-gonic/gin
    versions:
      - fixed: 1.6.0
    packages:
      - package: github.com/gin-gonic/gin
        symbols:
          - defaultLogFormatter
description: |
    Unsanitized input in the default logger in github.com/gin-gonic/gin before v1.6.0
    allows remote attackers to inject arbitrary log lines.
published: 2022-01-01T01:01:00Z
cves:
  - CVE-2020-36567
credit: '@thinkerou <thinkerou@example.com>'
references:
  - fix: https://github.com/gin-gonic/gin/pull/2237
  - fix: https://github.com/gin-gonic/gin/commit/a71af9c144f9579f6dbe945341c1df37aaf09c0d
"""


@pytest.fixture
def sample_path(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


def test_read_sample(sample_path):
    r = read(sample_path)
    assert r.modules[0].module == "github.com/gin-gonic/gin"
    assert r.modules[0].versions == [VersionRange(fixed="1.6.0")]
    assert r.modules[0].packages[0].symbols == ["defaultLogFormatter"]
    assert r.description.endswith("arbitrary log lines.\n")
    assert r.published == datetime(2022, 1, 1, 1, 1, tzinfo=timezone.utc)
    assert r.cves == ["CVE-2020-36567"]
    assert r.credit == "@thinkerou <thinkerou@example.com>"
    assert r.references[0].type is ReferenceType.FIX


def test_round_trip(sample_path, tmp_path):
    r = read(sample_path)
    out = tmp_path / "out.yaml"
    r.write(out)
    again = read(out)
    assert again == r
    out2 = tmp_path / "out2.yaml"
    again.write(out2)
    assert out2.read_text(encoding="utf-8") == out.read_text(encoding="utf-8")


def test_unknown_field(tmp_path):
    path = tmp_path / "unknown-field.yaml"
    path.write_text("description: d\nunknown: x\n", encoding="utf-8")
    with pytest.raises(ReportError, match="not found"):
        read(path)


def test_unknown_nested_field(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("modules:\n  - module: a.com/b\n    bogus: 1\n", encoding="utf-8")
    with pytest.raises(ReportError, match="not found"):
        read(path)


def test_numeric_looking_versions_stay_strings(tmp_path):
    path = tmp_path / "r.yaml"
    path.write_text("modules:\n  - module: std\n    versions:\n      - fixed: 1.10\n", encoding="utf-8")
    r = read(path)
    assert r.modules[0].versions[0].fixed == "1.10"
    r.write(path)
    assert read(path).modules[0].versions[0].fixed == "1.10"


def test_to_dict_omits_empty_fields():
    r = Report(description="d", modules=[Module(module="std", packages=[Package(package="time")])])
    assert r.to_dict() == {
        "modules": [{"module": "std", "packages": [{"package": "time"}]}],
        "description": "d",
    }


def test_empty_cve_metadata_kept():
    assert Report(cve_metadata=CVEMeta()).to_dict() == {"cve_metadata": {}}


def test_parse_filepath():
    assert parse_filepath("data/reports/GO-1999-0023.yaml") == (
        "data/reports",
        "GO-1999-0023.yaml",
        23,
    )


def test_parse_filepath_rejects_other_paths():
    with pytest.raises(ReportError, match="not a report filepath"):
        parse_filepath("reports/GO-1999-0023.yaml")


def test_go_id_and_link():
    assert get_go_id_from_filename("data/reports/GO-2022-0001.yaml") == "GO-2022-0001"
    assert get_go_advisory_link("GO-2022-0001") == "https://pkg.go.dev/vuln/GO-2022-0001"


def test_version_methods():
    assert Version("1.2.3").v() == "v1.2.3"
    assert Version("1.2").is_valid()
    assert not Version("1.3.X").is_valid()
    assert Version("1.2.1").before("1.3.0")
    assert not Version("1.3").before("1.2.1")
    assert Version("1.2").canonical() == "1.2.0"


def test_reference_yaml():
    ref = Reference.from_yaml({"fix": "https://go.dev/cl/1"})
    assert ref.type is ReferenceType.FIX
    assert ref.to_yaml() == {"fix": "https://go.dev/cl/1"}
    assert Reference(type="INVALID", url="u").to_yaml() == {"invalid": "u"}


def test_reference_must_have_one_entry():
    with pytest.raises(ReportError, match="mapping with one value"):
        Reference.from_yaml({"fix": "a", "web": "b"})


def test_all_symbols():
    p = Package(symbols=["A"], derived_symbols=["B", "C"])
    assert p.all_symbols() == ["A", "B", "C"]
    assert p.symbols == ["A"]


def test_aliases():
    r = Report(cves=["C1"], ghsas=["G1"])
    assert r.get_aliases() == ["C1", "G1"]
    r.cve_metadata = CVEMeta(id="C2")
    assert r.get_cves() == ["C2"]
    assert r.get_aliases() == ["C2", "G1"]