import pytest

from vulndb.lines import read_file_lines


def test_skips_blank_and_comment_lines(tmp_path):
    p = tmp_path / "list.txt"
    p.write_text("# header\n\n  CVE-2020-15112  \n\t# indented comment\nCVE-2021-3344\r\n   \n")
    assert read_file_lines(p) == ["CVE-2020-15112", "CVE-2021-3344"]


def test_keeps_inner_hash(tmp_path):
    p = tmp_path / "list.txt"
    p.write_text("a # b\n")
    assert read_file_lines(str(p)) == ["a # b"]


def test_empty_file(tmp_path):
    p = tmp_path / "empty.txt"
    p.write_text("")
    assert read_file_lines(p) == []


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file_lines(tmp_path / "absent.txt")