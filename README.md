# vulndb

A library for working with a database of Go vulnerability reports: reading
and writing the YAML report files, turning GitHub security advisory version
ranges into report version ranges, validating module paths and versions,
working out which module a package path may belong to, querying a module
proxy, and filing issues.

## Modules

- `vulndb.report` – the report data model: `Report`, `Module`, `Package`,
  `VersionRange`, `Reference`, `ReferenceType`, `CVEMeta` and `Version`
  (a `str` with `v()`, `is_valid()`, `before()` and `canonical()`).
  `read(filename)` decodes a YAML report and raises `ReportError` on unknown
  fields or malformed data; `Report.to_string()` and `Report.write(filename)`
  encode it again. `Report.to_dict()` / `Report.from_dict()` convert to and
  from plain data. Also `parse_filepath`, `get_go_id_from_filename` and
  `get_go_advisory_link`.
- `vulndb.ghsa` – `parse_vuln_range` splits an advisory's vulnerable range
  (such as `">= 1.1.0, < 1.1.3"`) into `VulnRangeItem`s; `versions` turns an
  earliest fixed version and a range into report `VersionRange`s, writing a
  `TODO (...)` text where the shape is not one it handles.
- `vulndb.semver` – `is_valid`, `compare`, `canonical`, `build` and
  `prerelease` for versions written with a leading `v`.
- `vulndb.modpath` – `check_path`, `check_import_path`, `check(path, version)`,
  `escape_path` and `escape_version`; invalid input raises `ModulePathError`.
- `vulndb.stdlib` – `contains(path)` tells whether an import path could be part
  of the standard library; `MODULE_PATH` is `"std"` and
  `TOOLCHAIN_MODULE_PATH` is `"cmd"`.
- `vulndb.paths` – `candidate_module_paths` lists the module paths that could
  hold a package path, longest first; `matches_negative_regexp` recognises
  prefixes known not to be modules (mailing list archives, bug trackers and so
  on).
- `vulndb.module_proxy` – `latest_version`, `latest_tagged_version`,
  `module_zip` (returns a `zipfile.ZipFile`) and `proxy_request`; each takes
  the proxy's base URL. A failed request raises `ProxyError`.
- `vulndb.issues` – the `Client` interface with `GitHubClient` (issues in a
  GitHub repository; `api_url` and `session` may be given) and `FakeClient`
  (in memory, for tests), plus `Issue` and `GetIssuesOptions`.
- `vulndb.log` – `Label`, `Event` and `Labels`, with `LineHandler` (one plain
  line per event) and `GCPJSONHandler` (JSON lines for cloud logging).
  `set_handler` installs where events go; without one they are dropped.
- `vulndb.lines` – `read_file_lines` returns a file's trimmed lines, skipping
  blanks and `#` comments.
- `vulndb.gitrepo` – `parse_github_repo` splits `owner/repo` or
  `github.com/owner/repo`.
- `vulndb.config` – `Config` for a worker server; `Config.validate()` raises
  `ValueError` when something required is missing.

## Examples

Read a report and write it back:

```python
from vulndb.report import read

report = read("data/reports/GO-2022-0001.yaml")
print(report.get_aliases())
report.write("copy.yaml")
```

Split a report file path into its parts:

```python
from vulndb.report import parse_filepath

parse_filepath("data/reports/GO-1999-0023.yaml")
# ("data/reports", "GO-1999-0023.yaml", 23)
```

Turn an advisory range into report versions:

```python
from vulndb.ghsa import versions

versions("1.1.3", ">= 1.1.0, < 1.1.3")
# [VersionRange(introduced="1.1.0", fixed="1.1.3")]
```

Find candidate modules for a package path:

```python
from vulndb.paths import candidate_module_paths
from vulndb.stdlib import contains

candidate_module_paths("github.com/google/go-cmp/cmp")
# ["github.com/google/go-cmp/cmp", "github.com/google/go-cmp"]

contains("encoding/json")  # True
```

Log to standard error:

```python
import sys
from vulndb import log

log.set_handler(log.LineHandler(sys.stderr))
log.with_labels("count", 3).info("scanned %s", "example.com/mod")
```

## What it does not do

The package does not check reports for problems or normalise their versions
and URLs, and it has no command-line tool, server or persistent storage. It
does not clone or inspect git repositories, and it does not run vulnerability
scans of modules.

## Tests

The test suite uses pytest and responses, available through the `test`
extra.