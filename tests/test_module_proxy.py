import io
import zipfile

import pytest
import responses

from vulndb import semver
from vulndb.module_proxy import (
    ProxyError,
    latest_tagged_version,
    latest_version,
    module_zip,
    proxy_request,
)

PROXY = "http://proxy.test"


def _zip_bytes(name, content):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zw:
        zw.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def proxy():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.GET,
            f"{PROXY}/example.com/x/build/@latest",
            body='{"Version":"v0.0.0-20220722180300-9ed544e84dd1","Time":"2022-07-22T18:03:00Z"}',
        )
        rsps.add(responses.GET, f"{PROXY}/example.com/x/build/@v/list", body="")
        rsps.add(
            responses.GET, f"{PROXY}/example.com/x/tools/@v/list", body="v0.1.1\nv0.1.2\n"
        )
        rsps.add(
            responses.GET,
            f"{PROXY}/example.com/x/time/@latest",
            body='{"Version":"v0.0.0-20220722155302-e5dcc9cfc0b9","Time":"2022-07-22T15:53:02Z"}',
        )
        rsps.add(
            responses.GET,
            f"{PROXY}/example.com/x/time/@v/v0.0.0-20220722155302-e5dcc9cfc0b9.zip",
            body=_zip_bytes(
                "example.com/x/time@v0.0.0-20220722155302-e5dcc9cfc0b9/go.mod",
                "module example.com/x/time",
            ),
        )
        rsps.add(responses.GET, f"{PROXY}/example.com/x/missing/@latest", status=404)
        rsps.add(responses.GET, f"{PROXY}/github.com/!foo/bar/@v/list", body="v1.0.0\n")
        yield rsps


def test_latest_version(proxy):
    got = latest_version(PROXY, "example.com/x/build")
    assert got == "v0.0.0-20220722180300-9ed544e84dd1"
    assert semver.is_valid(got)


def test_latest_tagged_version_none(proxy):
    assert latest_tagged_version(PROXY, "example.com/x/build") == ""


def test_latest_tagged_version(proxy):
    got = latest_tagged_version(PROXY, "example.com/x/tools")
    assert semver.is_valid(got)
    assert got == "v0.1.2"


def test_module_zip(proxy):
    m = "example.com/x/time"
    v = latest_version(PROXY, m)
    zf = module_zip(PROXY, m, v)
    assert zf.namelist() == [
        "example.com/x/time@v0.0.0-20220722155302-e5dcc9cfc0b9/go.mod"
    ]
    assert zf.read(zf.namelist()[0]) == b"module example.com/x/time"


def test_not_found_raises(proxy):
    with pytest.raises(ProxyError, match="returned status 404"):
        latest_version(PROXY, "example.com/x/missing")


def test_uppercase_path_is_escaped(proxy):
    assert proxy_request(PROXY, "github.com/Foo/bar", "/@v/list") == b"v1.0.0\n"


def test_bad_module_path_raises():
    with pytest.raises(ProxyError, match="module path"):
        proxy_request(PROXY, "nodot/path", "/@latest")