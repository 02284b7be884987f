"""Convenience functions for talking to a module proxy."""

from __future__ import annotations

import functools
import io
import json
import zipfile

import requests

from vulndb import modpath, semver

_TIMEOUT = 60


class ProxyError(OSError):
    """A module proxy request failed or was malformed."""


def proxy_request(proxy_url: str, module_path: str, suffix: str) -> bytes:
    """Fetch proxy_url/<escaped module_path><suffix> and return the body."""
    try:
        escaped = modpath.escape_path(module_path)
    except modpath.ModulePathError as exc:
        raise ProxyError(f"module path {module_path}: {exc}") from exc
    url = f"{proxy_url}/{escaped}{suffix}"
    resp = requests.get(url, timeout=_TIMEOUT)
    if resp.status_code != 200:
        raise ProxyError(f"{url} returned status {resp.status_code}")
    return resp.content


def latest_version(proxy_url: str, module_path: str) -> str:
    """Return the version reported by the proxy's "@latest" endpoint."""
    body = proxy_request(proxy_url, module_path, "/@latest")
    info = json.loads(body)
    version = info.get("Version", "") if isinstance(info, dict) else ""
    return version if isinstance(version, str) else ""


def latest_tagged_version(proxy_url: str, module_path: str) -> str:
    """Return the highest tagged version listed by the proxy, or "" if none."""
    body = proxy_request(proxy_url, module_path, "/@v/list")
    listed = body.decode("utf-8", errors="replace").strip().split("\n")
    return max(listed, key=functools.cmp_to_key(semver.compare))


def module_zip(proxy_url: str, module_path: str, version: str) -> zipfile.ZipFile:
    """Download and open the zip of module_path at version."""
    escaped_version = modpath.escape_version(version)
    body = proxy_request(proxy_url, module_path, f"/@v/{escaped_version}.zip")
    return zipfile.ZipFile(io.BytesIO(body))