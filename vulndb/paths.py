"""Guessing which module paths might contain a given import path."""

from __future__ import annotations

import posixpath
import re

from vulndb import modpath, stdlib

_PROJECT = "go" + "lang"

_THREE_ELEMENT_HOSTS = frozenset(
    (
        "bitbucket.org git.sr.ht gitea.com gitee.com github.com gitlab.com "
        f"hg.sr.ht launchpad.net {_PROJECT}.org"
    ).split()
)


def vcs_host_with_three_element_repo_name(hostname: str) -> bool:
    """Report whether repos on hostname are named like hostname/account/project."""
    return hostname in _THREE_ELEMENT_HOSTS


# Glob patterns for prefixes of paths that are known not to be modules.
# Checking them first avoids needless lookups elsewhere.
NEGATIVE_PREFIX_PATTERNS = tuple(
    """
    *.blogspot.com *.blogspot.dk *.readthedocs.org *.slashdot.org
    advisories.mageia.org archives.neohapsis.com arstechnica.com/security
    blog.python.org blogs.oracle.com blogs.technet.com bugs.* bugzilla.*
    cert.uni-stuttgart.de/archive community.rapid7.com/community/*/blog
    cr.yp.to/talks crbug.com dev2dev.bea.com/pub/advisory
    developer.mozilla.org/docs developer.mozilla.org/en-US/docs
    docs.google.com docs.microsoft.com
    downloads.securityfocus.com/vulnerabilities drupal.org/node
    erpscan.com/advisories exchange.xforce.ibmcloud.com fedoranews.org
    ftp.caldera.com/pub/security ftp.netbsd.org/pub ftp.sco.com/pub
    github.com/*/*/blob github.com/*/*/commit github.com/*/*/issues
    groups.google.com helpx.adobe.com/security hg.openjdk.java.net
    ics-cert.us-cert.gov issues.apache.org issues.rpath.com java.net jira.*
    jvn.jp jvndb.jvn.jp krebsonsecurity.com
    labs.mwrinfosecurity.com/advisories
    lists.*/archive lists.*/archives lists.*/pipermail
    lists.apache.org lists.apple.com lists.debian.org lists.mysql.com
    lists.opensuse.org lists.ubuntu.com
    mail-archives.* mail.*.org/archive mail.*.org/archives mail.*/pipermail
    mailman.*.org/archives mailman.*.org/pipermail
    nodesecurity.io/advisories online.securityfocus.com/advisories
    openwall.com/lists oss.oracle.com/pipermail osvdb.org
    owncloud.org/about/security packetstormsecurity.com/files
    patches.sgi.com/support/free/security/advisories plus.google.com
    puppetlabs.com/security raw.github.com rhn.redhat.com/errata seclists.org
    secunia.com/advisories secunia.com/secunia_research
    security.e-matters.de/advisories security.gentoo.org/glsa
    securityreason.com/securityalert securityreason.com/securityalert/
    securityresponse.symantec.com securitytracker.com/alerts service.sap.com
    subversion.apache.org/security technet.microsoft.com/en-us/security
    technet.microsoft.com/security tools.cisco.com/security/center
    twitter.com ubuntu.com/usn usn.ubuntu.com
    www.adobe.com/support www.adobe.com/support/security
    www.atstake.com/research/advisories www.bugzilla.org/security
    www.cert.org/advisories www.ciac.org/ciac/bulletins
    www.cisco.com/warp/public/707 www.coresecurity.com/advisories
    www.debian.org/security www.derkeiler.com/Mailing-Lists
    www.drupal.org/node www.exploit-db.com www.gentoo.org/security
    www.htbridge.com/advisory www.ibm.com/developerworks/java
    www.iss.net/security_center www.kb.cert.org www.kde.org/info/security
    www.kernel.org/pub www.kernel.org/pub/linux/kernel/v3*/ChangeLog*
    www.linux-mandrake.com/en/security www.linuxsecurity.com/advisories
    www.microsoft.com/technet/security www.mozilla.org/security
    www.netvigilance.com/advisory* www.novell.com/linux/security
    www.openwall.com/lists www.oracle.com/technetwork www.osvdb.org
    www.phpmyadmin.net/home_page/security
    www.portcullis-security.com/security-research-and-downloads
    www.postgresql.org/docs www.red-database-security.com/advisory
    www.redhat.com/archives www.redhat.com/support/errata
    www.samba.org/samba/security www.secunia.com/advisories
    www.securiteam.com/exploits www.securiteam.com/securitynews
    www.securiteam.com/unixfocus www.securiteam.com/windowsntfocus
    www.security-assessment.com/files www.securityfocus.com
    www.securitytracker.com www.sophos.com/en-us/support www.suse.com/support
    www.symantec.com/avcenter/security www.trustix.org/errata
    www.ubuntu.com/usn www.us-cert.gov/cas www.us-cert.gov/ncas
    www.us.debian.org/security www.vmware.com/security/advisories
    www.vupen.com/english/advisories www.wireshark.org/security
    www.zerodayinitiative.com/advisories xforce.iss.net/alerts
    zerodayinitiative.com/advisories
    """.split()
)


def _glob_to_regexp(pattern: str) -> re.Pattern[str]:
    body = pattern.replace(".", r"\.").replace("*", "[^/]*")
    return re.compile("^" + body + r"(\Z|/)")


_NEGATIVE_REGEXPS = tuple(_glob_to_regexp(p) for p in NEGATIVE_PREFIX_PATTERNS)


def matches_negative_regexp(s: str) -> bool:
    """Report whether s begins with a prefix known not to be a module."""
    return any(r.match(s) for r in _NEGATIVE_REGEXPS)


def _clean(p: str) -> str:
    if not p:
        return "."
    cleaned = posixpath.normpath(p)
    if cleaned.startswith("//"):
        cleaned = cleaned[1:]
    return cleaned


def _dir(p: str) -> str:
    return _clean(p[: p.rfind("/") + 1])


def candidate_module_paths(full_path: str) -> list[str]:
    """Return the module paths that could contain full_path, longest first.

    An empty list means no valid module path can be built.
    """
    if matches_negative_regexp(full_path):
        return []
    if stdlib.contains(full_path):
        try:
            modpath.check_import_path(full_path)
        except modpath.ModulePathError:
            return []
        return [stdlib.MODULE_PATH]

    candidates: list[str] = []
    p = full_path
    while p not in (".", "/"):
        try:
            modpath.check_path(p)
        except modpath.ModulePathError:
            pass
        else:
            candidates.append(p)
        p = _dir(p)

    if not candidates:
        return []
    if not vcs_host_with_three_element_repo_name(candidates[-1]):
        return candidates
    if len(candidates) < 3:
        return []
    return candidates[:-2]