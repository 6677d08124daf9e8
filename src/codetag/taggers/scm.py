"""Version-control detection: repository roots and remote hosts."""

from __future__ import annotations

import logging
import os
import re
import stat
from typing import Any, Callable, Iterable, Mapping

from codetag.scanner.context import namespace_tags
from codetag.security.redaction import redact_text
from codetag.taggers.language import PatternTagRule
from codetag.taggers.registry import TaggerConfigError

LOGGER = logging.getLogger(__name__)

SCM_MARKERS: tuple[tuple[str, str], ...] = (
    (".git", "git"),
    (".hg", "hg"),
    (".svn", "svn"),
    (".bzr", "bzr"),
    ("_darcs", "darcs"),
    ("CVS", "cvs"),
)
URL_HOST_PATTERN = re.compile(
    r"^(?:[A-Za-z][\w+.-]*://)?(?:[^@/]*@)?(?P<host>\[[^\]/]+\]|[^/:\s]+)"
)
_SECTION_PATTERN = re.compile(r"^\s*\[\s*(?P<name>[^\]\s\"]+)(?:\s+\"(?P<sub>[^\"]*)\")?\s*\]")
_ENTRY_PATTERN = re.compile(r"^\s*(?P<key>[^=\s#;][^=]*?)\s*=\s*(?P<value>.*?)\s*$")


def compile_markers(name: str, raw_config: Any) -> tuple[tuple[str, str], ...]:
    if raw_config is None:
        return SCM_MARKERS
    if not isinstance(raw_config, Mapping):
        raise TaggerConfigError(f"{name}: config must be a map, got {raw_config!r}")
    unknown = set(raw_config) - {"markers"}
    if unknown:
        raise TaggerConfigError(f"{name}: unknown option(s): {', '.join(sorted(unknown))}")
    markers = raw_config.get("markers")
    if not isinstance(markers, Mapping) or not markers:
        raise TaggerConfigError(f"{name}: 'markers' must be a non-empty map of dir to tag")
    return tuple((str(marker), str(tag)) for marker, tag in markers.items())


def tag_scm_root(
    name: str,
    markers: tuple[tuple[str, str], ...],
    path: str,
    info: os.stat_result,
    ns_context: dict[str, Any],
) -> list[str]:
    """Repository boundary: replaces whatever SCM tags were inherited."""
    if not stat.S_ISDIR(info.st_mode):
        return []
    found = [tag for marker, tag in markers if os.path.isdir(os.path.join(path, marker))]
    if found:
        LOGGER.debug("%s: %s is a repository root (%s)", name, path, ", ".join(found))
        namespace_tags(ns_context).reset()
    return found


def compile_host_rules(name: str, raw_config: Any) -> tuple[PatternTagRule, ...]:
    """Tag -> host pattern map; unusable entries are dropped, never fatal."""
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, Mapping):
        raise TaggerConfigError(f"{name}: config must be a map of tag to host pattern")
    rules: list[PatternTagRule] = []
    for tag, pattern in raw_config.items():
        if not isinstance(pattern, str):
            LOGGER.warning("%s: skipping rule %r, pattern must be a string", name, tag)
            continue
        try:
            rules.append(PatternTagRule(pattern=re.compile(pattern), tag=str(tag)))
        except re.error as exc:
            LOGGER.warning("%s: skipping rule %r (%r): %s", name, tag, pattern, exc)
    if not rules:
        LOGGER.warning("%s: no usable host rules, tagger will do nothing", name)
    return tuple(rules)


def url_host(url: str) -> str | None:
    match = URL_HOST_PATTERN.match(url.strip())
    if not match:
        return None
    return match.group("host").strip("[]").lower()


def _iter_ini_entries(lines: Iterable[str]) -> Iterable[tuple[str, str | None, str, str]]:
    section, subsection = "", None
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped[0] in "#;":
            continue
        header = _SECTION_PATTERN.match(line)
        if header:
            section, subsection = header.group("name"), header.group("sub")
            # Legacy git spelling: [remote.origin]
            if subsection is None and "." in section:
                section, subsection = section.split(".", 1)
            section = section.lower()
            continue
        entry = _ENTRY_PATTERN.match(line)
        if entry:
            yield section, subsection, entry.group("key").strip().lower(), entry.group("value")


def git_remote_urls(repo_path: str) -> list[str]:
    """Remote URLs from ``.git/config``."""
    with open(os.path.join(repo_path, ".git", "config"), encoding="utf-8", errors="replace") as handle:
        return [
            value
            for section, _sub, key, value in _iter_ini_entries(handle)
            if section == "remote" and key in {"url", "pushurl"} and value
        ]


def hg_remote_urls(repo_path: str) -> list[str]:
    """Path aliases from the ``[paths]`` section of ``.hg/hgrc``."""
    with open(os.path.join(repo_path, ".hg", "hgrc"), encoding="utf-8", errors="replace") as handle:
        return [
            value
            for section, _sub, _key, value in _iter_ini_entries(handle)
            if section == "paths" and value
        ]


def _remote_host_tagger(
    marker: str, read_urls: Callable[[str], list[str]]
) -> Callable[[str, tuple[PatternTagRule, ...], str, os.stat_result, dict[str, Any]], list[str]]:
    def tag_remote_hosts(
        name: str,
        rules: tuple[PatternTagRule, ...],
        path: str,
        info: os.stat_result,
        ns_context: dict[str, Any],
    ) -> list[str]:
        if not rules or not stat.S_ISDIR(info.st_mode):
            return []
        if not os.path.isdir(os.path.join(path, marker)):
            return []
        try:
            urls = read_urls(path)
        except (OSError, UnicodeError) as exc:
            LOGGER.debug("%s: cannot read remotes of %s: %s", name, path, exc)
            return []
        hosts = {host for host in (url_host(url) for url in urls) if host}
        LOGGER.debug(
            "%s: %s remotes %s", name, path, [redact_text(url) for url in urls]
        )
        return [
            rule.tag
            for rule in rules
            if any(rule.pattern.search(host) for host in hosts)
        ]

    return tag_remote_hosts


tag_git_remote_hosts = _remote_host_tagger(".git", git_remote_urls)
tag_hg_remote_hosts = _remote_host_tagger(".hg", hg_remote_urls)
