"""Builtin types for structcheck.

This module builds the read-only builtin tier of the type registry.

Categories:
- Numbers: int, range, hex, oct, number, port
- Text: word, line, text, quoted, regex, vars
- Network: uri, ipv4, cidrv4, ipv6, cidrv6, hostname, resolvablehost
- System: path, fileexists, user, group

Patterns anchor themselves with \\A and \\Z (``$`` would accept a trailing
newline). The only unanchored builtin is ``vars``, which looks for an
interpolation token anywhere in the value.

The predicates that touch the host system go through a SystemProbes
object so callers can swap DNS, filesystem and account lookups.
"""

import os
import re
import socket
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from structcheck.matchers import Matcher, PatternMatcher, PredicateMatcher


# =============================================================================
# Patterns
# =============================================================================

INT_PATTERN = re.compile(r"\A-?\d+\Z")
HEX_PATTERN = re.compile(r"\A(?:0[xX])?[0-9a-fA-F]+\Z")
OCT_PATTERN = re.compile(r"\A[0-7]+\Z")
NUMBER_PATTERN = re.compile(r"\A[-+]?\d+(?:[.,]\d+)?\Z")
WORD_PATTERN = re.compile(r"\A[\w-]+\Z")
LINE_PATTERN = re.compile(r"\A[^\n\r]*\Z")
TEXT_PATTERN = re.compile(r"\A.*\Z", re.DOTALL)
REGEX_PATTERN = re.compile(r"\Aqr(?:/.*/|\(.*\)|\{.*\})[imsxpn]*\Z", re.DOTALL)
QUOTED_PATTERN = re.compile(r"\A'.*'\Z", re.DOTALL)

# scheme "://" then anything without whitespace
URI_PATTERN = re.compile(r"\A[A-Za-z][A-Za-z0-9+.\-]*://[^\s]+\Z")

_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"
_IPV4 = rf"{_OCTET}(?:\.{_OCTET}){{3}}"

_H16 = r"[0-9a-fA-F]{1,4}"
_IPV6 = "|".join(
    [
        rf"(?:{_H16}:){{7}}{_H16}",
        rf"(?:{_H16}:){{6}}{_IPV4}",
        rf"(?:{_H16}:){{1,7}}:",
        rf"(?:{_H16}:){{1,6}}:{_H16}",
        rf"(?:{_H16}:){{1,5}}(?::{_H16}){{1,2}}",
        rf"(?:{_H16}:){{1,4}}(?::{_H16}){{1,3}}",
        rf"(?:{_H16}:){{1,3}}(?::{_H16}){{1,4}}",
        rf"(?:{_H16}:){{1,2}}(?::{_H16}){{1,5}}",
        rf"{_H16}:(?::{_H16}){{1,6}}",
        rf"(?:{_H16}:){{1,4}}:{_IPV4}",
        rf"::(?:[fF]{{4}}(?::0{{1,4}})?:)?{_IPV4}",
        rf":(?:(?::{_H16}){{1,7}}|:)",
    ]
)

IPV4_PATTERN = re.compile(rf"\A{_IPV4}\Z")
CIDRV4_PATTERN = re.compile(rf"\A{_IPV4}/(?:3[0-2]|[12]?\d)\Z")
IPV6_PATTERN = re.compile(rf"\A(?:{_IPV6})\Z")
CIDRV6_PATTERN = re.compile(rf"\A(?:{_IPV6})/(?:12[0-8]|1[01]\d|[1-9]?\d)\Z")

# RFC 2396: hostname = *( domainlabel "." ) toplabel [ "." ]
_DOMAINLABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
_TOPLABEL = r"[A-Za-z](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
HOSTNAME_PATTERN = re.compile(rf"\A(?:{_DOMAINLABEL}\.)*{_TOPLABEL}\.?\Z")

PATH_PATTERN = re.compile(r"\A/[^\0\n]*\Z")

PORT_PATTERN = re.compile(
    r"\A(?:6553[0-5]|655[0-2]\d|65[0-4]\d\d|6[0-4]\d{3}|[1-5]\d{4}|\d{1,4})\Z"
)

# $name, $(name), ${name}
VARS_PATTERN = re.compile(r"\$(?:\w+|\(\w+\)|\{\w+\})")


# =============================================================================
# System probes
# =============================================================================


def _resolve_host(name: str) -> bool:
    try:
        socket.getaddrinfo(name, None)
    except socket.gaierror:
        return False
    return True


def _user_exists(name: str) -> bool:
    import pwd

    try:
        if name.isdigit():
            pwd.getpwuid(int(name))
        else:
            pwd.getpwnam(name)
    except KeyError:
        return False
    return True


def _group_exists(name: str) -> bool:
    import grp

    try:
        if name.isdigit():
            grp.getgrgid(int(name))
        else:
            grp.getgrnam(name)
    except KeyError:
        return False
    return True


@dataclass(frozen=True)
class SystemProbes:
    """Side-effecting lookups used by the system predicates.

    Each probe receives the value text and returns a bool. Probes may block
    (DNS in particular); no timeout is applied here. A probe that raises is
    treated as a non-match by the leaf evaluator.

    Attributes:
        resolve_host: True if the name resolves to an address
        path_exists: True if the path exists on the filesystem
        user_exists: True if the user name or uid is known
        group_exists: True if the group name or gid is known
    """

    resolve_host: Callable[[str], bool] = _resolve_host
    path_exists: Callable[[str], bool] = os.path.exists
    user_exists: Callable[[str], bool] = _user_exists
    group_exists: Callable[[str], bool] = _group_exists


# =============================================================================
# Predicates
# =============================================================================


def _range(value: str, raw_args: str | None, parsed_args: tuple[str, ...]) -> bool:
    """Integer within the inclusive bounds given as range(min-max)."""
    if len(parsed_args) != 2 or not INT_PATTERN.search(value):
        return False
    low, high = parsed_args
    if not (INT_PATTERN.search(low) and INT_PATTERN.search(high)):
        return False
    return int(low) <= int(value) <= int(high)


def _make_resolvablehost(probes: SystemProbes):
    def resolvablehost(value: str, raw_args: str | None, parsed_args: tuple[str, ...]) -> bool:
        """Hostname that resolves via DNS."""
        if not HOSTNAME_PATTERN.search(value):
            return False
        return probes.resolve_host(value)

    return resolvablehost


def _make_fileexists(probes: SystemProbes):
    def fileexists(value: str, raw_args: str | None, parsed_args: tuple[str, ...]) -> bool:
        """Path that exists on the filesystem."""
        return probes.path_exists(value)

    return fileexists


def _make_user(probes: SystemProbes):
    def user(value: str, raw_args: str | None, parsed_args: tuple[str, ...]) -> bool:
        """User name or uid known to the system."""
        return bool(value) and probes.user_exists(value)

    return user


def _make_group(probes: SystemProbes):
    def group(value: str, raw_args: str | None, parsed_args: tuple[str, ...]) -> bool:
        """Group name or gid known to the system."""
        return bool(value) and probes.group_exists(value)

    return group


# =============================================================================
# Table
# =============================================================================


def build_builtin_types(probes: SystemProbes | None = None) -> Mapping[str, Matcher]:
    """Build a read-only builtin type table.

    Args:
        probes: System lookups for the side-effecting predicates
            (defaults to the real socket/os/pwd/grp lookups)

    Returns:
        Mapping of type name to Matcher
    """
    probes = probes or SystemProbes()
    table: dict[str, Matcher] = {
        "int": PatternMatcher(INT_PATTERN, "Integer, optionally negative"),
        "range": PredicateMatcher(_range),
        "hex": PatternMatcher(HEX_PATTERN, "Hexadecimal number, optional 0x prefix"),
        "oct": PatternMatcher(OCT_PATTERN, "Octal number"),
        "number": PatternMatcher(NUMBER_PATTERN, "Signed decimal number, '.' or ',' separator"),
        "word": PatternMatcher(WORD_PATTERN, "Letters, digits, '_' and '-'"),
        "line": PatternMatcher(LINE_PATTERN, "Any text without a newline"),
        "text": PatternMatcher(TEXT_PATTERN, "Any text, newlines included"),
        "regex": PatternMatcher(REGEX_PATTERN, "Regex literal: qr/.../, qr(...) or qr{...}"),
        "uri": PatternMatcher(URI_PATTERN, "URI with scheme://"),
        "ipv4": PatternMatcher(IPV4_PATTERN, "IPv4 address"),
        "cidrv4": PatternMatcher(CIDRV4_PATTERN, "IPv4 address with /netmask"),
        "ipv6": PatternMatcher(IPV6_PATTERN, "IPv6 address"),
        "cidrv6": PatternMatcher(CIDRV6_PATTERN, "IPv6 address with /prefix"),
        "quoted": PatternMatcher(QUOTED_PATTERN, "Single-quoted text"),
        "hostname": PatternMatcher(HOSTNAME_PATTERN, "RFC 2396 hostname"),
        "resolvablehost": PredicateMatcher(_make_resolvablehost(probes)),
        "path": PatternMatcher(PATH_PATTERN, "Absolute path"),
        "fileexists": PredicateMatcher(_make_fileexists(probes)),
        "user": PredicateMatcher(_make_user(probes)),
        "group": PredicateMatcher(_make_group(probes)),
        "port": PatternMatcher(PORT_PATTERN, "TCP/UDP port, 0-65535"),
        "vars": PatternMatcher(VARS_PATTERN, "Contains $name, $(name) or ${name}"),
    }
    return MappingProxyType(table)


BUILTIN_TYPES = build_builtin_types()
