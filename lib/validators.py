#!/usr/bin/env python3

"""Validation utilities for desired state fields."""

import re

import pytz


def validate_ip_address(ip: str) -> bool:
    """Validate an IPv4 address."""
    pattern = r'^(\d{1,3}\.){3}\d{1,3}$'
    if not re.match(pattern, ip):
        return False
    octets = ip.split('.')
    return all(0 <= int(octet) <= 255 for octet in octets)


def validate_host(host: str) -> bool:
    """Validate a hostname or IP address."""
    normalized_host = host.lower().rstrip('.')
    if validate_ip_address(normalized_host):
        return True
    hostname_pattern = r'^([a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)*[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?$'
    return bool(re.match(hostname_pattern, normalized_host))


def validate_domain(domain: str) -> bool:
    """Validate a DNS domain served by the reverse proxy.

    The proxy also answers for www.<domain>, so a leading "www." is rejected.
    """
    if not domain or domain.lower().startswith("www."):
        return False
    if validate_ip_address(domain):
        return False
    return '.' in domain and validate_host(domain)


def validate_app_name(name: str) -> bool:
    """Validate an application name usable as a path, pm2 name and log file stem."""
    pattern = r'^[a-zA-Z0-9][a-zA-Z0-9_.-]{0,63}$'
    return bool(re.match(pattern, name)) and name not in (".", "..")


def validate_repo_url(url: str) -> bool:
    """Validate a git remote URL (https, ssh, git or scp-style)."""
    if re.match(r'^(https?|ssh|git)://[^\s]+$', url):
        return True
    return bool(re.match(r'^[\w.-]+@[\w.-]+:[^\s]+$', url))


def validate_runtime_version(version: str) -> bool:
    """Validate a runtime major-version token such as "20"."""
    return bool(re.match(r'^[1-9][0-9]{0,2}$', version))


def validate_timezone(timezone: str) -> bool:
    """Validate an IANA timezone name."""
    try:
        pytz.timezone(timezone)
    except pytz.exceptions.UnknownTimeZoneError:
        return False
    return True


def validate_port(port: int) -> bool:
    """Validate a TCP port number."""
    return isinstance(port, int) and not isinstance(port, bool) and 1 <= port <= 65535
