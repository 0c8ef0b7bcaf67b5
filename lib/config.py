#!/usr/bin/env python3

import argparse
import json
import os
from dataclasses import dataclass, asdict, fields
from typing import Optional, Dict, Any

from lib.errors import ConfigError
from lib.types import ProcessPolicy
from lib.validators import (
    validate_app_name,
    validate_domain,
    validate_host,
    validate_port,
    validate_repo_url,
    validate_runtime_version,
    validate_timezone,
)


DEFAULT_BASE_PATH = "/var/www"
DEFAULT_NGINX_CONF_DIR = "/etc/nginx/conf.d"
DEFAULT_NGINX_LOG_DIR = "/var/log/nginx"
DEFAULT_LOGROTATE_DIR = "/etc/logrotate.d"
DEFAULT_PROCESS_POLICY = "skip"

PROCESS_POLICIES = ["skip", "reload"]

REQUIRED_FIELDS = (
    "app_name",
    "domain",
    "repo_url",
    "runtime_version",
    "timezone",
    "hostname",
    "listen_port",
)

STRING_FIELDS = (
    "app_name",
    "domain",
    "repo_url",
    "runtime_version",
    "timezone",
    "hostname",
    "base_path",
    "nginx_conf_dir",
    "nginx_log_dir",
    "logrotate_dir",
)


@dataclass(frozen=True)
class DesiredState:
    """Target configuration a run converges the host toward.

    Created once at startup and passed read-only to every step.
    """
    app_name: str
    domain: str
    repo_url: str
    runtime_version: str
    timezone: str
    hostname: str
    listen_port: int
    base_path: str = DEFAULT_BASE_PATH
    process_policy: ProcessPolicy = DEFAULT_PROCESS_POLICY
    nginx_conf_dir: str = DEFAULT_NGINX_CONF_DIR
    nginx_log_dir: str = DEFAULT_NGINX_LOG_DIR
    logrotate_dir: str = DEFAULT_LOGROTATE_DIR

    def __post_init__(self) -> None:
        problems = self.validate()
        if problems:
            raise ConfigError(problems)

    @property
    def app_dir(self) -> str:
        return os.path.join(self.base_path, self.app_name)

    def validate(self) -> list[str]:
        problems = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                problems.append(f"{name} is required")
        if problems:
            return problems

        wrong_type = [name for name in STRING_FIELDS if not isinstance(getattr(self, name), str)]
        for name in wrong_type:
            problems.append(f"{name} must be a string: {getattr(self, name)!r}")

        checks = (
            ("app_name", validate_app_name, "is not filesystem/service safe"),
            ("domain", validate_domain, "is not a valid DNS name"),
            ("repo_url", validate_repo_url, "is not a git URL"),
            ("runtime_version", validate_runtime_version, "must be a major version number"),
            ("timezone", validate_timezone, "is not a known IANA timezone"),
            ("hostname", validate_host, "is invalid"),
        )
        for name, check, reason in checks:
            value = getattr(self, name)
            if name not in wrong_type and not check(value):
                problems.append(f"{name} {reason}: {value!r}")

        if not validate_port(self.listen_port):
            problems.append(f"listen_port must be an integer between 1 and 65535: {self.listen_port!r}")
        if "base_path" not in wrong_type and not os.path.isabs(self.base_path):
            problems.append(f"base_path must be absolute: {self.base_path!r}")
        if self.process_policy not in PROCESS_POLICIES:
            problems.append(f"process_policy must be one of {', '.join(PROCESS_POLICIES)}: {self.process_policy!r}")
        return problems

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DesiredState':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError([f"unknown configuration key: {key}" for key in unknown])

        values = dict(data)
        values["listen_port"] = _coerce_port(values.get("listen_port"))
        # Accept a bare number such as 20 for the major version
        if isinstance(values.get("runtime_version"), int) and not isinstance(values["runtime_version"], bool):
            values["runtime_version"] = str(values["runtime_version"])

        missing = [name for name in REQUIRED_FIELDS if name not in values]
        if missing:
            raise ConfigError([f"{name} is required" for name in missing])

        return cls(**values)

    @classmethod
    def from_args(cls, args: argparse.Namespace, base: Optional[Dict[str, Any]] = None) -> 'DesiredState':
        """Build from parsed CLI arguments layered over a base mapping.

        Flags that were not given on the command line leave the base value
        (from a config file or recalled state) in place.
        """
        data: Dict[str, Any] = dict(base or {})
        for f in fields(cls):
            value = getattr(args, f.name, None)
            if value is not None:
                data[f.name] = value
        return cls.from_dict(data)


def _coerce_port(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a JSON configuration file into a plain mapping."""
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError([f"cannot read config file {path}: {e}"])
    except json.JSONDecodeError as e:
        raise ConfigError([f"config file {path} is not valid JSON: {e}"])

    if not isinstance(data, dict):
        raise ConfigError([f"config file {path} must contain a JSON object"])
    return data
