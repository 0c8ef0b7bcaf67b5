"""Observed state of the host being converged.

Check predicates read the host exclusively through a HostState so they can
be exercised against a fake in tests.
"""

from __future__ import annotations

import json
import os
import re
import shlex
from typing import Optional

from lib.host_utils import probe


class HostState:
    """Inspects the live host on demand using read-only commands."""

    def current_timezone(self) -> Optional[str]:
        result = probe("timedatectl show -p Timezone --value")
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
        if os.path.islink("/etc/localtime"):
            target = os.readlink("/etc/localtime")
            if "zoneinfo/" in target:
                return target.split("zoneinfo/", 1)[1]
        return None

    def current_hostname(self) -> Optional[str]:
        result = probe("hostnamectl --static")
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
        result = probe("hostname")
        if result.returncode == 0:
            return result.stdout.strip() or None
        return None

    def is_package_installed(self, package: str) -> bool:
        result = probe(f"rpm -q {shlex.quote(package)}")
        return result.returncode == 0

    def missing_packages(self, packages: list[str]) -> list[str]:
        return [pkg for pkg in packages if not self.is_package_installed(pkg)]

    def runtime_major_version(self) -> Optional[str]:
        result = probe("node --version")
        if result.returncode != 0:
            return None
        match = re.match(r'^v?(\d+)\.', result.stdout.strip())
        return match.group(1) if match else None

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_git_repo(self, path: str) -> bool:
        return os.path.isdir(os.path.join(path, ".git"))

    def is_dir_empty(self, path: str) -> bool:
        if not os.path.isdir(path):
            return not os.path.exists(path)
        return not os.listdir(path)

    def is_repo_current(self, path: str) -> bool:
        """True when the clone's HEAD matches the upstream branch tip on the remote.

        The remote tip is read with git ls-remote, so neither refs nor the
        working tree change. Any git failure reports the repo as not current.
        """
        quoted = shlex.quote(path)
        local = probe(f"git -C {quoted} rev-parse HEAD")
        upstream = probe(f"git -C {quoted} rev-parse --abbrev-ref --symbolic-full-name '@{{u}}'")
        if local.returncode != 0 or upstream.returncode != 0:
            return False

        remote, _, branch = upstream.stdout.strip().partition("/")
        if not remote or not branch:
            return False
        listing = probe(
            f"git -C {quoted} ls-remote {shlex.quote(remote)} {shlex.quote('refs/heads/' + branch)}",
            timeout=300,
        )
        if listing.returncode != 0 or not listing.stdout.strip():
            return False
        return listing.stdout.split()[0] == local.stdout.strip()

    def is_process_registered(self, name: str) -> bool:
        result = probe("pm2 jlist")
        if result.returncode != 0:
            return False
        try:
            processes = json.loads(result.stdout or "[]")
        except json.JSONDecodeError:
            return False
        return any(isinstance(p, dict) and p.get("name") == name for p in processes)
