"""Command execution and file helpers for the host being converged."""

from __future__ import annotations

import os
import subprocess
import tempfile
from logging import getLogger
from typing import Optional

from lib.errors import ExternalToolError, UnsupportedOSError


logger = getLogger("host_converge")

SUPPORTED_OS_IDS = ("rocky", "rhel", "almalinux", "centos", "fedora")

_dry_run = False


def set_dry_run(enabled: bool) -> None:
    """Set dry-run mode globally."""
    global _dry_run
    _dry_run = enabled


def is_dry_run() -> bool:
    """Check if dry-run mode is enabled."""
    return _dry_run


def _log_command(cmd: str) -> None:
    logger.info(f"  Running: {cmd[:80]}..." if len(cmd) > 80 else f"  Running: {cmd}")


def run(cmd: str, check: bool = True, cwd: Optional[str] = None) -> subprocess.CompletedProcess[str]:
    """Run a host-mutating shell command.

    Skipped in dry-run mode. Raises ExternalToolError on a non-zero exit
    when check is set.
    """
    _log_command(cmd)

    if is_dry_run():
        logger.info("  [DRY-RUN] Command not executed")
        return subprocess.CompletedProcess(args=[cmd], returncode=0, stdout="", stderr="")

    result = subprocess.run(cmd, shell=True, capture_output=True, text=True, cwd=cwd)
    if result.stdout:
        logger.debug(result.stdout.rstrip())
    if result.stderr:
        logger.debug(result.stderr.rstrip())

    if check and result.returncode != 0:
        output = "\n".join(part for part in (result.stdout, result.stderr) if part)
        raise ExternalToolError(cmd, result.returncode, output)
    return result


def probe(cmd: str, cwd: Optional[str] = None, timeout: int = 60) -> subprocess.CompletedProcess[str]:
    """Run a read-only inspection command; executes even in dry-run mode."""
    try:
        return subprocess.run(cmd, shell=True, capture_output=True, text=True, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        return subprocess.CompletedProcess(args=[cmd], returncode=124, stdout="", stderr=str(e))


def write_file(path: str, content: str, mode: int = 0o644) -> None:
    """Atomically write content to path, creating parent directories."""
    if is_dry_run():
        logger.info(f"  [DRY-RUN] Would write {path}")
        return

    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-")
    try:
        with os.fdopen(fd, 'w') as f:
            f.write(content)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def read_file(path: str) -> Optional[str]:
    try:
        with open(path, 'r') as f:
            return f.read()
    except (FileNotFoundError, PermissionError):
        return None


def remove_file(path: str) -> None:
    if is_dry_run():
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def read_os_release(path: str = "/etc/os-release") -> dict[str, str]:
    values: dict[str, str] = {}
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            values[key] = value.strip().strip('"')
    return values


def detect_os(path: str = "/etc/os-release") -> str:
    """Return the distribution id, raising UnsupportedOSError off RPM hosts."""
    try:
        release = read_os_release(path)
    except FileNotFoundError:
        raise UnsupportedOSError("Cannot detect OS", f"{path} not found")

    os_id = release.get("ID", "").lower()
    id_like = release.get("ID_LIKE", "").lower().split()
    if os_id in SUPPORTED_OS_IDS or any(like in ("rhel", "fedora") for like in id_like):
        return release.get("PRETTY_NAME", os_id)

    raise UnsupportedOSError(
        "Unsupported OS (only RPM-based distributions are supported)",
        release.get("PRETTY_NAME", os_id or "unknown"),
    )
