"""System-level convergence steps: packages, timezone, hostname, runtime."""

from __future__ import annotations

import shlex
from logging import getLogger

from lib.config import DesiredState
from lib.errors import PreconditionError
from lib.host_state import HostState
from lib.host_utils import run, is_dry_run


logger = getLogger("host_converge")

BASE_PACKAGES = ["curl", "git", "nginx", "firewalld"]
NODESOURCE_SETUP_URL = "https://rpm.nodesource.com/setup_{version}.x"


def update_system_packages(desired: DesiredState, host: HostState) -> None:
    logger.info("  Updating system packages...")
    run("dnf -y update")
    run("dnf -y upgrade")

    logger.info("  ✓ System packages updated and upgraded")


def timezone_is_set(desired: DesiredState, host: HostState) -> bool:
    return host.current_timezone() == desired.timezone


def set_timezone(desired: DesiredState, host: HostState) -> None:
    run(f"timedatectl set-timezone {shlex.quote(desired.timezone)}")
    logger.info(f"  ✓ Timezone set to {desired.timezone}")


def hostname_is_set(desired: DesiredState, host: HostState) -> bool:
    return host.current_hostname() == desired.hostname


def set_hostname(desired: DesiredState, host: HostState) -> None:
    run(f"hostnamectl set-hostname {shlex.quote(desired.hostname)}")
    logger.info(f"  ✓ Hostname set to {desired.hostname}")


def base_packages_installed(desired: DesiredState, host: HostState) -> bool:
    return not host.missing_packages(BASE_PACKAGES)


def install_base_packages(desired: DesiredState, host: HostState) -> None:
    missing = host.missing_packages(BASE_PACKAGES)
    if not missing:
        logger.info("  ✓ Base dependencies already installed")
        return

    run(f"dnf install -y {' '.join(missing)}")
    logger.info(f"  ✓ Installed {', '.join(missing)}")


def runtime_installed(desired: DesiredState, host: HostState) -> bool:
    return host.runtime_major_version() == desired.runtime_version


def install_runtime(desired: DesiredState, host: HostState) -> None:
    setup_url = NODESOURCE_SETUP_URL.format(version=desired.runtime_version)
    installed = host.runtime_major_version()
    if installed is not None:
        logger.info(f"  Replacing Node.js v{installed}...")
        run("dnf remove -y nodejs")

    logger.info(f"  Installing Node.js v{desired.runtime_version}...")
    # pipefail: a failed download fails the step
    setup_cmd = f"curl -fsSL {shlex.quote(setup_url)} | bash -"
    run(f"bash -o pipefail -c {shlex.quote(setup_cmd)}")
    run("dnf install -y nodejs")

    if not is_dry_run():
        actual = host.runtime_major_version()
        if actual != desired.runtime_version:
            raise PreconditionError(
                f"Node.js v{desired.runtime_version} not active after install",
                f"node reports {actual or 'no version'}",
            )

    logger.info(f"  ✓ Node.js v{desired.runtime_version} installed")
