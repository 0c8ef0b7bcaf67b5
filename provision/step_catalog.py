"""Fixed, ordered catalog of convergence steps."""

from __future__ import annotations

from typing import Optional

from lib.runner import Step
from .system_steps import (
    update_system_packages,
    timezone_is_set,
    set_timezone,
    hostname_is_set,
    set_hostname,
    base_packages_installed,
    install_base_packages,
    runtime_installed,
    install_runtime,
)
from .app_steps import (
    source_is_current,
    sync_source,
    install_and_build,
    process_is_supervised,
    supervise_process,
)
from .web_steps import (
    configure_nginx,
    configure_firewall,
    configure_log_rotation,
    print_summary,
)


CONVERGE_STEPS = [
    Step("system_packages", "Updating system packages", update_system_packages),
    Step("timezone", "Setting timezone", set_timezone, timezone_is_set),
    Step("hostname", "Setting hostname", set_hostname, hostname_is_set),
    Step("base_dependencies", "Installing base dependencies", install_base_packages, base_packages_installed),
    Step("runtime", "Installing Node.js", install_runtime, runtime_installed),
    Step("app_source", "Preparing application source", sync_source, source_is_current),
    Step("build", "Installing dependencies and building", install_and_build),
    Step("process_supervision", "Setting up PM2", supervise_process, process_is_supervised),
    Step("reverse_proxy", "Configuring Nginx reverse proxy", configure_nginx),
    Step("firewall", "Configuring firewall", configure_firewall),
    Step("log_rotation", "Setting up log rotation", configure_log_rotation),
    Step("summary", "Final summary", print_summary),
]

STEP_NAMES = [step.name for step in CONVERGE_STEPS]


def get_converge_steps(only: Optional[list[str]] = None) -> list[Step]:
    """Return the catalog, or the named subset in catalog order."""
    if not only:
        return list(CONVERGE_STEPS)

    unknown = [name for name in only if name not in STEP_NAMES]
    if unknown:
        raise KeyError(f"Unknown step(s): {', '.join(unknown)}")

    wanted = set(only)
    return [step for step in CONVERGE_STEPS if step.name in wanted]
