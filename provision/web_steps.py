"""Web-facing convergence steps: nginx, firewall, log rotation and the summary."""

from __future__ import annotations

from logging import getLogger

from lib.config import DesiredState
from lib.errors import ExternalToolError, ValidationError
from lib.host_state import HostState
from lib.host_utils import run, write_file, read_file, remove_file
from lib.logrotate_config import generate_logrotate_config, get_logrotate_path
from lib.nginx_config import generate_proxy_config, get_nginx_conf_path


logger = getLogger("host_converge")


def configure_nginx(desired: DesiredState, host: HostState) -> None:
    """Write the proxy config, validate it, then enable and reload nginx.

    When nginx -t rejects the config the previous file (if any) is put back
    and the running server is left untouched.
    """
    conf_path = get_nginx_conf_path(desired)
    previous = read_file(conf_path)

    logger.info(f"  Configuring Nginx for {desired.domain}...")
    write_file(conf_path, generate_proxy_config(desired))

    try:
        run("nginx -t")
    except ExternalToolError as e:
        if previous is None:
            remove_file(conf_path)
        else:
            write_file(conf_path, previous)
        raise ValidationError(f"nginx rejected {conf_path}", e.detail)

    run("systemctl enable nginx")
    run("systemctl reload-or-restart nginx")

    logger.info(f"  ✓ nginx serving {desired.domain} -> 127.0.0.1:{desired.listen_port}")


def configure_firewall(desired: DesiredState, host: HostState) -> None:
    run("systemctl enable firewalld --now")
    run("firewall-cmd --permanent --add-service=http")
    run("firewall-cmd --permanent --add-service=https")
    run("firewall-cmd --reload")

    logger.info("  ✓ Firewall allows HTTP and HTTPS")


def configure_log_rotation(desired: DesiredState, host: HostState) -> None:
    path = get_logrotate_path(desired)
    write_file(path, generate_logrotate_config(desired))

    logger.info(f"  ✓ Log rotation configured: {path}")


def summary_lines(desired: DesiredState) -> list[str]:
    return [
        f"Domain: http://{desired.domain}",
        f"Timezone: {desired.timezone}",
        f"Hostname: {desired.hostname}",
        f"App Path: {desired.app_dir}",
        f"PM2 App: {desired.app_name}",
        f"Upstream: 127.0.0.1:{desired.listen_port}",
    ]


def print_summary(desired: DesiredState, host: HostState) -> None:
    for line in summary_lines(desired):
        logger.info(f"  {line}")
