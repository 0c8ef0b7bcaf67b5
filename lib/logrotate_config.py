"""Logrotate policy generator for the application's nginx logs."""

import os

from lib.config import DesiredState


ROTATE_COUNT = 12
LOG_MODE = "0640"
LOG_OWNER = "nginx"
LOG_GROUP = "adm"
NGINX_PID_FILE = "/var/run/nginx.pid"


def get_logrotate_path(desired: DesiredState) -> str:
    return os.path.join(desired.logrotate_dir, desired.app_name)


def generate_logrotate_config(desired: DesiredState) -> str:
    """Render a weekly rotation policy for /var/log/nginx/<app>_*.log."""
    log_glob = os.path.join(desired.nginx_log_dir, f"{desired.app_name}_*.log")

    return f"""{log_glob} {{
    weekly
    missingok
    rotate {ROTATE_COUNT}
    compress
    delaycompress
    notifempty
    create {LOG_MODE} {LOG_OWNER} {LOG_GROUP}
    sharedscripts
    postrotate
        [ -f {NGINX_PID_FILE} ] && kill -USR1 `cat {NGINX_PID_FILE}`
    endscript
}}
"""
