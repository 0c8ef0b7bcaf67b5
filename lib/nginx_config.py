"""Nginx reverse-proxy configuration generator for the converged application."""

import os

from lib.config import DesiredState


GZIP_TYPES = (
    "text/plain",
    "text/css",
    "application/json",
    "application/javascript",
    "text/xml",
    "application/xml",
    "application/xml+rss",
    "image/svg+xml",
)

SECURITY_HEADERS = (
    ("X-Frame-Options", "SAMEORIGIN"),
    ("X-Content-Type-Options", "nosniff"),
    ("Referrer-Policy", "no-referrer-when-downgrade"),
    ("X-XSS-Protection", "1; mode=block"),
)


def get_nginx_conf_path(desired: DesiredState) -> str:
    return os.path.join(desired.nginx_conf_dir, f"{desired.app_name}.conf")


def get_nginx_log_paths(desired: DesiredState) -> tuple:
    """Return (access_log, error_log) paths for the application."""
    access_log = os.path.join(desired.nginx_log_dir, f"{desired.app_name}_access.log")
    error_log = os.path.join(desired.nginx_log_dir, f"{desired.app_name}_error.log")
    return (access_log, error_log)


def _make_proxy_location(port: int) -> str:
    """Generate the WebSocket-capable proxy_pass location block."""
    content = [
        f"        proxy_pass http://127.0.0.1:{port};",
        "        proxy_http_version 1.1;",
        "        proxy_set_header Upgrade $http_upgrade;",
        "        proxy_set_header Connection 'upgrade';",
        "        proxy_set_header Host $host;",
        "        proxy_cache_bypass $http_upgrade;",
    ]
    body = "\n".join(content)
    return f"""    location / {{
{body}
    }}"""


def _make_gzip_block() -> str:
    return f"""    # Gzip Compression
    gzip on;
    gzip_types {' '.join(GZIP_TYPES)};
    gzip_vary on;"""


def _make_security_headers() -> str:
    lines = ["    # Security Headers"]
    lines.extend(f'    add_header {name} "{value}";' for name, value in SECURITY_HEADERS)
    return "\n".join(lines)


def generate_proxy_config(desired: DesiredState) -> str:
    """Render the server block for desired.domain and www.desired.domain.

    Output depends only on the desired state, so repeated renders are
    byte-identical.
    """
    access_log, error_log = get_nginx_log_paths(desired)

    return f"""server {{
    listen 80;
    server_name {desired.domain} www.{desired.domain};

{_make_proxy_location(desired.listen_port)}

{_make_gzip_block()}

{_make_security_headers()}

    access_log {access_log};
    error_log {error_log};
}}
"""
