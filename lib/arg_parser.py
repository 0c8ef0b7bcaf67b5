#!/usr/bin/env python3

from __future__ import annotations

import argparse

import argcomplete

from lib.config import (
    PROCESS_POLICIES,
    DEFAULT_BASE_PATH,
    DEFAULT_NGINX_CONF_DIR,
    DEFAULT_NGINX_LOG_DIR,
    DEFAULT_LOGROTATE_DIR,
)


def create_converge_argument_parser(description: str, step_names: list[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)

    # Desired state
    parser.add_argument("--app-name", dest="app_name",
                       help="Application name (directory, pm2 process and log file name)")
    parser.add_argument("--domain", help="Domain served by nginx (www.<domain> is added automatically)")
    parser.add_argument("--repo-url", dest="repo_url", help="Git repository to clone into the app directory")
    parser.add_argument("--node-version", dest="runtime_version",
                       help="Node.js major version to install (e.g. 20)")
    parser.add_argument("-t", "--timezone", help="IANA timezone for the host (e.g. Asia/Riyadh)")
    parser.add_argument("--hostname", help="Static hostname for the host")
    parser.add_argument("--port", dest="listen_port", type=int,
                       help="Port the application listens on; nginx proxies to it")
    parser.add_argument("--base-path", dest="base_path",
                       help=f"Parent directory for the app checkout (default: {DEFAULT_BASE_PATH})")
    parser.add_argument("--process-policy", dest="process_policy", choices=PROCESS_POLICIES,
                       help="What to do when the app is already registered with pm2: "
                            "skip it or reload it after the new build (default: skip)")
    parser.add_argument("--nginx-conf-dir", dest="nginx_conf_dir",
                       help=f"nginx drop-in directory (default: {DEFAULT_NGINX_CONF_DIR})")
    parser.add_argument("--nginx-log-dir", dest="nginx_log_dir",
                       help=f"nginx log directory (default: {DEFAULT_NGINX_LOG_DIR})")
    parser.add_argument("--logrotate-dir", dest="logrotate_dir",
                       help=f"logrotate drop-in directory (default: {DEFAULT_LOGROTATE_DIR})")

    # Configuration sources
    parser.add_argument("-c", "--config", dest="config_file",
                       help="JSON file with desired state keys; command-line flags take precedence")
    parser.add_argument("--recall", action="store_true",
                       help="Start from the desired state saved by the last successful run")

    # Run control
    parser.add_argument("--only", dest="only_steps", nargs="+", choices=step_names, metavar="STEP",
                       help="Run only these steps, in catalog order")
    parser.add_argument("--list-steps", action="store_true",
                       help="List the convergence steps and exit")
    parser.add_argument("--dry-run", action="store_true",
                       help="Inspect the host and show what would be done without executing commands")
    parser.add_argument("--json", dest="json_report", action="store_true",
                       help="Print the per-step results as JSON after the run")
    parser.add_argument("--log-file", dest="log_file",
                       help="Log file path (default: /var/log/host_converge/host_converge.log)")
    parser.add_argument("-v", "--verbose", action="store_true",
                       help="Show output of external commands")

    argcomplete.autocomplete(parser)
    return parser
