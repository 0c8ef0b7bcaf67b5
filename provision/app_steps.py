"""Application convergence steps: source checkout, build and process supervision."""

from __future__ import annotations

import os
import shlex
from logging import getLogger

from lib.config import DesiredState
from lib.errors import PreconditionError
from lib.host_state import HostState
from lib.host_utils import run
from lib.system_utils import get_current_username, get_user_home


logger = getLogger("host_converge")


def source_is_current(desired: DesiredState, host: HostState) -> bool:
    """True when app_dir is a clone whose HEAD already matches upstream."""
    return host.is_git_repo(desired.app_dir) and host.is_repo_current(desired.app_dir)


def sync_source(desired: DesiredState, host: HostState) -> None:
    """Clone repo_url into app_dir, or pull the latest changes into an existing clone.

    A non-empty app_dir that is not a git clone is never overwritten.
    """
    app_dir = desired.app_dir
    safe_dir = shlex.quote(app_dir)

    if host.is_git_repo(app_dir):
        logger.info("  Repo already exists, pulling latest changes...")
        run(f"git -C {safe_dir} pull --ff-only")
        logger.info(f"  ✓ Updated {app_dir}")
        return

    if not host.is_dir_empty(app_dir):
        raise PreconditionError(
            f"{app_dir} exists and is not a git repository",
            "move or remove it before converging",
        )

    logger.info("  Cloning application repository...")
    run(f"mkdir -p {shlex.quote(os.path.dirname(app_dir))}")
    run(f"git clone {shlex.quote(desired.repo_url)} {safe_dir}")
    logger.info(f"  ✓ Cloned {desired.repo_url} to {app_dir}")


def install_and_build(desired: DesiredState, host: HostState) -> None:
    # Unchecked: runs on every convergence
    logger.info("  Installing NPM packages...")
    run("npm install --legacy-peer-deps", cwd=desired.app_dir)
    logger.info("  Building application...")
    run("npm run build", cwd=desired.app_dir)

    logger.info("  ✓ Dependencies installed and build produced")


def process_is_supervised(desired: DesiredState, host: HostState) -> bool:
    """True when pm2 already manages the app and the policy leaves it alone.

    Under the reload policy a registered app is never considered converged,
    so every run reloads it onto the fresh build.
    """
    if desired.process_policy == "reload":
        return False
    return host.is_process_registered(desired.app_name)


def supervise_process(desired: DesiredState, host: HostState) -> None:
    safe_name = shlex.quote(desired.app_name)

    if host.is_process_registered(desired.app_name):
        logger.info(f"  Reloading pm2 app {desired.app_name}...")
        run(f"PORT={desired.listen_port} pm2 reload {safe_name} --update-env")
        run("pm2 save")
        logger.info(f"  ✓ pm2 app {desired.app_name} reloaded")
        return

    logger.info("  Installing PM2 process manager...")
    run("npm install -g pm2")
    run(
        f"PORT={desired.listen_port} pm2 start 'npm run start' "
        f"--name {safe_name} --cwd {shlex.quote(desired.app_dir)}"
    )
    run("pm2 save")

    # Boot unit resurrects the dump pm2 save wrote for the invoking user
    user = get_current_username()
    home = get_user_home(user)
    run(f"pm2 startup systemd -u {shlex.quote(user)} --hp {shlex.quote(home)}")

    logger.info(f"  ✓ pm2 app {desired.app_name} started and registered for boot")
