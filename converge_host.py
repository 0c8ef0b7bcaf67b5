#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""Converge this host to run a Node.js web application behind nginx.

Safe to re-run: steps whose check reports the host already converged are
skipped, and the run halts at the first failing step.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lib.arg_parser import create_converge_argument_parser
from lib.config import DesiredState, load_config_file
from lib.display import print_run_header, print_run_report, results_to_json
from lib.errors import ConfigError, UnsupportedOSError
from lib.host_state import HostState
from lib.host_utils import detect_os, set_dry_run
from lib.logging_utils import setup_run_logger
from lib.machine_state import load_desired_state, save_desired_state
from lib.runner import (
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    EXIT_UNSUPPORTED_OS,
    exit_code_for,
    run_steps,
)
from provision import STEP_NAMES, get_converge_steps


def build_desired_state(args) -> DesiredState:
    """Layer recalled state, then the config file, then CLI flags."""
    base = {}
    if args.recall:
        recalled = load_desired_state()
        if recalled is None:
            raise ConfigError(["--recall given but no stored desired state was found"])
        base.update(recalled)
    if args.config_file:
        base.update(load_config_file(args.config_file))
    return DesiredState.from_args(args, base)


def main() -> int:
    parser = create_converge_argument_parser(
        "Converge a host to serve a Node.js application behind nginx",
        STEP_NAMES,
    )
    args = parser.parse_args()

    if args.list_steps:
        for index, step in enumerate(get_converge_steps(), 1):
            kind = "checked" if step.check else "always applied"
            print(f"{index:2d}. {step.name:<20} {step.description} ({kind})")
        return EXIT_SUCCESS

    logger = setup_run_logger(args.log_file, verbose=args.verbose)

    try:
        desired = build_desired_state(args)
    except ConfigError as e:
        logger.error(f"Error: {e.message}")
        for problem in e.problems:
            logger.error(f"  - {problem}")
        return EXIT_CONFIG_ERROR

    try:
        os_name = detect_os()
    except UnsupportedOSError as e:
        logger.error(f"Error: {e.describe()}")
        return EXIT_UNSUPPORTED_OS

    if args.dry_run:
        set_dry_run(True)
        logger.info("=" * 60)
        logger.info("DRY-RUN MODE ENABLED")

    print_run_header(desired, os_name, args.dry_run)

    steps = get_converge_steps(args.only_steps)
    results = run_steps(desired, steps, HostState())
    print_run_report(results, len(steps))

    if args.json_report:
        print(results_to_json(results))

    code = exit_code_for(results, STEP_NAMES)
    if code == EXIT_SUCCESS and not args.dry_run and not args.only_steps:
        try:
            save_desired_state(desired)
        except OSError as e:
            logger.warning(f"  ⚠ Could not save desired state for --recall: {e}")
    return code


if __name__ == "__main__":
    sys.exit(main())
