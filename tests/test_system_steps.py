"""Tests for provision/system_steps.py with a fake host and mocked commands."""

from __future__ import annotations

import os
import sys
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from converge_fakes import FakeHostState, make_desired
from lib.errors import PreconditionError
from provision.system_steps import (
    BASE_PACKAGES,
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


def _commands(mock_run):
    return [args[0] for args, _ in mock_run.call_args_list]


class TestUpdateSystemPackages(unittest.TestCase):
    @patch("provision.system_steps.run")
    def test_update_and_upgrade(self, mock_run):
        update_system_packages(make_desired(), FakeHostState())
        self.assertEqual(_commands(mock_run), ["dnf -y update", "dnf -y upgrade"])


class TestTimezone(unittest.TestCase):
    def test_check_matches(self):
        desired = make_desired(timezone='Asia/Riyadh')
        self.assertTrue(timezone_is_set(desired, FakeHostState(timezone='Asia/Riyadh')))
        self.assertFalse(timezone_is_set(desired, FakeHostState(timezone='UTC')))
        self.assertFalse(timezone_is_set(desired, FakeHostState()))

    @patch("provision.system_steps.run")
    def test_apply(self, mock_run):
        set_timezone(make_desired(timezone='Asia/Riyadh'), FakeHostState())
        mock_run.assert_called_once_with("timedatectl set-timezone Asia/Riyadh")


class TestHostname(unittest.TestCase):
    def test_check_matches(self):
        desired = make_desired(hostname='prod-server')
        self.assertTrue(hostname_is_set(desired, FakeHostState(hostname='prod-server')))
        self.assertFalse(hostname_is_set(desired, FakeHostState(hostname='localhost')))

    @patch("provision.system_steps.run")
    def test_apply(self, mock_run):
        set_hostname(make_desired(hostname='prod-server'), FakeHostState())
        mock_run.assert_called_once_with("hostnamectl set-hostname prod-server")


class TestBasePackages(unittest.TestCase):
    def test_check_all_installed(self):
        self.assertTrue(base_packages_installed(make_desired(), FakeHostState(packages=BASE_PACKAGES)))

    def test_check_missing(self):
        self.assertFalse(base_packages_installed(make_desired(), FakeHostState(packages=['curl'])))

    @patch("provision.system_steps.run")
    def test_installs_only_missing(self, mock_run):
        install_base_packages(make_desired(), FakeHostState(packages=['curl', 'git']))
        mock_run.assert_called_once_with("dnf install -y nginx firewalld")

    @patch("provision.system_steps.run")
    def test_nothing_missing(self, mock_run):
        install_base_packages(make_desired(), FakeHostState(packages=BASE_PACKAGES))
        mock_run.assert_not_called()


class TestRuntime(unittest.TestCase):
    def test_check_major_version(self):
        desired = make_desired(runtime_version='20')
        self.assertTrue(runtime_installed(desired, FakeHostState(runtime_version='20')))
        self.assertFalse(runtime_installed(desired, FakeHostState(runtime_version='18')))
        self.assertFalse(runtime_installed(desired, FakeHostState()))

    def _installing_run(self, host, version):
        def fake_run(cmd, **kwargs):
            if cmd == "dnf install -y nodejs":
                host.runtime_version = version
        return fake_run

    def test_fresh_install(self):
        host = FakeHostState()
        with patch("provision.system_steps.run", side_effect=self._installing_run(host, '20')) as mock_run:
            install_runtime(make_desired(runtime_version='20'), host)
        commands = _commands(mock_run)
        self.assertEqual(len(commands), 2)
        self.assertIn("https://rpm.nodesource.com/setup_20.x", commands[0])
        self.assertIn("pipefail", commands[0])
        self.assertEqual(commands[1], "dnf install -y nodejs")

    def test_replaces_other_version(self):
        host = FakeHostState(runtime_version='18')
        with patch("provision.system_steps.run", side_effect=self._installing_run(host, '20')) as mock_run:
            install_runtime(make_desired(runtime_version='20'), host)
        self.assertEqual(_commands(mock_run)[0], "dnf remove -y nodejs")

    def test_version_still_wrong_after_install(self):
        host = FakeHostState()
        with patch("provision.system_steps.run", side_effect=self._installing_run(host, '18')):
            with self.assertRaises(PreconditionError):
                install_runtime(make_desired(runtime_version='20'), host)

    @patch("provision.system_steps.is_dry_run", return_value=True)
    @patch("provision.system_steps.run")
    def test_dry_run_skips_verification(self, mock_run, _dry):
        install_runtime(make_desired(runtime_version='20'), FakeHostState())
        self.assertEqual(len(_commands(mock_run)), 2)


if __name__ == '__main__':
    unittest.main()
