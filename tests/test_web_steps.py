"""Tests for provision/web_steps.py: nginx validation, firewall, logrotate, summary."""

from __future__ import annotations

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from converge_fakes import FakeHostState, make_desired
from lib.errors import ExternalToolError, ValidationError
from lib.logrotate_config import generate_logrotate_config
from lib.nginx_config import generate_proxy_config
from provision.web_steps import (
    configure_nginx,
    configure_firewall,
    configure_log_rotation,
    print_summary,
    summary_lines,
)


def _commands(mock_run):
    return [args[0] for args, _ in mock_run.call_args_list]


def _reject_nginx_test(cmd, **kwargs):
    if cmd == "nginx -t":
        raise ExternalToolError(cmd, 1, "nginx: [emerg] unexpected end of file")


class TestConfigureNginx(unittest.TestCase):
    @patch("provision.web_steps.run")
    def test_writes_config_then_validates_and_reloads(self, mock_run):
        with tempfile.TemporaryDirectory() as tmpdir:
            desired = make_desired(nginx_conf_dir=tmpdir)
            configure_nginx(desired, FakeHostState())
            with open(os.path.join(tmpdir, 'shop.conf')) as f:
                self.assertEqual(f.read(), generate_proxy_config(desired))
        self.assertEqual(_commands(mock_run), [
            "nginx -t",
            "systemctl enable nginx",
            "systemctl reload-or-restart nginx",
        ])

    def test_rerun_is_byte_identical(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            desired = make_desired(nginx_conf_dir=tmpdir)
            with patch("provision.web_steps.run"):
                configure_nginx(desired, FakeHostState())
                with open(os.path.join(tmpdir, 'shop.conf')) as f:
                    first = f.read()
                configure_nginx(desired, FakeHostState())
                with open(os.path.join(tmpdir, 'shop.conf')) as f:
                    self.assertEqual(f.read(), first)

    @patch("provision.web_steps.run", side_effect=_reject_nginx_test)
    def test_validation_failure_does_not_reload(self, mock_run):
        with tempfile.TemporaryDirectory() as tmpdir:
            desired = make_desired(nginx_conf_dir=tmpdir)
            with self.assertRaises(ValidationError) as ctx:
                configure_nginx(desired, FakeHostState())
            self.assertFalse(os.path.exists(os.path.join(tmpdir, 'shop.conf')))
        self.assertEqual(_commands(mock_run), ["nginx -t"])
        self.assertIn("unexpected end of file", ctx.exception.describe())

    @patch("provision.web_steps.run", side_effect=_reject_nginx_test)
    def test_validation_failure_restores_previous_config(self, _run):
        with tempfile.TemporaryDirectory() as tmpdir:
            conf_path = os.path.join(tmpdir, 'shop.conf')
            with open(conf_path, 'w') as f:
                f.write("# previous config\n")
            with self.assertRaises(ValidationError):
                configure_nginx(make_desired(nginx_conf_dir=tmpdir), FakeHostState())
            with open(conf_path) as f:
                self.assertEqual(f.read(), "# previous config\n")


class TestConfigureFirewall(unittest.TestCase):
    @patch("provision.web_steps.run")
    def test_allows_http_and_https(self, mock_run):
        configure_firewall(make_desired(), FakeHostState())
        self.assertEqual(_commands(mock_run), [
            "systemctl enable firewalld --now",
            "firewall-cmd --permanent --add-service=http",
            "firewall-cmd --permanent --add-service=https",
            "firewall-cmd --reload",
        ])


class TestConfigureLogRotation(unittest.TestCase):
    def test_writes_policy(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            desired = make_desired(logrotate_dir=tmpdir)
            configure_log_rotation(desired, FakeHostState())
            with open(os.path.join(tmpdir, 'shop')) as f:
                self.assertEqual(f.read(), generate_logrotate_config(desired))

    @patch("provision.web_steps.write_file")
    def test_path_from_app_name(self, mock_write):
        configure_log_rotation(make_desired(), FakeHostState())
        self.assertEqual(mock_write.call_args[0][0], '/etc/logrotate.d/shop')


class TestSummary(unittest.TestCase):
    def test_summary_lines(self):
        lines = summary_lines(make_desired())
        self.assertIn("Domain: http://shop.example", lines)
        self.assertIn("App Path: /var/www/shop", lines)
        self.assertIn("PM2 App: shop", lines)

    def test_print_summary_logs(self):
        with self.assertLogs('host_converge', level='INFO') as logs:
            print_summary(make_desired(), FakeHostState())
        self.assertTrue(any("Timezone: Asia/Riyadh" in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()
