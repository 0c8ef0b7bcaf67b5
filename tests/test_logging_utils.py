"""Tests for lib/logging_utils.py: rotating logger and run logger setup."""

from __future__ import annotations

import io
import logging
import os
import sys
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lib.logging_utils import (
    LOGGER_NAME,
    get_standard_formatter,
    get_rotating_logger,
    setup_run_logger,
)


def _close_handlers(logger):
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestGetStandardFormatter(unittest.TestCase):
    def test_returns_formatter(self):
        fmt = get_standard_formatter()
        self.assertIsInstance(fmt, logging.Formatter)

    def test_format_string(self):
        fmt = get_standard_formatter()
        self.assertIn('%(asctime)s', fmt._fmt)
        self.assertIn('%(levelname)', fmt._fmt)


class TestGetRotatingLogger(unittest.TestCase):
    def test_creates_logger(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = get_rotating_logger('converge_test_1', os.path.join(tmpdir, 'test.log'))
            self.assertIsInstance(logger, logging.Logger)
            self.assertGreater(len(logger.handlers), 0)
            _close_handlers(logger)

    def test_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, 'test.log')
            logger1 = get_rotating_logger('converge_test_idempotent', log_file)
            handler_count = len(logger1.handlers)
            logger2 = get_rotating_logger('converge_test_idempotent', log_file)
            self.assertEqual(len(logger2.handlers), handler_count)
            _close_handlers(logger2)

    def test_writes_to_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, 'test.log')
            logger = get_rotating_logger('converge_test_write', log_file)
            logger.info('test message')
            for h in logger.handlers:
                h.flush()
            with open(log_file, 'r') as f:
                content = f.read()
            self.assertIn('test message', content)
            self.assertIn('INFO', content)
            _close_handlers(logger)

    def test_creates_parent_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, 'nested', 'dir', 'test.log')
            logger = get_rotating_logger('converge_test_nested', log_file)
            self.assertTrue(os.path.isdir(os.path.dirname(log_file)))
            _close_handlers(logger)


class TestSetupRunLogger(unittest.TestCase):
    def tearDown(self):
        _close_handlers(logging.getLogger(LOGGER_NAME))

    def test_file_and_console_handlers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_run_logger(os.path.join(tmpdir, 'run.log'))
            self.assertEqual(logger.name, LOGGER_NAME)
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in logger.handlers))
            self.assertTrue(any(getattr(h, 'stream', None) is sys.stdout for h in logger.handlers))
            self.assertEqual(logger.level, logging.INFO)
            _close_handlers(logger)

    def test_verbose_enables_debug(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_run_logger(os.path.join(tmpdir, 'run.log'), verbose=True)
            self.assertEqual(logger.level, logging.DEBUG)
            _close_handlers(logger)

    def test_console_handler_added_once(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, 'run.log')
            setup_run_logger(log_file)
            logger = setup_run_logger(log_file)
            consoles = [h for h in logger.handlers if getattr(h, 'stream', None) is sys.stdout]
            self.assertEqual(len(consoles), 1)
            _close_handlers(logger)

    def test_unwritable_log_dir_has_single_console_handler(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = os.path.join(tmpdir, 'blocker')
            with open(blocker, 'w'):
                pass
            with patch('sys.stderr', new_callable=io.StringIO) as stderr:
                logger = setup_run_logger(os.path.join(blocker, 'run.log'))
                streams = [getattr(h, 'stream', None) for h in logger.handlers]
            self.assertEqual(streams, [sys.stdout])
            self.assertIn('Error creating log directory', stderr.getvalue())
            _close_handlers(logger)

    def test_unwritable_log_dir_without_console_falls_back_to_stderr(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = os.path.join(tmpdir, 'blocker')
            with open(blocker, 'w'):
                pass
            with patch('sys.stderr', new_callable=io.StringIO) as stderr:
                logger = setup_run_logger(os.path.join(blocker, 'run.log'), console_output=False)
                streams = [getattr(h, 'stream', None) for h in logger.handlers]
                self.assertEqual(streams, [stderr])
            _close_handlers(logger)

    def test_without_console(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_run_logger(os.path.join(tmpdir, 'run.log'), console_output=False)
            self.assertFalse(any(getattr(h, 'stream', None) is sys.stdout for h in logger.handlers))
            _close_handlers(logger)


if __name__ == '__main__':
    unittest.main()
