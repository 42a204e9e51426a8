"""
Logging Configuration Tests

Level resolution and JSON output of the structlog setup.
"""
import io
import json
import logging

import structlog

from oicp.logging_config import configure, resolve_level


class TestResolveLevel:
    """Explicit argument, then environment, then INFO."""

    def test_explicit(self, monkeypatch):
        monkeypatch.setenv('OICP_LOG_LEVEL', 'ERROR')
        assert resolve_level('debug') == logging.DEBUG

    def test_environment(self, monkeypatch):
        monkeypatch.setenv('OICP_LOG_LEVEL', 'warning')
        assert resolve_level() == logging.WARNING

    def test_default_and_unknown(self, monkeypatch):
        monkeypatch.delenv('OICP_LOG_LEVEL', raising=False)
        assert resolve_level() == logging.INFO
        assert resolve_level('verbose') == logging.INFO


class TestConfigure:
    """Records are rendered as JSON lines on the given stream."""

    def test_json_event(self):
        stream = io.StringIO()
        configure('INFO', stream=stream)
        structlog.get_logger('oicp.test').info('context_built', year=2024, buyer='Quito')
        record = json.loads(stream.getvalue().splitlines()[-1])
        assert record['event'] == 'context_built'
        assert record['year'] == 2024
        assert record['level'] == 'info'
        assert record['logger'] == 'oicp.test'

    def test_level_filters(self):
        stream = io.StringIO()
        configure('WARNING', stream=stream)
        structlog.get_logger('oicp.test').info('hidden')
        assert stream.getvalue() == ''

    def test_reconfigure_replaces_handler(self):
        configure('INFO', stream=io.StringIO())
        configure('INFO', stream=io.StringIO())
        assert len(logging.getLogger().handlers) == 1
