from __future__ import annotations

import io
import json
import logging
import os
import unittest
from unittest.mock import patch

from stencil.core.interfaces import LoggerFactoryProtocol
from stencil.logging.factory import DefaultLoggerFactory
from stencil.logging.helpers import (
    BASE_LOGGER_NAME,
    JsonLogFormatter,
    get_logger,
    level_from_env,
    trace_io,
)


def _reset_base_logger() -> None:
    base = logging.getLogger(BASE_LOGGER_NAME)
    for h in list(base.handlers):
        base.removeHandler(h)
    base.propagate = True
    base.setLevel(logging.NOTSET)


class LoggingHelperTests(unittest.TestCase):
    def setUp(self) -> None:
        _reset_base_logger()

    def tearDown(self) -> None:
        _reset_base_logger()

    def test_loggers_are_namespaced(self) -> None:
        self.assertEqual(get_logger('render').name, 'stencil.render')
        self.assertEqual(get_logger('stencil.io').name, 'stencil.io')
        self.assertEqual(get_logger().name, 'stencil')

    def test_json_formatter_schema(self) -> None:
        record = logging.LogRecord('stencil.render', logging.INFO, __file__, 1, 'hi %s', ('there',), None)
        record.context = {'path': 'a.txt'}
        payload = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(payload['msg'], 'hi there')
        self.assertEqual(payload['level'], 'INFO')
        self.assertEqual(payload['module'], 'stencil.render')
        self.assertEqual(payload['ctx'], {'path': 'a.txt'})
        self.assertTrue(payload['ts'].endswith('Z'))
        self.assertIn('version', payload)

    def test_level_from_env(self) -> None:
        with patch.dict(os.environ, {'STENCIL_LOG_LEVEL': 'debug'}):
            self.assertEqual(level_from_env(), logging.DEBUG)
        with patch.dict(os.environ, {'STENCIL_LOG_LEVEL': 'nonsense'}):
            self.assertEqual(level_from_env(logging.WARNING), logging.WARNING)

    def test_factory_configures_once_and_writes_json(self) -> None:
        stream = io.StringIO()
        factory = DefaultLoggerFactory(json_logs=True, level=logging.DEBUG, stream=stream)
        log = factory.get_logger('copier')
        factory.get_logger('walker')
        log.info('copied %d files', 3)
        self.assertEqual(len(logging.getLogger(BASE_LOGGER_NAME).handlers), 1)
        line = stream.getvalue().strip().splitlines()[-1]
        self.assertEqual(json.loads(line)['msg'], 'copied 3 files')

    def test_factory_satisfies_render_protocol(self) -> None:
        self.assertIsInstance(DefaultLoggerFactory(stream=io.StringIO()), LoggerFactoryProtocol)

    def test_trace_io_is_gated_by_env(self) -> None:
        log = get_logger('trace-test')
        with patch.dict(os.environ, {'STENCIL_TRACE_IO': ''}):
            with patch.object(log, 'debug') as debug:
                trace_io(log, 'copied file', path='x')
                debug.assert_not_called()
        with patch.dict(os.environ, {'STENCIL_TRACE_IO': '1'}):
            with patch.object(log, 'debug') as debug:
                trace_io(log, 'copied file', path='x')
                debug.assert_called_once()
                self.assertEqual(debug.call_args.kwargs['extra'], {'context': {'path': 'x'}})


if __name__ == '__main__':
    unittest.main()
