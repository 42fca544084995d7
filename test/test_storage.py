#!/usr/bin/env python3
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from webhook_relay.storage import AlertLogWriter


class TestAlertLogWriter(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.log_dir = os.path.join(self._tmp.name, 'nested', 'logs')

    def tearDown(self):
        self._tmp.cleanup()

    def test_creates_directory_recursively(self):
        AlertLogWriter(self.log_dir)
        self.assertTrue(os.path.isdir(self.log_dir))

    def test_round_trip(self):
        writer = AlertLogWriter(self.log_dir)
        alert = {'ticker': 'ETH', 'price': 3040.5, 'nested': {'a': [1, 2, None]}, 'note': 'ação ✓', 'receivedAt': '2025-01-01T00:00:00.000Z'}
        result = {'relayed': True, 'prompt': 'Run setup-check skill for ETH 30m', 'ticker': 'ETH', 'method': 'http_trigger'}

        path = writer.persist(alert, result)
        entry = writer.load(path)

        self.assertEqual(entry['alert'], alert)
        self.assertEqual(entry['analysis'], result)
        self.assertIn('timestamp', entry)
        with open(path, encoding='utf-8') as f:
            self.assertEqual(json.load(f), entry)

    def test_filename_format(self):
        writer = AlertLogWriter(self.log_dir)
        with patch('webhook_relay.storage.utc_now_iso', return_value='2025-03-04T05:06:07.890Z'):
            path = writer.persist({'ticker': 'BINANCE:BTCUSDT'}, {'relayed': False})
        self.assertEqual(os.path.basename(path), '2025-03-04T05-06-07-890Z_BINANCE-BTCUSDT_analysis.json')

    def test_missing_ticker_uses_placeholder(self):
        writer = AlertLogWriter(self.log_dir)
        path = writer.persist({'message': 'raw text'}, None)
        self.assertTrue(os.path.basename(path).endswith('_UNKNOWN_analysis.json'))

    def test_lone_surrogate_in_alert_is_written(self):
        writer = AlertLogWriter(self.log_dir)
        alert = json.loads('{"ticker": "ETH", "message": "x\\ud800y"}')

        path = writer.persist(alert, {'relayed': False})

        self.assertGreater(os.path.getsize(path), 0)
        self.assertEqual(writer.load(path)['alert'], alert)
        self.assertEqual(len(os.listdir(self.log_dir)), 1)

    def test_long_ticker_is_truncated_in_filename(self):
        writer = AlertLogWriter(self.log_dir)
        alert = {'ticker': 'A' * 300}

        path = writer.persist(alert, {'relayed': True})

        name = os.path.basename(path)
        self.assertIn('_' + 'A' * 64 + '_analysis.json', name)
        self.assertLess(len(name), 255)
        self.assertEqual(writer.load(path)['alert'], alert)

    def test_same_timestamp_and_ticker_produce_distinct_files(self):
        writer = AlertLogWriter(self.log_dir)
        with patch('webhook_relay.storage.utc_now_iso', return_value='2025-03-04T05:06:07.890Z'):
            first = writer.persist({'ticker': 'ETH', 'n': 1}, {'relayed': True})
            second = writer.persist({'ticker': 'ETH', 'n': 2}, {'relayed': True})

        self.assertNotEqual(first, second)
        self.assertEqual(writer.load(first)['alert']['n'], 1)
        self.assertEqual(writer.load(second)['alert']['n'], 2)
        self.assertEqual(len(os.listdir(self.log_dir)), 2)


if __name__ == '__main__':
    unittest.main()
