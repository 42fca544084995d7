#!/usr/bin/env python3
import unittest

from webhook_relay.constants import WEBHOOK_PROMPT_MARKER
from webhook_relay.formatters import (
    format_analysis_message,
    format_relay_notice,
    format_trigger_message,
)


class TestFormatAnalysisMessage(unittest.TestCase):
    def test_without_analysis_shows_pending_only(self):
        msg = format_analysis_message({'ticker': 'ETH'}, None, now='2025-01-01T00:00:00.000Z')
        self.assertIn('TRADING ALERT: ETH', msg)
        self.assertIn('Analysis pending', msg)
        self.assertNotIn('SETUP FOUND', msg)
        self.assertNotIn('NO SETUP', msg)
        self.assertNotIn('Indicators', msg)
        self.assertIn('*Condition:* ALERT', msg)
        self.assertIn('*Price:* $N/A', msg)
        self.assertIn('2025-01-01T00:00:00.000Z', msg)

    def test_setup_without_indicators(self):
        analysis = {'setup': {'type': 'LONG', 'entry': '100'}}
        msg = format_analysis_message({'ticker': 'BTC', 'price': '100'}, analysis)
        self.assertIn('SETUP FOUND', msg)
        self.assertIn('*Entry:* $100', msg)
        self.assertIn('*Stop:* $N/A', msg)
        self.assertIn('*Win Rate:* N/A%', msg)
        self.assertNotIn('Indicators', msg)
        self.assertNotIn('Analysis pending', msg)

    def test_section_order(self):
        analysis = {
            'setup': {'type': 'SHORT', 'tp3': '90'},
            'indicators': {'adx': '26.7'},
            'recommendation': 'Wait for MGM < 0',
        }
        msg = format_analysis_message({'ticker': 'SOL'}, analysis)
        header = msg.index('TRADING ALERT')
        setup = msg.index('SETUP FOUND')
        indicators = msg.index('Indicators')
        recommendation = msg.index('Recommendation')
        self.assertLess(header, setup)
        self.assertLess(setup, indicators)
        self.assertLess(indicators, recommendation)
        self.assertIn('*TP3:* $90', msg)
        self.assertIn('• ADX: 26.7', msg)
        self.assertIn('• Jewel Fast: N/A', msg)
        self.assertIn('Wait for MGM < 0', msg)

    def test_empty_analysis_reports_no_setup(self):
        msg = format_analysis_message({}, {})
        self.assertIn('TRADING ALERT: UNKNOWN', msg)
        self.assertIn('NO SETUP', msg)
        self.assertNotIn('TP3', msg)
        self.assertNotIn('Analysis pending', msg)

    def test_empty_setup_and_indicators_render_placeholders(self):
        msg = format_analysis_message({'ticker': 'ETH'}, {'setup': {}, 'indicators': {}})
        self.assertIn('SETUP FOUND', msg)
        self.assertNotIn('NO SETUP', msg)
        self.assertIn('*Type:* N/A', msg)
        self.assertIn('Indicators', msg)
        self.assertIn('• ADX: N/A', msg)

    def test_null_setup_reports_no_setup(self):
        msg = format_analysis_message({'ticker': 'ETH'}, {'setup': None, 'indicators': None})
        self.assertIn('NO SETUP', msg)
        self.assertNotIn('Indicators', msg)

    def test_non_dict_fields_do_not_crash(self):
        msg = format_analysis_message({'ticker': 'ETH'}, {'setup': 'yes', 'indicators': ['x']})
        self.assertIn('*Type:* N/A', msg)
        self.assertIn('• MGM Momentum: N/A', msg)


class TestTriggerMessages(unittest.TestCase):
    def test_trigger_message_starts_with_marker(self):
        msg = format_trigger_message('Run setup-check skill for ETH 30m', {'alert': 'Cross', 'time': '12:00'})
        self.assertTrue(msg.startswith(f'{WEBHOOK_PROMPT_MARKER}Run setup-check skill for ETH 30m'))
        self.assertIn('Alert: Cross', msg)
        self.assertIn('Time: 12:00', msg)

    def test_trigger_message_default_alert_name(self):
        msg = format_trigger_message('hello', {})
        self.assertIn('Alert: TradingView Alert', msg)

    def test_relay_notice_has_no_marker(self):
        msg = format_relay_notice('analyze ETH', 'ETH', {})
        self.assertNotIn(WEBHOOK_PROMPT_MARKER, msg)
        self.assertIn('ETH', msg)


if __name__ == '__main__':
    unittest.main()
