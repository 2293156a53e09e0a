"""Test the caret blink timer."""

import unittest
from unittest.mock import Mock

from spantext.blink import PolledBlinkTimer


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestPolledBlinkTimer(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.callback = Mock()
        self.timer = PolledBlinkTimer(0.5, self.callback, clock=self.clock)

    def test_idle_until_started(self):
        self.assertFalse(self.timer.is_running)
        self.assertIsNone(self.timer.seconds_until_due())
        self.clock.now += 10
        self.assertFalse(self.timer.poll())
        self.callback.assert_not_called()

    def test_fires_once_per_interval(self):
        self.timer.start()
        self.assertEqual(self.timer.seconds_until_due(), 0.5)

        self.clock.now += 0.2
        self.assertFalse(self.timer.poll())
        self.assertAlmostEqual(self.timer.seconds_until_due(), 0.3)

        self.clock.now = 100.5
        self.assertTrue(self.timer.poll())
        self.callback.assert_called_once()
        self.assertEqual(self.timer.seconds_until_due(), 0.5)

    def test_overdue_timer_waits_zero(self):
        self.timer.start()
        self.clock.now += 3
        self.assertEqual(self.timer.seconds_until_due(), 0.0)

    def test_cancel(self):
        self.timer.start()
        self.timer.cancel()
        self.clock.now += 1
        self.assertFalse(self.timer.poll())
        self.assertFalse(self.timer.is_running)
