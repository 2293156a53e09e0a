"""Test selection and caret behaviour."""

import threading
import unittest
from unittest.mock import Mock

from spantext.blink import PolledBlinkTimer
from spantext.document import Position, TextDocument
from spantext.selection import TextSelection


class FakeTimer:
    """Blink timer double that only fires when told to."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


class TestSelection(unittest.TestCase):
    """Test selection operations."""

    def setUp(self):
        self.timers = []
        self.on_change = Mock()
        self.document = TextDocument.from_text("The quick brown fox\njumps over\nthe lazy dog")
        self.selection = TextSelection(
            self.document,
            blink_interval=0.25,
            timer_factory=self._make_timer,
            on_change=self.on_change,
        )

    def _make_timer(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    def test_starts_collapsed_at_origin(self):
        self.assertEqual(self.selection.start, Position(0, 0))
        self.assertEqual(self.selection.end, Position(0, 0))
        self.assertTrue(self.selection.is_empty())
        self.assertTrue(self.selection.is_active_side_end)

    def test_set_position_clamps(self):
        self.selection.set_position(9, 99)
        self.assertEqual(self.selection.get_position(), Position(2, 12))
        self.selection.set_position(-1, -1)
        self.assertEqual(self.selection.get_position(), Position(0, 0))

    def test_none_keeps_current_coordinate(self):
        self.selection.set_position(1, 4)
        self.selection.set_position(character=0)
        self.assertEqual(self.selection.get_position(), Position(1, 0))
        self.selection.set_position(line=2)
        self.assertEqual(self.selection.get_position(), Position(2, 0))

    def test_extend_forward(self):
        self.selection.set_position(0, 4)
        self.selection.set_position(0, 9, keep_selection=True)
        self.assertEqual(self.selection.start, Position(0, 4))
        self.assertEqual(self.selection.end, Position(0, 9))
        self.assertTrue(self.selection.is_active_side_end)
        self.assertEqual(self.document.get_text(self.selection.start, self.selection.end), "quick")

    def test_extend_backward_from_caret_moves_start(self):
        self.selection.set_position(0, 9)
        self.selection.set_position(0, 4, keep_selection=True)
        self.assertEqual(self.selection.start, Position(0, 4))
        self.assertEqual(self.selection.end, Position(0, 9))
        self.assertFalse(self.selection.is_active_side_end)
        self.assertEqual(self.selection.get_position(), Position(0, 4))

    def test_crossing_the_anchor_swaps_ends(self):
        self.selection.set_position(0, 4)
        self.selection.set_position(0, 9, keep_selection=True)
        self.selection.set_position(0, 2, keep_selection=True)
        self.assertEqual(self.selection.start, Position(0, 2))
        self.assertEqual(self.selection.end, Position(0, 4))
        self.assertFalse(self.selection.is_active_side_end)
        self.assertEqual(self.selection.get_position(), Position(0, 2))

    def test_moving_above_start_line_drags_start(self):
        self.selection.set_position(1, 2)
        self.selection.set_position(2, 1, keep_selection=True)
        self.selection.set_position(0, 1, keep_selection=True)
        self.assertEqual(self.selection.start, Position(0, 1))
        self.assertEqual(self.selection.end, Position(2, 1))
        self.assertFalse(self.selection.is_active_side_end)

    def test_plain_move_collapses(self):
        self.selection.set_position(0, 4)
        self.selection.set_position(0, 9, keep_selection=True)
        self.selection.set_position(1, 1)
        self.assertTrue(self.selection.is_empty())
        self.assertTrue(self.selection.is_active_side_end)

    def test_collapse_to_start_and_end(self):
        self.selection.set_position(0, 4)
        self.selection.set_position(0, 9, keep_selection=True)
        self.selection.collapse_to_start()
        self.assertEqual(self.selection.get_position(), Position(0, 4))
        self.assertTrue(self.selection.is_empty())

        self.selection.set_position(0, 9, keep_selection=True)
        self.selection.collapse_to_end()
        self.assertEqual(self.selection.get_position(), Position(0, 9))

    def test_select_all(self):
        self.selection.select_all()
        self.assertEqual(self.selection.start, Position(0, 0))
        self.assertEqual(self.selection.end, Position(2, 12))

    def test_directional_moves(self):
        self.selection.set_position(0, 18)
        self.selection.move_down()
        # Column clamps to the shorter line and is not remembered
        self.assertEqual(self.selection.get_position(), Position(1, 10))
        self.selection.move_down()
        self.assertEqual(self.selection.get_position(), Position(2, 10))
        self.selection.move_left(3)
        self.assertEqual(self.selection.get_position(), Position(2, 7))
        self.selection.move_up(5)
        self.assertEqual(self.selection.get_position(), Position(0, 7))
        self.selection.move_right(keep_selection=True)
        self.assertEqual((self.selection.start, self.selection.end), (Position(0, 7), Position(0, 8)))

    def test_left_at_line_start_does_not_wrap(self):
        self.selection.set_position(1, 0)
        self.selection.move_left()
        self.assertEqual(self.selection.get_position(), Position(1, 0))

    def test_line_start_and_end(self):
        self.selection.set_position(1, 3)
        self.selection.move_line_end()
        self.assertEqual(self.selection.get_position(), Position(1, 10))
        self.selection.move_line_start(keep_selection=True)
        self.assertEqual((self.selection.start, self.selection.end), (Position(1, 0), Position(1, 10)))

    def test_follows_replaced_document(self):
        self.selection.set_position(2, 5)
        self.selection.document = TextDocument.from_text("ab")
        self.selection.set_position(2, 5)
        self.assertEqual(self.selection.get_position(), Position(0, 2))

    def test_get_position_returns_copy(self):
        position = self.selection.get_position()
        position.line = 5
        self.assertEqual(self.selection.end, Position(0, 0))

    def test_compare_position(self):
        self.assertEqual(TextSelection.compare_position(Position(0, 1), Position(0, 2)), -1)
        self.assertEqual(TextSelection.compare_position(Position(1, 0), Position(0, 9)), 1)


class TestCaretBlinking(unittest.TestCase):
    """Test visibility and the blink timer lifecycle."""

    def setUp(self):
        self.timers = []
        self.on_change = Mock()
        self.selection = TextSelection(
            TextDocument.from_text("one\ntwo"),
            blink_interval=0.25,
            timer_factory=self._make_timer,
            on_change=self.on_change,
        )

    def _make_timer(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    def test_hidden_selection_has_no_timer(self):
        self.selection.set_position(1, 1)
        self.assertEqual(self.timers, [])

    def test_becoming_visible_starts_blinking(self):
        self.selection.set_visible(True)
        self.assertEqual(len(self.timers), 1)
        self.assertTrue(self.timers[0].started)
        self.assertEqual(self.timers[0].interval, 0.25)
        self.assertTrue(self.selection.is_blink_visible)

    def test_blink_toggles_and_redraws_selected_lines(self):
        self.selection.set_visible(True)
        self.selection.set_position(1, 2)
        self.on_change.reset_mock()
        self.timers[-1].fire()
        self.assertFalse(self.selection.is_blink_visible)
        self.on_change.assert_called_once_with(1, 1)
        self.timers[-1].fire()
        self.assertTrue(self.selection.is_blink_visible)

    def test_moving_resets_blink(self):
        self.selection.set_visible(True)
        self.timers[-1].fire()
        self.assertFalse(self.selection.is_blink_visible)
        first_timer = self.timers[-1]
        self.selection.set_position(0, 1)
        self.assertTrue(self.selection.is_blink_visible)
        self.assertTrue(first_timer.cancelled)
        self.assertTrue(self.timers[-1].started)
        self.on_change.assert_called_with(None, None)

    def test_hiding_stops_timer(self):
        self.selection.set_visible(True)
        self.selection.set_visible(False)
        self.assertTrue(self.timers[0].cancelled)
        self.assertFalse(self.selection.is_visible)

    def test_destroy_cancels_timer_and_callbacks(self):
        self.selection.set_visible(True)
        self.selection.destroy()
        self.assertTrue(self.timers[0].cancelled)
        self.on_change.reset_mock()
        self.selection.set_position(1, 1)
        self.on_change.assert_not_called()


class TestDefaultBlinkTimer(unittest.TestCase):
    """Without a timer_factory the caret only blinks when the host polls."""

    def setUp(self):
        self.on_change = Mock()
        self.selection = TextSelection(TextDocument.from_text("one"), blink_interval=0.0,
                                       on_change=self.on_change)

    def test_ticks_run_on_the_polling_thread(self):
        threads_before = threading.active_count()
        self.selection.set_visible(True)
        timer = self.selection._blink_timer
        self.assertIsInstance(timer, PolledBlinkTimer)
        self.assertEqual(threading.active_count(), threads_before)
        self.assertTrue(self.selection.is_blink_visible)

        callers = []
        self.on_change.side_effect = lambda *lines: callers.append(threading.current_thread())
        self.assertTrue(timer.poll())
        self.assertFalse(self.selection.is_blink_visible)
        self.assertEqual(callers, [threading.main_thread()])

    def test_no_tick_after_hiding(self):
        self.selection.set_visible(True)
        timer = self.selection._blink_timer
        self.selection.set_visible(False)
        self.assertFalse(timer.poll())
        self.assertTrue(self.selection.is_blink_visible)
