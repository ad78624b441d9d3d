import asyncio
import unittest

from seat_shuffler.geometry import CellMetrics
from seat_shuffler.layout import assign
from seat_shuffler.rearrange import (
    DRAG,
    TOUCH,
    LoopScheduler,
    ManualScheduler,
    RearrangementEngine,
)
from seat_shuffler.render import Board


def _board():
    # depths [2, 1] -> (0,0)=1 (0,1)=3 (1,0)=2 (1,1)=placeholder
    return Board.from_grid(assign([1, 2, 3], [2, 1], 2), CellMetrics(80, 60, 10))


class TestManualScheduler(unittest.TestCase):
    def test_runs_due_callbacks_in_order(self):
        s = ManualScheduler()
        calls = []
        s.call_later(0.5, lambda: calls.append("b"))
        s.call_later(0.2, lambda: calls.append("a"))
        s.advance(0.3)
        self.assertEqual(calls, ["a"])
        self.assertEqual(s.pending, 1)
        s.advance(0.3)
        self.assertEqual(calls, ["a", "b"])
        self.assertEqual(s.pending, 0)


class TestLoopScheduler(unittest.TestCase):
    def test_fires_on_running_loop(self):
        calls = []

        async def run():
            LoopScheduler().call_later(0.01, lambda: calls.append(1))
            await asyncio.sleep(0.05)

        asyncio.run(run())
        self.assertEqual(calls, [1])


class TestRearrangementEngine(unittest.TestCase):
    def setUp(self):
        self.board = _board()
        self.scheduler = ManualScheduler()
        self.engine = RearrangementEngine(self.scheduler, swap_cue_seconds=0.3)
        self.a = self.board.at(0, 0)
        self.b = self.board.at(0, 1)
        self.c = self.board.at(1, 0)
        self.hole = self.board.at(1, 1)

    def test_begin_marks_source(self):
        session = self.engine.begin(self.a)
        self.assertIs(session.source, self.a)
        self.assertEqual(session.modality, DRAG)
        self.assertIsNone(session.proxy)
        self.assertFalse(session.suppress_scroll)
        self.assertTrue(self.a.dragging)
        self.assertTrue(self.engine.active)

    def test_touch_session_gets_proxy(self):
        session = self.engine.begin(self.a, modality=TOUCH)
        self.assertEqual(session.proxy.number, 1)
        self.assertEqual(session.proxy.size, 80.0)
        self.assertTrue(session.suppress_scroll)

    def test_begin_ignored_while_active_or_on_placeholder(self):
        self.assertIsNone(self.engine.begin(self.hole))
        self.assertIsNone(self.engine.begin(None))
        first = self.engine.begin(self.a)
        self.assertIsNone(self.engine.begin(self.b))
        self.assertIs(self.engine.session, first)
        self.assertFalse(self.b.dragging)

    def test_only_one_target_marked(self):
        self.engine.begin(self.a)
        self.assertIs(self.engine.update_target(self.b), self.b)
        self.assertTrue(self.b.drag_over)
        self.engine.update_target(self.c)
        self.assertFalse(self.b.drag_over)
        self.assertTrue(self.c.drag_over)

    def test_source_and_placeholder_clear_target(self):
        self.engine.begin(self.a)
        self.engine.update_target(self.b)
        self.assertIsNone(self.engine.update_target(self.a))
        self.assertFalse(self.b.drag_over)
        self.assertFalse(self.a.drag_over)
        self.engine.update_target(self.b)
        self.assertIsNone(self.engine.update_target(self.hole))
        self.assertFalse(self.b.drag_over)
        self.assertIsNone(self.engine.session.target)

    def test_update_target_when_idle_is_noop(self):
        self.assertIsNone(self.engine.update_target(self.b))
        self.assertFalse(self.b.drag_over)

    def test_commit_swaps_and_cues(self):
        self.engine.begin(self.a)
        self.engine.update_target(self.c)
        result = self.engine.end(committed=True)
        self.assertEqual(result.numbers, (2, 1))
        self.assertEqual((self.a.assigned_number, self.c.assigned_number), (2, 1))
        self.assertFalse(self.a.dragging)
        self.assertFalse(self.c.drag_over)
        self.assertTrue(self.a.swapped and self.c.swapped)
        self.assertFalse(self.engine.active)

        self.scheduler.advance(0.2)
        self.assertTrue(self.a.swapped)
        self.scheduler.advance(0.2)
        self.assertFalse(self.a.swapped or self.c.swapped)

    def test_overlapping_cues_clear_idempotently(self):
        self.engine.begin(self.a)
        self.engine.update_target(self.b)
        self.engine.end(True)
        self.scheduler.advance(0.2)
        self.engine.begin(self.a)
        self.engine.update_target(self.c)
        self.engine.end(True)
        self.scheduler.advance(0.15)
        # first cue has fired
        self.assertFalse(self.b.swapped)
        self.assertTrue(self.c.swapped)
        self.scheduler.advance(0.3)
        self.assertFalse(any(s.swapped for s in self.board.seats()))

    def test_end_without_commit_or_target_is_noop(self):
        before = self.board.numbers()
        self.engine.begin(self.a)
        self.engine.update_target(self.b)
        self.assertIsNone(self.engine.end(committed=False))
        self.engine.begin(self.a)
        self.assertIsNone(self.engine.end(committed=True))
        self.assertEqual(self.board.numbers(), before)
        self.assertFalse(any(s.dragging or s.drag_over or s.swapped for s in self.board.seats()))
        self.assertEqual(self.scheduler.pending, 0)

    def test_end_when_idle(self):
        self.assertIsNone(self.engine.end(True))
        self.engine.cancel()

    def test_cancel_clears_markers(self):
        self.engine.begin(self.a)
        self.engine.update_target(self.b)
        self.engine.cancel()
        self.assertFalse(self.a.dragging or self.b.drag_over)
        self.assertFalse(self.engine.active)

    def _swap(self, x, y):
        self.engine.begin(x)
        self.engine.update_target(y)
        self.engine.end(True)

    def test_swap_is_involution(self):
        before = self.board.numbers()
        self._swap(self.a, self.b)
        self.assertNotEqual(self.board.numbers(), before)
        self._swap(self.a, self.b)
        self.assertEqual(self.board.numbers(), before)

    def test_swaps_preserve_multiset(self):
        before = sorted(self.board.numbers())
        for x, y in [(self.a, self.b), (self.b, self.c), (self.c, self.a), (self.a, self.c)]:
            self._swap(x, y)
            self.assertEqual(sorted(self.board.numbers()), before)


if __name__ == "__main__":
    unittest.main()
