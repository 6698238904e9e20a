"""SecondTicker scheduling, alignment and cancellation."""
from __future__ import annotations

import unittest
from typing import List, Optional

from watchface.logic.second_ticker import SecondTicker
from watchface.tests.fakes import FakeDispatchQueue


class TestSecondTicker(unittest.TestCase):
    def setUp(self) -> None:
        self.queue: Optional[FakeDispatchQueue] = FakeDispatchQueue(start_ms=4_999)
        self.running = True
        self.calls: List[int] = []
        self.ticker = SecondTicker(
            lambda: self.calls.append(self.queue.now_ms if self.queue else -1),
            lambda: self.queue,
            keep_running=lambda: self.running,
        )

    def test_run_fires_now_and_arms_next_boundary(self) -> None:
        self.ticker.run()
        self.assertEqual(self.calls, [4_999])
        self.assertTrue(self.ticker.is_scheduled)
        self.assertEqual(self.ticker.next_tick_ms, 5_000)

    def test_run_twice_keeps_single_schedule(self) -> None:
        self.ticker.run()
        self.ticker.run()
        self.assertEqual(len(self.calls), 2)
        self.assertEqual(len(self.queue.scheduled), 1)

    def test_boundaries_absorb_latency(self) -> None:
        self.ticker.run()
        self.queue.advance(1, latency_ms=990)
        self.assertEqual(self.calls, [4_999, 5_990])
        self.assertEqual(self.ticker.next_tick_ms, 6_000)
        self.queue.advance(10)
        self.assertEqual(self.calls[-1], 6_000)
        self.assertEqual(self.ticker.next_tick_ms, 7_000)

    def test_cancel_drops_pending_and_inflight_firings(self) -> None:
        self.ticker.run()
        inflight = self.queue.scheduled[0][2]
        self.ticker.cancel()
        self.assertFalse(self.ticker.is_scheduled)
        self.assertIsNone(self.ticker.next_tick_ms)
        self.assertEqual(self.queue.scheduled, [])
        inflight()
        self.assertEqual(self.calls, [4_999])

    def test_keep_running_false_stops_rearming(self) -> None:
        self.ticker.run()
        self.running = False
        self.queue.advance(1)
        self.assertEqual(len(self.calls), 2)
        self.assertFalse(self.ticker.is_scheduled)

    def test_missing_queue_runs_action_without_rearming(self) -> None:
        self.queue = None
        self.ticker.run()
        self.assertEqual(self.calls, [-1])
        self.assertFalse(self.ticker.is_scheduled)
        self.ticker.cancel()

    def test_action_may_cancel_ticker(self) -> None:
        ticker = SecondTicker(lambda: ticker.cancel(), lambda: self.queue)
        ticker.run()
        self.assertFalse(ticker.is_scheduled)

    def test_failing_action_still_rearms(self) -> None:
        failures = [RuntimeError("host busy")]

        def action() -> None:
            self.calls.append(self.queue.now_ms)
            if failures:
                raise failures.pop()

        ticker = SecondTicker(action, lambda: self.queue)
        with self.assertRaises(RuntimeError):
            ticker.run()
        self.assertTrue(ticker.is_scheduled)
        self.assertEqual(ticker.next_tick_ms, 5_000)

        self.queue.advance(5_001)
        self.assertEqual(self.calls, [4_999, 5_000, 6_000, 7_000, 8_000, 9_000, 10_000])
        self.assertEqual(len(self.queue.scheduled), 1)

    def test_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            SecondTicker(lambda: None, lambda: self.queue, interval_ms=0)

    def test_custom_interval(self) -> None:
        ticker = SecondTicker(lambda: None, lambda: self.queue, interval_ms=250)
        ticker.run()
        self.assertEqual(ticker.next_tick_ms, 5_000)
        self.queue.advance(1)
        self.assertEqual(ticker.next_tick_ms, 5_250)


if __name__ == "__main__":
    unittest.main()
