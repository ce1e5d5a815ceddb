import random
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostmon_telemetry.errors import ArithmeticDegenerate, RatePending
from hostmon_telemetry.models import CpuTicks
from hostmon_telemetry.rate import RateState, cpu_usage_percent


def _ticks(busy: int, idle: int) -> CpuTicks:
    return CpuTicks(user=busy, nice=0, system=0, idle=idle, iowait=0, irq=0, softirq=0)


class RateStateTests(unittest.TestCase):
    def test_first_pass_is_pending_and_primes_state(self):
        state = RateState()
        with self.assertRaises(RatePending):
            state.advance(_ticks(200, 800))
        self.assertEqual(state.prev_total, 1000)
        self.assertEqual(state.prev_idle, 800)
        self.assertTrue(state.primed)

    def test_second_pass_uses_deltas(self):
        state = RateState()
        with self.assertRaises(RatePending):
            state.advance(_ticks(200, 800))
        self.assertAlmostEqual(state.advance(_ticks(400, 1600)), 20.0)

    def test_rate_is_pairwise(self):
        state = RateState()
        with self.assertRaises(RatePending):
            state.advance(_ticks(0, 1000))
        self.assertAlmostEqual(state.advance(_ticks(1000, 1000)), 100.0)
        self.assertAlmostEqual(state.advance(_ticks(1000, 2000)), 0.0)

    def test_same_tick_is_degenerate_and_still_updates(self):
        state = RateState()
        with self.assertRaises(RatePending):
            state.advance(_ticks(200, 800))
        with self.assertRaises(ArithmeticDegenerate):
            state.advance(_ticks(200, 800))
        self.assertAlmostEqual(state.advance(_ticks(300, 900)), 50.0)

    def test_usage_stays_in_range_for_monotonic_ticks(self):
        rng = random.Random(7)
        for _ in range(200):
            prev = _ticks(rng.randint(1, 10**6), rng.randint(1, 10**6))
            cur = _ticks(prev.user + rng.randint(0, 5000), prev.idle + rng.randint(1, 5000))
            usage = cpu_usage_percent(prev.idle_total, prev.total, cur)
            self.assertGreaterEqual(usage, 0.0)
            self.assertLessEqual(usage, 100.0)


if __name__ == "__main__":
    unittest.main()
