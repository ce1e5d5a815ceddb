import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostmon_telemetry.errors import ArithmeticDegenerate, ParseError
from hostmon_telemetry.models import DiskReading, MemoryReading
from hostmon_telemetry.parsers import (
    compute_disk_reading,
    disk_usage_percent,
    memory_usage_percent,
    parse_cpu_ticks,
    parse_gpu_csv,
    parse_meminfo,
)

PROC_STAT_LINE = "cpu  74608 2520 24433 1117073 6176 4054 2051 0 0 0\n"

MEMINFO = """\
MemTotal:       16318112 kB
MemFree:         1022412 kB
MemAvailable:    9383200 kB
Buffers:          409628 kB
Cached:          7731064 kB
HugePages_Total:       0
"""


class CpuTicksTests(unittest.TestCase):
    def test_parses_first_seven_counters(self):
        ticks = parse_cpu_ticks(PROC_STAT_LINE)
        self.assertEqual(ticks.user, 74608)
        self.assertEqual(ticks.softirq, 2051)
        self.assertEqual(ticks.total, 74608 + 2520 + 24433 + 1117073 + 6176 + 4054 + 2051)
        self.assertEqual(ticks.idle_total, 1117073 + 6176)

    def test_exactly_seven_fields(self):
        ticks = parse_cpu_ticks("cpu 1 2 3 4 5 6 7")
        self.assertEqual(ticks.total, 28)

    def test_short_line_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_cpu_ticks("cpu 1 2 3 4 5 6")

    def test_empty_line_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_cpu_ticks("")

    def test_non_numeric_token_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_cpu_ticks("cpu 1 2 x 4 5 6 7")

    def test_negative_token_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_cpu_ticks("cpu 1 2 -3 4 5 6 7")

    def test_int_literal_forms_are_rejected(self):
        for token in ("1_000", "+5", "\u0661\u0662"):
            with self.assertRaises(ParseError):
                parse_cpu_ticks(f"cpu {token} 2 3 4 5 6 7")

    def test_parse_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_cpu_ticks("cpu")


class MemInfoTests(unittest.TestCase):
    def test_usage_from_available(self):
        reading = parse_meminfo("MemTotal: 1000 kB\nMemFree: 100 kB\nMemAvailable: 400 kB\n")
        self.assertEqual(reading, MemoryReading(total_kb=1000, free_kb=100, available_kb=400))
        self.assertEqual(reading.used_kb, 600)
        self.assertAlmostEqual(memory_usage_percent(reading), 60.0)

    def test_real_layout_ignores_unknown_keys(self):
        reading = parse_meminfo(MEMINFO)
        self.assertEqual(reading.total_kb, 16318112)
        self.assertEqual(reading.free_kb, 1022412)
        self.assertEqual(reading.available_kb, 9383200)

    def test_missing_available_defaults_to_zero(self):
        reading = parse_meminfo("MemTotal: 1000 kB\nMemFree: 100 kB\n")
        self.assertEqual(reading.available_kb, 0)
        self.assertAlmostEqual(memory_usage_percent(reading), 100.0)

    def test_non_numeric_known_value_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_meminfo("MemTotal: lots kB\n")

    def test_signed_known_value_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_meminfo("MemTotal: +10 kB\n")

    def test_zero_total_is_degenerate(self):
        with self.assertRaises(ArithmeticDegenerate):
            memory_usage_percent(parse_meminfo("Cached: 10 kB\n"))


class DiskTests(unittest.TestCase):
    def test_compute_disk_reading(self):
        reading = compute_disk_reading(blocks=1000, fragment_size=4096, available_blocks=250)
        self.assertEqual(reading.total_bytes, 4_096_000)
        self.assertEqual(reading.free_bytes, 1_024_000)
        self.assertEqual(reading.used_bytes, 3_072_000)
        self.assertAlmostEqual(disk_usage_percent(reading), 75.0)

    def test_zero_total_is_degenerate(self):
        with self.assertRaises(ArithmeticDegenerate):
            disk_usage_percent(DiskReading(total_bytes=0, free_bytes=0))

    def test_degenerate_is_zero_division(self):
        with self.assertRaises(ZeroDivisionError):
            disk_usage_percent(compute_disk_reading(0, 4096, 0))


class GpuCsvTests(unittest.TestCase):
    def test_parses_data_line(self):
        reading = parse_gpu_csv("utilization.gpu, temperature.gpu\n45 %, 62\n")
        self.assertEqual(reading.utilization_percent, 45.0)
        self.assertEqual(reading.temperature_c, 62.0)

    def test_real_header_with_units(self):
        reading = parse_gpu_csv("utilization.gpu [%], temperature.gpu\n 7 % ,  38 \n")
        self.assertEqual(reading.utilization_percent, 7.0)
        self.assertEqual(reading.temperature_c, 38.0)

    def test_header_only_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_gpu_csv("header\n")

    def test_wrong_field_count_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_gpu_csv("h\n45 %, 62, 10\n")
        with self.assertRaises(ParseError):
            parse_gpu_csv("h\n45 %\n")

    def test_non_finite_values_are_parse_error(self):
        for line in ("nan %, 62", "45 %, inf", "-inf %, 62"):
            with self.assertRaises(ParseError):
                parse_gpu_csv(f"h\n{line}\n")

    def test_not_supported_value_is_parse_error(self):
        with self.assertRaises(ParseError):
            parse_gpu_csv("h\n[N/A], 62\n")


if __name__ == "__main__":
    unittest.main()
