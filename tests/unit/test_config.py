import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostmon_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.sampler.mount_path, "/")
            self.assertEqual(cfg.sampler.gpu_backend, "nvidia-smi")
            self.assertIsNone(cfg.sampler.gpu_timeout_s)
            self.assertEqual(cfg.poll.interval_ms, 1000)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.poll.interval_ms = 2500
            cfg.sampler.mount_path = "/home"
            cfg.sampler.gpu_timeout_s = 3.0
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.poll.interval_ms, 2500)
            self.assertEqual(reloaded.sampler.mount_path, "/home")
            self.assertEqual(reloaded.sampler.gpu_timeout_s, 3.0)

    def test_normalizes_out_of_range_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "sampler": {"gpu_backend": "rocm", "gpu_index": -2, "gpu_timeout_s": 0, "unknown": 1},
                "poll": {"interval_ms": 5},
                "performance": {"duty_cycle_max": 7},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.sampler.gpu_backend, "nvidia-smi")
            self.assertEqual(cfg.sampler.gpu_index, 0)
            self.assertIsNone(cfg.sampler.gpu_timeout_s)
            self.assertFalse(hasattr(cfg.sampler, "unknown"))
            self.assertEqual(cfg.poll.interval_ms, 100)
            self.assertEqual(cfg.performance.duty_cycle_max, 1.0)

    def test_malformed_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())

            path.write_text(json.dumps({"poll": {"interval_ms": "fast"}}), encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())


if __name__ == "__main__":
    unittest.main()
