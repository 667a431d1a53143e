"""Tests for config loading, merging, and validation."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from docpage import config
from docpage.adapters import BUILTIN_ADAPTERS, strip_selection_prompt
from docpage.errors import ConfigurationError


class ConfigDefaultsTests(unittest.TestCase):
    def test_defaults_match_documented_values(self) -> None:
        cfg = config.DocPageConfig()
        self.assertEqual(cfg.max_prefetch_options, 10)
        self.assertEqual(cfg.max_async_jobs, 5)
        self.assertTrue(cfg.enable_async)
        self.assertEqual(cfg.history_mode, "separate")
        self.assertFalse(cfg.auto_select_first_match)
        self.assertEqual(set(cfg.adapters), set(BUILTIN_ADAPTERS))

    def test_content_width_clamps_to_max_width_and_minimum(self) -> None:
        cfg = config.DocPageConfig(max_width=100)
        self.assertEqual(cfg.content_width(200), 92)
        self.assertEqual(cfg.content_width(80), 72)
        self.assertEqual(cfg.content_width(30), 40)

    def test_invalid_values_raise_configuration_error(self) -> None:
        for kwargs in (
            {"history_mode": "manpage"},
            {"position": "left"},
            {"max_async_jobs": 0},
            {"max_async_jobs": True},
            {"enable_async": "yes"},
            {"max_prefetch_options": -1},
        ):
            with self.subTest(kwargs=kwargs), self.assertRaises(ConfigurationError):
                config.DocPageConfig(**kwargs)

    def test_build_registry_rejects_dangling_filetype_adapter(self) -> None:
        cfg = config.config_from_dict({"filetype_adapters": {"rust": "rustdoc"}})
        with self.assertRaises(ConfigurationError):
            cfg.build_registry()

    def test_build_registry_rejects_unknown_default_adapter(self) -> None:
        with self.assertRaises(ConfigurationError):
            config.DocPageConfig(default_adapter="nothing").build_registry()


class ConfigFromDictTests(unittest.TestCase):
    def test_unknown_keys_are_ignored(self) -> None:
        cfg = config.config_from_dict({"max_width": 90, "colour": "blue"})
        self.assertEqual(cfg.max_width, 90)

    def test_adapter_entry_merges_onto_builtin(self) -> None:
        cfg = config.config_from_dict({"adapters": {"man": {"env": {"LANG": "C"}, "fallback_to_lsp": False}}})
        man = cfg.adapters["man"]
        self.assertEqual(man.env["LANG"], "C")
        self.assertEqual(man.env["MANPAGER"], "cat")
        self.assertFalse(man.fallback_to_lsp)

    def test_new_adapter_requires_cmd_and_resolves_named_processors(self) -> None:
        cfg = config.config_from_dict(
            {
                "adapters": {
                    "mydoc": {
                        "cmd": "mydoc",
                        "args": "--width={width}",
                        "process_output": "strip_selection_prompt",
                        "supports_selections": True,
                        "parse_options": "numbered",
                    }
                },
                "filetype_adapters": {"lua": {"adapter": "mydoc", "args": "--lua"}},
            }
        )
        self.assertIs(cfg.adapters["mydoc"].process_output, strip_selection_prompt)
        resolved = cfg.build_registry().resolve("lua")
        self.assertEqual((resolved.name, resolved.args), ("mydoc", "--lua"))

        with self.assertRaises(ConfigurationError):
            config.config_from_dict({"adapters": {"nocmd": {"args": "x"}}})

    def test_merge_config_dicts_is_deep(self) -> None:
        merged = config.merge_config_dicts(
            {"adapters": {"man": {"args": "-a"}}, "max_width": 80},
            {"adapters": {"man": {"env": {"X": "1"}}}, "max_width": 90},
        )
        self.assertEqual(merged, {"adapters": {"man": {"args": "-a", "env": {"X": "1"}}}, "max_width": 90})


class ConfigFileTests(unittest.TestCase):
    def test_missing_or_malformed_file_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("docpage.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                config_path.write_text("{not json", encoding="utf-8")
                self.assertEqual(config.load_config(), {})
                config_path.write_text("[1, 2]", encoding="utf-8")
                self.assertEqual(config.load_config(), {})

    def test_overrides_win_over_file_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps({"max_async_jobs": 2, "history_mode": "unified"}), encoding="utf-8"
            )
            with mock.patch("docpage.config.CONFIG_PATH", config_path):
                cfg = config.load_docpage_config({"max_async_jobs": 7})

        self.assertEqual(cfg.max_async_jobs, 7)
        self.assertEqual(cfg.history_mode, "unified")

    def test_invalid_file_value_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(json.dumps({"history_mode": "sideways"}), encoding="utf-8")
            with mock.patch("docpage.config.CONFIG_PATH", config_path), self.assertRaises(ConfigurationError):
                config.load_docpage_config()


if __name__ == "__main__":
    unittest.main()
