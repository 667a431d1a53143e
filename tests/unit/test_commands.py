"""Tests for command composition and exit classification."""

from __future__ import annotations

import unittest

from docpage.adapters import BUILTIN_ADAPTERS, BackendAdapter
from docpage.commands import build_command, interpret_output, no_output_lines
from docpage.errors import BackendError


class BuildCommandTests(unittest.TestCase):
    def test_cppman_command_with_selection_pipes_answer(self) -> None:
        command = build_command(BUILTIN_ADAPTERS["cppman"], "sort", 2, 80)
        self.assertEqual(command, "echo 2 | cppman --force-columns=80 sort")

    def test_env_assignments_resolve_width_and_query_is_quoted(self) -> None:
        command = build_command(BUILTIN_ADAPTERS["man"], "it's here", None, 64)
        self.assertEqual(command, "MANWIDTH=64 MANPAGER=cat man 'it'\"'\"'s here'")

    def test_selection_is_ignored_for_adapters_without_selections(self) -> None:
        command = build_command(BUILTIN_ADAPTERS["man"], "printf", 3, 64)
        self.assertFalse(command.startswith("echo"))


class InterpretOutputTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = BackendAdapter(
            name="doc",
            cmd="doc",
            error_patterns=("No manual entry for",),
            exit_code_error=True,
        )

    def test_nonzero_exit_is_backend_error_when_exit_codes_matter(self) -> None:
        result = interpret_output(self.adapter, "doc x", 3, "partial")

        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, BackendError)
        self.assertEqual(result.error.exit_code, 3)
        self.assertEqual(result.lines, ("Error running doc (exit code: 3)", "Command: doc x"))
        self.assertFalse(result.cacheable)

    def test_nonzero_exit_is_ignored_when_exit_codes_do_not_matter(self) -> None:
        adapter = BackendAdapter(name="doc", cmd="doc", exit_code_error=False)
        result = interpret_output(adapter, "doc x", 1, "body\n")
        self.assertTrue(result.ok)
        self.assertEqual(result.lines, ("body",))

    def test_error_pattern_is_backend_error_even_with_zero_exit(self) -> None:
        result = interpret_output(self.adapter, "doc x", 0, "No manual entry for x\n")
        self.assertEqual(result.error.pattern, "No manual entry for")
        self.assertEqual(result.lines, ("Error from doc: matched 'No manual entry for'",))

    def test_empty_output_returns_sentinel_that_is_not_cacheable(self) -> None:
        result = interpret_output(self.adapter, "doc x", 0, "\n\n")
        self.assertTrue(result.ok)
        self.assertTrue(result.empty)
        self.assertFalse(result.cacheable)
        self.assertEqual(list(result.lines), no_output_lines(self.adapter))

    def test_success_is_cacheable(self) -> None:
        result = interpret_output(self.adapter, "doc x", 0, "a\nb\n")
        self.assertTrue(result.cacheable)
        self.assertEqual(result.lines, ("a", "b"))


if __name__ == "__main__":
    unittest.main()
