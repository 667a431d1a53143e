from __future__ import annotations

import unittest

from docpage.engine import VIEW_CONTENT, VIEW_SELECTION
from docpage.session import HELP_TEXT, LookupSession, run_session

from docpage_fakes import make_engine, sort_spawner


def _sync_session(domain_key: str | None = "cpp") -> tuple[LookupSession, object]:
    harness = make_engine(sort_spawner(), enable_async=False)
    return LookupSession(harness.engine, domain_key=domain_key, content_timeout=0.1), harness


class LookupSessionTests(unittest.TestCase):
    def test_prompt_follows_view_kind(self) -> None:
        session, harness = _sync_session()
        session.open("sort")
        self.assertEqual(session.prompt(), "select> ")

        self.assertTrue(session.handle("1"))
        self.assertEqual(harness.renderer.last.kind, VIEW_CONTENT)
        self.assertEqual(session.prompt(), "docpage> ")

    def test_navigation_commands_drive_engine(self) -> None:
        session, harness = _sync_session()
        session.open("sort")
        session.handle("1")
        session.handle("k vector")
        self.assertEqual(harness.renderer.last.lines, ("vector page", "more text"))

        session.handle("b")
        self.assertEqual(harness.renderer.last.lines, ("sorts elements",))
        session.handle("f")
        self.assertEqual(harness.renderer.last.title, "fakeman: vector")

    def test_slash_starts_fresh_lookup(self) -> None:
        session, harness = _sync_session()
        session.open("sort")
        session.handle("/map")
        self.assertEqual(harness.renderer.last.lines, ("map page",))
        self.assertEqual(harness.engine.history.back, [])

    def test_help_and_unknown_commands_notify(self) -> None:
        session, harness = _sync_session()
        self.assertTrue(session.handle("?"))
        self.assertTrue(session.handle("zzz"))
        self.assertEqual(harness.notifier.messages[0], (f"{HELP_TEXT}\nAdapters: fakeman, plaindoc", "info"))
        self.assertEqual(harness.notifier.messages[1][1], "warn")

    def test_quit_closes_engine(self) -> None:
        session, harness = _sync_session()
        session.open("sort")
        self.assertFalse(session.handle("q"))
        self.assertEqual(harness.renderer.closed, 1)
        self.assertIsNone(harness.engine.state.view)

    def test_adapter_label_uses_domain_or_default(self) -> None:
        self.assertEqual(_sync_session("cpp")[0].adapter_label(), "fakeman")
        self.assertEqual(_sync_session(None)[0].adapter_label(), "plaindoc")


class RunSessionTests(unittest.TestCase):
    def test_prompts_for_query_and_stops_at_end_of_input(self) -> None:
        session, harness = _sync_session()
        prompts: list[str] = []
        script = iter(["sort", "1"])

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            try:
                return next(script)
            except StopIteration:
                raise EOFError from None

        run_session(session, read_line=read_line)

        self.assertEqual(prompts, ["Search fakeman: ", "select> ", "docpage> "])
        self.assertEqual(harness.renderer.last.lines, ("sorts elements",))
        self.assertEqual(harness.renderer.closed, 1)

    def test_initial_query_skips_search_prompt(self) -> None:
        session, harness = _sync_session()
        prompts: list[str] = []

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            return "q"

        run_session(session, read_line=read_line, initial_query="sort")

        self.assertEqual(prompts, ["select> "])
        self.assertEqual(harness.renderer.requests[0].kind, VIEW_SELECTION)


if __name__ == "__main__":
    unittest.main()
