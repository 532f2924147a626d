"""Tests for dashboard frame building and viewport composition."""

from __future__ import annotations

from pathlib import Path
import unittest

from vigil.ansi import ANSI_ESCAPE_RE, display_width
from vigil.render import (
    BANNER,
    build_body_lines,
    build_footer_lines,
    build_frame,
    build_header_lines,
    compose_frame,
    format_branch_file,
    format_divergence,
    format_file_change,
)
from vigil.snapshot import BranchDivergence, BranchFileDiff, FileChange, Snapshot, StatusCode
from vigil.ui_theme import DEFAULT_THEME, PLAIN_THEME

ROOT = Path("/work/project")


def _change(staged: str, unstaged: str, label: str, path: str, orig_path: str | None = None) -> FileChange:
    return FileChange(StatusCode(staged), StatusCode(unstaged), label, path, orig_path)


class DivergenceFormatTests(unittest.TestCase):
    def test_pending_check(self) -> None:
        self.assertEqual(format_divergence(None, PLAIN_THEME), "checking upstream…")

    def test_no_upstream(self) -> None:
        self.assertEqual(format_divergence(BranchDivergence.no_upstream(), PLAIN_THEME), "no upstream")

    def test_in_sync(self) -> None:
        self.assertEqual(format_divergence(BranchDivergence(0, 0), PLAIN_THEME), "up to date")

    def test_ahead_and_behind(self) -> None:
        self.assertEqual(format_divergence(BranchDivergence(3, 0), PLAIN_THEME), "↑3 ahead")
        self.assertEqual(format_divergence(BranchDivergence(0, 2), PLAIN_THEME), "↓2 behind")
        self.assertEqual(format_divergence(BranchDivergence(1, 4), PLAIN_THEME), "↑1 ahead  ↓4 behind")


class HeaderAndBodyTests(unittest.TestCase):
    def test_header_shows_banner_root_branch_and_upstream(self) -> None:
        snapshot = Snapshot(branch="main", divergence=BranchDivergence(0, 0))

        lines = build_header_lines(ROOT, snapshot, PLAIN_THEME)

        self.assertEqual(lines[: len(BANNER)], list(BANNER))
        self.assertIn(str(ROOT), lines)
        self.assertIn("Branch: main", lines)
        self.assertIn("Upstream: up to date", lines)

    def test_clean_tree_reads_no_changes(self) -> None:
        lines = build_body_lines(Snapshot(branch="main", default_branch="main"), PLAIN_THEME)

        self.assertEqual(lines, ["No changes detected"])

    def test_changes_are_listed_in_order_with_labels(self) -> None:
        snapshot = Snapshot(
            branch="main",
            default_branch="main",
            changes=(
                _change("M", " ", "modified (staged)", "a.txt"),
                _change("?", "?", "untracked", "b.txt"),
                _change(" ", "D", "deleted", "c.txt"),
            ),
        )

        lines = build_body_lines(snapshot, PLAIN_THEME)

        self.assertEqual(
            lines,
            [
                "Changed Files (3):",
                "  M  a.txt (modified (staged))",
                "  ?? b.txt (untracked)",
                "   D c.txt (deleted)",
            ],
        )

    def test_rename_shows_both_paths(self) -> None:
        line = format_file_change(_change("R", " ", "renamed (staged)", "new.txt", "old.txt"), PLAIN_THEME)

        self.assertEqual(line, "  R  old.txt → new.txt (renamed (staged))")

    def test_branch_changes_section(self) -> None:
        snapshot = Snapshot(
            branch="feature",
            default_branch="main",
            branch_files=(
                BranchFileDiff(StatusCode.ADDED, "feature.py"),
                BranchFileDiff(StatusCode.RENAMED, "b.py", "a.py"),
            ),
        )

        lines = build_body_lines(snapshot, PLAIN_THEME)

        self.assertIn("Branch Changes vs main (2):", lines)
        self.assertIn("  A  feature.py", lines)
        self.assertIn("  R  a.py → b.py", lines)

    def test_unknown_default_branch_is_called_out(self) -> None:
        lines = build_body_lines(Snapshot(branch="main"), PLAIN_THEME)

        self.assertEqual(lines[-1], "Branch Changes: default branch unknown")

    def test_unresolvable_branch_comparison_is_called_out(self) -> None:
        lines = build_body_lines(Snapshot(branch="feature", default_branch="master", branch_files=None), PLAIN_THEME)

        self.assertEqual(
            lines[-1],
            "Branch Changes vs master: unavailable (default branch or merge base not found)",
        )

    def test_head_on_default_branch_shows_no_branch_section(self) -> None:
        lines = build_body_lines(Snapshot(branch="main", default_branch="main", branch_files=()), PLAIN_THEME)

        self.assertFalse(any(line.startswith("Branch Changes") for line in lines))

    def test_control_characters_in_paths_are_escaped(self) -> None:
        line = format_file_change(_change("?", "?", "untracked", "evil\x1b[31m.txt"), PLAIN_THEME)

        self.assertNotIn("\x1b", line)
        self.assertEqual(line, "  ?? evil\\x1b[31m.txt (untracked)")

    def test_control_characters_in_rename_sources_are_escaped(self) -> None:
        line = format_branch_file(BranchFileDiff(StatusCode.RENAMED, "new.txt", "old\r\x07.txt"), PLAIN_THEME)

        self.assertEqual(line, "  R  old\\x0d\\x07.txt → new.txt")

    def test_colored_theme_keeps_only_its_own_escapes(self) -> None:
        line = format_file_change(_change("?", "?", "untracked", "bad\x1b]0;title\x07.txt"), DEFAULT_THEME)

        self.assertEqual(ANSI_ESCAPE_RE.sub("", line), "  ?? bad\\x1b]0;title\\x07.txt (untracked)")

    def test_footer_carries_status_message_and_help(self) -> None:
        footer = build_footer_lines(PLAIN_THEME, "watch error: boom")

        self.assertEqual(footer[0], "watch error: boom")
        self.assertIn("q quit", footer[1])

    def test_colored_theme_wraps_status_codes(self) -> None:
        line = format_file_change(_change("A", " ", "added (staged)", "new.txt"), DEFAULT_THEME)

        self.assertIn(DEFAULT_THEME.status_added, line)
        self.assertEqual(ANSI_ESCAPE_RE.sub("", line), "  A  new.txt (added (staged))")


class ComposeFrameTests(unittest.TestCase):
    def _rows(self, composed: str) -> list[str]:
        self.assertTrue(composed.startswith("\033[H\033[J"))
        return composed[len("\033[H\033[J"):].split("\r\n")

    def test_frame_fills_exactly_the_terminal_height(self) -> None:
        frame = build_frame(ROOT, Snapshot(branch="main", default_branch="main"), PLAIN_THEME)

        rows = self._rows(compose_frame(frame, start=0, columns=80, rows=24))

        self.assertEqual(len(rows), 24)
        self.assertIn("q quit", rows[-1])

    def test_body_scrolls_from_start(self) -> None:
        changes = tuple(_change("?", "?", "untracked", f"f{index:02d}.txt") for index in range(30))
        frame = build_frame(ROOT, Snapshot(branch="main", default_branch="main", changes=changes), PLAIN_THEME)

        rows = self._rows(compose_frame(frame, start=5, columns=80, rows=20))

        body = rows[len(frame.header): len(frame.header) + 11]
        self.assertEqual(body[0], "  ?? f04.txt (untracked)")
        self.assertEqual(body[-1], "  ?? f14.txt (untracked)")

    def test_long_rows_are_clipped_to_width(self) -> None:
        changes = (_change("?", "?", "untracked", "x" * 200),)
        frame = build_frame(ROOT, Snapshot(branch="main", default_branch="main", changes=changes), DEFAULT_THEME)

        rows = self._rows(compose_frame(frame, start=0, columns=40, rows=24))

        for row in rows:
            self.assertLessEqual(display_width(ANSI_ESCAPE_RE.sub("", row)), 39)

    def test_tiny_terminal_still_shows_one_body_row(self) -> None:
        frame = build_frame(ROOT, Snapshot(branch="main", default_branch="main"), PLAIN_THEME)

        rows = self._rows(compose_frame(frame, start=0, columns=80, rows=5))

        self.assertEqual(len(rows), 5)


if __name__ == "__main__":
    unittest.main()
