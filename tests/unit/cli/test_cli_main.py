"""Entry-point behavior tests.

Verifies how ``vigil.cli.main`` validates the working directory and maps
failures to exit messages before any terminal setup happens.
"""

from __future__ import annotations

import io
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from vigil import __version__, cli
from vigil.config import VigilSettings
from vigil.errors import WatcherError


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


class CliMainTests(unittest.TestCase):
    def setUp(self) -> None:
        patches = [
            mock.patch("vigil.cli.load_settings", return_value=VigilSettings()),
            mock.patch("vigil.cli.configure_logging", return_value=None),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_outside_repository_exits_with_message(self) -> None:
        with mock.patch("vigil.cli.GitRepository.is_repository", return_value=False), mock.patch(
            "vigil.cli.run_dashboard"
        ) as run_dashboard:
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertEqual(raised.exception.code, cli.NOT_A_REPOSITORY_MESSAGE)
        self.assertIn("Please run vigil from within a git repository.", str(raised.exception.code))
        run_dashboard.assert_not_called()

    def test_non_interactive_terminal_is_refused(self) -> None:
        with mock.patch("vigil.cli.GitRepository.is_repository", return_value=True), mock.patch(
            "vigil.cli.resolve_repository_root", return_value=None
        ), mock.patch.object(sys, "stdin", io.StringIO()), mock.patch("vigil.cli.run_dashboard") as run_dashboard:
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertIn("interactive terminal", str(raised.exception.code))
        run_dashboard.assert_not_called()

    def test_runs_dashboard_at_repository_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            nested = root / "pkg"
            nested.mkdir()
            previous_cwd = Path.cwd()
            try:
                os.chdir(nested)
                with mock.patch("vigil.cli.GitRepository.is_repository", return_value=True), mock.patch(
                    "vigil.cli.resolve_repository_root", return_value=root
                ), mock.patch.object(sys, "stdin", _Tty()), mock.patch.object(sys, "stdout", _Tty()), mock.patch(
                    "vigil.cli.run_dashboard"
                ) as run_dashboard:
                    cli.main([])
            finally:
                os.chdir(previous_cwd)

        run_dashboard.assert_called_once_with(root, VigilSettings())

    def test_watcher_failure_maps_to_error_exit(self) -> None:
        with mock.patch("vigil.cli.GitRepository.is_repository", return_value=True), mock.patch(
            "vigil.cli.resolve_repository_root", return_value=Path("/repo")
        ), mock.patch.object(sys, "stdin", _Tty()), mock.patch.object(sys, "stdout", _Tty()), mock.patch(
            "vigil.cli.run_dashboard", side_effect=WatcherError("cannot watch /repo")
        ):
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertEqual(raised.exception.code, "Error: cannot watch /repo")

    def test_unreadable_working_directory_exits(self) -> None:
        with mock.patch("vigil.cli.os.getcwd", side_effect=FileNotFoundError("gone")):
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertIn("Error getting current directory", str(raised.exception.code))

    def test_version_flag(self) -> None:
        stdout = io.StringIO()
        with mock.patch.object(sys, "stdout", stdout):
            with self.assertRaises(SystemExit) as raised:
                cli.main(["--version"])

        self.assertEqual(raised.exception.code, 0)
        self.assertIn(__version__, stdout.getvalue())


if __name__ == "__main__":
    unittest.main()
