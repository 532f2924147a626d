from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from vigil.git.upstream import AHEAD_BEHIND_ARGS, FETCH_ARGS, FETCH_ENV, ahead_behind, parse_ahead_behind
from vigil.snapshot import NO_UPSTREAM, UNEXPECTED_OUTPUT, BranchDivergence


def _completed(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(["git"], returncode, stdout, stderr)


class ParseAheadBehindTests(unittest.TestCase):
    def test_tab_separated_counts(self) -> None:
        self.assertEqual(parse_ahead_behind("3\t1\n"), BranchDivergence(ahead=3, behind=1))

    def test_in_sync(self) -> None:
        divergence = parse_ahead_behind("0\t0")

        self.assertTrue(divergence.in_sync)
        self.assertTrue(divergence.has_upstream)

    def test_malformed_output(self) -> None:
        self.assertEqual(parse_ahead_behind("").error, UNEXPECTED_OUTPUT)
        self.assertEqual(parse_ahead_behind("1 2 3").error, UNEXPECTED_OUTPUT)
        self.assertEqual(parse_ahead_behind("x\ty").error, UNEXPECTED_OUTPUT)


class AheadBehindTests(unittest.TestCase):
    def test_fetches_before_counting(self) -> None:
        runner = mock.Mock()
        runner.run.side_effect = [_completed(0), _completed(0, "2\t0\n")]

        self.assertEqual(ahead_behind(runner, 30.0), BranchDivergence(ahead=2, behind=0))
        self.assertEqual(
            runner.run.call_args_list,
            [
                mock.call(FETCH_ARGS, timeout_seconds=30.0, env=FETCH_ENV),
                mock.call(AHEAD_BEHIND_ARGS),
            ],
        )

    def test_failed_fetch_still_counts(self) -> None:
        runner = mock.Mock()
        runner.run.side_effect = [_completed(128, stderr="fatal: offline"), _completed(0, "0\t4\n")]

        self.assertEqual(ahead_behind(runner, 5.0), BranchDivergence(ahead=0, behind=4))

    def test_count_failure_means_no_upstream(self) -> None:
        runner = mock.Mock()
        runner.run.side_effect = [None, _completed(128, stderr="fatal: no upstream configured")]

        divergence = ahead_behind(runner, 5.0)

        self.assertEqual(divergence, BranchDivergence.no_upstream())
        self.assertEqual(divergence.error, NO_UPSTREAM)
        self.assertFalse(divergence.has_upstream)

    def test_git_not_runnable_returns_none(self) -> None:
        runner = mock.Mock()
        runner.run.side_effect = [None, None]

        self.assertIsNone(ahead_behind(runner, 5.0))


if __name__ == "__main__":
    unittest.main()
