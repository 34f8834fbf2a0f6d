"""End-to-end tests for runbench.harness."""

from __future__ import annotations

import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from harness_test_helpers import ScriptedSampler, make_suite, parse_data_file

from runbench.config import HarnessConfig
from runbench.harness import run_harness, run_hook


class HarnessTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmp.name)
        self.basename = str(self.tmpdir / "results")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def config(self, **kwargs: object) -> HarnessConfig:
        kwargs.setdefault("plot", False)
        return HarnessConfig(basename=self.basename, **kwargs)  # type: ignore[arg-type]

    def read_rows(self) -> list[tuple[str, list[float]]]:
        _, rows = parse_data_file((self.tmpdir / "results.txt").read_text())
        return rows


class TestEndToEnd(HarnessTestCase):
    """Two binaries A and B, one test t1, durations [2.0, 1.0]."""

    def setUp(self) -> None:
        super().setUp()
        self.suite = make_suite(tests={"t1": "t1.lua"}, binaries={"A": "a", "B": "b"})
        self.outcomes = {"a t1.lua": 2.0, "b t1.lua": 1.0}

    def _run(self, **kwargs: object) -> list[float]:
        run_harness(self.config(**kwargs), self.suite, sampler=ScriptedSampler(self.outcomes))
        rows = self.read_rows()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][0], "t1")
        return rows[0][1]

    def test_raw(self) -> None:
        self.assertEqual(self._run(), [2.0, 1.0])

    def test_speedup(self) -> None:
        self.assertEqual(self._run(speedup=True), [1.0, 2.0])

    def test_normalize(self) -> None:
        self.assertEqual(self._run(normalize=True), [1.0, 0.5])

    def test_header(self) -> None:
        self._run()
        labels, _ = parse_data_file((self.tmpdir / "results.txt").read_text())
        self.assertEqual(labels, ["A", "B"])


class TestFailingTest(HarnessTestCase):
    def test_always_failing_test_writes_zero_row(self) -> None:
        suite = make_suite(
            tests={"good": "good.lua", "broken": "broken.lua"},
            binaries={"A": "a", "B": "b"},
        )
        sampler = ScriptedSampler({"a good.lua": 1.0, "b good.lua": 0.5})
        result = run_harness(self.config(), suite, sampler=sampler)

        self.assertEqual(
            self.read_rows(),
            [("good", [1.0, 0.5]), ("broken", [0.0, 0.0])],
        )
        self.assertEqual(len(result.failures), 2)
        self.assertEqual({f.test for f in result.failures}, {"broken"})
        self.assertFalse(result.interrupted)
        self.assertEqual(result.data_path, self.tmpdir / "results.txt")


class TestValidation(HarnessTestCase):
    def test_invalid_config_raises_before_measuring(self) -> None:
        sampler = ScriptedSampler({})
        with self.assertRaises(ValueError) as ctx:
            run_harness(self.config(speedup=True, normalize=True), make_suite(), sampler=sampler)
        self.assertIn("mutually exclusive", str(ctx.exception))
        self.assertEqual(sampler.calls, [])
        self.assertFalse((self.tmpdir / "results.txt").exists())


class TestPlotting(HarnessTestCase):
    @patch("runbench.harness.render_plot")
    def test_plot_enabled(self, mock_plot: MagicMock) -> None:
        suite = make_suite(binaries={"A": "a", "B": "b", "C": "c"})
        result = run_harness(self.config(plot=True), suite, sampler=ScriptedSampler({}))
        mock_plot.assert_called_once_with(
            self.tmpdir / "results.txt",
            self.tmpdir / "results.png",
            3,
            script=None,
        )
        self.assertEqual(result.image_path, self.tmpdir / "results.png")

    @patch("runbench.harness.render_plot")
    def test_plot_disabled(self, mock_plot: MagicMock) -> None:
        result = run_harness(self.config(), make_suite(), sampler=ScriptedSampler({}))
        mock_plot.assert_not_called()
        self.assertIsNone(result.image_path)

    @patch("runbench.harness.render_plot", side_effect=FileNotFoundError("gnuplot"))
    def test_plot_failure_propagates_after_write(self, _mock_plot: MagicMock) -> None:
        with self.assertRaises(FileNotFoundError):
            run_harness(self.config(plot=True), make_suite(), sampler=ScriptedSampler({}))
        self.assertTrue((self.tmpdir / "results.txt").exists())


class TestHooks(HarnessTestCase):
    @patch("runbench.harness.subprocess.run")
    def test_setup_and_teardown_order(self, mock_run: MagicMock) -> None:
        events: list[str] = []
        mock_run.side_effect = lambda cmd, **kw: events.append(cmd)

        class RecordingSampler(ScriptedSampler):
            def __call__(self, command: str, runs: int, *, timeout: float | None = None) -> float:
                events.append("measure")
                return super().__call__(command, runs, timeout=timeout)

        suite = make_suite(setup="make input", teardown="rm input")
        run_harness(self.config(), suite, sampler=RecordingSampler({"a t1.lua": 1.0, "b t1.lua": 1.0}))
        self.assertEqual(events, ["make input", "measure", "measure", "rm input"])

    @patch("runbench.harness.subprocess.run")
    def test_teardown_runs_after_interrupt(self, mock_run: MagicMock) -> None:
        suite = make_suite(teardown="rm input")
        sampler = ScriptedSampler({"a t1.lua": KeyboardInterrupt()})
        result = run_harness(self.config(), suite, sampler=sampler)
        mock_run.assert_called_once_with("rm input", shell=True, check=True)
        self.assertTrue(result.interrupted)
        self.assertEqual(self.read_rows(), [("t1", [0.0, 0.0])])

    def test_failing_setup_raises(self) -> None:
        with self.assertRaises(subprocess.CalledProcessError):
            run_hook("setup", "exit 3")

    @patch("runbench.harness.subprocess.run")
    def test_empty_hook_is_skipped(self, mock_run: MagicMock) -> None:
        run_hook("setup", None)
        run_hook("teardown", "")
        mock_run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
