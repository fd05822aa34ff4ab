"""Tests for the cputop command line wiring."""

import psutil
import pytest

from cputop import cli
from cputop.config import DisplayMode, Settings
from cputop.sources import FixtureCounterSource


def test_run_renders_ranked_records():
    """Test a successful run hands the ranked records to the renderer once."""
    source = FixtureCounterSource([10, 20], [{10: 100, 20: 50}, {10: 150, 20: 50}], [10000, 10100])
    rendered = []

    status = cli.run(Settings(), source=source, renderer=rendered.append, sleep=source.advance)

    assert status == 0
    assert len(rendered) == 1
    assert [(r.pid, r.cpu_percent) for r in rendered[0]] == [(10, 50.0), (20, 0.0)]


def test_run_with_no_processes_succeeds():
    """Test an empty process table is rendered, not reported as a failure."""
    source = FixtureCounterSource([], [{}, {}], [0, 100])
    rendered = []

    status = cli.run(Settings(), source=source, renderer=rendered.append, sleep=source.advance)

    assert status == 0
    assert rendered == [[]]


def test_run_reports_sampling_failure(capsys):
    """Test an unreadable system counter fails the run without rendering."""
    source = FixtureCounterSource([1], [{1: 0}, {1: 1}], [None, 100])
    rendered = []

    status = cli.run(Settings(), source=source, renderer=rendered.append, sleep=source.advance)

    assert status == 1
    assert rendered == []
    assert capsys.readouterr().err.startswith("cputop: ")


def test_run_uses_mode_renderer(monkeypatch):
    """Test the renderer follows the configured display mode."""
    source = FixtureCounterSource([1], [{1: 0}, {1: 1}], [0, 100])
    seen = []
    monkeypatch.setattr(cli, "get_renderer", lambda mode: seen.append(mode) or (lambda records: None))

    cli.run(Settings(mode=DisplayMode.STATIC), source=source, sleep=source.advance)

    assert seen == [DisplayMode.STATIC]


def test_main_exits_with_run_status(monkeypatch):
    """Test main parses arguments and exits with the run status."""
    captured = {}

    def fake_run(settings):
        captured["settings"] = settings
        return 0

    monkeypatch.setattr(cli, "run", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--static", "-i", "0.2"])

    assert excinfo.value.code == 0
    assert captured["settings"].mode is DisplayMode.STATIC
    assert captured["settings"].interval == 0.2


def test_psutil_errors_are_recoverable():
    """Test per-process psutil errors do not escape a run."""
    class FlakySource(FixtureCounterSource):
        def process_ticks(self, pid):
            if pid == 2:
                raise psutil.AccessDenied(pid)
            return super().process_ticks(pid)

    source = FlakySource([1, 2], [{1: 0, 2: 0}, {1: 10, 2: 10}], [0, 100])
    rendered = []

    assert cli.run(Settings(), source=source, renderer=rendered.append, sleep=source.advance) == 0
    assert [r.pid for r in rendered[0]] == [1]
