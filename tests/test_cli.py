"""Tests for CLI commands."""

import json
import re
from pathlib import Path
from textwrap import dedent

import pytest
from click.testing import CliRunner

from metrictest.cli.main import cli

REPO_ROOT = Path(__file__).parent.parent


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
    return ansi_escape.sub('', text)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def make_config(tmp_path, metrics_dir):
    """Write a SQLite configuration file; the database lives under tmp_path."""
    def _make(database="gha_cli", cases=None):
        lines = [
            "database:",
            "  type: sqlite",
            f"  path: {tmp_path / (database + '.db')}",
            "metrics:",
            f"  directory: {metrics_dir}",
        ]
        if cases:
            lines.append(f"cases: {cases}")
        path = tmp_path / "metrictest.yaml"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _make


@pytest.fixture
def failing_cases(tmp_path):
    path = tmp_path / "cases.yaml"
    path.write_text(dedent("""
        cases:
          - name: merged count
            setup: prs_merged
            metric: all_prs_merged
            from: 2017-07-01
            to: 2017-08-01
            expected: [[6]]
          - name: wrong count
            setup: prs_merged
            metric: all_prs_merged
            from: 2017-07-01
            to: 2017-08-01
            expected: [[5]]
    """), encoding="utf-8")
    return path


class TestConfigCommands:

    def test_sample_and_validate(self, runner, tmp_path, monkeypatch):
        monkeypatch.delenv("PG_DB", raising=False)
        sample = tmp_path / "sample.yaml"

        result = runner.invoke(cli, ['config', 'sample', str(sample)])
        assert result.exit_code == 0
        assert sample.exists()

        result = runner.invoke(cli, ['config', 'validate', str(sample)])
        assert result.exit_code == 0
        output = strip_ansi(result.output)
        assert 'is valid' in output
        assert 'gha_test' in output

    def test_sample_overwrite_declined(self, runner, tmp_path):
        sample = tmp_path / "sample.yaml"
        sample.write_text("keep me\n", encoding="utf-8")

        result = runner.invoke(cli, ['config', 'sample', str(sample)], input="n\n")

        assert result.exit_code == 1
        assert sample.read_text(encoding="utf-8") == "keep me\n"

    def test_validate_invalid(self, runner, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("database:\n  type: sqlite\n  path: ':memory:'\n", encoding="utf-8")

        result = runner.invoke(cli, ['config', 'validate', str(bad)])

        assert result.exit_code == 1
        assert 'validation failed' in strip_ansi(result.output)


class TestMetricsCommands:

    def test_list(self, runner, metrics_dir):
        result = runner.invoke(cli, ['metrics', 'list', '--metrics-dir', str(metrics_dir)])
        assert result.exit_code == 0
        output = strip_ansi(result.output)
        for name in ('reviewers', 'sig_mentions', 'prs_merged', 'opened_to_merged'):
            assert name in output

    def test_render(self, runner, metrics_dir):
        result = runner.invoke(cli, [
            'metrics', 'render', 'all_prs_merged',
            '--from', '2017-07-01', '--to', '2017-08-01 12:00:00',
            '--metrics-dir', str(metrics_dir),
        ])
        assert result.exit_code == 0
        assert "pr.merged_at >= '2017-07-01 00:00:00'" in result.output
        assert "pr.merged_at < '2017-08-01 12:00:00'" in result.output

    def test_render_dialect_from_config(self, runner, make_config):
        config = make_config()
        result = runner.invoke(cli, [
            '--config', str(config), 'metrics', 'render', 'reviewers',
            '--from', '2017-07-01', '--to', '2017-08-01',
        ])
        assert result.exit_code == 0
        assert 'regexp' in result.output

    def test_render_unknown_metric(self, runner, metrics_dir):
        result = runner.invoke(cli, [
            'metrics', 'render', 'nope', '--from', '2017-07-01', '--to', '2017-08-01',
            '--metrics-dir', str(metrics_dir),
        ])
        assert result.exit_code == 1


class TestRunCommand:

    def test_builtin_cases_pass(self, runner, make_config, tmp_path):
        config = make_config()
        report = tmp_path / "out" / "results.json"

        result = runner.invoke(cli, ['--config', str(config), 'run', '--output', str(report)])

        assert result.exit_code == 0, result.output
        assert 'All 6 cases passed' in strip_ansi(result.output)
        data = json.loads(report.read_text(encoding="utf-8"))
        assert data['summary']['passed_cases'] == 6
        assert not (tmp_path / "gha_cli.db").exists()

    def test_metric_filter(self, runner, make_config):
        result = runner.invoke(cli, ['--config', str(make_config()), 'run', '--metric', 'reviewers'])
        assert result.exit_code == 0, result.output
        assert 'All 2 cases passed' in strip_ansi(result.output)

    def test_failing_case_exits_non_zero(self, runner, make_config, failing_cases):
        result = runner.invoke(cli, ['--config', str(make_config()), 'run', '--cases', str(failing_cases)])

        assert result.exit_code == 1
        assert '1/2 cases failed' in strip_ansi(result.output)

    def test_cases_from_config(self, runner, make_config, failing_cases):
        config = make_config(cases=str(failing_cases))
        result = runner.invoke(cli, ['--config', str(config), 'run', '--filter', 'merged count'])

        assert result.exit_code == 0, result.output
        assert 'All 1 cases passed' in strip_ansi(result.output)

    def test_protected_database_refused(self, runner, make_config, tmp_path):
        result = runner.invoke(cli, ['--config', str(make_config(database="gha")), 'run'])

        assert result.exit_code == 1
        assert 'Refusing to run' in strip_ansi(result.output)
        assert not (tmp_path / "gha.db").exists()

    def test_nothing_selected(self, runner, make_config):
        result = runner.invoke(cli, ['--config', str(make_config()), 'run', '--metric', 'nope'])
        assert result.exit_code == 0
        assert 'No cases were selected' in strip_ansi(result.output)
