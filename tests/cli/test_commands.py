"""CLI command tests using Click CliRunner.

Strategy: patch get_components at each command module's import point so
commands run against a temp store and a mock-LLM analysis provider.
"""

import json
from datetime import timezone
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cli.config_models import MindJournalConfig
from cli.main import cli
from journal.models import utcnow

REPLY = json.dumps(
    {
        "distortions": [{"type": "labeling", "confidence": 0.8, "textSnippet": "I'm hopeless"}],
        "reframes": [],
        "overallSentiment": "negative",
        "keyThemes": [],
    }
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_config(tmp_path):
    return MindJournalConfig.from_dict(
        {
            "paths": {
                "db": str(tmp_path / "journal.db"),
                "log_file": str(tmp_path / "mindjournal.log"),
                "export_dir": str(tmp_path / "exports"),
            },
            "analysis": {"batch_delay": 0},
        }
    )


@pytest.fixture
def patch_components(cli_config, store, analysis_provider):
    """Patch config loading, logging and get_components everywhere they're imported."""
    comps = {"config": cli_config, "store": store, "tz": timezone.utc, "provider": None}

    def fake_get_components(need_analysis=False):
        c = dict(comps)
        if need_analysis:
            c["provider"] = analysis_provider
        return c

    targets = [
        "cli.commands.analytics.get_components",
        "cli.commands.analyze.get_components",
        "cli.commands.export.get_components",
    ]
    patches = [patch(t, side_effect=fake_get_components) for t in targets]
    patches.append(patch("cli.main.load_config_model", return_value=cli_config))
    patches.append(patch("cli.main.setup_logging"))
    for p in patches:
        p.start()
    yield comps
    for p in patches:
        p.stop()


@pytest.fixture
def seeded(store):
    now = utcnow()
    store.create("alice", "Good day", "Sunny and calm", "happy", 8, created_at=now)
    store.create("alice", "Hard day", "I'm hopeless at this", "sad", 3, created_at=now)
    return store


class TestAnalyticsCommands:
    def test_stats(self, runner, patch_components, seeded):
        result = runner.invoke(cli, ["stats", "-d", "7"])
        assert result.exit_code == 0, result.output
        assert "Entries" in result.output
        assert "5.50" in result.output

    def test_trends(self, runner, patch_components, seeded):
        result = runner.invoke(cli, ["trends", "--group-by", "month"])
        assert result.exit_code == 0, result.output
        assert utcnow().strftime("%Y-%m") in result.output

    def test_trends_empty(self, runner, patch_components, store):
        store.create("alice", "Old", "Long ago", "happy", created_at=utcnow().replace(year=2000))
        result = runner.invoke(cli, ["trends", "-d", "7"])
        assert result.exit_code == 0
        assert "No entries" in result.output

    def test_distortions_empty(self, runner, patch_components, seeded):
        result = runner.invoke(cli, ["distortions"])
        assert result.exit_code == 0
        assert "No distortions found" in result.output

    def test_progress(self, runner, patch_components, seeded):
        result = runner.invoke(cli, ["progress"])
        assert result.exit_code == 0, result.output
        assert "journaling consistency" in result.output

    def test_days_out_of_range(self, runner, patch_components, seeded):
        result = runner.invoke(cli, ["stats", "-d", "0"])
        assert result.exit_code != 0

    def test_multiple_users_need_flag(self, runner, patch_components, seeded):
        seeded.create("bob", "Bob's", "Hello", "neutral")
        result = runner.invoke(cli, ["stats"])
        assert result.exit_code == 1
        assert "--user" in result.output

        result = runner.invoke(cli, ["stats", "-u", "bob"])
        assert result.exit_code == 0

    def test_no_entries(self, runner, patch_components):
        result = runner.invoke(cli, ["stats"])
        assert result.exit_code == 1
        assert "No journal entries yet" in result.output


class TestAnalyzePending:
    def test_analyzes_and_reports(self, runner, patch_components, seeded, mock_llm):
        mock_llm.generate.return_value = REPLY
        result = runner.invoke(cli, ["analyze-pending"])
        assert result.exit_code == 0, result.output
        assert "Processed:" in result.output
        assert seeded.list_unprocessed("alice") == []

        result = runner.invoke(cli, ["distortions", "--examples"])
        assert "labeling" in result.output
        assert "I'm hopeless" in result.output

    def test_nothing_pending(self, runner, patch_components, mock_llm):
        result = runner.invoke(cli, ["analyze-pending"])
        assert result.exit_code == 0
        assert "Nothing to analyze" in result.output
        mock_llm.generate.assert_not_called()


class TestExport:
    def test_export_json_default_location(self, runner, patch_components, seeded, cli_config):
        result = runner.invoke(cli, ["export"])
        assert result.exit_code == 0, result.output
        assert "Exported 2 entries" in result.output
        data = json.loads((cli_config.paths.export_dir / "alice.json").read_text())
        assert data["count"] == 2

    def test_export_markdown(self, runner, patch_components, seeded, tmp_path):
        out = tmp_path / "md"
        result = runner.invoke(cli, ["export", "-f", "markdown", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert len(list(out.glob("*.md"))) == 2


def test_serve_runs_uvicorn(runner, patch_components):
    with patch("uvicorn.run") as run:
        result = runner.invoke(cli, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    run.assert_called_once_with(
        "web.app:app", host="127.0.0.1", port=9000, reload=False, log_config=None
    )


def test_verbose_sets_debug(runner, patch_components, seeded):
    runner.invoke(cli, ["-v", "stats"])
    from cli import main

    assert main.setup_logging.call_args.kwargs["level"] == "DEBUG"
