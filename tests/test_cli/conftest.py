"""Fixtures for CLI tests."""

import pytest
from click.testing import CliRunner
from rich.console import Console

import research_council.cli.main as main_mod
from research_council.cli.main import cli
from research_council.contexts.store import ContextStore
from research_council.storage.database import Database


@pytest.fixture
def invoke(tmp_path, monkeypatch):
    """Run ``council --data-dir <tmp> --mock ...`` and return the result."""
    monkeypatch.setattr(main_mod, "console", Console(width=200))
    runner = CliRunner()

    def run(*args: str):
        return runner.invoke(
            cli,
            ["--data-dir", str(tmp_path), "--mock", *args],
            env={"COUNCIL_BACKGROUND_WORKERS": "1"},
        )

    return run


@pytest.fixture
def stored_contexts(tmp_path):
    """Read access to the contexts the CLI wrote."""
    return ContextStore(Database(tmp_path / "council.db"))


@pytest.fixture
def seeded(invoke, stored_contexts):
    result = invoke("seed")
    assert result.exit_code == 0, result.output
    return {node.name: node for node in stored_contexts.list_all()}
