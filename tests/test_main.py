"""Tests for the command-line entry point."""

import json
import sys

import pytest
from loguru import logger

import main as cli


@pytest.fixture
def env(monkeypatch, tmp_path):
    cache = tmp_path / "index.json"
    cache.write_text(json.dumps([
        {"name": "acme", "URL": "http://x/acme.zip", "count": 10},
        {"name": "globex", "URL": "http://x/globex.zip", "count": 2},
    ]))
    for key, value in {
        "CHAOS_INDEX_URL": "http://unused.test/index.json",
        "CHAOS_INDEX_CACHE": str(cache),
        "CHAOS_CORPUS_DIR": str(tmp_path / "chaos"),
        "CHAOS_WORKERS": "2",
        "LOG_LEVEL": "WARNING",
    }.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("LOG_DIR", raising=False)
    yield tmp_path
    logger.remove()
    logger.add(sys.stderr)


def test_list_prints_program_names(env, capsys):
    assert cli.main(["--list"]) == 0

    assert capsys.readouterr().out.splitlines() == ["acme", "globex"]


def test_unknown_program_exits_with_error(env):
    assert cli.main(["--dl", "umbrella"]) == 1


def test_query_on_empty_corpus_prints_nothing(env, capsys):
    assert cli.main(["--q", "acme.com"]) == 0

    assert capsys.readouterr().out == ""


def test_no_action_prints_usage(env, capsys):
    assert cli.main([]) == 0

    assert "usage" in capsys.readouterr().out.lower()


def test_non_positive_worker_count_is_rejected(env):
    assert cli.main(["--q", "acme", "-w", "0"]) == 1


def test_unreadable_index_exits_with_error(env):
    (env / "index.json").write_text("not json")

    assert cli.main(["--list"]) == 1


@pytest.fixture
def captured_workers(monkeypatch):
    seen = []

    def fake_run_query(self, term, workers=None, sink=None):
        seen.append(workers)

    monkeypatch.setattr(cli.CorpusCoordinator, "run_query", fake_run_query)
    return seen


def test_env_file_sets_default_worker_count(env, monkeypatch, captured_workers):
    # the fixture's value is registered, so teardown also drops the one loaded from the file
    monkeypatch.delenv("CHAOS_WORKERS")
    env_file = env / "custom.env"
    env_file.write_text("CHAOS_WORKERS=3\n")

    assert cli.main(["--q", "acme", "--env-file", str(env_file)]) == 0

    assert captured_workers == [3]


def test_worker_flag_overrides_environment(env, captured_workers):
    assert cli.main(["--q", "acme", "-w", "5"]) == 0

    assert captured_workers == [5]


def test_non_positive_worker_count_from_environment_is_rejected(env, monkeypatch, captured_workers):
    monkeypatch.setenv("CHAOS_WORKERS", "0")

    assert cli.main(["--q", "acme"]) == 1
    assert captured_workers == []
