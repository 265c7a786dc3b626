"""Tests for demo seeding and the CLI entry point."""

import json
from datetime import timedelta

import pytest

import cli
from loadcal.capacity import CapacityResolver, LoadAggregator
from loadcal.repositories import CapacityRepository, EntityRepository, GroupRepository, LoadRepository
from loadcal.seed import SAMPLE_LOADS, seed
from tests.fixtures import TODAY


class TestSeed:
    def test_populates_empty_db(self, empty_store):
        assert seed(empty_store, today=TODAY) is True

        entities = EntityRepository(empty_store)
        assert entities.count() == 5
        assert GroupRepository(empty_store).members("engineering") == ["alice@example.com", "bob@example.com"]
        assert entities.get("engineering").default_capacity == 10.0
        assert len(LoadRepository(empty_store).loads_in_range(TODAY, TODAY + timedelta(days=60))) == len(SAMPLE_LOADS)

    def test_overloaded_sample_day(self, empty_store):
        seed(empty_store, today=TODAY)
        day = TODAY + timedelta(days=5)
        load = LoadAggregator(LoadRepository(empty_store)).person_load_for_date("bob@example.com", day)
        capacity = CapacityResolver(CapacityRepository(empty_store)).effective_capacity("bob@example.com", day)
        assert (load, capacity) == (7.0, 6.0)

    def test_second_run_is_noop(self, empty_store):
        seed(empty_store, today=TODAY)
        assert seed(empty_store, today=TODAY) is False
        assert EntityRepository(empty_store).count() == 5

    def test_skips_populated_db(self, store):
        assert seed(store) is False


class TestCli:
    def test_init_db(self, capsys):
        assert cli.main(["init-db"]) == 0
        out = capsys.readouterr().out
        assert "Schema version" in out
        assert "entities" in out

    def test_seed_then_heatmap_json(self, capsys):
        assert cli.main(["seed"]) == 0
        capsys.readouterr()

        assert cli.main(["heatmap", "bob@example.com", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["entity"]["id"] == "bob@example.com"
        assert len(data["days"]) > 180
        assert any(d["color"] == "overloaded" for d in data["days"])

    def test_heatmap_calendar(self, capsys):
        cli.main(["seed"])
        capsys.readouterr()
        assert cli.main(["heatmap", "engineering"]) == 0
        assert "overloaded day(s)" in capsys.readouterr().out

    def test_unknown_entity_exits_1(self, capsys):
        cli.main(["init-db"])
        assert cli.main(["heatmap", "ghost@example.com"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_bad_config_exits_2(self, monkeypatch, capsys):
        monkeypatch.setenv("LOADCAL_ALERT_WORKERS", "zero")
        assert cli.main(["init-db"]) == 2

    def test_day(self, capsys):
        cli.main(["seed"])
        capsys.readouterr()
        assert cli.main(["day", "alice@example.com", "2026-01-20"]) == 0
        assert "capacity 5.0" in capsys.readouterr().out

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            cli.main([])
