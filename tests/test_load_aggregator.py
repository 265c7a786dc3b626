"""
Tests for load aggregation and the load repository.

Tests cover:
- Person and group range sums (sparse results)
- Read-time group membership
- Repeated reads are stable
- Upsert by external_id replaces in place
- Distinct loads per group day
"""

from datetime import date

import pytest

from loadcal.capacity import LoadAggregator
from loadcal.errors import ConflictError, NotFoundError
from loadcal.models import EntityType, Load, LoadAssignment

DAY = date(2026, 1, 20)


def put(loads, external_id, day, *assignees, title=None):
    return loads.upsert_by_external_id(
        Load(title=title or external_id, date=day, external_id=external_id),
        [LoadAssignment(person_email=email, weight=weight) for email, weight in assignees],
    )


@pytest.fixture
def aggregator(loads):
    return LoadAggregator(loads)


class TestPersonLoad:
    def test_sums_per_day(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 2.0))
        put(loads, "b", DAY, ("alice@example.com", 4.0))
        put(loads, "c", date(2026, 1, 22), ("alice@example.com", 1.5))
        result = aggregator.person_load_for_range("alice@example.com", date(2026, 1, 1), date(2026, 1, 31))
        assert result == {DAY: 6.0, date(2026, 1, 22): 1.5}

    def test_days_without_load_absent(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 2.0))
        result = aggregator.person_load_for_range("alice@example.com", date(2026, 1, 21), date(2026, 1, 31))
        assert result == {}

    def test_single_day(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 2.0), ("bob@example.com", 1.0))
        assert aggregator.person_load_for_date("alice@example.com", DAY) == 2.0
        assert aggregator.person_load_for_date("carol@example.com", DAY) == 0.0


class TestGroupLoad:
    def test_sums_members(self, loads, aggregator, capacities):
        put(loads, "a", DAY, ("alice@example.com", 1.0), ("bob@example.com", 1.0))
        assert aggregator.group_load_for_range("eng", DAY, DAY) == {DAY: 2.0}

    def test_non_members_excluded(self, loads, aggregator):
        put(loads, "a", DAY, ("carol@example.com", 3.0))
        assert aggregator.group_load_for_range("eng", DAY, DAY) == {}

    def test_removed_member_drops_out_immediately(self, loads, aggregator, groups):
        put(loads, "a", DAY, ("bob@example.com", 2.0))
        assert aggregator.group_load_for_range("eng", DAY, DAY) == {DAY: 2.0}
        groups.remove_member("eng", "bob@example.com")
        assert aggregator.group_load_for_range("eng", DAY, DAY).get(DAY, 0.0) == 0.0

    def test_repeated_reads_identical(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 1.0), ("bob@example.com", 2.5))
        put(loads, "b", date(2026, 1, 25), ("bob@example.com", 1.0))
        first = aggregator.group_load_for_range("eng", date(2026, 1, 1), date(2026, 1, 31))
        second = aggregator.group_load_for_range("eng", date(2026, 1, 1), date(2026, 1, 31))
        assert first == second

    def test_dispatch_on_entity_type(self, loads, aggregator, entities):
        put(loads, "a", DAY, ("alice@example.com", 1.0), ("bob@example.com", 1.0))
        assert aggregator.load_for_range(entities.get("eng"), DAY, DAY) == {DAY: 2.0}
        assert aggregator.load_for_range(entities.get("alice@example.com"), DAY, DAY) == {DAY: 1.0}


class TestLoadsOnDate:
    def test_group_load_listed_once_with_member_assignments(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 1.0), ("bob@example.com", 2.0), ("carol@example.com", 1.0))
        result = aggregator.loads_for_entity_on_date("eng", EntityType.GROUP, DAY)
        assert len(result) == 1
        assert [a.person_email for a in result[0].assignments] == ["alice@example.com", "bob@example.com"]

    def test_person_sees_own_assignment(self, loads, aggregator):
        put(loads, "a", DAY, ("alice@example.com", 1.0), ("bob@example.com", 2.0))
        put(loads, "b", DAY, ("bob@example.com", 1.0))
        result = aggregator.loads_for_entity_on_date("alice@example.com", EntityType.PERSON, DAY)
        assert len(result) == 1
        assert result[0].assignments[0].person_email == "alice@example.com"

    def test_ordered_by_load_id(self, loads, aggregator):
        first = put(loads, "x", DAY, ("alice@example.com", 1.0))
        second = put(loads, "y", DAY, ("bob@example.com", 1.0))
        result = aggregator.loads_for_entity_on_date("eng", EntityType.GROUP, DAY)
        assert [lw.load.id for lw in result] == [first, second]


class TestUpsert:
    def test_same_external_id_updates_in_place(self, loads):
        first = put(loads, "ext-1", date(2026, 2, 1), ("bob@example.com", 2.0))
        second = put(loads, "ext-1", date(2026, 2, 2), ("carol@example.com", 1.0), title="Renamed")
        assert first == second

        all_loads = loads.loads_in_range(date(2026, 1, 1), date(2026, 12, 31))
        assert len(all_loads) == 1
        lw = all_loads[0]
        assert lw.load.date == date(2026, 2, 2)
        assert lw.load.title == "Renamed"
        assert [(a.person_email, a.weight) for a in lw.assignments] == [("carol@example.com", 1.0)]

    def test_zero_assignees_clears(self, loads):
        load_id = put(loads, "ext-1", DAY, ("bob@example.com", 2.0))
        put(loads, "ext-1", DAY)
        assert loads.get(load_id).assignments == []

    def test_add_assignment_replaces_weight(self, loads):
        load_id = put(loads, "ext-1", DAY, ("bob@example.com", 2.0))
        loads.add_assignments(load_id, [LoadAssignment("bob@example.com", 3.0)])
        assert [(a.person_email, a.weight) for a in loads.get(load_id).assignments] == [("bob@example.com", 3.0)]

    def test_remove_missing_assignment(self, loads):
        load_id = put(loads, "ext-1", DAY, ("bob@example.com", 2.0))
        with pytest.raises(NotFoundError):
            loads.remove_assignment(load_id, "alice@example.com")

    def test_failed_upsert_leaves_previous_state(self, loads):
        load_id = put(loads, "ext-1", DAY, ("bob@example.com", 2.0))
        # unknown person violates the assignment foreign key
        with pytest.raises(ConflictError):
            put(loads, "ext-1", date(2026, 3, 1), ("ghost@example.com", 1.0))
        lw = loads.get(load_id)
        assert lw.load.date == DAY
        assert [a.person_email for a in lw.assignments] == ["bob@example.com"]

    def test_deleting_person_cascades(self, loads, entities):
        load_id = put(loads, "ext-1", DAY, ("bob@example.com", 2.0), ("alice@example.com", 1.0))
        entities.delete("bob@example.com")
        assert [a.person_email for a in loads.get(load_id).assignments] == ["alice@example.com"]
