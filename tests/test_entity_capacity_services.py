"""
Tests for entity CRUD, group membership and capacity updates.

Tests cover:
- Create defaults and conflicts
- Membership add/remove and type checks
- Default capacity and date overrides, all-or-nothing batch updates
- capacity_info override horizon
"""

import time
from datetime import date, timedelta

import pytest

from loadcal.context import RequestContext
from loadcal.errors import ConflictError, NotFoundError, ValidationError
from tests.fixtures import TODAY


class TestEntityService:
    def test_create_defaults_capacity(self, services):
        entity = services.entity_service.create_entity("dana@example.com", "Dana", "person")
        assert entity.default_capacity == 5.0
        assert entity.created_at

    def test_create_group_with_capacity(self, services):
        entity = services.entity_service.create_entity("ops", "Ops", "group", default_capacity=12)
        assert entity.is_group
        assert entity.default_capacity == 12.0

    def test_create_conflict(self, services):
        with pytest.raises(ConflictError):
            services.entity_service.create_entity("alice@example.com", "Alice", "person")

    @pytest.mark.parametrize(
        "args",
        [("", "X", "person"), ("x", " ", "person"), ("x", "X", "robot"), ("dana", "Dana", "person")],
    )
    def test_create_invalid(self, services, args):
        with pytest.raises(ValidationError):
            services.entity_service.create_entity(*args)

    def test_negative_capacity(self, services):
        with pytest.raises(ValidationError):
            services.entity_service.create_entity("dana@example.com", "Dana", "person", default_capacity=-1)

    def test_update(self, services):
        entity = services.entity_service.update_entity("carol@example.com", title="Carol C", employee_id="E-300")
        assert entity.title == "Carol C"
        assert services.entities.get_by_employee_id("E-300").id == "carol@example.com"

    def test_list_by_type(self, services):
        persons = services.entity_service.list_entities("person")
        assert [e.id for e in persons] == ["alice@example.com", "bob@example.com", "carol@example.com"]

    def test_delete_unknown(self, services):
        with pytest.raises(NotFoundError):
            services.entity_service.delete_entity("ghost")

    def test_membership(self, services):
        svc = services.entity_service
        assert svc.add_group_member("eng", "carol@example.com") is True
        assert svc.add_group_member("eng", "carol@example.com") is False
        assert [m.id for m in svc.group_members("eng")] == [
            "alice@example.com",
            "bob@example.com",
            "carol@example.com",
        ]
        svc.remove_group_member("eng", "carol@example.com")
        with pytest.raises(NotFoundError):
            svc.remove_group_member("eng", "carol@example.com")

    def test_person_groups(self, services):
        services.entity_service.create_entity("ops", "Ops", "group")
        services.entity_service.add_group_member("ops", "alice@example.com")
        memberships = services.entity_service.person_groups("alice@example.com")
        assert [m.group_id for m in memberships] == ["eng", "ops"]
        assert services.entity_service.person_groups("carol@example.com") == []
        with pytest.raises(ValidationError):
            services.entity_service.person_groups("eng")

    def test_group_in_group_rejected(self, services):
        services.entity_service.create_entity("ops", "Ops", "group")
        with pytest.raises(ValidationError):
            services.entity_service.add_group_member("eng", "ops")

    def test_membership_on_person_rejected(self, services):
        with pytest.raises(ValidationError):
            services.entity_service.group_members("alice@example.com")


class TestCapacityService:
    def test_update_default(self, services):
        services.capacity_service.update_default_capacity("carol@example.com", 2.0)
        assert services.resolver.effective_capacity("carol@example.com", TODAY) == 2.0

    def test_negative_rejected(self, services):
        with pytest.raises(ValidationError):
            services.capacity_service.update_default_capacity("carol@example.com", -0.5)

    @pytest.mark.parametrize("raw", [float("nan"), float("inf")])
    def test_non_finite_rejected(self, services, raw):
        svc = services.capacity_service
        with pytest.raises(ValidationError):
            svc.update_default_capacity("carol@example.com", raw)
        with pytest.raises(ValidationError):
            svc.set_date_override("carol@example.com", TODAY, raw)
        with pytest.raises(ValidationError):
            svc.update_capacity("carol@example.com", default_capacity=raw)
        with pytest.raises(ValidationError):
            services.entity_service.update_entity("carol@example.com", default_capacity=raw)
        assert services.entities.get("carol@example.com").default_capacity == 4.0

    def test_override_unknown_entity(self, services):
        with pytest.raises(NotFoundError):
            services.capacity_service.set_date_override("ghost", TODAY, 1.0)

    def test_delete_missing_override(self, services):
        with pytest.raises(NotFoundError):
            services.capacity_service.delete_date_override("alice@example.com", TODAY)

    def test_capacity_info_horizon(self, services):
        svc = services.capacity_service
        svc.set_date_override("alice@example.com", TODAY - timedelta(days=1), 1.0)
        svc.set_date_override("alice@example.com", TODAY, 2.0)
        svc.set_date_override("alice@example.com", TODAY + timedelta(days=90), 3.0)
        svc.set_date_override("alice@example.com", TODAY + timedelta(days=91), 4.0)

        info = svc.capacity_info("alice@example.com", today=TODAY)
        assert [o.capacity for o in info.overrides] == [2.0, 3.0]
        assert info.to_dict()["entity"]["id"] == "alice@example.com"

    def test_batch_update(self, services):
        services.capacity_service.update_capacity(
            "alice@example.com",
            default_capacity=6.0,
            date_overrides=[("2026-02-01", 1.0), (date(2026, 2, 2), 0.0)],
        )
        assert services.resolver.capacities_for_range(
            "alice@example.com", date(2026, 1, 31), date(2026, 2, 3)
        ).values == [6.0, 1.0, 0.0, 6.0]

    def test_batch_all_or_nothing(self, services):
        with pytest.raises(ValidationError):
            services.capacity_service.update_capacity(
                "alice@example.com",
                default_capacity=6.0,
                date_overrides=[("2026-02-01", 1.0), ("not-a-date", 1.0)],
            )
        assert services.entities.get("alice@example.com").default_capacity == 5.0
        assert services.capacities.get_override("alice@example.com", date(2026, 2, 1)) is None


class TestRequestContext:
    def test_fresh_context_not_done(self):
        assert not RequestContext().done()

    def test_cancel(self):
        ctx = RequestContext()
        ctx.cancel()
        assert ctx.cancelled
        assert ctx.done()

    def test_expired(self):
        ctx = RequestContext.with_timeout(0.0001)
        time.sleep(0.01)
        assert ctx.expired

    def test_no_timeout(self):
        ctx = RequestContext.with_timeout(None, request_id="req-1")
        assert ctx.deadline is None
        assert ctx.request_id == "req-1"
