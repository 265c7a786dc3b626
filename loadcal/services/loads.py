"""
Load service - the mutation flows for loads and their assignees.

Every flow validates its whole input before writing anything, commits in one
transaction, and only then queues overload checks for the affected persons.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from loadcal.context import BACKGROUND, RequestContext
from loadcal.dates import parse_date
from loadcal.errors import NotFoundError, ValidationError
from loadcal.models import DEFAULT_PERSON_CAPACITY, DEFAULT_WEIGHT, EntityType, Load, LoadAssignment, LoadWithAssignments
from loadcal.notifier.overload import OverloadAlertDispatcher
from loadcal.repositories import EntityRepository, LoadRepository
from loadcal.store import Store
from loadcal.validation import require_amount, require_email

logger = logging.getLogger(__name__)


@dataclass
class AssigneeInput:
    """One assignee in a request: an email (or employee id) and an optional weight."""

    key: str
    weight: float | None = None


@dataclass
class UpsertLoadCommand:
    external_id: str
    title: str
    date: str | date
    assignees: list[AssigneeInput] = field(default_factory=list)
    source: str | None = None
    url: str | None = None


def normalize_weight(weight: float | None) -> float:
    """Omitted or zero weight means 1.0; negative or non-finite weight is rejected."""
    if weight is None or weight == 0:
        return DEFAULT_WEIGHT
    return require_amount(weight, "weight")


def _dedupe(assignees: list[AssigneeInput]) -> dict[str, float]:
    """key -> normalized weight. A key repeated in one request keeps its last weight."""
    result: dict[str, float] = {}
    for a in assignees:
        key = (a.key or "").strip()
        if not key:
            raise ValidationError("assignee identifier is required")
        result[key] = normalize_weight(a.weight)
    return result


def _dedupe_emails(assignees: list[AssigneeInput]) -> dict[str, float]:
    """Like _dedupe, but every key must be a valid email address."""
    weights = _dedupe(assignees)
    for email in weights:
        require_email(email, "assignee email")
    return weights


class LoadService:
    def __init__(
        self,
        store: Store,
        entities: EntityRepository,
        loads: LoadRepository,
        dispatcher: OverloadAlertDispatcher,
        auto_create_missing_assignees: bool = True,
        default_person_capacity: float = DEFAULT_PERSON_CAPACITY,
    ):
        self.store = store
        self.entities = entities
        self.loads = loads
        self.dispatcher = dispatcher
        self.auto_create_missing_assignees = auto_create_missing_assignees
        self.default_person_capacity = default_person_capacity

    # ==================== Validation ====================

    def _validate_load(self, cmd: UpsertLoadCommand) -> Load:
        if not (cmd.external_id or "").strip():
            raise ValidationError("external_id is required")
        if not (cmd.title or "").strip():
            raise ValidationError("title is required")
        day = cmd.date if isinstance(cmd.date, date) else parse_date(cmd.date)
        return Load(
            external_id=cmd.external_id.strip(),
            title=cmd.title.strip(),
            source=cmd.source,
            url=cmd.url,
            date=day,
        )

    def _missing_persons(self, emails: list[str]) -> list[str]:
        """Emails with no entity yet. Raises if an email names a group."""
        existing = self.entities.get_many(emails)
        for email, entity in existing.items():
            if entity.type != EntityType.PERSON:
                raise ValidationError(f"assignee {email} is a group, not a person")
        missing = [e for e in emails if e not in existing]
        if missing and not self.auto_create_missing_assignees:
            raise ValidationError(f"unknown assignees: {', '.join(missing)}")
        return missing

    # ==================== Upserts ====================

    def upsert_load(self, cmd: UpsertLoadCommand) -> int:
        """
        Create or replace a load by external_id, with assignees keyed by email.

        Unknown assignees are created as persons (title = email) when the
        auto-create policy is on. Returns the load id.
        """
        load = self._validate_load(cmd)
        weights = _dedupe_emails(cmd.assignees)
        missing = self._missing_persons(list(weights))

        with self.store.transaction(operation="load.upsert") as tx:
            for email in missing:
                self.entities.ensure_person(email, self.default_person_capacity, tx)
            load_id = self.loads.upsert_by_external_id(
                load, [LoadAssignment(person_email=e, weight=w) for e, w in weights.items()], tx=tx
            )

        for email in weights:
            self.dispatcher.check_and_alert(email, load.date)
        return load_id

    def upsert_load_by_employee_id(self, cmd: UpsertLoadCommand) -> int:
        """
        Same as upsert_load, but assignees are identified by employee_id.

        Every employee id must already belong to a person; nothing is auto-created.
        """
        load = self._validate_load(cmd)
        weights = _dedupe(cmd.assignees)

        assignments = []
        for employee_id, weight in weights.items():
            person = self.entities.get_by_employee_id(employee_id)
            assignments.append(LoadAssignment(person_email=person.id, weight=weight))

        load_id = self.loads.upsert_by_external_id(load, assignments)

        for a in assignments:
            self.dispatcher.check_and_alert(a.person_email, load.date)
        return load_id

    # ==================== Assignees ====================

    def add_assignees(self, load_id: int, assignees: list[AssigneeInput]) -> LoadWithAssignments:
        """Add (or re-weight) assignees on an existing load."""
        existing = self.loads.get(load_id)
        weights = _dedupe_emails(assignees)
        if not weights:
            raise ValidationError("at least one assignee is required")
        missing = self._missing_persons(list(weights))

        with self.store.transaction(operation="load.add_assignees") as tx:
            for email in missing:
                self.entities.ensure_person(email, self.default_person_capacity, tx)
            self.loads.add_assignments(
                load_id, [LoadAssignment(person_email=e, weight=w, load_id=load_id) for e, w in weights.items()], tx=tx
            )

        for email in weights:
            self.dispatcher.check_and_alert(email, existing.load.date)
        return self.loads.get(load_id)

    def remove_assignee(self, load_id: int, person_email: str) -> None:
        """Remove one person from a load; other assignees are untouched."""
        if not self.loads.exists(load_id):
            raise NotFoundError("load", load_id)
        self.loads.remove_assignment(load_id, person_email)
        logger.info("Removed %s from load %s", person_email, load_id)

    # ==================== Reads / delete ====================

    def get_load(self, load_id: int, ctx: RequestContext = BACKGROUND) -> LoadWithAssignments:
        return self.loads.get(load_id, ctx)

    def loads_in_range(self, start: date, end: date, ctx: RequestContext = BACKGROUND) -> list[LoadWithAssignments]:
        if end < start:
            raise ValidationError(f"range end {end} is before start {start}")
        return self.loads.loads_in_range(start, end, ctx)

    def delete_load(self, load_id: int) -> None:
        self.loads.delete(load_id)
