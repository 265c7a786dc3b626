"""Entity service - person/group CRUD and group membership."""

import logging

from loadcal.context import BACKGROUND, RequestContext
from loadcal.errors import ConflictError, NotFoundError, ValidationError
from loadcal.models import DEFAULT_PERSON_CAPACITY, Entity, EntityType, GroupMembership
from loadcal.repositories import EntityRepository, GroupRepository
from loadcal.validation import require_amount, require_email

logger = logging.getLogger(__name__)


def _entity_type(value: str | EntityType) -> EntityType:
    try:
        return EntityType(value)
    except ValueError:
        raise ValidationError(f"type must be 'person' or 'group', got {value!r}") from None


class EntityService:
    def __init__(self, entities: EntityRepository, groups: GroupRepository):
        self.entities = entities
        self.groups = groups

    def create_entity(
        self,
        entity_id: str,
        title: str,
        entity_type: str | EntityType,
        employee_id: str | None = None,
        default_capacity: float | None = None,
    ) -> Entity:
        """Create a person or group. Omitted or zero capacity means the default of 5.0."""
        entity_id = (entity_id or "").strip()
        if not entity_id:
            raise ValidationError("id is required")
        if not (title or "").strip():
            raise ValidationError("title is required")
        kind = _entity_type(entity_type)
        if kind == EntityType.PERSON:
            entity_id = require_email(entity_id, "person id")
        if default_capacity is not None:
            default_capacity = require_amount(default_capacity, "default_capacity")

        entity = Entity(
            id=entity_id,
            title=title.strip(),
            type=kind,
            employee_id=employee_id or None,
            default_capacity=default_capacity or DEFAULT_PERSON_CAPACITY,
        )
        if self.entities.exists(entity_id):
            raise ConflictError(f"entity already exists: {entity_id}")
        self.entities.create(entity)
        return self.entities.get(entity_id)

    def update_entity(
        self,
        entity_id: str,
        title: str | None = None,
        employee_id: str | None = None,
        default_capacity: float | None = None,
    ) -> Entity:
        """Patch title, employee id and/or default capacity. Type cannot change."""
        entity = self.entities.get(entity_id)
        if title is not None:
            if not title.strip():
                raise ValidationError("title cannot be empty")
            entity.title = title.strip()
        if employee_id is not None:
            entity.employee_id = employee_id or None
        if default_capacity is not None:
            entity.default_capacity = require_amount(default_capacity, "default_capacity")
        self.entities.update(entity)
        return entity

    def delete_entity(self, entity_id: str) -> None:
        self.entities.delete(entity_id)

    def get_entity(self, entity_id: str, ctx: RequestContext = BACKGROUND) -> Entity:
        return self.entities.get(entity_id, ctx)

    def list_entities(self, entity_type: str | EntityType | None = None, ctx: RequestContext = BACKGROUND) -> list[Entity]:
        if entity_type is None:
            return self.entities.list_all(ctx)
        return self.entities.list_by_type(_entity_type(entity_type), ctx)

    # ==================== Groups ====================

    def _require_group(self, group_id: str) -> Entity:
        group = self.entities.get(group_id)
        if not group.is_group:
            raise ValidationError(f"{group_id} is not a group")
        return group

    def group_members(self, group_id: str) -> list[Entity]:
        self._require_group(group_id)
        emails = self.groups.members(group_id)
        found = self.entities.get_many(emails)
        return [found[e] for e in emails if e in found]

    def add_group_member(self, group_id: str, person_email: str) -> bool:
        self._require_group(group_id)
        person = self.entities.get(person_email)
        if person.type != EntityType.PERSON:
            raise ValidationError(f"{person_email} is not a person")
        added = self.groups.add_member(group_id, person_email)
        if added:
            logger.info("Added %s to group %s", person_email, group_id)
        return added

    def remove_group_member(self, group_id: str, person_email: str) -> None:
        self._require_group(group_id)
        if not self.groups.remove_member(group_id, person_email):
            raise NotFoundError("group member", f"{group_id}/{person_email}")
        logger.info("Removed %s from group %s", person_email, group_id)

    def person_groups(self, person_email: str) -> list[GroupMembership]:
        """Groups the person currently belongs to."""
        person = self.entities.get(person_email)
        if person.type != EntityType.PERSON:
            raise ValidationError(f"{person_email} is not a person")
        return self.groups.memberships_for_person(person_email)
