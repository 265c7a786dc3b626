"""Entity repository - persons and groups."""

import logging
from datetime import datetime

from loadcal.context import BACKGROUND, RequestContext
from loadcal.errors import NotFoundError
from loadcal.models import Entity, EntityType
from loadcal.store import Store, Transaction

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, type, employee_id, default_capacity, created_at"


def row_to_entity(row: dict) -> Entity:
    created_at = row.get("created_at")
    return Entity(
        id=row["id"],
        title=row["title"],
        type=EntityType(row["type"]),
        employee_id=row.get("employee_id"),
        default_capacity=float(row["default_capacity"]),
        created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00")) if created_at else None,
    )


class EntityRepository:
    def __init__(self, store: Store):
        self.store = store

    def get(self, entity_id: str, ctx: RequestContext = BACKGROUND) -> Entity:
        """Raises NotFoundError when the entity does not exist."""
        row = self.store.query_one(
            f"SELECT {_COLUMNS} FROM entities WHERE id = ?",
            [entity_id],
            ctx=ctx,
            operation="entity.get",
        )
        if row is None:
            raise NotFoundError("entity", entity_id)
        return row_to_entity(row)

    def get_by_employee_id(self, employee_id: str, ctx: RequestContext = BACKGROUND) -> Entity:
        row = self.store.query_one(
            f"SELECT {_COLUMNS} FROM entities WHERE employee_id = ? AND type = 'person'",
            [employee_id],
            ctx=ctx,
            operation="entity.get_by_employee_id",
        )
        if row is None:
            raise NotFoundError("employee", employee_id)
        return row_to_entity(row)

    def exists(self, entity_id: str, ctx: RequestContext = BACKGROUND) -> bool:
        row = self.store.query_one(
            "SELECT EXISTS(SELECT 1 FROM entities WHERE id = ?) AS present",
            [entity_id],
            ctx=ctx,
            operation="entity.exists",
        )
        return bool(row and row["present"])

    def create(self, entity: Entity, tx: Transaction | None = None) -> None:
        """Insert a new entity. A duplicate id raises ConflictError."""
        sql = "INSERT INTO entities (id, title, type, employee_id, default_capacity) VALUES (?, ?, ?, ?, ?)"
        params = [entity.id, entity.title, str(entity.type), entity.employee_id, entity.default_capacity]
        if tx is not None:
            tx.execute(sql, params)
        else:
            self.store.execute(sql, params, operation="entity.create")
        logger.info("Created %s entity %s", entity.type, entity.id)

    def ensure_person(self, email: str, default_capacity: float, tx: Transaction) -> bool:
        """Create a person (title = email) unless the id is taken. Returns True if created."""
        cursor = tx.execute(
            "INSERT INTO entities (id, title, type, default_capacity) VALUES (?, ?, 'person', ?) "
            "ON CONFLICT (id) DO NOTHING",
            [email, email, default_capacity],
        )
        if cursor.rowcount > 0:
            logger.info("Auto-created person %s (capacity %.1f)", email, default_capacity)
            return True
        return False

    def get_many(self, entity_ids: list[str], ctx: RequestContext = BACKGROUND) -> dict[str, Entity]:
        if not entity_ids:
            return {}
        marks = ", ".join("?" for _ in entity_ids)
        rows = self.store.query(
            f"SELECT {_COLUMNS} FROM entities WHERE id IN ({marks})",
            list(entity_ids),
            ctx=ctx,
            operation="entity.get_many",
        )
        return {r["id"]: row_to_entity(r) for r in rows}

    def update(self, entity: Entity) -> None:
        """Update title, employee id and default capacity. Type is immutable."""
        count = self.store.execute(
            "UPDATE entities SET title = ?, employee_id = ?, default_capacity = ? WHERE id = ?",
            [entity.title, entity.employee_id, entity.default_capacity, entity.id],
            operation="entity.update",
        )
        if count == 0:
            raise NotFoundError("entity", entity.id)

    def update_default_capacity(self, entity_id: str, capacity: float) -> None:
        count = self.store.execute(
            "UPDATE entities SET default_capacity = ? WHERE id = ?",
            [capacity, entity_id],
            operation="entity.update_default_capacity",
        )
        if count == 0:
            raise NotFoundError("entity", entity_id)

    def delete(self, entity_id: str) -> None:
        """Delete an entity; memberships, overrides and assignments cascade."""
        count = self.store.execute(
            "DELETE FROM entities WHERE id = ?", [entity_id], operation="entity.delete"
        )
        if count == 0:
            raise NotFoundError("entity", entity_id)
        logger.info("Deleted entity %s", entity_id)

    def list_all(self, ctx: RequestContext = BACKGROUND) -> list[Entity]:
        rows = self.store.query(
            f"SELECT {_COLUMNS} FROM entities ORDER BY type, title",
            ctx=ctx,
            operation="entity.list_all",
        )
        return [row_to_entity(r) for r in rows]

    def list_by_type(self, entity_type: EntityType, ctx: RequestContext = BACKGROUND) -> list[Entity]:
        rows = self.store.query(
            f"SELECT {_COLUMNS} FROM entities WHERE type = ? ORDER BY title",
            [str(entity_type)],
            ctx=ctx,
            operation="entity.list_by_type",
        )
        return [row_to_entity(r) for r in rows]

    def count(self) -> int:
        row = self.store.query_one("SELECT COUNT(*) AS c FROM entities", operation="entity.count")
        return row["c"] if row else 0
