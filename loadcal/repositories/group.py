"""Group membership repository."""

from loadcal.context import BACKGROUND, RequestContext
from loadcal.models import GroupMembership
from loadcal.store import Store


class GroupRepository:
    def __init__(self, store: Store):
        self.store = store

    def members(self, group_id: str, ctx: RequestContext = BACKGROUND) -> list[str]:
        """Current member emails of a group, read fresh on every call."""
        rows = self.store.query(
            "SELECT person_email FROM group_members WHERE group_id = ? ORDER BY person_email",
            [group_id],
            ctx=ctx,
            operation="group.members",
        )
        return [r["person_email"] for r in rows]

    def add_member(self, group_id: str, person_email: str) -> bool:
        """Add a member. Returns False if the pair already existed."""
        count = self.store.execute(
            "INSERT INTO group_members (group_id, person_email) VALUES (?, ?) "
            "ON CONFLICT (group_id, person_email) DO NOTHING",
            [group_id, person_email],
            operation="group.add_member",
        )
        return count > 0

    def remove_member(self, group_id: str, person_email: str) -> bool:
        count = self.store.execute(
            "DELETE FROM group_members WHERE group_id = ? AND person_email = ?",
            [group_id, person_email],
            operation="group.remove_member",
        )
        return count > 0

    def memberships_for_person(self, person_email: str, ctx: RequestContext = BACKGROUND) -> list[GroupMembership]:
        rows = self.store.query(
            "SELECT group_id, person_email FROM group_members WHERE person_email = ? ORDER BY group_id",
            [person_email],
            ctx=ctx,
            operation="group.memberships_for_person",
        )
        return [GroupMembership(group_id=r["group_id"], person_email=r["person_email"]) for r in rows]
