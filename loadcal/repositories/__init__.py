"""Table-level access over the Store."""

from loadcal.repositories.capacity import CapacityRepository
from loadcal.repositories.entity import EntityRepository
from loadcal.repositories.group import GroupRepository
from loadcal.repositories.load import LoadRepository

__all__ = ["CapacityRepository", "EntityRepository", "GroupRepository", "LoadRepository"]
