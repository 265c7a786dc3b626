"""Mutation and query flows used by the API and the CLI."""

from loadcal.services.capacity import CapacityInfo, CapacityService
from loadcal.services.entities import EntityService
from loadcal.services.loads import AssigneeInput, LoadService, UpsertLoadCommand

__all__ = [
    "AssigneeInput",
    "CapacityInfo",
    "CapacityService",
    "EntityService",
    "LoadService",
    "UpsertLoadCommand",
]
