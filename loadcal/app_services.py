"""
Service wiring.

build_services(settings) assembles the store, repositories, capacity engine,
alert dispatcher and services into one Services bundle. The API lifespan and
the CLI each build their own; nothing here is a module-level singleton.
"""

import logging
from dataclasses import dataclass

from loadcal.background_tasks import TaskManager
from loadcal.capacity import CapacityResolver, DayDetailAssembler, HeatmapBuilder, LoadAggregator
from loadcal.config import Settings
from loadcal.notifier import OverloadAlertDispatcher, WebhookChannel
from loadcal.repositories import CapacityRepository, EntityRepository, GroupRepository, LoadRepository
from loadcal.services import CapacityService, EntityService, LoadService
from loadcal.store import Store

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: Store
    entities: EntityRepository
    groups: GroupRepository
    capacities: CapacityRepository
    loads: LoadRepository
    resolver: CapacityResolver
    aggregator: LoadAggregator
    heatmap: HeatmapBuilder
    day_detail: DayDetailAssembler
    tasks: TaskManager
    dispatcher: OverloadAlertDispatcher
    load_service: LoadService
    capacity_service: CapacityService
    entity_service: EntityService

    def shutdown(self, wait: bool = True) -> None:
        self.dispatcher.shutdown(wait=wait)


def build_services(settings: Settings, channel=None, store: Store | None = None) -> Services:
    """
    Wire everything from settings.

    Args:
        channel: Alert channel override (tests pass a recorder). Defaults to a
            WebhookChannel when a webhook URL is configured, else no alerts.
        store: Store override; defaults to one on settings.db_path.
    """
    store = store or Store(settings.db_path)

    entities = EntityRepository(store)
    groups = GroupRepository(store)
    capacities = CapacityRepository(store)
    loads = LoadRepository(store)

    resolver = CapacityResolver(capacities)
    aggregator = LoadAggregator(loads)

    if channel is None and settings.alerts_enabled:
        channel = WebhookChannel(settings.webhook_url, timeout=settings.webhook_timeout)
    tasks = TaskManager(max_workers=settings.alert_workers, thread_name_prefix="loadcal-alert")
    dispatcher = OverloadAlertDispatcher(aggregator, resolver, tasks, channel=channel)
    if not dispatcher.enabled:
        logger.info("No webhook configured, overload alerts disabled")

    return Services(
        settings=settings,
        store=store,
        entities=entities,
        groups=groups,
        capacities=capacities,
        loads=loads,
        resolver=resolver,
        aggregator=aggregator,
        heatmap=HeatmapBuilder(entities, resolver, aggregator),
        day_detail=DayDetailAssembler(entities, resolver, aggregator),
        tasks=tasks,
        dispatcher=dispatcher,
        load_service=LoadService(
            store,
            entities,
            loads,
            dispatcher,
            auto_create_missing_assignees=settings.auto_create_missing_assignees,
            default_person_capacity=settings.default_person_capacity,
        ),
        capacity_service=CapacityService(store, entities, capacities),
        entity_service=EntityService(entities, groups),
    )
