"""Wire the ledger, statistics, protest and dispatch components together."""

from __future__ import annotations

from dataclasses import dataclass

from hotdog_ledger.config import BotConfig
from hotdog_ledger.interactions.commands import CommandDispatcher
from hotdog_ledger.ledger.service import LedgerService
from hotdog_ledger.protest.coordinator import ProtestCoordinator
from hotdog_ledger.protest.store import build_protest_store
from hotdog_ledger.stats.engine import StatisticsEngine


@dataclass(slots=True)
class BotServices:
    """Long-lived service objects shared by the HTTP routes."""

    ledger: LedgerService
    stats: StatisticsEngine
    coordinator: ProtestCoordinator
    dispatcher: CommandDispatcher


def build_services(cfg: BotConfig) -> BotServices:
    """Construct every service from configuration.

    Raises:
        ValueError: ``protests.storage`` names an unknown backend.
        zoneinfo.ZoneInfoNotFoundError: ``ledger.reference_timezone`` is not
            a known IANA zone.
    """
    ledger = LedgerService(max_addition=cfg.ledger.max_addition)
    stats = StatisticsEngine(cfg.ledger.zone)
    coordinator = ProtestCoordinator(ledger, build_protest_store(cfg.protests.storage))
    dispatcher = CommandDispatcher(ledger, stats, coordinator)
    return BotServices(ledger=ledger, stats=stats, coordinator=coordinator, dispatcher=dispatcher)
