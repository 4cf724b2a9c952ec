"""Chat-platform adapters: command dispatch, registration and REST calls."""

from hotdog_ledger.interactions.commands import (
    ActionButton,
    CommandDispatcher,
    CommandInvocation,
    CommandResponse,
    ComponentInvocation,
    UnknownCommand,
)

__all__ = [
    "ActionButton",
    "CommandDispatcher",
    "CommandInvocation",
    "CommandResponse",
    "ComponentInvocation",
    "UnknownCommand",
]
