"""Slash-command definitions and their one-shot registration."""

from __future__ import annotations

import logging
from typing import Any

from hotdog_ledger.interactions import discord_api

logger = logging.getLogger(__name__)

# Discord application-command option types.
OPTION_INTEGER = 4
OPTION_USER = 6

# Installable to guilds (0) and to users (1).
INTEGRATION_TYPES = [0, 1]

HOTDOG_COMMAND: dict[str, Any] = {
    "name": "hotdog",
    "description": "Add hot dogs",
    "options": [
        {
            "type": OPTION_INTEGER,
            "name": "amount",
            "description": "Number of hot dogs to add",
            "required": True,
        },
    ],
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": [0, 1],
}

PROTEST_COMMAND: dict[str, Any] = {
    "name": "protest",
    "description": "Protest another user's hotdog claim",
    "options": [
        {
            "type": OPTION_USER,
            "name": "user",
            "description": "User to protest",
            "required": True,
        },
        {
            "type": OPTION_INTEGER,
            "name": "amount",
            "description": "Amount to deduct if seconded",
            "required": True,
        },
    ],
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": [0, 1, 2],
}

LEADERBOARD_COMMAND: dict[str, Any] = {
    "name": "leaderboard",
    "description": "View the hot dog leaderboard",
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": [0, 1, 2],
}

STATS_COMMAND: dict[str, Any] = {
    "name": "stats",
    "description": "View server hot dog stats",
    "type": 1,
    "integration_types": INTEGRATION_TYPES,
    "contexts": [0, 1, 2],
}

ALL_COMMANDS = [HOTDOG_COMMAND, PROTEST_COMMAND, LEADERBOARD_COMMAND, STATS_COMMAND]


def register_global_commands() -> tuple[bool, str | None]:
    """Install :data:`ALL_COMMANDS` as the application's global commands."""
    ok, error = discord_api.install_global_commands(ALL_COMMANDS)
    if ok:
        logger.info("Registered %d global commands", len(ALL_COMMANDS))
    else:
        logger.error("Command registration failed: %s", error)
    return ok, error
