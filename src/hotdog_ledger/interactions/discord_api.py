"""Outbound calls to the chat platform's REST API.

Only two calls are needed: bulk-overwriting the global slash commands and
editing the message a protest button lives on once the protest resolves.
Both return ``(ok, error_message)`` and never raise for transport failures;
the caller decides whether a failure matters.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from hotdog_ledger import __version__
from hotdog_ledger.config import config

logger = logging.getLogger(__name__)

USER_AGENT = f"DiscordBot (hotdog-ledger, {__version__})"


def _headers() -> dict[str, str]:
    return {
        "Authorization": f"Bot {config.discord.bot_token}",
        "Content-Type": "application/json; charset=UTF-8",
        "User-Agent": USER_AGENT,
    }


def _endpoint(path: str) -> str:
    base_url = config.discord.api_base_url.strip().rstrip("/")
    return f"{base_url}/{path.lstrip('/')}"


def _request(method: str, path: str, payload: Any) -> tuple[bool, str | None]:
    try:
        response = requests.request(
            method,
            _endpoint(path),
            json=payload,
            headers=_headers(),
            timeout=config.discord.timeout_seconds,
        )
    except requests.exceptions.RequestException as exc:
        logger.warning("Discord API %s %s failed: %s", method, path, exc)
        return False, "Discord API unavailable."

    if not response.ok:
        logger.warning(
            "Discord API %s %s returned HTTP %s: %s",
            method,
            path,
            response.status_code,
            response.text[:500],
        )
        return False, f"Discord API returned HTTP {response.status_code}."
    return True, None


def install_global_commands(commands: list[dict[str, Any]]) -> tuple[bool, str | None]:
    """Replace every global slash command of the configured application."""
    application_id = config.discord.application_id
    if not application_id or not config.discord.bot_token:
        return False, "DISCORD_APPLICATION_ID and DISCORD_BOT_TOKEN must both be set."
    return _request("PUT", f"applications/{application_id}/commands", commands)


def edit_original_message(
    interaction_token: str, message_id: str, content: str
) -> tuple[bool, str | None]:
    """Replace the content of the message a component interaction came from."""
    application_id = config.discord.application_id
    if not application_id:
        return False, "DISCORD_APPLICATION_ID is not set."
    payload = {"components": [{"type": 10, "content": content}]}
    return _request(
        "PATCH",
        f"webhooks/{application_id}/{interaction_token}/messages/{message_id}",
        payload,
    )
