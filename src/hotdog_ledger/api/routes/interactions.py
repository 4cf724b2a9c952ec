"""
Discord interactions webhook.

Discord POSTs every slash command and button press to ``/interactions``. This
module translates that JSON into dispatcher invocations and renders the
dispatcher's reply as an interaction response:

- type 1 (PING) → ``{"type": 1}``
- type 2 (APPLICATION_COMMAND) → :meth:`CommandDispatcher.handle_command`
- type 3 (MESSAGE_COMPONENT) → :meth:`CommandDispatcher.handle_component`
- anything else → 400 ``{"error": "unknown interaction type"}``

Request signature verification is expected to happen in front of this
service; the route trusts its input.
"""

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body
from fastapi.responses import JSONResponse

from hotdog_ledger.api.models import ErrorResponse
from hotdog_ledger.interactions import discord_api
from hotdog_ledger.interactions.commands import (
    ActionButton,
    CommandDispatcher,
    CommandInvocation,
    CommandResponse,
    ComponentInvocation,
)

logger = logging.getLogger(__name__)

# Interaction types
PING = 1
APPLICATION_COMMAND = 2
MESSAGE_COMPONENT = 3

# Interaction response types
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4

# Message flags
FLAG_EPHEMERAL = 1 << 6
FLAG_IS_COMPONENTS_V2 = 1 << 15

# Component types
ACTION_ROW = 1
BUTTON = 2
TEXT_DISPLAY = 10

BUTTON_STYLES = {"primary": 1, "secondary": 2, "success": 3, "danger": 4}


class MalformedInteraction(ValueError):
    """Interaction JSON is missing a field the bot needs."""


def _invoking_user(body: dict[str, Any]) -> dict[str, Any]:
    """Return the user object of whoever triggered the interaction.

    Guild interactions (context 0) carry the user under ``member``; DMs and
    user-installed contexts carry it at the top level.
    """
    member_user = (body.get("member") or {}).get("user")
    direct_user = body.get("user")
    user = member_user if body.get("context") == 0 else direct_user
    user = user or member_user or direct_user
    if not isinstance(user, dict) or not user.get("id"):
        raise MalformedInteraction("missing invoking user")
    return user


def _display_name(user: dict[str, Any]) -> str:
    return user.get("global_name") or user.get("username") or f"<@{user['id']}>"


def parse_command(body: dict[str, Any]) -> CommandInvocation:
    """Build a :class:`CommandInvocation` from an APPLICATION_COMMAND body."""
    user = _invoking_user(body)
    data = body.get("data") or {}
    options = {
        option["name"]: option.get("value")
        for option in data.get("options") or []
        if isinstance(option, dict) and "name" in option
    }
    return CommandInvocation(
        command_name=str(data.get("name", "")),
        invoker_id=str(user["id"]),
        invoker_name=_display_name(user),
        options=options,
        interaction_id=str(body.get("id", "")),
    )


def parse_component(body: dict[str, Any]) -> ComponentInvocation:
    """Build a :class:`ComponentInvocation` from a MESSAGE_COMPONENT body."""
    user = _invoking_user(body)
    data = body.get("data") or {}
    return ComponentInvocation(
        component_key=str(data.get("custom_id", "")),
        invoker_id=str(user["id"]),
        interaction_id=str(body.get("id", "")),
    )


def _render_button(button: ActionButton) -> dict[str, Any]:
    return {
        "type": BUTTON,
        "custom_id": button.custom_id,
        "label": button.label,
        "style": BUTTON_STYLES.get(button.style, BUTTON_STYLES["secondary"]),
    }


def render_response(response: CommandResponse) -> dict[str, Any]:
    """Render a dispatcher reply as a CHANNEL_MESSAGE_WITH_SOURCE payload."""
    flags = FLAG_IS_COMPONENTS_V2
    if response.ephemeral:
        flags |= FLAG_EPHEMERAL

    components: list[dict[str, Any]] = [{"type": TEXT_DISPLAY, "content": response.text}]
    if response.components:
        components.append(
            {
                "type": ACTION_ROW,
                "components": [_render_button(button) for button in response.components],
            }
        )
    return {
        "type": CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {"flags": flags, "components": components},
    }


def _edit_original_message(token: str, message_id: str, content: str) -> None:
    ok, error = discord_api.edit_original_message(token, message_id, content)
    if not ok:
        logger.error("Could not update protest message %s: %s", message_id, error)


def router(dispatcher: CommandDispatcher) -> APIRouter:
    """Build the interactions router around a command dispatcher."""
    api = APIRouter()

    @api.post("/interactions", responses={400: {"model": ErrorResponse}})
    def interactions(background_tasks: BackgroundTasks, body: dict[str, Any] = Body(...)):
        """Receive one Discord interaction."""
        interaction_type = body.get("type")

        if interaction_type == PING:
            return {"type": PONG}

        try:
            if interaction_type == APPLICATION_COMMAND:
                reply = dispatcher.handle_command(parse_command(body))
            elif interaction_type == MESSAGE_COMPONENT:
                reply = dispatcher.handle_component(parse_component(body))
            else:
                logger.warning("Unknown interaction type: %r", interaction_type)
                return JSONResponse(
                    status_code=400,
                    content=ErrorResponse(error="unknown interaction type").model_dump(),
                )
        except MalformedInteraction as exc:
            return JSONResponse(
                status_code=400, content=ErrorResponse(error=str(exc)).model_dump()
            )

        if reply.original_message_text is not None:
            message_id = (body.get("message") or {}).get("id")
            token = body.get("token")
            if message_id and token:
                background_tasks.add_task(
                    _edit_original_message,
                    str(token),
                    str(message_id),
                    reply.original_message_text,
                )

        return render_response(reply)

    return api
