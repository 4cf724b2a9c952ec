"""
Platform-neutral command dispatch.

The webhook route turns raw interaction JSON into :class:`CommandInvocation`
or :class:`ComponentInvocation` objects and hands them to
:class:`CommandDispatcher`, which calls the ledger, statistics engine and
protest coordinator and renders a :class:`CommandResponse`.

Every domain or datastore error is converted into user-facing text here, so a
chat user never sees a stack trace. Only an unknown command name or component
key escapes, as :class:`UnknownCommand`, because that indicates a mismatch
between registered commands and this code rather than a user mistake.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from hotdog_ledger.errors import LedgerError, StoreUnavailable
from hotdog_ledger.ledger.service import LedgerService
from hotdog_ledger.protest.coordinator import ProtestCoordinator
from hotdog_ledger.stats.engine import LeaderboardRow, StatisticsEngine

logger = logging.getLogger(__name__)

PROTEST_BUTTON_PREFIX = "second_protest_"

STORE_UNAVAILABLE_TEXT = "The hot dog ledger is unavailable right now. Please try again later."
EMPTY_LEADERBOARD_TEXT = "No hot dog counts yet!"


class UnknownCommand(LookupError):
    """Raised for a command name or component key this bot never registered."""


# ============================================================================
# INVOCATIONS AND RESPONSES
# ============================================================================


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """
    A slash command as seen by the bot.

    Attributes:
        command_name: Registered command name (``hotdog``, ``protest``...).
        invoker_id: Platform id of the user who ran the command.
        invoker_name: Display name (global name preferred over username).
        options: Option name to raw option value.
        interaction_id: Platform-unique id of this invocation; protests are
            keyed by it.
    """

    command_name: str
    invoker_id: str
    invoker_name: str
    options: dict[str, Any] = field(default_factory=dict)
    interaction_id: str = ""


@dataclass(frozen=True, slots=True)
class ComponentInvocation:
    """A button press on a message the bot previously sent."""

    component_key: str
    invoker_id: str
    interaction_id: str = ""


@dataclass(frozen=True, slots=True)
class ActionButton:
    custom_id: str
    label: str
    style: str = "danger"


@dataclass(frozen=True, slots=True)
class CommandResponse:
    """
    Rendered reply to an invocation.

    Attributes:
        text: Message body.
        ephemeral: Only the invoker should see the reply.
        components: Buttons to attach below the text.
        original_message_text: When set, the message holding the pressed
            component should be edited to this text.
    """

    text: str
    ephemeral: bool = False
    components: tuple[ActionButton, ...] = ()
    original_message_text: str | None = None


# ============================================================================
# RENDERING
# ============================================================================


def mention(subject_id: str) -> str:
    return f"<@{subject_id}>"


def render_leaderboard(rows: list[LeaderboardRow], grand_total: int) -> str:
    """Format ranked rows the way the leaderboard command posts them."""
    if rows:
        body = "\n".join(
            f"{row.rank}. {mention(row.subject_id)} - {row.total} hot dogs" for row in rows
        )
    else:
        body = EMPTY_LEADERBOARD_TEXT
    return f"🌭 **Hot Dog Leaderboard** 🌭\n\n{body}\n\nTotal glizzies guzzled: {grand_total}"


def render_stats(bundle: dict[str, Any]) -> str:
    """Format a statistics bundle as a chat message."""
    streak = bundle["longestDailyStreak"]
    if streak["userIds"]:
        holders = ", ".join(mention(user_id) for user_id in streak["userIds"])
        day_word = "day" if streak["days"] == 1 else "days"
        streak_line = f"{holders} ({streak['days']} {day_word})"
    else:
        streak_line = "nobody yet"

    largest = bundle["largestSingleSessionSubmission"]
    if largest["userId"] is not None:
        largest_line = f"{largest['amount']} by {mention(largest['userId'])}"
    else:
        largest_line = "nothing yet"

    lines = [
        "📊 **Hot Dog Stats** 📊",
        "",
        f"Total glizzies guzzled: {bundle['totalDogsConsumed']}",
        f"Dogs per day: {bundle['dogsPerDay']}",
        f"Dogs per month: {bundle['dogsPerMonth']}",
        f"Longest daily streak: {streak_line}",
        f"Largest single submission: {largest_line}",
        f"Average per entry: {bundle['averageAmountPerDbRow']}",
    ]
    return "\n".join(lines)


def _int_option(options: dict[str, Any], name: str) -> int:
    """Read an integer option; missing or malformed values read as 0."""
    try:
        return int(options.get(name, 0))
    except (TypeError, ValueError):
        return 0


# ============================================================================
# DISPATCHER
# ============================================================================


class CommandDispatcher:
    """Route invocations to the domain services and render replies."""

    def __init__(
        self,
        ledger: LedgerService,
        stats: StatisticsEngine,
        coordinator: ProtestCoordinator,
    ) -> None:
        self.ledger = ledger
        self.stats = stats
        self.coordinator = coordinator
        self._handlers: dict[str, Callable[[CommandInvocation], CommandResponse]] = {
            "hotdog": self._hotdog,
            "protest": self._protest,
            "leaderboard": self._leaderboard,
            "stats": self._stats,
        }

    def handle_command(self, invocation: CommandInvocation) -> CommandResponse:
        """Run a slash command.

        Raises:
            UnknownCommand: ``invocation.command_name`` is not registered.
        """
        handler = self._handlers.get(invocation.command_name)
        if handler is None:
            logger.warning("Unknown command: %s", invocation.command_name)
            raise UnknownCommand("unknown command")

        try:
            return handler(invocation)
        except LedgerError as exc:
            return CommandResponse(text=exc.user_message)
        except StoreUnavailable:
            logger.exception("Store failure while handling /%s", invocation.command_name)
            return CommandResponse(text=STORE_UNAVAILABLE_TEXT, ephemeral=True)

    def handle_component(self, invocation: ComponentInvocation) -> CommandResponse:
        """Handle a button press. Only protest "Second" buttons exist.

        Raises:
            UnknownCommand: the component key has an unrecognised prefix.
        """
        if not invocation.component_key.startswith(PROTEST_BUTTON_PREFIX):
            logger.warning("Unknown component: %s", invocation.component_key)
            raise UnknownCommand("unknown component")
        protest_id = invocation.component_key[len(PROTEST_BUTTON_PREFIX) :]

        try:
            resolution = self.coordinator.confirm(protest_id, invocation.invoker_id)
        except LedgerError as exc:
            return CommandResponse(text=exc.user_message, ephemeral=True)
        except StoreUnavailable:
            logger.exception("Store failure while seconding protest %s", protest_id)
            return CommandResponse(text=STORE_UNAVAILABLE_TEXT, ephemeral=True)

        target = mention(resolution.protest.target_subject_id)
        amount = resolution.protest.proposed_amount
        return CommandResponse(
            text=f"You seconded the protest — deducted {amount} from {target}.",
            ephemeral=True,
            original_message_text=(
                f"Protest resolved: {mention(resolution.confirmer_id)} seconded; "
                f"{target} now has {resolution.new_total} hot dogs."
            ),
        )

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _hotdog(self, invocation: CommandInvocation) -> CommandResponse:
        amount = _int_option(invocation.options, "amount")
        new_total = self.ledger.record_addition(
            invocation.invoker_id, invocation.invoker_name, amount
        )
        return CommandResponse(
            text=f"You now have {new_total} hot dogs, {invocation.invoker_name}! 🌭"
        )

    def _protest(self, invocation: CommandInvocation) -> CommandResponse:
        target_id = str(invocation.options.get("user") or "")
        if not target_id:
            return CommandResponse(text="Please choose a user to protest.", ephemeral=True)
        amount = _int_option(invocation.options, "amount")

        protest = self.coordinator.propose(
            protest_id=invocation.interaction_id,
            proposer_id=invocation.invoker_id,
            target_subject_id=target_id,
            amount=amount,
        )
        return CommandResponse(
            text=(
                f"{mention(protest.proposer_id)} protests {mention(protest.target_subject_id)} "
                f"for {protest.proposed_amount} hot dogs. Second to confirm."
            ),
            components=(
                ActionButton(
                    custom_id=f"{PROTEST_BUTTON_PREFIX}{protest.protest_id}",
                    label="Second",
                ),
            ),
        )

    def _leaderboard(self, invocation: CommandInvocation) -> CommandResponse:
        rows = self.stats.leaderboard()
        grand_total = sum(row.total for row in rows)
        return CommandResponse(text=render_leaderboard(rows, grand_total))

    def _stats(self, invocation: CommandInvocation) -> CommandResponse:
        return CommandResponse(text=render_stats(self.stats.stats_bundle()))
