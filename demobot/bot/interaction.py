"""
Interaction model — typed option access and the response protocol.

A handler receives an InteractionContext wrapping the discord.py
Interaction. Option values come from the raw interaction payload and are
coerced to the kind declared in the command schema:

    age = ctx.options.get("age")            # int | None
    plus = ctx.sub_option("plus")           # OptionBag | None
    lhs = plus["lhs"].as_number() if plus else None

Responses follow Discord's rules: one initial response (reply, or defer then
reply), then any number of follow-ups.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

import discord

from demobot.bot.embeds import EmbedBuilder
from demobot.commands import Command, Option, OptionKind
from demobot.config.logging import TRACE, get_logger
from demobot.errors import DoubleResponse, MissingResponse

logger = get_logger(__name__)

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}


@dataclass(frozen=True)
class OptionValue:
    """A raw option value tagged with the kind Discord reported for it."""

    kind: OptionKind
    raw: Any

    def as_string(self) -> str | None:
        return self.raw if isinstance(self.raw, str) else None

    def as_int(self) -> int | None:
        raw = self.raw
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            return int(raw) if raw.is_integer() else None
        if isinstance(raw, str):
            try:
                return int(raw.strip())
            except ValueError:
                return None
        return None

    def as_number(self) -> float | None:
        raw = self.raw
        if isinstance(raw, bool):
            return None
        if isinstance(raw, (int, float)):
            return float(raw)
        if isinstance(raw, str):
            try:
                return float(raw.strip())
            except ValueError:
                return None
        return None

    def as_bool(self) -> bool | None:
        raw = self.raw
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return None

    def coerce(self, kind: OptionKind) -> Any:
        """Return the value as ``kind``, or None if it doesn't convert."""
        if kind is OptionKind.STRING:
            return self.as_string()
        if kind is OptionKind.INTEGER:
            return self.as_int()
        if kind is OptionKind.NUMBER:
            return self.as_number()
        if kind is OptionKind.BOOLEAN:
            return self.as_bool()
        # Snowflake-typed kinds (user, channel, ...) are passed through untouched
        return self.raw


class OptionBag:
    """
    The options supplied for one scope (a command or one sub-command).

    Args:
        schema: Declared options for the scope; they decide the kind each
            value is coerced to
        values: Option entries from the interaction payload
    """

    def __init__(self, schema: Sequence[Option], values: list[dict[str, Any]]) -> None:
        self._declared = {opt.name: opt.type for opt in schema}
        self._values: dict[str, OptionValue] = {}
        for entry in values:
            try:
                kind = OptionKind(entry.get("type"))
            except ValueError:
                continue
            if "value" in entry:
                self._values[entry["name"]] = OptionValue(kind, entry["value"])

    def __getitem__(self, name: str) -> OptionValue | None:
        return self._values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        raw = {name: value.raw for name, value in self._values.items()}
        return f"OptionBag({raw!r})"

    def get(self, name: str) -> Any:
        """
        Return the option coerced to its declared kind.

        Returns None when the option wasn't supplied or its raw value doesn't
        convert. Options missing from the schema use the payload's kind.
        """
        value = self._values.get(name)
        if value is None:
            return None
        return value.coerce(self._declared.get(name, value.kind))


class ResponseState(enum.Enum):
    PENDING = "pending"
    REPLIED = "replied"
    DEFERRED = "deferred"
    COMPLETED = "completed"  # deferred, then replied via edit


class InteractionContext:
    """
    What a command handler sees of one invocation.

    Args:
        interaction: The discord.py interaction being answered
        command: The matched command schema
    """

    def __init__(self, interaction: discord.Interaction, command: Command) -> None:
        self.interaction = interaction
        self.command = command
        self.state = ResponseState.PENDING

        data = interaction.data or {}
        entries = data.get("options") or []
        self.subcommand_name: str | None = None
        sub_entries: list[dict[str, Any]] = []
        if command.subcommands:
            for entry in entries:
                if entry.get("type") == OptionKind.SUB_COMMAND:
                    self.subcommand_name = entry.get("name")
                    sub_entries = entry.get("options") or []
                    break
            self.options = OptionBag([], [])
        else:
            self.options = OptionBag(command.options, entries)

        sub = command.subcommand(self.subcommand_name) if self.subcommand_name else None
        self._sub_options = OptionBag(sub.options, sub_entries) if sub else None

    @property
    def user(self) -> discord.User | discord.Member:
        return self.interaction.user

    @property
    def path(self) -> str:
        """The invoked command path, e.g. ``calculator plus``."""
        if self.subcommand_name:
            return f"{self.command.name} {self.subcommand_name}"
        return self.command.name

    @property
    def responded(self) -> bool:
        return self.state is not ResponseState.PENDING

    @property
    def finished(self) -> bool:
        """True once a final (non-deferred) response has been delivered."""
        return self.state in (ResponseState.REPLIED, ResponseState.COMPLETED)

    def sub_option(self, name: str) -> OptionBag | None:
        """The options of sub-command ``name``, or None if it wasn't invoked."""
        if self._sub_options is not None and self.subcommand_name == name:
            return self._sub_options
        return None

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: EmbedBuilder | discord.Embed | None = None,
        ephemeral: bool = False,
    ) -> None:
        """
        Send the response to this interaction.

        After ``defer_reply`` this edits the deferred "thinking" message
        instead.

        Raises:
            DoubleResponse: The interaction already has a final response
        """
        kwargs = _message_kwargs(content, embed)
        if self.state is ResponseState.PENDING:
            await self.interaction.response.send_message(ephemeral=ephemeral, **kwargs)
            self.state = ResponseState.REPLIED
        elif self.state is ResponseState.DEFERRED:
            await self.interaction.edit_original_response(**kwargs)
            self.state = ResponseState.COMPLETED
        else:
            raise DoubleResponse(f"/{self.path} has already been replied to")
        logger.log(TRACE, f"Replied to /{self.path} ({self.state.value})")

    async def defer_reply(self, *, ephemeral: bool = False) -> None:
        """
        Acknowledge the interaction and show a loading indicator.

        Raises:
            DoubleResponse: The interaction has already been responded to
        """
        if self.state is not ResponseState.PENDING:
            raise DoubleResponse(f"/{self.path} cannot be deferred after responding")
        await self.interaction.response.defer(ephemeral=ephemeral, thinking=True)
        self.state = ResponseState.DEFERRED
        logger.log(TRACE, f"Deferred /{self.path}")

    async def followup(
        self,
        content: str | None = None,
        *,
        embed: EmbedBuilder | discord.Embed | None = None,
        ephemeral: bool = False,
    ) -> discord.WebhookMessage:
        """
        Send an additional message after the initial response.

        Raises:
            MissingResponse: Nothing has been sent for this interaction yet
        """
        if self.state is ResponseState.PENDING:
            raise MissingResponse(f"/{self.path} needs a reply or defer before a follow-up")
        return await self.interaction.followup.send(
            ephemeral=ephemeral, wait=True, **_message_kwargs(content, embed)
        )


def _message_kwargs(
    content: str | None, embed: EmbedBuilder | discord.Embed | None
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed.build() if isinstance(embed, EmbedBuilder) else embed
    if not kwargs:
        raise ValueError("A response needs content, an embed, or both")
    return kwargs
