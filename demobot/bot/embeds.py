"""
Fluent builder for discord.Embed payloads.

Setters accept None and ignore it, so optional command options can be fed
straight through:

    embed = (
        EmbedBuilder()
        .title(ctx.options.get("title"))
        .description(ctx.options.get("description"))
        .color(ctx.options.get("color"))
        .build()
    )
"""

from __future__ import annotations

from typing import Iterable

import discord

from demobot.errors import BadEmbed

MAX_COLOR = 0xFFFFFF


class EmbedBuilder:
    """
    Collects embed fields and validates them on ``build()``.

    Args:
        title: Embed title
        description: Main body text
        url: Link attached to the title
        color: 24-bit RGB value (or a discord.Color)
        fields: Initial (name, value) pairs
    """

    def __init__(
        self,
        title: str | None = None,
        description: str | None = None,
        url: str | None = None,
        color: int | discord.Color | None = None,
        fields: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._title = title
        self._description = description
        self._url = url
        self._color = color
        self._footer: str | None = None
        self._fields: list[tuple[str, str, bool]] = [
            (name, value, True) for name, value in fields or ()
        ]

    def title(self, value: str | None) -> EmbedBuilder:
        if value is not None:
            self._title = value
        return self

    def description(self, value: str | None) -> EmbedBuilder:
        if value is not None:
            self._description = value
        return self

    def url(self, value: str | None) -> EmbedBuilder:
        if value is not None:
            self._url = value
        return self

    def color(self, value: int | discord.Color | None) -> EmbedBuilder:
        if value is not None:
            self._color = value
        return self

    def footer(self, text: str | None) -> EmbedBuilder:
        if text is not None:
            self._footer = text
        return self

    def add_field(self, name: str, value: str, *, inline: bool = True) -> EmbedBuilder:
        self._fields.append((name, value, inline))
        return self

    def build(self) -> discord.Embed:
        """
        Finalize into a discord.Embed.

        Raises:
            BadEmbed: No title, description or fields; or a color outside
                the 24-bit range
        """
        if not (self._title or self._description or self._fields):
            raise BadEmbed("An embed needs a title, a description, or at least one field")

        color = self._color
        if isinstance(color, discord.Color):
            color = color.value
        if color is not None and not 0 <= color <= MAX_COLOR:
            raise BadEmbed(f"Embed color {color!r} is outside 0x000000-0xFFFFFF")

        embed = discord.Embed(
            title=self._title,
            description=self._description,
            url=self._url,
            color=color,
        )
        for name, value, inline in self._fields:
            embed.add_field(name=name, value=value, inline=inline)
        if self._footer:
            embed.set_footer(text=self._footer)
        return embed
