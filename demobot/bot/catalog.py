"""
The demo's slash commands.

    /hello [name] [age]              greeting, optionally with a birth timestamp
    /time                            current time as a Discord timestamp
    /choose yes|no                   sub-commands without options
    /calculator plus|minus|times|divide lhs rhs
    /wait seconds                    deferred reply for slow work
    /embed title [description] [color]
"""

from __future__ import annotations

import asyncio
import math
import random
from datetime import MAXYEAR, MINYEAR, UTC, datetime

from demobot.bot.embeds import EmbedBuilder
from demobot.bot.interaction import InteractionContext
from demobot.commands import (
    Command,
    CommandCatalog,
    IntegerOption,
    NumberOption,
    StringOption,
    SubCommand,
)

MAX_WAIT_SECONDS = 10


def _now() -> datetime:
    return datetime.now(UTC)


def discord_timestamp(moment: datetime, style: str = "F") -> str:
    """Format ``moment`` as a ``<t:EPOCH:STYLE>`` token the client renders locally."""
    return f"<t:{int(moment.timestamp())}:{style}>"


def years_before(moment: datetime, years: int) -> datetime:
    """
    Subtract calendar years, clamping Feb 29 to Feb 28 in non-leap years.

    Raises:
        ValueError: The resulting year is outside what datetime supports
    """
    year = moment.year - years
    if not MINYEAR <= year <= MAXYEAR:
        raise ValueError(f"Year {year} is out of range")
    try:
        return moment.replace(year=year)
    except ValueError:
        return moment.replace(year=year, day=28)


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------

async def hello(ctx: InteractionContext) -> None:
    name = ctx.options.get("name")
    if name is None:
        await ctx.reply("Hi there! Fill in the name option for a personalised greeting!")
        return

    age = ctx.options.get("age")
    if age is not None:
        try:
            born = years_before(_now(), age)
        except (ValueError, OverflowError):
            born = None
        if born is not None:
            await ctx.reply(f"Hi {name}, you were born {discord_timestamp(born, 'R')}!")
            return

    await ctx.reply(f"Hey {name}, nice to meet you!")


async def current_time(ctx: InteractionContext) -> None:
    await ctx.reply(f"Today's {discord_timestamp(_now(), 'F')}")


async def choose(ctx: InteractionContext) -> None:
    choice = ctx.sub_option("yes") is not None
    agree = random.choice((True, False))
    await ctx.reply(f"You said {'yes' if choice else 'no'}, and I {'' if agree else 'dis'}agree!")


def _divide(lhs: float, rhs: float) -> float:
    if rhs:
        return lhs / rhs
    if lhs == 0 or math.isnan(lhs):
        return math.nan
    return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)


_OPERATIONS = {
    "plus": ("+", lambda lhs, rhs: lhs + rhs),
    "minus": ("-", lambda lhs, rhs: lhs - rhs),
    "times": ("×", lambda lhs, rhs: lhs * rhs),
    "divide": ("÷", _divide),
}


async def calculator(ctx: InteractionContext) -> None:
    for name, (symbol, operation) in _OPERATIONS.items():
        opt = ctx.sub_option(name)
        if opt is None:
            continue
        lhs, rhs = opt.get("lhs"), opt.get("rhs")
        if lhs is None or rhs is None:
            break
        await ctx.reply(f"`{lhs} {symbol} {rhs} = {operation(lhs, rhs)}`")
        return
    await ctx.reply("I couldn't work that one out :(", ephemeral=True)


async def wait(ctx: InteractionContext) -> None:
    seconds = ctx.options.get("seconds") or 1
    seconds = max(1, min(seconds, MAX_WAIT_SECONDS))
    # Sleeping past the initial response window requires a defer first
    await ctx.defer_reply()
    await asyncio.sleep(seconds)
    await ctx.reply(f"Waited {seconds} second{'' if seconds == 1 else 's'}!")
    await ctx.followup("Done waiting.")


async def embed(ctx: InteractionContext) -> None:
    builder = (
        EmbedBuilder()
        .title(ctx.options.get("title"))
        .description(ctx.options.get("description"))
        .color(ctx.options.get("color"))
        .footer(f"Requested by {ctx.user.display_name}")
    )
    await ctx.reply(embed=builder)


# ----------------------------------------------------------------------
# Catalog
# ----------------------------------------------------------------------

def _operands(lhs: str, rhs: str) -> tuple[NumberOption, NumberOption]:
    return (
        NumberOption("lhs", lhs, required=True),
        NumberOption("rhs", rhs, required=True),
    )


def build_catalog() -> CommandCatalog:
    """Build the catalog of every slash command the demo registers."""
    return CommandCatalog(
        Command(
            "hello", "Get a nice hello message",
            StringOption("name", "Your beautiful name"),
            IntegerOption("age", "How old (in years) are you?").min(1),
            handler=hello,
        ),
        Command("time", "What time is it???", handler=current_time),
        Command(
            "choose", "Make a choice, and I'll tell you if I approve of it",
            SubCommand("yes", "How about yes?"),
            SubCommand("no", "Maybe not..."),
            handler=choose,
        ),
        Command(
            "calculator", "Need help crunching numbers? Just use this command!",
            SubCommand("plus", "Add two numbers",
                       *_operands("First number to add", "Second number to add")),
            SubCommand("minus", "Subtract one number from the other",
                       *_operands("Number to subtract from", "Number to subtract")),
            SubCommand("times", "Multiply the first number with the other",
                       *_operands("Base value to multiply", "Multiplier/Factor to multiply base value by")),
            SubCommand("divide", "Divide the first number by the second",
                       *_operands("Quotient (number to divide)", "Divisor")),
            handler=calculator,
        ),
        Command(
            "wait", "Take your time... I'll get back to you",
            IntegerOption("seconds", "How long should I wait?", required=True,
                          min=1, max=MAX_WAIT_SECONDS),
            handler=wait,
        ),
        Command(
            "embed", "Build a rich embed message",
            StringOption("title", "Embed title", required=True),
            StringOption("description", "Embed body text"),
            IntegerOption("color", "24-bit RGB color, e.g. 16711680 for red", min=0, max=0xFFFFFF),
            handler=embed,
        ),
    )
