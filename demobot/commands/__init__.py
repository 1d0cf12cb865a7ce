"""
Declarative application-command catalog.

Commands, sub-commands and typed options are plain values validated when
built (raising BadSchema) and serialized to Discord's registration payload.
"""

from demobot.commands.catalog import CommandCatalog
from demobot.commands.command import Command, Handler, SubCommand
from demobot.commands.options import (
    BooleanOption,
    IntegerOption,
    NumberOption,
    Option,
    OptionKind,
    StringOption,
)

__all__ = [
    "BooleanOption",
    "Command",
    "CommandCatalog",
    "Handler",
    "IntegerOption",
    "NumberOption",
    "Option",
    "OptionKind",
    "StringOption",
    "SubCommand",
]
