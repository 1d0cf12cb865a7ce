"""
Discord Bot Layer.

Wires the command catalog to discord.py: interaction dispatch, the response
protocol, embeds and prefix commands.
"""

from demobot.bot.client import DemoBot

__all__ = ["DemoBot"]
