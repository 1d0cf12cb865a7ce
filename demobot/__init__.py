"""
demobot - sample Discord bot showing application commands with discord.py.

Declares a small catalog of slash commands (with typed options and nested
sub-commands), dispatches interactions to their handlers, and answers a few
prefix-style text commands.
"""

__version__ = "0.1.0"
