"""
demobot CLI entry point.

    python -m demobot            run the bot (same as `run`)
    python -m demobot config     show the effective configuration
    python -m demobot commands   print the command registration payload
"""

import argparse
import json
import sys
from pathlib import Path

from demobot import __version__
from demobot.config.logging import get_logger, setup_logging
from demobot.config.settings import Settings, load_settings
from demobot.errors import BadSchema, MissingConfig


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="demobot",
        description="Sample Discord bot demonstrating slash commands",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"demobot {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("run", help="Run the Discord bot (default)")
    subparsers.add_parser("config", help="Show current configuration")

    commands_parser = subparsers.add_parser(
        "commands",
        help="Print the application command registration payload as JSON",
    )
    commands_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== demobot Configuration ===\n")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"Token: {'Set' if settings.bot.token else 'Not set'}")
    logger.info(f"Command Guild: {settings.bot.command_guild_id or 'None (global)'}")
    logger.info(f"Message Command Prefix: {settings.bot.message_command_prefix}")
    logger.info(f"Test Channel: {settings.bot.test_channel_id or 'None'}")

    return 0


def cmd_commands(indent: int) -> int:
    """Print the registration payload for the demo catalog."""
    logger = get_logger(__name__)

    from demobot.bot.catalog import build_catalog

    try:
        catalog = build_catalog()
    except BadSchema as e:
        logger.critical(f"Command catalog is invalid: {e}")
        return 1
    print(json.dumps(catalog.to_payload(), indent=indent, ensure_ascii=False))
    return 0


def cmd_run(settings: Settings) -> int:
    """Start the Discord bot and block until it stops."""
    logger = get_logger(__name__)

    try:
        token = settings.bot.require_token()
    except MissingConfig as e:
        # We cannot continue without a token present
        logger.critical(str(e))
        return 1

    from demobot.bot import DemoBot

    bot = DemoBot(settings)
    logger.info("Starting demobot...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(token, log_handler=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "commands":
        return cmd_commands(args.indent)
    else:
        return cmd_run(settings)


if __name__ == "__main__":
    sys.exit(main())
