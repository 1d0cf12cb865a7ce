"""
Exception hierarchy for demobot.

None of these subclass ValueError: pydantic wraps ValueError raised inside
validators into a ValidationError, and schema errors must surface as-is.
"""

from __future__ import annotations


class DemoBotError(Exception):
    """Base class for all demobot errors."""


class MissingConfig(DemoBotError):
    """A required configuration value (e.g. the bot token) is not set."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"{variable} was not found in the environment!")
        self.variable = variable


class BadSchema(DemoBotError):
    """The command catalog failed validation while being built."""


class NotReady(DemoBotError):
    """Command registration was attempted before the client became ready."""


class RegistrationFailed(DemoBotError):
    """
    Uploading the command catalog failed.

    Args:
        kind: "transport" for network-level failures, "platform" when Discord
            rejected the request
        cause: The underlying exception
    """

    def __init__(self, kind: str, cause: BaseException) -> None:
        super().__init__(f"Command registration failed ({kind}): {cause}")
        self.kind = kind
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Transport failures may be retried; platform rejections won't change."""
        return self.kind == "transport"


class HandlerError(DemoBotError):
    """An uncaught exception escaped a command handler."""

    def __init__(self, command: str, cause: BaseException) -> None:
        super().__init__(f"Handler for /{command} failed: {cause!r}")
        self.command = command
        self.cause = cause


class ResponseError(DemoBotError):
    """An interaction response was sent out of order."""


class DoubleResponse(ResponseError):
    """An interaction was answered twice without an intervening defer."""


class MissingResponse(ResponseError):
    """A follow-up was sent before the interaction had any initial response."""


class BadEmbed(DemoBotError):
    """An embed failed validation when built."""
