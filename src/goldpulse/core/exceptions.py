"""Custom exception hierarchy for goldpulse."""

from typing import Any


class GoldPulseError(Exception):
    """Base exception for all goldpulse errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(GoldPulseError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str: the config field that failed validation
        value: Any: the invalid value (redacted for secrets)
    """


class SourceFailure(GoldPulseError):
    """A price source could not be fetched or parsed.

    Policy: the aggregator turns it into a warning notice. Never retried
    within the same cycle.

    Context keys:
        source: str: the source label ("World Gold", "DOJI", "BTMC")
        status_code: int | None: upstream HTTP status if one was received
    """

    def __init__(
        self,
        source: str,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context={"source": source, **(context or {})})
        self.source = source
        self.message = message
        self.cause = cause


class ParsingError(GoldPulseError):
    """A source payload did not have the expected shape.

    Policy: raised by adapters only. Sources convert it to SourceFailure.

    Context keys:
        reason: str: what was missing or malformed
    """


class NotificationError(GoldPulseError):
    """The notifier failed to deliver a message.

    Policy: fatal for the current cycle. Not retried.

    Context keys:
        status_code: int | None: HTTP status from the delivery endpoint
        description: str | None: error description returned by the endpoint
    """
