"""Exception types raised by the receiver."""


class ReceiverError(Exception):
    """Base class for all receiver errors."""


class ValidationError(ReceiverError):
    """
    A push payload failed validation.

    The reason is a short human-readable string such as "no ref" or
    "bad repository url: <value>".
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ConfigurationError(ReceiverError):
    """Required configuration is missing or malformed."""


class OutcomeAlreadyDelivered(ReceiverError):
    """A notifier was asked to deliver a second outcome."""
