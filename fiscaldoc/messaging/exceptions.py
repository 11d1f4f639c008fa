class MessagingError(Exception):
    """Base exception for broker-related errors."""


class BrokerConnectionError(MessagingError):
    """Raised when the broker connection cannot be opened."""


class PublishError(MessagingError):
    """Raised when a message could not be handed to the broker."""


class EventDecodeError(MessagingError):
    """Raised when a delivered message body is not a valid event."""
