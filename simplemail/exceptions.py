"""Exception hierarchy for simplemail.

Every error raised by the library derives from `SimpleMailError`, so callers
can catch library failures in one place while still telling address,
configuration and transport problems apart.
"""


class SimpleMailError(Exception):
    """Base exception class for all simplemail errors."""


class ConfigurationError(SimpleMailError, ValueError):
    """Raised for an invalid SMTP configuration (host, port, timeout)."""


class AddressError(SimpleMailError, ValueError):
    """Raised when an email address cannot be parsed."""


class MessagingError(SimpleMailError):
    """Raised for SMTP, socket or TLS failures while sending."""


class MessageSentError(MessagingError):
    """Raised when a message is modified or sent again after being sent."""
