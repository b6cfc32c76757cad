"""simplemail package initialization module.

This package provides a small Python interface for composing one email
and sending it through an SMTP server. A message is built from an HTML
body (or a Jinja2 template), file attachments and in-memory attachments,
all collected into one multipart container.

Modules:
    core (module): Implements the `SimpleMail` composer and sender.
    config (module): Provides the immutable `SmtpConfig` session settings.
    exceptions (module): Defines the library error hierarchy.
    utils (module): Provides validation helpers for addresses, files and settings.

Example:
    from simplemail import SimpleMail

    mail = SimpleMail("smtp.domain.com", 465, "me@domain.com", "secret")
    mail.set_from("me@domain.com")
    mail.add_recipient("recipient@domain.com")
    mail.set_subject("Hello!")
    mail.set_message("<p>This is a test email.</p>")
    mail.send_mail()
"""

from .config import SmtpConfig
from .core import Recipient, RecipientType, SimpleMail
from .exceptions import AddressError, ConfigurationError, MessageSentError, MessagingError, SimpleMailError

__all__ = [
    "SimpleMail",
    "SmtpConfig",
    "Recipient",
    "RecipientType",
    "SimpleMailError",
    "ConfigurationError",
    "AddressError",
    "MessagingError",
    "MessageSentError",
]
