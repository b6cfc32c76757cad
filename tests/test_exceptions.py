"""Tests for simplemail.exceptions."""

import pytest

from simplemail.exceptions import (
    AddressError,
    ConfigurationError,
    MessageSentError,
    MessagingError,
    SimpleMailError,
)


def test_hierarchy():
    """All exceptions should inherit from SimpleMailError."""
    for exc_cls in [ConfigurationError, AddressError, MessagingError, MessageSentError]:
        assert issubclass(exc_cls, SimpleMailError)


def test_message_sent_error_is_messaging_error():
    assert issubclass(MessageSentError, MessagingError)


def test_validation_errors_are_value_errors():
    assert issubclass(AddressError, ValueError)
    assert issubclass(ConfigurationError, ValueError)


def test_catch_base():
    with pytest.raises(SimpleMailError, match="bad address"):
        raise AddressError("bad address")
