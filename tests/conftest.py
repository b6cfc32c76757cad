"""Shared test fixtures for simplemail."""

from unittest.mock import MagicMock, patch

import pytest


def _mock_transport(target):
    patcher = patch(target)
    smtp_cls = patcher.start()
    server = MagicMock()
    server.send_message.return_value = {}
    smtp_cls.return_value.__enter__ = MagicMock(return_value=server)
    smtp_cls.return_value.__exit__ = MagicMock(return_value=False)
    return patcher, smtp_cls, server


@pytest.fixture
def smtp_ssl():
    """Patch `SMTP_SSL`; yields `(smtp_class_mock, server_mock)`."""
    patcher, smtp_cls, server = _mock_transport("simplemail.core.SMTP_SSL")
    yield smtp_cls, server
    patcher.stop()


@pytest.fixture
def smtp_plain():
    """Patch plain `SMTP`; yields `(smtp_class_mock, server_mock)`."""
    patcher, smtp_cls, server = _mock_transport("simplemail.core.SMTP")
    yield smtp_cls, server
    patcher.stop()
