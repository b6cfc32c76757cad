"""Validation helpers for addresses, files, templates and SMTP settings."""

from email.utils import getaddresses, formataddr
from os import PathLike, fspath
from os.path import isfile, splitext
from re import fullmatch
from typing import Union

from .exceptions import AddressError, ConfigurationError

TEMPLATE_EXTENSIONS = (".html", ".htm", ".j2", ".jinja", ".jinja2")

_ADDR_SPEC = r"[^@\s<>()\[\],;:\"\\]+@[^@\s<>()\[\],;:\"\\]+"


def validate_address(address: str) -> str:
    """Parses a single email address and returns it in canonical form.

    Accepts a bare address (`"john@domain.com"`) or one with a display
    name (`"John <john@domain.com>"`).

    Args:
        address (str): The address to validate.

    Returns:
        str: The address formatted for use in a header.

    Raises:
        AddressError: If `address` is empty, holds more than one address,
            contains line breaks or is not of the form `local@domain`.
    """
    if not isinstance(address, str) or not address.strip():
        raise AddressError("Email address must be a non-empty string.")
    if "\r" in address or "\n" in address:
        raise AddressError(f"Email address must not contain line breaks: {address!r}")

    parsed = getaddresses([address])
    if len(parsed) != 1:
        raise AddressError(f"Expected a single email address, got {address!r}")

    name, addr_spec = parsed[0]
    if not fullmatch(_ADDR_SPEC, addr_spec):
        raise AddressError(f"Invalid email address: {address!r}")

    return formataddr((name, addr_spec))


def validate_path(path: Union[str, PathLike]) -> str:
    """Checks that `path` names an existing regular file.

    Returns:
        str: The path as a string.

    Raises:
        ValueError: If `path` is not a string or path-like object.
        FileNotFoundError: If the file does not exist.
    """
    if not isinstance(path, (str, PathLike)):
        raise ValueError("Path must be a string or path-like object.")
    path = fspath(path)
    if not isfile(path):
        raise FileNotFoundError(f"File not found: {path}")
    return path


def validate_template(path: Union[str, PathLike]) -> str:
    """Checks that `path` is an existing HTML or Jinja2 template file.

    Raises:
        ValueError: If the extension is not one of `TEMPLATE_EXTENSIONS`.
        FileNotFoundError: If the file does not exist.
    """
    path = validate_path(path)
    if splitext(path)[1].lower() not in TEMPLATE_EXTENSIONS:
        raise ValueError(f"Not an HTML template: {path}")
    return path


def validate_smtp_config(host: str, port: int, timeout: float | None = None) -> None:
    """Validates SMTP connection settings.

    Raises:
        ConfigurationError: If the host is empty, the port is not an integer
            in 1..65535 or the timeout is not positive.
    """
    if not isinstance(host, str) or not host.strip():
        raise ConfigurationError("SMTP host must be a non-empty string.")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigurationError(f"SMTP port must be an integer between 1 and 65535, got {port!r}")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ConfigurationError(f"SMTP timeout must be a positive number, got {timeout!r}")


def validate_header_value(value: str, name: str) -> str:
    """Checks that a header value fits on one line.

    Raises:
        ValueError: If `value` is not a string or contains CR or LF.
    """
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string.")
    if "\r" in value or "\n" in value:
        raise ValueError(f"{name} must not contain line breaks: {value!r}")
    return value
