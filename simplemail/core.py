from smtplib import SMTP, SMTP_SSL, SMTPException
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.mime.application import MIMEApplication
from email.mime.image import MIMEImage
from email.mime.audio import MIMEAudio
from email.mime.base import MIMEBase
from email.encoders import encode_base64
from email.errors import MessageError
from email.utils import formatdate, make_msgid, parseaddr
from enum import Enum
from mimetypes import guess_type
from os import PathLike
from os.path import basename
from threading import Lock
from typing import Iterable, List, NamedTuple, Union
from jinja2 import Template  # type: ignore
from loguru import logger
from .config import SmtpConfig, default_ssl_context
from .exceptions import MessageSentError, MessagingError
from .utils import validate_address, validate_header_value, validate_path, validate_template


class RecipientType(str, Enum):
    """Header a recipient is listed under. `BCC` recipients only reach the envelope."""

    TO = "To"
    CC = "Cc"
    BCC = "Bcc"

    @classmethod
    def parse(cls, kind: Union["RecipientType", str]) -> "RecipientType":
        """Accepts a `RecipientType` or its name, case-insensitive (`"cc"`)."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls[str(kind).upper()]
        except KeyError:
            raise ValueError(f"Unknown recipient type: {kind!r}. Use 'to', 'cc' or 'bcc'.") from None


class Recipient(NamedTuple):
    address: str
    kind: RecipientType


class SimpleMail:
    """Composes a single email and sends it through an SMTP server.

    The message is built up part by part: every call to `set_message` or
    `add_attachment` appends one part to a `multipart/related` container, in
    call order. Nothing is replaced, so calling `set_message` twice yields
    two HTML parts.

    `send_mail` is terminal. Once it succeeds the composer refuses further
    changes and a second send with `MessageSentError`. Only `send_mail` is
    serialized; building the message is meant to happen on a single thread.

    Example:
        mail = SimpleMail("smtp.gmail.com", 465, "me@gmail.com", "secret")
        mail.set_from("me@gmail.com")
        mail.add_recipient("you@domain.com")
        mail.set_subject("Monthly report")
        mail.set_message('<p>See attached.</p><img src="cid:logo">')
        mail.add_attachment("logo.png", content_id="logo")
        mail.send_mail()
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
    ):
        """Initializes the composer with the SMTP session settings.

        No connection is opened here; transport errors surface from
        `send_mail`.

        Args:
            host (str): SMTP server hostname or IP.
            port (int): SMTP port.
            username (str, optional): Login name. Empty or `None` disables
                authentication and TLS.
            password (str, optional): Login password.
            timeout (float, optional): Socket timeout in seconds. Defaults to
                the `smtplib` default.

        Raises:
            ConfigurationError: If the host, port or timeout is invalid.
        """
        self._config = SmtpConfig(host, port, username, password, timeout)

        self._from_address = None
        self._recipients: List[Recipient] = []
        self._subject = None
        self._parts: List[MIMEBase] = []

        self._send_lock = Lock()
        self._sent = False

    @classmethod
    def from_config(cls, config: SmtpConfig) -> "SimpleMail":
        """Creates a composer from an existing `SmtpConfig`."""
        return cls(config.host, config.port, config.username, config.password, config.timeout)

    @property
    def config(self) -> SmtpConfig:
        return self._config

    @property
    def from_address(self) -> str | None:
        return self._from_address

    @property
    def recipients(self) -> tuple[Recipient, ...]:
        return tuple(self._recipients)

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def parts(self) -> tuple[MIMEBase, ...]:
        return tuple(self._parts)

    @property
    def sent(self) -> bool:
        return self._sent

    def _ensure_not_sent(self) -> None:
        if self._sent:
            raise MessageSentError("This message has already been sent.")

    def set_from(self, address: str) -> None:
        """Sets the sender address.

        Raises:
            AddressError: If `address` is malformed. The previous sender is kept.
            MessageSentError: If the message was already sent.
        """
        self._ensure_not_sent()
        self._from_address = validate_address(address)

    def add_recipient(self, address: str, kind: Union[RecipientType, str] = RecipientType.TO) -> None:
        """Adds one recipient as "To" (default), "Cc" or "Bcc".

        Args:
            address (str): Recipient address, optionally with a display name.
            kind (RecipientType | str): Header to list the recipient under.

        Raises:
            AddressError: If `address` is malformed.
            ValueError: If `kind` is not a known recipient type.
            MessageSentError: If the message was already sent.

        Example:
            add_recipient("boss@domain.com", RecipientType.CC)
        """
        self._ensure_not_sent()
        kind = RecipientType.parse(kind)
        self._recipients.append(Recipient(validate_address(address), kind))
        logger.debug(f"Added {kind.value} recipient ({len(self._recipients)} total)")

    def add_recipients(self, addresses: Iterable[str], kind: Union[RecipientType, str] = RecipientType.TO) -> None:
        """Adds several recipients in order.

        There is no rollback: if one address is malformed, the ones before
        it stay added and `AddressError` is raised.
        """
        for address in addresses:
            self.add_recipient(address, kind)

    def set_subject(self, subject: str) -> None:
        """Sets the subject line.

        Raises:
            ValueError: If `subject` is not a string or contains a line break.
        """
        self._ensure_not_sent()
        self._subject = validate_header_value(subject, "Subject")

    def set_message(self, html: str) -> None:
        """Appends an HTML body part.

        Each call adds a new `text/html` part; earlier ones are not replaced.

        Raises:
            ValueError: If `html` is not a string.
        """
        self._ensure_not_sent()
        if not isinstance(html, str):
            raise ValueError("Message must be a string.")
        self._parts.append(MIMEText(html, "html", "utf-8"))

    def use_template(self, file: Union[str, PathLike], **variables) -> None:
        """Renders a Jinja2 HTML template and appends it as a body part.

        Args:
            file (str): Path to the HTML template file.
            **variables: Key-value pairs for Jinja2 placeholders.

        Raises:
            ValueError: If the file is not an HTML template.
            FileNotFoundError: If the file does not exist.

        Example:
            use_template("templates/welcome.html", name="John", version="1.0.0")
        """
        self._ensure_not_sent()
        file = validate_template(file)

        with open(file, "r", encoding="utf-8") as f:
            html = Template(f.read()).render(**variables)
        self.set_message(html)

    def add_attachment(self, attachment_path: Union[str, PathLike], content_id: str | None = None) -> None:
        """Attaches a file from disk.

        The file is read immediately. Its MIME type is guessed from the file
        name and falls back to `application/octet-stream`.

        Args:
            attachment_path (str): Path to the file to be attached.
            content_id (str, optional): Content-ID to reference the file from
                the HTML body as `cid:<content_id>`.

        Raises:
            FileNotFoundError: If the file does not exist.
            OSError: If the file cannot be read.
            ValueError: If `content_id` contains a line break.

        Example:
            add_attachment("images/logo.png", content_id="logo")
        """
        self._ensure_not_sent()
        if content_id is not None:
            validate_header_value(content_id, "Content-ID")
        path = validate_path(attachment_path)

        with open(path, "rb") as f:
            data = f.read()

        mime_type, _ = guess_type(path)
        main_type, sub_type = mime_type.split("/", 1) if mime_type else ("application", "octet-stream")

        if main_type == "image":
            part = MIMEImage(data, _subtype=sub_type)
        elif main_type == "audio":
            part = MIMEAudio(data, _subtype=sub_type)
        elif main_type == "application":
            part = MIMEApplication(data, _subtype=sub_type)
        else:
            part = MIMEBase(main_type, sub_type)
            part.set_payload(data)
            encode_base64(part)

        if content_id is not None:
            part.add_header("Content-ID", f"<{content_id}>")
        part.add_header("Content-Disposition", "attachment", filename=basename(path))

        self._parts.append(part)
        logger.debug(f"Attached {path} as {main_type}/{sub_type} ({len(data)} bytes)")

    def add_data_attachment(self, data: bytes, content_type: str, content_id: str | None, filename: str | None) -> None:
        """Attaches an in-memory byte buffer.

        The bytes are sent base64-encoded and unchanged. `content_type` is
        written verbatim as the part's Content-Type header.

        Args:
            data (bytes): Raw attachment content.
            content_type (str): MIME type, e.g. `"image/png"`.
            content_id (str | None): Content-ID for `cid:` references, or
                `None` to omit the header.
            filename (str | None): File name shown to the recipient.

        Raises:
            ValueError: If `data` is not bytes-like or `content_id` contains
                a line break.

        Example:
            add_data_attachment(png_bytes, "image/png", "chart", "chart.png")
        """
        self._ensure_not_sent()
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValueError("Attachment data must be bytes.")
        if content_id is not None:
            validate_header_value(content_id, "Content-ID")

        part = MIMEBase("application", "octet-stream")
        part.set_payload(bytes(data))
        encode_base64(part)
        part.replace_header("Content-Type", content_type)

        if content_id is not None:
            part.add_header("Content-ID", f"<{content_id}>")
        if filename:
            part.add_header("Content-Disposition", "attachment", filename=filename)
        else:
            part.add_header("Content-Disposition", "attachment")

        self._parts.append(part)
        logger.debug(f"Attached {len(data)} bytes as {content_type}")

    def build_message(self) -> MIMEMultipart:
        """Assembles the headers and all parts into one message.

        Bcc recipients are left out of the headers; they are only used for
        the SMTP envelope.

        Returns:
            MIMEMultipart: A `multipart/related` message ready to send.
        """
        message = MIMEMultipart("related")

        if self._from_address:
            message["From"] = self._from_address
        for kind in (RecipientType.TO, RecipientType.CC):
            addresses = [r.address for r in self._recipients if r.kind is kind]
            if addresses:
                message[kind.value] = ", ".join(addresses)
        if self._subject is not None:
            message["Subject"] = self._subject
        message["Date"] = formatdate(localtime=True)
        message["Message-ID"] = make_msgid(domain=self._config.host)

        for part in self._parts:
            message.attach(part)

        return message

    def _connect(self) -> Union[SMTP, SMTP_SSL]:
        """Opens the SMTP connection, over implicit TLS when credentials are set."""
        config = self._config
        options = {} if config.timeout is None else {"timeout": config.timeout}

        if config.ssl_enabled:
            logger.debug(f"Connecting to {config.host}:{config.port} over SSL")
            return SMTP_SSL(config.host, config.port, context=default_ssl_context(), **options)

        logger.debug(f"Connecting to {config.host}:{config.port}")
        return SMTP(config.host, config.port, **options)

    def send_mail(self) -> None:
        """Builds the message and sends it, blocking until the server answers.

        Concurrent calls on the same instance are serialized. Whichever call
        runs second finds the message already sent and raises
        `MessageSentError`. A message without a sender is sent with an empty
        envelope sender (`MAIL FROM:<>`); the server decides whether to
        accept it.

        Raises:
            MessagingError: On any SMTP, authentication, socket or TLS
                failure, or when the message cannot be serialized. The
                message stays unsent.
            MessageSentError: If the message was already sent.
        """
        with self._send_lock:
            self._ensure_not_sent()
            config = self._config

            message = self.build_message()
            try:
                message.as_bytes()
            except MessageError as e:
                raise MessagingError(f"Message cannot be serialized: {e}") from e

            envelope_from = parseaddr(self._from_address)[1] if self._from_address else ""
            envelope_to = [parseaddr(r.address)[1] for r in self._recipients]

            try:
                with self._connect() as smtp:
                    if config.auth_enabled:
                        smtp.login(config.username, config.password or "")
                    refused = smtp.send_message(message, from_addr=envelope_from, to_addrs=envelope_to)
            except (SMTPException, MessageError, OSError) as e:
                logger.warning(f"Sending via {config.host}:{config.port} failed: {e}")
                raise MessagingError(f"Failed to send mail via {config.host}:{config.port}: {e}") from e

            self._sent = True

        if refused:
            logger.warning(f"Server refused {len(refused)} recipient(s)")
        logger.info(f"Sent '{self._subject or ''}' to {len(envelope_to) - len(refused or {})} recipient(s)")

    def __repr__(self) -> str:
        return (
            f"<SimpleMail host={self._config.host!r} port={self._config.port} "
            f"recipients={len(self._recipients)} parts={len(self._parts)} sent={self._sent}>"
        )
