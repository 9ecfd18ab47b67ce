"""Provider-agnostic email model."""

import mimetypes
import os
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from mailrelay.render import Recipient

RecipientInput = Union[str, tuple]

ATTACHMENT_TYPES = {"attachment", "inline"}


def format_recipient(value: RecipientInput) -> Recipient:
    """
    Normalize a recipient into a ``(name, address)`` tuple.

    Accepts a bare address or a ``(name, address)`` pair. Blank names
    become ``None``.
    """
    if isinstance(value, str):
        name, address = None, value
    elif isinstance(value, tuple) and len(value) == 2:
        name, address = value
    else:
        raise ValueError(f"Invalid recipient: {value!r}")

    if not isinstance(address, str) or not address.strip():
        raise ValueError(f"Invalid recipient address: {value!r}")
    if name is not None and not isinstance(name, str):
        raise ValueError(f"Invalid recipient name: {value!r}")

    return (name or None, address.strip())


def _format_recipients(value) -> list[Recipient]:
    if value is None:
        return []
    if isinstance(value, list):
        return [format_recipient(v) for v in value]
    return [format_recipient(value)]


@dataclass
class Attachment:
    """A file attached to an email, held in memory or referenced by path."""
    filename: str
    content_type: str = "application/octet-stream"
    path: Optional[str] = None
    data: Optional[bytes] = None
    type: str = "attachment"

    def __post_init__(self):
        if self.path is None and self.data is None:
            raise ValueError(f"Attachment {self.filename!r} needs either a path or data")
        if self.path is not None and self.data is not None:
            raise ValueError(f"Attachment {self.filename!r} takes a path or data, not both")
        if self.type not in ATTACHMENT_TYPES:
            raise ValueError(f"Unknown attachment type: {self.type}")

    @classmethod
    def from_path(
        cls,
        path: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        type: str = "attachment",
    ) -> "Attachment":
        """Reference a file on disk. Bytes are read when the request is encoded."""
        filename = filename or os.path.basename(path)
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return cls(filename=filename, content_type=content_type, path=path, type=type)

    @classmethod
    def from_data(
        cls,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        type: str = "attachment",
    ) -> "Attachment":
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return cls(filename=filename, content_type=content_type, data=data, type=type)


@dataclass
class Email:
    """
    An outgoing email, independent of any provider.

    Recipients are stored as ``(name, address)`` tuples. The builder methods
    return the email itself so calls can be chained::

        Email().put_from(("T Stark", "tony@example.com")).to("steve@example.com")
    """
    from_: Optional[Recipient] = None
    to_: list[Recipient] = field(default_factory=list)
    cc_: list[Recipient] = field(default_factory=list)
    bcc_: list[Recipient] = field(default_factory=list)
    reply_to: Union[Recipient, list[Recipient], None] = None
    subject: str = ""
    html_body: Optional[str] = None
    text_body: Optional[str] = None
    amp_html_body: Optional[str] = None
    attachments: list[Attachment] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    provider_options: dict[str, Any] = field(default_factory=dict)
    assigns: dict[str, Any] = field(default_factory=dict)

    def put_from(self, sender: RecipientInput) -> "Email":
        self.from_ = format_recipient(sender)
        return self

    def to(self, recipients) -> "Email":
        """Append one recipient or a list of them to ``to``."""
        self.to_.extend(_format_recipients(recipients))
        return self

    def put_to(self, recipients) -> "Email":
        """Replace the ``to`` list."""
        self.to_ = _format_recipients(recipients)
        return self

    def cc(self, recipients) -> "Email":
        self.cc_.extend(_format_recipients(recipients))
        return self

    def put_cc(self, recipients) -> "Email":
        self.cc_ = _format_recipients(recipients)
        return self

    def bcc(self, recipients) -> "Email":
        self.bcc_.extend(_format_recipients(recipients))
        return self

    def put_bcc(self, recipients) -> "Email":
        self.bcc_ = _format_recipients(recipients)
        return self

    def put_reply_to(self, recipients) -> "Email":
        """Set reply-to to a single recipient, or to a list of them."""
        if isinstance(recipients, list):
            self.reply_to = [format_recipient(r) for r in recipients]
        elif recipients is None:
            self.reply_to = None
        else:
            self.reply_to = format_recipient(recipients)
        return self

    def put_subject(self, subject: str) -> "Email":
        self.subject = subject
        return self

    def put_html_body(self, body: Optional[str]) -> "Email":
        self.html_body = body
        return self

    def put_text_body(self, body: Optional[str]) -> "Email":
        self.text_body = body
        return self

    def put_amp_html_body(self, body: Optional[str]) -> "Email":
        self.amp_html_body = body
        return self

    def header(self, name: str, value: str) -> "Email":
        if not isinstance(name, str) or not isinstance(value, str):
            raise ValueError(f"Header name and value must be strings, got {name!r}: {value!r}")
        self.headers[name] = value
        return self

    def attachment(self, attachment: Union[Attachment, str]) -> "Email":
        """Attach an ``Attachment`` or a filesystem path."""
        if isinstance(attachment, str):
            attachment = Attachment.from_path(attachment)
        self.attachments.append(attachment)
        return self

    def put_provider_option(self, key: str, value: Any) -> "Email":
        self.provider_options[key] = value
        return self

    def assign(self, key: str, value: Any) -> "Email":
        self.assigns[key] = value
        return self
