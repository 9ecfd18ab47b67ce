"""Mailgun email provider (https://www.mailgun.com).

Builds the form payload for ``POST {base_url}/{domain}/messages``.

Provider options (``Email.put_provider_option``):

* ``custom_vars`` (dict) - sent as ``h:X-Mailgun-Variables``
* ``recipient_vars`` (dict) - ``recipient-variables``, per-recipient variables
* ``sending_options`` (dict) - one ``o:<key>`` per entry
* ``tags`` (list) - ``o:tag``; predates ``sending_options`` and is kept alongside it
* ``template_name`` (str) - ``template``
* ``template_options`` (dict) - one ``t:<key>`` per entry (``version``, ``text``, ``variables``)

Custom headers set with ``Email.header`` are sent as ``h:<name>``.
"""

import base64
import json
import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from mailrelay import __version__
from mailrelay.api_client import ApiClient, HttpxApiClient
from mailrelay.config import DEFAULT_BASE_URL, MailgunSettings, get_settings
from mailrelay.email import Attachment, Email, format_recipient
from mailrelay.errors import ConfigurationError, ProviderError, ResponseDecodeError, TransportError
from mailrelay.providers.base import DeliveryResult, EmailProvider
from mailrelay.render import render_recipient
from mailrelay.validate import validate_provider_config

logger = logging.getLogger(__name__)

API_ENDPOINT = "/messages"

# Payload attribute -> Mailgun field name, in the order fields are written
_FIELD_KEYS = (
    ("from_", "from"),
    ("to", "to"),
    ("subject", "subject"),
    ("html", "html"),
    ("text", "text"),
    ("amp_html", "amp-html"),
    ("cc", "cc"),
    ("bcc", "bcc"),
    ("reply_to", "h:Reply-To"),
    ("custom_variables", "h:X-Mailgun-Variables"),
    ("recipient_variables", "recipient-variables"),
    ("template", "template"),
)


@dataclass
class AttachmentPart:
    """A file part of the multipart body. Exactly one of data/path is set."""
    field_name: str
    filename: str
    content_type: str
    data: Optional[bytes] = None
    path: Optional[str] = None


@dataclass
class MailgunPayload:
    """Form fields for one send. Unset fields are never serialized."""
    from_: Optional[str] = None
    to: Optional[str] = None
    subject: Optional[str] = None
    html: Optional[str] = None
    text: Optional[str] = None
    amp_html: Optional[str] = None
    cc: Optional[str] = None
    bcc: Optional[str] = None
    reply_to: Optional[str] = None
    custom_variables: Optional[str] = None
    recipient_variables: Any = None
    template: Optional[str] = None
    # h:, o: and t: prefixed keys, in write order; a repeated key keeps its
    # first position and takes the latest value
    extra: dict[str, Any] = field(default_factory=dict)
    attachments: list[AttachmentPart] = field(default_factory=list)

    def put_extra(self, key: str, value: Any) -> None:
        if value is None:
            return
        self.extra[key] = value

    def fields(self) -> dict[str, Any]:
        """Return the form fields, known keys first, then the extra keys."""
        fields = {}
        for attr, key in _FIELD_KEYS:
            value = getattr(self, attr)
            if value is not None:
                fields[key] = value
        # An extra key matching a known key overrides it in place
        fields.update(self.extra)
        return fields


@dataclass
class EncodedBody:
    content_type: str
    content_length: int
    body: bytes


def encode_variable(value: Any) -> Any:
    """JSON-encode dicts and lists; pass scalars through unchanged."""
    if isinstance(value, (dict, list, tuple)):
        return _json_dumps(value)
    return value


def _json_dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


# --- Payload steps ---


def _prepare_from(payload: MailgunPayload, email: Email) -> None:
    if email.from_ is None:
        raise ValueError("Email has no sender")
    payload.from_ = render_recipient(email.from_)


def _prepare_to(payload: MailgunPayload, email: Email) -> None:
    payload.to = render_recipient(email.to_)


def _prepare_subject(payload: MailgunPayload, email: Email) -> None:
    payload.subject = email.subject


def _prepare_html(payload: MailgunPayload, email: Email) -> None:
    if email.html_body is not None:
        payload.html = email.html_body


def _prepare_text(payload: MailgunPayload, email: Email) -> None:
    if email.text_body is not None:
        payload.text = email.text_body


def _prepare_amp_html(payload: MailgunPayload, email: Email) -> None:
    if email.amp_html_body is not None:
        payload.amp_html = email.amp_html_body


def _prepare_cc(payload: MailgunPayload, email: Email) -> None:
    if email.cc_:
        payload.cc = render_recipient(email.cc_)


def _prepare_bcc(payload: MailgunPayload, email: Email) -> None:
    if email.bcc_:
        payload.bcc = render_recipient(email.bcc_)


def _prepare_reply_to(payload: MailgunPayload, email: Email) -> None:
    reply_to = email.reply_to
    if reply_to is None:
        return
    if isinstance(reply_to, (str, tuple)):
        payload.reply_to = format_recipient(reply_to)[1]
    elif reply_to:
        payload.reply_to = ", ".join(format_recipient(r)[1] for r in reply_to)


def _prepare_attachments(payload: MailgunPayload, email: Email) -> None:
    payload.attachments = [prepare_file(a) for a in email.attachments]


def _prepare_custom_vars(payload: MailgunPayload, email: Email) -> None:
    if "custom_vars" in email.provider_options:
        payload.custom_variables = _json_dumps(email.provider_options["custom_vars"])


def _prepare_sending_options(payload: MailgunPayload, email: Email) -> None:
    sending_options = email.provider_options.get("sending_options")
    if not sending_options:
        return
    for key, value in sending_options.items():
        payload.put_extra(f"o:{key}", encode_variable(value))


def _prepare_recipient_vars(payload: MailgunPayload, email: Email) -> None:
    if email.provider_options.get("recipient_vars") is not None:
        payload.recipient_variables = encode_variable(email.provider_options["recipient_vars"])


def _prepare_tags(payload: MailgunPayload, email: Email) -> None:
    tags = email.provider_options.get("tags")
    if isinstance(tags, (list, tuple)):
        payload.put_extra("o:tag", list(tags))


def _prepare_custom_headers(payload: MailgunPayload, email: Email) -> None:
    for name, value in email.headers.items():
        payload.put_extra(f"h:{name}", value)


def _prepare_template(payload: MailgunPayload, email: Email) -> None:
    if email.provider_options.get("template_name") is not None:
        payload.template = email.provider_options["template_name"]


def _prepare_template_options(payload: MailgunPayload, email: Email) -> None:
    options = email.provider_options.get("template_options")
    if not isinstance(options, dict):
        return
    for key, value in options.items():
        payload.put_extra(f"t:{key}", encode_variable(value))


PAYLOAD_STEPS = (
    _prepare_from,
    _prepare_to,
    _prepare_subject,
    _prepare_html,
    _prepare_text,
    _prepare_amp_html,
    _prepare_cc,
    _prepare_bcc,
    _prepare_reply_to,
    _prepare_attachments,
    _prepare_custom_vars,
    _prepare_sending_options,
    _prepare_recipient_vars,
    _prepare_tags,
    _prepare_custom_headers,
    _prepare_template,
    _prepare_template_options,
)


def prepare_payload(email: Email) -> MailgunPayload:
    """Map an email onto Mailgun form fields."""
    payload = MailgunPayload()
    for step in PAYLOAD_STEPS:
        step(payload, email)
    return payload


def prepare_file(attachment: Attachment) -> AttachmentPart:
    """Build the multipart file part for an attachment; path files are read at encode time."""
    part = AttachmentPart(
        field_name=str(attachment.type),
        filename=attachment.filename,
        content_type=attachment.content_type,
    )
    if attachment.data is None:
        part.path = attachment.path
    else:
        part.data = attachment.data
    return part


def encode_body(url: str, payload: MailgunPayload) -> EncodedBody:
    """
    Serialize the payload.

    With attachments the whole request is multipart/form-data: one text part
    per field followed by one file part per attachment. Without attachments
    the fields are sent as application/x-www-form-urlencoded.
    """
    fields = payload.fields()

    with ExitStack() as stack:
        if payload.attachments:
            files = []
            for part in payload.attachments:
                if part.data is None:
                    content = stack.enter_context(open(part.path, "rb"))
                else:
                    content = part.data
                files.append((part.field_name, (part.filename, content, part.content_type)))
            request = httpx.Request("POST", url, data=fields, files=files)
        else:
            request = httpx.Request("POST", url, data=fields)
        body = request.read()

    return EncodedBody(
        content_type=request.headers["Content-Type"],
        content_length=len(body),
        body=body,
    )


class MailgunProvider(EmailProvider):
    """Send transactional email via the Mailgun messages API."""

    @property
    def provider_type(self) -> str:
        return "mailgun"

    def __init__(
        self,
        api_key: str,
        domain: str,
        base_url: Optional[str] = None,
        api_client: Optional[ApiClient] = None,
    ):
        self.api_key = api_key
        self.domain = domain
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.api_client = api_client or HttpxApiClient()

    @classmethod
    def from_config(cls, config: dict, api_client: Optional[ApiClient] = None) -> "MailgunProvider":
        """
        Config shape: { "api_key": str, "domain": str, "base_url": str (optional) }
        """
        err = validate_provider_config("mailgun", config)
        if err:
            raise ConfigurationError(err)
        if api_client is None and config.get("timeout"):
            api_client = HttpxApiClient(timeout=config["timeout"])
        return cls(
            api_key=config["api_key"],
            domain=config["domain"],
            base_url=config.get("base_url"),
            api_client=api_client,
        )

    @classmethod
    def from_settings(cls, settings: Optional[MailgunSettings] = None) -> Optional["MailgunProvider"]:
        """Create a MailgunProvider from environment settings. Returns None if not configured."""
        settings = settings or get_settings()
        if not settings.is_configured:
            logger.warning("MAILGUN_API_KEY or MAILGUN_DOMAIN not set")
            return None
        return cls.from_config(settings.to_config())

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.domain}{API_ENDPOINT}"

    def _auth(self) -> str:
        return base64.b64encode(f"api:{self.api_key}".encode()).decode()

    def prepare_headers(self) -> list[tuple[str, str]]:
        return [
            ("User-Agent", f"mailrelay/{__version__}"),
            ("Accept", "*/*"),
            ("Authorization", f"Basic {self._auth()}"),
        ]

    async def deliver(self, email: Email) -> DeliveryResult:
        url = self.url
        encoded = encode_body(url, prepare_payload(email))
        headers = [
            ("Content-Type", encoded.content_type),
            ("Content-Length", str(encoded.content_length)),
            *self.prepare_headers(),
        ]

        try:
            resp = await self.api_client.post(url, headers, encoded.body, email)
        except TransportError as e:
            logger.error("Mailgun request to %s failed: %s", url, e.reason)
            raise

        if resp.status_code == 200:
            try:
                message_id = json.loads(resp.body)["id"]
            except (ValueError, KeyError, TypeError):
                raise ResponseDecodeError(resp.status_code, _text(resp.body)) from None
            if not message_id:
                raise ResponseDecodeError(resp.status_code, _text(resp.body))
            logger.info(
                "Email sent via Mailgun: id=%s to=%s subject=%s",
                message_id,
                render_recipient(email.to_),
                email.subject,
            )
            return DeliveryResult(id=message_id, provider=self.provider_type)

        error = _decode_error(resp.body)
        logger.warning("Mailgun send failed: %s %s", resp.status_code, error)
        if resp.status_code > 399:
            raise ProviderError(resp.status_code, error)
        raise ProviderError(
            resp.status_code,
            error,
            message=f"Unexpected Mailgun status {resp.status_code}",
        )


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _decode_error(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return _text(body)
