"""MIME message assembly for compiled documents"""

from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from pathlib import Path
from typing import Optional

from inkpost.core.attachments import guess_content_type, load_optional, part_filename
from inkpost.core.models.document import CompiledDocument
from inkpost.core.models.draft import Identity
from inkpost.core.validation.email import EmailValidator
from inkpost.utils.logging import get_logger

from .constants import MimeDefaults

logger = get_logger(__name__)


def format_sender(name: str, address: str) -> str:
    """Build the From header value.

    ``"Name" <addr>`` for ASCII names, an RFC 2047 encoded word for anything
    else and the bare address when the name is empty.
    """
    name = name.strip()
    if not name:
        return address

    if name.isascii():
        quoted = name.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{quoted}" <{address}>'

    return formataddr((name, address), charset="utf-8")


def _disposition_filename(filename: str):
    if filename.isascii():
        return filename
    return ("utf-8", "", filename)


def _file_part(path: Path, disposition: str, fallback_name: str, kind: str) -> Optional[MIMEBase]:
    """Read a file into a base64 leaf; None when it cannot be read."""
    payload = load_optional(path, kind)
    if payload is None:
        return None

    maintype, subtype = guess_content_type(path)
    part = MIMEBase(maintype, subtype)
    part.set_payload(payload)
    encoders.encode_base64(part)
    part.add_header(
        "Content-Disposition",
        disposition,
        filename=_disposition_filename(part_filename(path, fallback_name)),
    )
    return part


def assemble(
    compiled: CompiledDocument,
    sender_identity: Identity,
    sender_address: str,
    recipient_address: str,
    subject: str,
) -> MIMEMultipart:
    """Build the ``mixed -> related -> alternative`` tree for a document.

    Raises:
        InvalidEmailAddressError: If either address fails syntax validation
    """
    sender = EmailValidator.normalize(sender_address, role="sender")
    recipient = EmailValidator.normalize(recipient_address, role="recipient")

    alternative = MIMEMultipart("alternative")
    alternative.attach(MIMEText(compiled.plain_body, "plain", "utf-8"))
    alternative.attach(MIMEText(compiled.html_body, "html", "utf-8"))

    related = MIMEMultipart("related")
    related.attach(alternative)
    for image in compiled.inline_images:
        part = _file_part(image.source_path, "inline", MimeDefaults.IMAGE_FILENAME, "inline image")
        if part is None:
            continue
        part.add_header("Content-ID", f"<{image.content_id}>")
        related.attach(part)

    message = MIMEMultipart("mixed")
    message.attach(related)
    for path in compiled.attachments:
        part = _file_part(path, "attachment", MimeDefaults.ATTACHMENT_FILENAME, "attachment")
        if part is not None:
            message.attach(part)

    message["From"] = format_sender(sender_identity.name, sender)
    message["To"] = recipient
    message["Subject"] = subject
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2])

    logger.debug(
        "Assembled message",
        extra={
            "inline_images": len(compiled.inline_images),
            "attachments": len(compiled.attachments),
        },
    )
    return message
