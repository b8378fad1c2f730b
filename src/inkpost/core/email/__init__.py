"""Message assembly and SMTP delivery.

- assemble: build the mixed -> related -> alternative MIME tree
- SMTPTransport: hand an assembled message to the fixed relay

    >>> message = assemble(compiled, identity, "me@example.com", "you@example.com", "Hi")
    >>> SMTPTransport().send(message, SMTPCredentials("me@example.com", "app-password"))
"""

from .assembler import assemble, format_sender
from .transport import SMTPCredentials, SMTPTransport, send_draft

__all__ = [
    "SMTPCredentials",
    "SMTPTransport",
    "assemble",
    "format_sender",
    "send_draft",
]
