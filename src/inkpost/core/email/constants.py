"""SMTP constants and configuration values."""


class SMTPRelay:
    """The fixed relay every message is delivered through."""

    HOST = "smtp.gmail.com"
    PORT = 587  # STARTTLS submission


class Timeouts:
    """Timeout values for network operations (in seconds)."""

    SMTP_CONNECT = 30.0  # Connect, STARTTLS and login
    WORKER_REQUEST = 60.0  # Schedule uploads can carry attachments


class MimeDefaults:
    """Fallbacks used when a part's type or name cannot be inferred."""

    CONTENT_TYPE = "application/octet-stream"
    IMAGE_FILENAME = "image.png"
    ATTACHMENT_FILENAME = "attachment.bin"
