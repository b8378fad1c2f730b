"""SMTP delivery through the fixed relay"""

import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import Message
from typing import Optional

from inkpost.core.compiler import compile
from inkpost.core.models.draft import Draft
from inkpost.utils.config import AppConfig
from inkpost.utils.errors import DeliveryError
from inkpost.utils.logging import get_logger, log_call, log_event

from .assembler import assemble
from .constants import SMTPRelay, Timeouts

logger = get_logger(__name__)


@dataclass(frozen=True)
class SMTPCredentials:
    """Username and app password for the relay."""

    username: str
    password: str = field(repr=False)


def _server_text(error: smtplib.SMTPException) -> str:
    """Best-effort text of a relay response."""
    raw = getattr(error, "smtp_error", None)
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    if raw:
        return str(raw)
    return str(error)


class SMTPTransport:
    """Blocking SMTP sender: STARTTLS, login, one message, quit.

    Every failure is raised as a DeliveryError; nothing is retried.
    """

    def __init__(
        self,
        host: str = SMTPRelay.HOST,
        port: int = SMTPRelay.PORT,
        timeout: float = Timeouts.SMTP_CONNECT,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout

    @log_call
    def send(self, message: Message, credentials: SMTPCredentials) -> None:
        """Deliver an assembled message.

        Raises:
            DeliveryError: On authentication failure, refused recipients,
                disconnects, socket errors or timeouts
        """
        details = {"host": self.host, "port": self.port}

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=ssl.create_default_context())
                server.login(credentials.username, credentials.password)
                refused = server.send_message(message)

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            raise DeliveryError(
                f"SMTP authentication failed: {_server_text(e)}",
                details={**details, "code": e.smtp_code},
            ) from e

        except smtplib.SMTPRecipientsRefused as e:
            reasons = "; ".join(
                f"{address}: {_server_text(smtplib.SMTPResponseException(*reply))}"
                for address, reply in e.recipients.items()
            )
            raise DeliveryError(f"Recipient refused: {reasons}", details=details) from e

        except smtplib.SMTPResponseException as e:
            raise DeliveryError(
                f"Relay rejected the message ({e.smtp_code}): {_server_text(e)}",
                details={**details, "code": e.smtp_code},
            ) from e

        except smtplib.SMTPException as e:
            raise DeliveryError(f"SMTP error: {_server_text(e)}", details=details) from e

        except OSError as e:
            # Socket errors and timeouts
            logger.error(f"SMTP connection error: {e}")
            raise DeliveryError(
                f"Could not reach {self.host}:{self.port}: {e}", details=details
            ) from e

        if refused:
            raise DeliveryError(
                f"Recipient refused: {', '.join(refused)}", details=details
            )

        log_event("email_sent", f"Message delivered to {message.get('To')}")


def send_draft(
    config: AppConfig, draft: Draft, transport: Optional[SMTPTransport] = None
) -> None:
    """Compile, assemble and deliver a draft immediately.

    Blocking; the task layer runs it in a worker thread.

    Raises:
        MissingCredentialsError: If SMTP credentials are not configured
        InvalidEmailAddressError: Before any connection is made
        DeliveryError: If the relay rejects the message
    """
    config.require_smtp_credentials()

    compiled = compile(draft, config.identity, config.worker_url)
    message = assemble(
        compiled,
        config.identity,
        config.smtp_username,
        draft.recipient,
        draft.subject,
    )

    transport = transport or SMTPTransport()
    transport.send(message, SMTPCredentials(config.smtp_username, config.smtp_app_password))
