"""Open-tracking token and beacon markup"""

import base64
import binascii
from html import escape


def tracking_token(recipient_email: str) -> str:
    """Encode a recipient address as an unpadded URL-safe base64 token.

    The encoding is reversible so the dashboard can show the address again;
    the same address always yields the same token.
    """
    encoded = base64.urlsafe_b64encode(recipient_email.encode("utf-8"))
    return encoded.rstrip(b"=").decode("ascii")


def decode_tracking_token(token: str) -> str:
    """Decode a tracking token back to the address, or return it unchanged."""
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return token

    return raw.decode("utf-8", errors="replace")


def beacon_markup(base_url: str, token: str) -> str:
    """Invisible 1x1 image pointing at the worker's pixel endpoint."""
    src = f"{base_url.rstrip('/')}/pixel.png?id={token}"
    return (
        f'<img src="{escape(src, quote=True)}" alt="" width="1" height="1" '
        f'border="0" style="display:none;" />'
    )
