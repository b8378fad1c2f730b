"""Signature footer rendering"""

from html import escape
from typing import Tuple

from inkpost.core.models.draft import Identity

HTML_EMAIL_SEPARATOR = " || "
PLAIN_EMAIL_SEPARATOR = " | "


class FooterRenderer:
    """Render a sender identity as HTML and plain-text footers."""

    @staticmethod
    def render(identity: Identity) -> Tuple[str, str]:
        """Return ``(html_footer, plain_footer)`` for the identity."""
        return FooterRenderer.render_html(identity), FooterRenderer.render_plain(identity)

    @staticmethod
    def render_html(identity: Identity) -> str:
        color = escape(identity.footer_color, quote=True)

        email_row = ""
        if identity.emails:
            links = HTML_EMAIL_SEPARATOR.join(
                f'<a href="mailto:{escape(email, quote=True)}">{escape(email)}</a>'
                for email in identity.emails
            )
            email_row = f'<br><span style="color: {color};">E-mail:</span> {links}'

        return (
            f'<div style="font-family: sans-serif; border-left: 4px solid {color}; '
            f'padding-left: 12px; color: #333;">'
            f'<h3 style="margin: 0; color: #2c3e50;">{escape(identity.name)}</h3>'
            f'<p style="margin: 2px 0; font-size: 14px;">'
            f"{escape(identity.role)}<br>{escape(identity.department)}</p>"
            f'<p style="margin: 2px 0; font-size: 12px; color: #666;">'
            f"{escape(identity.institution)}</p><br>"
            f'<div style="font-size: 13px;">'
            f'<span style="color: {color};">Phone:</span> {escape(identity.phone)}'
            f"{email_row}</div></div>"
        )

    @staticmethod
    def render_plain(identity: Identity) -> str:
        lines = [
            identity.name,
            identity.role,
            identity.department,
            identity.institution,
            "",
            f"Phone: {identity.phone}",
        ]
        if identity.emails:
            lines.append(f"Email: {PLAIN_EMAIL_SEPARATOR.join(identity.emails)}")

        return "\n".join(lines)


def render_footer(identity: Identity) -> Tuple[str, str]:
    """Render both footer variants for an identity."""
    return FooterRenderer.render(identity)
