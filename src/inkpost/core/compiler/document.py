"""Draft compilation - body, footer and tracking beacon in one document"""

from html import escape

from inkpost.core.models.document import CompiledDocument
from inkpost.core.models.draft import Draft, Identity

from .footer import FooterRenderer
from .markdown import compile_body
from .tracker import beacon_markup, tracking_token

HTML_TEMPLATE = (
    "<!DOCTYPE html><html><head><style>"
    "body {{ font-family: Arial, sans-serif; color: #333; line-height: 1.6; }} "
    "a {{ color: {color}; text-decoration: none; }} "
    "img {{ max-width: 100%; }}"
    "</style></head><body>"
    '<div style="margin-bottom: 20px;">{content}</div><br>'
    "{footer}{beacon}</body></html>"
)

PLAIN_SEPARATOR = "\n\n--\n"


def compile(draft: Draft, identity: Identity, tracking_base_url: str) -> CompiledDocument:
    """Compile a draft into HTML and plain bodies ready for transport.

    The beacon is HTML-only and is left out when no tracking URL is set.
    Nothing is read from disk; inline images and attachments are only listed.
    """
    html_content, plain_content, images = compile_body(draft.body)
    html_footer, plain_footer = FooterRenderer.render(identity)

    beacon = ""
    if tracking_base_url:
        beacon = beacon_markup(tracking_base_url, tracking_token(draft.recipient))

    html_body = HTML_TEMPLATE.format(
        color=escape(identity.footer_color, quote=True),
        content=html_content,
        footer=html_footer,
        beacon=beacon,
    )
    plain_body = plain_content.rstrip("\n") + PLAIN_SEPARATOR + plain_footer

    return CompiledDocument(
        html_body=html_body,
        plain_body=plain_body,
        inline_images=tuple(images),
        attachments=tuple(draft.attachments),
    )
