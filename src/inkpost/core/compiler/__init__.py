"""Draft-to-document compilation pipeline."""

from .document import compile
from .footer import FooterRenderer, render_footer
from .markdown import MarkdownCompiler, compile_body
from .tracker import beacon_markup, decode_tracking_token, tracking_token

__all__ = [
    "FooterRenderer",
    "MarkdownCompiler",
    "beacon_markup",
    "compile",
    "compile_body",
    "decode_tracking_token",
    "render_footer",
    "tracking_token",
]
