"""Markdown body compilation - HTML and plain renderings plus inline images"""

import uuid
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token

from inkpost.core.models.document import InlineImage
from inkpost.utils.logging import get_logger

logger = get_logger(__name__)

REMOTE_SCHEMES = ("http://", "https://")

# Already-embedded sources that must not be re-embedded
PASSTHROUGH_SCHEMES = ("cid:", "data:")


def _new_content_id() -> str:
    return str(uuid.uuid4())


def build_parser() -> MarkdownIt:
    """CommonMark parser with the table and strikethrough extensions."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


class MarkdownCompiler:
    """Render markdown to HTML and plain text, embedding local images by cid."""

    def __init__(self, content_id_factory: Optional[Callable[[], str]] = None):
        self._md = build_parser()
        self._new_content_id = content_id_factory or _new_content_id

    def compile_body(self, markdown: str) -> Tuple[str, str, List[InlineImage]]:
        """Compile a markdown body.

        Args:
            markdown: Markdown source text

        Returns:
            Tuple of (html, plain, inline_images); inline images are listed in
            the order they appear, one per local image reference.
        """
        if not markdown:
            return "", "", []

        env: dict = {}
        tokens = self._md.parse(markdown, env)
        images = self._rewrite_local_images(tokens)
        html = self._md.renderer.render(tokens, self._md.options, env)

        # Independent pass so entities never leak into the plain rendering
        plain = render_plain(self._md.parse(markdown, {}))

        logger.debug(
            "Compiled markdown body",
            extra={"html_length": len(html), "inline_images": len(images)},
        )
        return html, plain, images

    def _rewrite_local_images(self, tokens: Sequence[Token]) -> List[InlineImage]:
        images: List[InlineImage] = []

        for token in tokens:
            for child in token.children or ():
                if child.type != "image":
                    continue

                src = str(child.attrGet("src") or "")
                if is_remote(src) or src.lower().startswith(PASSTHROUGH_SCHEMES):
                    continue

                content_id = self._new_content_id()
                source_path = Path(self._md.normalizeLinkText(src))
                child.attrSet("src", f"cid:{content_id}")
                images.append(InlineImage(content_id=content_id, source_path=source_path))

        return images


def is_remote(url: str) -> bool:
    """Whether an image destination points at an http(s) resource."""
    return url.lower().startswith(REMOTE_SCHEMES)


def render_plain(tokens: Sequence[Token]) -> str:
    """Concatenate the literal text of a token stream.

    Soft and hard breaks become a newline, paragraphs and headings end with a
    blank line, list items and table rows with a single newline.
    """
    parts: List[str] = []

    for token in tokens:
        if token.type == "inline":
            parts.extend(_inline_text(token.children or ()))
        elif token.type in ("code_block", "fence"):
            parts.append(token.content)
        elif token.type == "paragraph_close" and not token.hidden:
            parts.append("\n\n")
        elif token.type == "heading_close":
            parts.append("\n\n")
        elif token.type in ("list_item_close", "tr_close"):
            parts.append("\n")
        elif token.type in ("th_close", "td_close"):
            parts.append("\t")
        elif token.type == "table_close":
            parts.append("\n")

    return "".join(parts)


def _inline_text(children: Sequence[Token]) -> List[str]:
    parts: List[str] = []

    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append("\n")
        elif child.type == "image":
            parts.extend(_inline_text(child.children or ()))

    return parts


_default_compiler: Optional[MarkdownCompiler] = None


def compile_body(markdown: str) -> Tuple[str, str, List[InlineImage]]:
    """Compile markdown with a shared :class:`MarkdownCompiler`."""
    global _default_compiler
    if _default_compiler is None:
        _default_compiler = MarkdownCompiler()
    return _default_compiler.compile_body(markdown)
