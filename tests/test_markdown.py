"""
Tests for markdown body compilation

Tests cover:
- HTML rendering with the table and strikethrough extensions
- Local image rewriting to cid: references
- Plain text rendering
"""
import itertools
from pathlib import Path

import pytest

from inkpost.core.compiler.markdown import MarkdownCompiler, compile_body, is_remote


@pytest.fixture
def compiler():
    """Compiler with predictable content ids"""
    counter = itertools.count(1)
    return MarkdownCompiler(content_id_factory=lambda: f"cid-{next(counter)}")


class TestHtmlRendering:
    """Tests for the HTML rendering"""

    def test_empty_body(self, compiler):
        """Test an empty body compiles to empty output"""
        assert compiler.compile_body("") == ("", "", [])

    def test_heading_and_emphasis(self, compiler):
        """Test basic CommonMark rendering"""
        html, _, _ = compiler.compile_body("# Hello\n\nThe numbers are **up**.")
        assert "<h1>Hello</h1>" in html
        assert "<strong>up</strong>" in html

    def test_strikethrough_enabled(self, compiler):
        """Test the strikethrough extension is on"""
        html, _, _ = compiler.compile_body("~~gone~~")
        assert "<s>gone</s>" in html

    def test_table_enabled(self, compiler):
        """Test the table extension is on"""
        html, _, _ = compiler.compile_body("| a | b |\n|---|---|\n| 1 | 2 |")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_html_is_escaped(self, compiler):
        """Test special characters are escaped in HTML"""
        html, _, _ = compiler.compile_body("A < B")
        assert "A &lt; B" in html


class TestInlineImages:
    """Tests for local image handling"""

    def test_local_image_rewritten(self, compiler):
        """Test a local image becomes a cid reference"""
        html, _, images = compiler.compile_body("![logo](images/logo.png)")

        assert len(images) == 1
        assert images[0].content_id == "cid-1"
        assert images[0].source_path == Path("images/logo.png")
        assert 'src="cid:cid-1"' in html
        assert "images/logo.png" not in html

    def test_remote_image_untouched(self, compiler):
        """Test http(s) images are left alone"""
        html, _, images = compiler.compile_body(
            "![a](https://example.com/a.png) ![b](http://example.com/b.png)"
        )

        assert images == []
        assert 'src="https://example.com/a.png"' in html
        assert 'src="http://example.com/b.png"' in html

    def test_duplicate_images_not_merged(self, compiler):
        """Test each reference gets its own content id"""
        html, _, images = compiler.compile_body("![a](pic.png)\n\n![b](pic.png)")

        assert [img.content_id for img in images] == ["cid-1", "cid-2"]
        assert all(img.source_path == Path("pic.png") for img in images)
        for img in images:
            assert html.count(f"cid:{img.content_id}") == 1

    def test_images_in_document_order(self, compiler):
        """Test images are listed in first-seen order"""
        _, _, images = compiler.compile_body("![1](first.png) text ![2](second.jpg)")
        assert [img.source_path.name for img in images] == ["first.png", "second.jpg"]

    def test_percent_encoded_path_decoded(self, compiler):
        """Test the source path is URL-decoded"""
        _, _, images = compiler.compile_body("![x](my%20pic.png)")
        assert images[0].source_path == Path("my pic.png")

    def test_cid_reference_not_reembedded(self, compiler):
        """Test existing cid: sources are passed through"""
        _, _, images = compiler.compile_body("![x](cid:already-there)")
        assert images == []

    def test_default_content_ids_are_unique(self):
        """Test the shared compiler mints fresh ids"""
        _, _, first = compile_body("![x](a.png)")
        _, _, second = compile_body("![x](a.png)")
        assert first[0].content_id != second[0].content_id


class TestPlainRendering:
    """Tests for the plain text rendering"""

    def test_paragraphs_and_headings(self, compiler):
        """Test block ends become blank lines"""
        _, plain, _ = compiler.compile_body("# Hello\n\nThe numbers are **up**.")
        assert plain == "Hello\n\nThe numbers are up.\n\n"

    def test_soft_break(self, compiler):
        """Test a soft break becomes a newline"""
        _, plain, _ = compiler.compile_body("line one\nline two")
        assert plain == "line one\nline two\n\n"

    def test_tight_list(self, compiler):
        """Test list items end with a single newline"""
        _, plain, _ = compiler.compile_body("- one\n- two")
        assert plain == "one\ntwo\n"

    def test_inline_code_and_fence(self, compiler):
        """Test code content is kept literally"""
        _, plain, _ = compiler.compile_body("use `pip`\n\n```\ncode here\n```")
        assert "use pip" in plain
        assert "code here\n" in plain

    def test_image_alt_text(self, compiler):
        """Test images contribute their alt text"""
        _, plain, _ = compiler.compile_body("![alt text](a.png)")
        assert plain == "alt text\n\n"

    def test_no_html_entities(self, compiler):
        """Test entities are decoded in the plain rendering"""
        _, plain, _ = compiler.compile_body("Fish &amp; chips, A < B")
        assert "Fish & chips, A < B" in plain
        assert "&amp;" not in plain
        assert "&lt;" not in plain

    def test_table_cells(self, compiler):
        """Test table cells are tab separated"""
        _, plain, _ = compiler.compile_body("| a | b |\n|---|---|\n| 1 | 2 |")
        assert "a\tb" in plain
        assert "1\t2" in plain


class TestIsRemote:
    """Tests for the remote URL check"""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/a.png", True),
            ("HTTP://EXAMPLE.COM/A.PNG", True),
            ("images/a.png", False),
            ("/abs/a.png", False),
            ("ftp://example.com/a.png", False),
        ],
    )
    def test_is_remote(self, url, expected):
        """Test only http and https count as remote"""
        assert is_remote(url) is expected
