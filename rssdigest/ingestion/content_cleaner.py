"""
Content Cleaner
===============

Converts feed text into ConTeXt-safe text.

This module provides:
- Escaping of ConTeXt special characters
- Flat conversion for feed-level fields (``convert_generic``)
- Structure-preserving HTML to ConTeXt conversion for entries (``convert_html``)
- Removal of dangerous and non-content HTML elements
"""

import re
from typing import Any

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import CData, Declaration, Doctype, ProcessingInstruction

from rssdigest.utils.logging import get_logger_for_component
from rssdigest.utils.exceptions import ContentConversionError


# Characters ConTeXt treats as syntax, and their literal forms
CONTEXT_ESCAPES = {
    "\\": r"\letterbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "#": r"\#",
    "%": r"\%",
    "_": r"\_",
    "^": r"\letterhat{}",
    "~": r"\lettertilde{}",
    "|": r"\letterbar{}",
}

CONTEXT_SPECIALS_PATTERN = re.compile(
    "[" + re.escape("".join(CONTEXT_ESCAPES)) + "]"
)


def escape_context(text: str) -> str:
    """Replace every ConTeXt special character with its literal form."""
    return CONTEXT_SPECIALS_PATTERN.sub(lambda m: CONTEXT_ESCAPES[m.group(0)], text)


class TextCleaner:
    """
    Feed text to ConTeXt converter.

    ``convert_generic`` flattens a value to one line of escaped text and is
    meant for feed titles and descriptions. ``convert_html`` keeps paragraph,
    emphasis, list and quotation structure and renders it as ConTeXt markup.
    Both raise ContentConversionError instead of returning partial output.
    """

    # HTML elements to completely remove (including content)
    DANGEROUS_ELEMENTS = {
        "script",
        "style",
        "iframe",
        "embed",
        "object",
        "applet",
        "form",
        "input",
        "button",
        "select",
        "textarea",
        "meta",
        "link",
        "base",
        "noscript",
        "canvas",
        "svg",
    }

    BLOCK_ELEMENTS = {
        "p",
        "div",
        "section",
        "article",
        "header",
        "footer",
        "aside",
        "figure",
        "figcaption",
        "table",
        "tr",
        "dl",
        "dt",
        "dd",
        "hr",
        "pre",
    }

    EMPHASIS_ELEMENTS = {"em", "i", "cite", "var", "dfn"}
    BOLD_ELEMENTS = {"strong", "b"}
    CODE_ELEMENTS = {"code", "tt", "kbd", "samp"}
    HEADING_ELEMENTS = {"h1", "h2", "h3", "h4", "h5", "h6"}

    NON_CONTENT_TYPES = (Comment, CData, ProcessingInstruction, Declaration, Doctype)

    WHITESPACE_PATTERN = re.compile(r"\s+")
    INLINE_SPACE_PATTERN = re.compile(r"[ \t\r\f\v]+")
    MULTIPLE_NEWLINES_PATTERN = re.compile(r"\n{3,}")

    def __init__(self):
        self.logger = get_logger_for_component("content_cleaner")
        self.parser = "html.parser"

    def convert_generic(self, text: Any) -> str:
        """
        Convert a feed-level value to a single line of ConTeXt-safe text.

        Any markup is dropped and entities are decoded.

        Raises:
            ContentConversionError: If the value is absent or cannot be parsed
        """
        self._require_text(text)

        if not text.strip():
            return ""

        try:
            soup = BeautifulSoup(text, self.parser)
            self._remove_dangerous_elements(soup)
            self._remove_non_content_elements(soup)
            plain = soup.get_text(separator=" ")
        except Exception as e:
            raise ContentConversionError(f"Failed to convert text: {e}") from e

        plain = self.WHITESPACE_PATTERN.sub(" ", plain).strip()
        return escape_context(plain)

    def convert_html(self, text: Any) -> str:
        """
        Convert an HTML fragment to ConTeXt text.

        Raises:
            ContentConversionError: If the value is absent or cannot be parsed
        """
        self._require_text(text)

        if not text.strip():
            return ""

        try:
            soup = BeautifulSoup(text, self.parser)
            self._remove_dangerous_elements(soup)
            self._remove_non_content_elements(soup)
            rendered = self._render_children(soup)
        except Exception as e:
            raise ContentConversionError(f"Failed to convert HTML: {e}") from e

        converted = self._normalize_text(rendered)
        self.logger.debug(f"Converted HTML: {len(text)} -> {len(converted)} chars")
        return converted

    def _require_text(self, text: Any) -> None:
        if text is None:
            raise ContentConversionError("No text to convert")
        if not isinstance(text, str):
            raise ContentConversionError(
                f"Expected text, got {type(text).__name__}"
            )

    def _remove_dangerous_elements(self, soup: BeautifulSoup) -> None:
        """Remove dangerous HTML elements completely."""
        for element in soup.find_all(list(self.DANGEROUS_ELEMENTS)):
            # nested matches go away with their ancestor
            if not element.decomposed:
                element.decompose()

    def _remove_non_content_elements(self, soup: BeautifulSoup) -> None:
        """Remove comments, CDATA, doctypes and processing instructions."""
        for element in soup.find_all(
            string=lambda text: isinstance(text, self.NON_CONTENT_TYPES)
        ):
            element.extract()

    def _render_children(self, node: Tag) -> str:
        return "".join(self._render(child) for child in node.children)

    def _render(self, node) -> str:
        if isinstance(node, NavigableString):
            if isinstance(node, self.NON_CONTENT_TYPES):
                return ""
            return escape_context(self.WHITESPACE_PATTERN.sub(" ", str(node)))

        if not isinstance(node, Tag):
            return ""

        name = (node.name or "").lower()

        if name == "br":
            return "\\crlf\n"
        if name == "img":
            return escape_context(node.get("alt", "").strip())
        if name in self.CODE_ELEMENTS:
            return self._render_code(node.get_text())

        inner = self._render_children(node)

        if name in self.EMPHASIS_ELEMENTS:
            return f"{{\\em {inner}}}" if inner.strip() else inner
        if name in self.BOLD_ELEMENTS:
            return f"{{\\bf {inner}}}" if inner.strip() else inner
        if name in self.HEADING_ELEMENTS:
            return f"\n\n{{\\bf {inner.strip()}}}\n\n"
        if name in ("ul", "ol"):
            opener = "\\startitemize[n]" if name == "ol" else "\\startitemize"
            return f"\n\n{opener}\n{inner.strip()}\n\\stopitemize\n\n"
        if name == "li":
            return f"\\item {inner.strip()}\n"
        if name == "blockquote":
            return f"\n\n\\startquotation\n{inner.strip()}\n\\stopquotation\n\n"
        if name in self.BLOCK_ELEMENTS:
            return f"\n\n{inner.strip()}\n\n"

        return inner

    def _render_code(self, code: str) -> str:
        code = self.WHITESPACE_PATTERN.sub(" ", code).strip()
        if not code:
            return ""
        # \type{} is verbatim but cannot hold braces
        if "{" in code or "}" in code:
            return f"{{\\tt {escape_context(code)}}}"
        return f"\\type{{{code}}}"

    def _normalize_text(self, text: str) -> str:
        """Normalize whitespace while keeping paragraph breaks."""
        lines = [self.INLINE_SPACE_PATTERN.sub(" ", line).strip() for line in text.split("\n")]
        text = "\n".join(lines)
        text = self.MULTIPLE_NEWLINES_PATTERN.sub("\n\n", text)
        return text.strip()


# Convenience functions for common operations
def convert_generic(text: str) -> str:
    """Quick function to flatten text for ConTeXt."""
    return TextCleaner().convert_generic(text)


def convert_html(html_content: str) -> str:
    """Quick function to convert an HTML fragment to ConTeXt."""
    return TextCleaner().convert_html(html_content)
