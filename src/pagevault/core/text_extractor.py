"""
Readable Text Extraction Module

This module projects rendered page markup onto plain readable text:
the content root is taken from the page, script/style/noscript elements are
dropped, block-level elements are placed on their own lines, and whitespace
is normalized.
"""

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
import re
import logging
from typing import Optional


# Elements whose content is never part of the readable text
REMOVED_TAGS = ('script', 'style', 'noscript')

# Elements rendered on their own line(s)
BLOCK_TAGS = (
    'address', 'article', 'aside', 'blockquote', 'caption', 'dd', 'details',
    'dialog', 'div', 'dl', 'dt', 'fieldset', 'figcaption', 'figure', 'footer',
    'form', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'header', 'hgroup', 'hr', 'li',
    'main', 'nav', 'ol', 'p', 'pre', 'section', 'summary', 'table', 'tbody',
    'thead', 'tfoot', 'tr', 'ul',
)

# Elements whose whitespace is preserved as-is
PREFORMATTED_TAGS = ('pre', 'textarea')


def normalize_text(text: str) -> str:
    """
    Normalize whitespace in extracted text.

    Spaces and tabs before a newline are dropped, runs of three or more
    newlines become exactly two, and the result is trimmed.
    """
    text = re.sub(r'[^\S\n]+\n', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


class TextExtractor:
    """
    Extracts readable text from rendered HTML.

    The parsed document is a private copy, so the markup handed in is
    never affected by element removal.
    """

    def __init__(self, parser: str = 'lxml'):
        self.parser = parser
        self.logger = logging.getLogger(__name__)

    def extract_text(self, html_content: str, source_url: Optional[str] = None) -> str:
        """
        Extract normalized readable text from markup.

        Args:
            html_content: Rendered page markup
            source_url: URL of the page (for logging)

        Returns:
            Readable text, possibly empty
        """
        soup = BeautifulSoup(html_content or '', self.parser)
        root = self._content_root(soup)
        if root is None:
            return ''

        removed = self._remove_hidden_elements(root)
        self._collapse_whitespace(root)
        self._mark_blocks(root)

        text = normalize_text(self._strip_line_indent(root.get_text()))

        self.logger.debug(
            f"Extracted {len(text)} chars of text"
            + (f" from {source_url}" if source_url else "")
            + f" ({removed} script/style/noscript elements dropped)"
        )
        return text

    def _content_root(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Return <body>, falling back to the document element."""
        if soup.body is not None:
            return soup.body
        if soup.html is not None:
            return soup.html
        return soup.find(True)

    def _remove_hidden_elements(self, root: Tag) -> int:
        removed_count = 0
        for element in root.find_all(REMOVED_TAGS):
            # Already gone if an ancestor was decomposed first
            if element.decomposed:
                continue
            element.decompose()
            removed_count += 1

        for node in root.find_all(string=lambda s: isinstance(s, (Comment, Doctype))):
            node.extract()

        return removed_count

    def _collapse_whitespace(self, root: Tag) -> None:
        """Collapse whitespace runs in text nodes outside preformatted elements."""
        for node in list(root.find_all(string=True)):
            if not isinstance(node, NavigableString):
                continue
            if node.find_parent(PREFORMATTED_TAGS) is not None:
                continue
            collapsed = re.sub(r'\s+', ' ', str(node))
            if collapsed != str(node):
                node.replace_with(collapsed)

    def _mark_blocks(self, root: Tag) -> None:
        """Put line breaks around block elements and in place of <br>."""
        for br in root.find_all('br'):
            br.replace_with('\n')

        for element in root.find_all(BLOCK_TAGS):
            element.insert_before('\n')
            element.insert_after('\n')

        for cell in root.find_all(['td', 'th']):
            cell.insert_after('\t')

    def _strip_line_indent(self, text: str) -> str:
        """Drop spaces that collapsed markup leaves at the start of lines."""
        return re.sub(r'\n[ \t]+', '\n', text)
