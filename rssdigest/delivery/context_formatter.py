"""
ConTeXt Formatter
=================

Renders fetched feeds into one ConTeXt document: a title page with a
table of contents, then one chapter per entry.

Entry titles are typeset inside ascii mode so characters such as ``#`` or
``%`` cannot act as ConTeXt syntax there. Entry content is emitted as is,
since it is already converted ConTeXt text and may carry markup.
"""

from typing import Iterable, Optional

from ..models import Entry, Feed, NamedFeedCollection
from ..config.settings import get_settings
from ..utils.logging import get_logger_for_component


def literal_title(title: str, label: str) -> str:
    """Chapter opener with the title and label set in ascii mode."""
    return (
        "\\startasciimode\n"
        f"\\startchapter[title={{{title}}}][name={{{label}}}]\n"
        "\\stopasciimode\n"
    )


class FeedFormatter:
    """Formats a collection of feeds into a ConTeXt document."""

    def __init__(self, feed_hash: NamedFeedCollection, module: Optional[str] = None):
        """Initialize formatter.

        Args:
            feed_hash: Identifier -> Feed (or sequence of entries)
            module: ConTeXt module to load (default from config)
        """
        self.feed_hash = feed_hash
        self.module = module or get_settings().document.context_module
        self.logger = get_logger_for_component("context_formatter")

    def format(self, title: str = "Rss Feeds") -> str:
        """Render the whole document.

        Args:
            title: Document title, embedded verbatim

        Returns:
            ConTeXt source
        """
        formatted_entries = []
        for feed_id, feed in self.feed_hash.items():
            for entry in self._entries(feed):
                formatted_entries.append(self.format_entry(feed_id, entry))

        self.logger.debug(f"Formatted {len(formatted_entries)} entries from {len(self.feed_hash)} feeds")

        return self._start(title) + "".join(formatted_entries) + self._stop()

    def format_entry(self, feed_id: str, entry: Entry) -> str:
        """One chapter, labelled with the feed identifier."""
        return (
            "\n"
            + literal_title(entry.title, feed_id)
            + f"{entry.content}\n"
            + "\\stopchapter\n"
        )

    def _start(self, title: str) -> str:
        return (
            f"\\usemodule[{self.module}]\n"
            "\\starttext\n"
            f"\\starttitle[title={{{title}}}]\n"
            "    \\placelist[chapter]\n"
            "\\stoptitle\n"
        )

    def _stop(self) -> str:
        return "\n\\stoptext\n"

    @staticmethod
    def _entries(feed) -> Iterable[Entry]:
        if isinstance(feed, Feed):
            return feed.entries
        return feed
