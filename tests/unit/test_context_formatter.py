"""
Unit tests for FeedFormatter - ConTeXt document rendering.
"""

import pytest

from rssdigest.delivery.context_formatter import FeedFormatter, literal_title
from rssdigest.models import Entry, Feed


@pytest.fixture
def single_entry_collection():
    return {"k": [Entry(title="A # B", content="hi")]}


class TestDocumentStructure:
    """Preamble, chapters and closing marker."""

    def test_preamble_and_closing(self):
        document = FeedFormatter({}, module="rssfeed").format("My Feeds")

        assert document.startswith("\\usemodule[rssfeed]\n\\starttext\n")
        assert "\\starttitle[title={My Feeds}]\n    \\placelist[chapter]\n\\stoptitle\n" in document
        assert document.rstrip().endswith("\\stoptext")
        assert "\\startchapter" not in document

    def test_default_title(self):
        document = FeedFormatter({}, module="rssfeed").format()

        assert "\\starttitle[title={Rss Feeds}]" in document

    def test_module_from_settings(self):
        document = FeedFormatter({}).format()

        assert document.startswith("\\usemodule[rssfeed]")

    def test_title_and_label_in_ascii_mode(self, single_entry_collection):
        document = FeedFormatter(single_entry_collection, module="rssfeed").format()

        expected = (
            "\\startasciimode\n"
            "\\startchapter[title={A # B}][name={k}]\n"
            "\\stopasciimode\n"
            "hi\n"
            "\\stopchapter\n"
        )
        assert expected in document

    def test_content_outside_ascii_mode(self, single_entry_collection):
        document = FeedFormatter(single_entry_collection, module="rssfeed").format()

        stop_ascii = document.index("\\stopasciimode")
        assert document.index("hi\n") > stop_ascii
        assert document.index("hi\n") < document.index("\\stopchapter")

    def test_content_is_passed_through(self):
        collection = {"k": [Entry(title="t", content="{\\em already} converted \\# text")]}

        document = FeedFormatter(collection, module="rssfeed").format()

        assert "{\\em already} converted \\# text\n\\stopchapter" in document


class TestOrderingAndLabels:
    """Iteration order and shared labels."""

    def test_entries_in_collection_then_feed_order(self):
        collection = {
            "b": [Entry(title="b1", content="x"), Entry(title="b2", content="x")],
            "a": [Entry(title="a1", content="x")],
        }

        document = FeedFormatter(collection, module="rssfeed").format()

        positions = [document.index(f"title={{{t}}}") for t in ("b1", "b2", "a1")]
        assert positions == sorted(positions)

    def test_shared_key_shares_label(self):
        collection = {"news": [Entry(title="one", content="1"), Entry(title="two", content="2")]}

        document = FeedFormatter(collection, module="rssfeed").format()

        assert "\\startchapter[title={one}][name={news}]" in document
        assert "\\startchapter[title={two}][name={news}]" in document
        assert document.count("[name={news}]") == 2

    def test_accepts_feed_values(self):
        feed = Feed(title="Feed", url="https://example.com/",
                    entries=[Entry(title="from feed", content="body")])

        document = FeedFormatter({"site": feed}, module="rssfeed").format()

        assert "\\startchapter[title={from feed}][name={site}]" in document
        assert "body\n\\stopchapter" in document


class TestPurity:
    """Formatting is a pure function of its input."""

    def test_idempotent(self, single_entry_collection):
        formatter = FeedFormatter(single_entry_collection, module="rssfeed")

        assert formatter.format("T") == formatter.format("T")

    def test_same_input_new_formatter(self, single_entry_collection):
        first = FeedFormatter(single_entry_collection, module="rssfeed").format()
        second = FeedFormatter(single_entry_collection, module="rssfeed").format()

        assert first == second


def test_literal_title_wraps_opener():
    assert literal_title("50% off", "deals") == (
        "\\startasciimode\n"
        "\\startchapter[title={50% off}][name={deals}]\n"
        "\\stopasciimode\n"
    )
