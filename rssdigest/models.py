"""
RssDigest Data Models
=====================

Value objects passed between the pipeline stages.

``NormalizedFeed`` and ``RawEntry`` hold what the feed normalizer read,
untouched. ``Feed`` and ``Entry`` hold the filtered, cleaned result and are
frozen once built.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field


@dataclass
class RawEntry:
    """One feed item as reported by the normalizer. ``None`` means absent."""

    title: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    date_published: Optional[str] = None
    last_updated: Optional[str] = None
    link: Optional[str] = None
    # UTC time tuples from feedparser, when it could read the date strings
    published_parsed: Optional[Sequence[int]] = None
    updated_parsed: Optional[Sequence[int]] = None


@dataclass
class NormalizedFeed:
    """A feed with format differences (RSS 1.0/2.0, Atom) smoothed out."""

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    entries: List[RawEntry] = field(default_factory=list)


class Entry(BaseModel):
    """Cleaned feed item ready for rendering."""

    title: str = Field(default="", description="Cleaned entry title")
    content: str = Field(default="", description="Cleaned entry body")
    published: Optional[datetime] = Field(
        default=None, description="Date the entry was kept on, if it had one"
    )
    link: str = Field(default="", description="Entry link, not rendered")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"Entry({self.title[:50]})"


class Feed(BaseModel):
    """One fetched, filtered and cleaned syndication source."""

    title: str = Field(default="", description="Cleaned feed title")
    description: str = Field(default="", description="Cleaned feed description")
    url: str = Field(default="", description="Canonical URL reported by the feed")
    entries: Tuple[Entry, ...] = Field(default=(), description="Entries in feed order")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"Feed({self.title[:50]}:{len(self.entries)} entries)"


# Identifier -> entries to render under that identifier
NamedFeedCollection = Mapping[str, Union[Feed, Sequence[Entry]]]
