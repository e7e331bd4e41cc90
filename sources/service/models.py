"""
Provider-agnostic channel model.

Every back-end maps its provider responses into these types. They are
created per request and handed to the feed builder; nothing is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass
class Enclosure:
    """The enclosed media content of an item."""

    # Relative path of the download within its back-end. It is part of the
    # enclosure URL and is passed back to the back-end to resolve the media URL.
    file: str
    mime_type: str
    # Length in bytes (exact or estimated)
    length: int


@dataclass
class Item:
    """A content item belonging to a channel."""

    title: str
    link: str
    enclosure: Enclosure
    guid: str
    published_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    # Category name -> domain URL
    categories: Dict[str, str] = field(default_factory=dict)
    duration: Optional[int] = None
    keywords: List[str] = field(default_factory=list)
    image: Optional[str] = None


@dataclass
class Channel:
    """A collection of content items with its metadata."""

    title: str
    link: str
    description: str
    author: Optional[str] = None
    # The first category is considered to be the "main" category
    categories: List[str] = field(default_factory=list)
    image: Optional[str] = None
    items: List[Item] = field(default_factory=list)
