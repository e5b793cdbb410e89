"""Activity-stream feed parsing and per-ticket grouping.

Jira serves the activity stream as an Atom feed whose entries carry
activity-streams ``object``/``target`` elements. Elements are matched by
local name, so the namespaced and the plain form of the document both work.
"""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import NamedTuple

from activity_errors import ParseError, ValidationError

logger = logging.getLogger(__name__)

DATE_PREFIX_LEN = 10  # "YYYY-MM-DD"


@dataclass(frozen=True)
class ActivityObject:
    id: str = ""
    title: str = ""


@dataclass(frozen=True)
class ActivityEntry:
    id: str = ""
    title: str = ""
    summary: str = ""
    content: str = ""
    published: str = ""
    updated: str = ""
    object: ActivityObject = field(default_factory=ActivityObject)
    target: ActivityObject = field(default_factory=ActivityObject)

    @property
    def ticket(self):
        return self.target.title or self.object.title


@dataclass(frozen=True)
class Feed:
    id: str = ""
    title: str = ""
    entries: tuple = ()


class GroupKey(NamedTuple):
    date: str
    ticket: str

    def __str__(self):
        return f"{self.date}_{self.ticket}"


class EntryGroups:
    """Entries bucketed by (date, ticket), in first-seen order."""

    def __init__(self):
        self.groups = {}
        self.skipped = []

    def add(self, key, entry):
        self.groups.setdefault(key, []).append(entry)

    @property
    def keys(self):
        return list(self.groups)

    def items(self):
        return self.groups.items()

    def __getitem__(self, key):
        return self.groups[key]

    def __len__(self):
        return len(self.groups)


# ---------- Parsing ----------
def _local(tag):
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child(elem, name):
    for ch in elem:
        if _local(ch.tag) == name:
            return ch
    return None


def _text(elem, name):
    ch = _child(elem, name)
    if ch is None:
        return ""
    return "".join(ch.itertext()).strip()


def _activity_object(elem, name):
    ch = _child(elem, name)
    if ch is None:
        return ActivityObject()
    return ActivityObject(id=_text(ch, "id"), title=_text(ch, "title"))


def _entry(elem):
    return ActivityEntry(
        id=_text(elem, "id"),
        title=_text(elem, "title"),
        summary=_text(elem, "summary"),
        content=_text(elem, "content"),
        published=_text(elem, "published"),
        updated=_text(elem, "updated"),
        object=_activity_object(elem, "object"),
        target=_activity_object(elem, "target"),
    )


def parse_feed(raw):
    """Decode the XML feed document into a Feed with entries in feed order."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise ParseError(f"activity feed is not well-formed XML: {e}") from e

    if _local(root.tag) != "feed":
        raise ParseError(f"expected a <feed> document, got <{_local(root.tag)}>")

    entries = tuple(_entry(el) for el in root if _local(el.tag) == "entry")
    return Feed(id=_text(root, "id"), title=_text(root, "title"), entries=entries)


# ---------- Grouping ----------
def entry_group_key(entry):
    if len(entry.updated) < DATE_PREFIX_LEN:
        raise ValidationError(
            f"entry {entry.id or '<no id>'} has no usable update date: {entry.updated!r}"
        )
    return GroupKey(entry.updated[:DATE_PREFIX_LEN], entry.ticket)


def group_entries(entries):
    """
    Bucket entries by (update date, ticket) in a single pass.

    Keys keep the order of their first occurrence and every group keeps its
    entries in feed order. An entry whose key cannot be derived is skipped and
    recorded in ``skipped``; the rest of the feed is still grouped.
    """
    grouped = EntryGroups()
    for entry in entries:
        try:
            key = entry_group_key(entry)
        except ValidationError as e:
            logger.warning("Skipping entry: %s", e)
            grouped.skipped.append(entry)
            continue
        grouped.add(key, entry)
    return grouped
