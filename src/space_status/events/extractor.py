"""
Event Extractor
===============

Turns forum topic titles into structured EventRecords.

Title Grammar (whitespace-separated tokens):
    DD/MM/YYYY HH:MM - HH:MM <title...>     time range
    DD/MM/YYYY HH:MM <title...>             start time only

Rules:
    - token[0] must be exactly two digits, slash, two digits, slash, four digits
    - token[1] must be exactly two digits, colon, two digits
    - a range needs token[2] == "-" and a time at token[3]; anything else
      falls back to the start-only form with the rest as the title
    - titles that do not match are dropped, never raised

This is a best-effort heuristic, not a date parser. Free-form titles such as
"Open Social Night" are simply not events as far as the service is concerned.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from space_status.models.events import EventRecord, TopicSourceRecord


logger = logging.getLogger(__name__)


DATE_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")
TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")
RANGE_SEPARATOR = "-"


@dataclass(frozen=True, slots=True)
class ParsedTitle:
    """Date/time fields recovered from a single title."""

    date: str
    begin: str
    end: str
    title: str


def _token(tokens: Sequence[str], index: int) -> Optional[str]:
    if 0 <= index < len(tokens):
        return tokens[index]
    return None


def _is_date(token: Optional[str]) -> bool:
    return token is not None and DATE_PATTERN.fullmatch(token) is not None


def _is_time(token: Optional[str]) -> bool:
    return token is not None and TIME_PATTERN.fullmatch(token) is not None


def _is_calendar_date(token: str) -> bool:
    try:
        datetime.strptime(token, "%d/%m/%Y")
    except ValueError:
        return False
    return True


class EventExtractor:
    """
    Positional token parser for event titles.

    Stateless: parse() may be called concurrently from any number of tasks.

    Attributes:
        base_url: Forum root used to build topic links
        validate_dates: Also drop dates that are not real calendar days

    Example:
        extractor = EventExtractor("https://community.lambdaspace.gr")
        events = extractor.parse(topics)
    """

    def __init__(self, base_url: str, validate_dates: bool = False) -> None:
        self.base_url = base_url.rstrip("/")
        self.validate_dates = validate_dates

    def parse_title(self, title: str) -> Optional[ParsedTitle]:
        """
        Parse one title.

        Args:
            title: Raw topic title

        Returns:
            ParsedTitle, or None if the title is not an event announcement
        """
        tokens = title.split()

        date = _token(tokens, 0)
        if not _is_date(date):
            return None
        if self.validate_dates and not _is_calendar_date(date):
            return None

        begin = _token(tokens, 1)
        if not _is_time(begin):
            return None

        end_token = _token(tokens, 3)
        if _token(tokens, 2) == RANGE_SEPARATOR and _is_time(end_token):
            return ParsedTitle(
                date=date,
                begin=begin,
                end=end_token,
                title=" ".join(tokens[4:]),
            )

        return ParsedTitle(date=date, begin=begin, end="", title=" ".join(tokens[2:]))

    def topic_url(self, slug: str, topic_id: int) -> str:
        return f"{self.base_url}/t/{slug}/{topic_id}"

    def parse(self, topics: Iterable[TopicSourceRecord]) -> List[EventRecord]:
        """
        Extract events from forum topics.

        Args:
            topics: Topics in forum order

        Returns:
            EventRecords in the same order; non-matching topics are omitted
        """
        events: List[EventRecord] = []
        dropped = 0

        for topic in topics:
            parsed = self.parse_title(topic.title)
            if parsed is None:
                dropped += 1
                logger.debug(f"Skipping topic {topic.id}: {topic.title!r}")
                continue

            events.append(
                EventRecord(
                    title=parsed.title,
                    date=parsed.date,
                    begin=parsed.begin,
                    end=parsed.end,
                    url=self.topic_url(topic.slug, topic.id),
                )
            )

        logger.debug(f"Extracted {len(events)} events, skipped {dropped} topics")
        return events
